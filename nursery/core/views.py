import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .models import Setting, AuditLog
from .serializers import (
    UserSerializer, UserCreateSerializer, OrganisationSerializer,
    SettingSerializer, AuditLogSerializer
)
from .tenancy import get_request_org, org_queryset, get_org_object_or_404
from .utils import create_audit_log

logger = logging.getLogger(__name__)

User = get_user_model()


class NurseryTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Login serializer; the access token carries the user's organisation and groups"""

    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['org_id'] = user.org_id
        token['groups'] = list(user.groups.values_list('name', flat=True))
        return token


class NurseryTokenObtainPairView(TokenObtainPairView):
    serializer_class = NurseryTokenObtainPairSerializer


class NurseryTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports tokens of deleted users as invalid"""

    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')
        except TokenError as e:
            raise InvalidToken(str(e))


class NurseryTokenRefreshView(TokenRefreshView):
    serializer_class = NurseryTokenRefreshSerializer


def _is_admin(user):
    return user.is_superuser or user.is_staff or user.groups.filter(name='Admin').exists()


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a user and return a token pair"""
    serializer = UserCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    user = serializer.save()
    token = NurseryTokenObtainPairSerializer.get_token(user)
    logger.info(f"User '{user.username}' registered (org={user.org_id})")
    return Response({
        'user': UserSerializer(user).data,
        'access': str(token.access_token),
        'refresh': str(token),
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """The current user with groups and organisation"""
    user = request.user
    data = UserSerializer(user).data
    data['groups'] = list(user.groups.values_list('name', flat=True))
    data['organisation'] = OrganisationSerializer(user.org).data if user.org else None
    data['is_admin'] = _is_admin(user)
    return Response(data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def organisation_detail(request):
    """The requesting user's organisation; only admins may edit it"""
    org = get_request_org(request)
    if request.method == 'GET':
        return Response(OrganisationSerializer(org).data)

    if not _is_admin(request.user):
        return Response({'error': 'Only administrators can edit the organisation'}, status=status.HTTP_403_FORBIDDEN)
    serializer = OrganisationSerializer(org, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.save()
    create_audit_log(request, 'update', 'Organisation', org.id, changes=dict(request.data), object_name=org.name)
    return Response(serializer.data)


def _users_for(request):
    # Platform admins see everyone; staff only their own organisation
    if request.user.is_superuser:
        return User.objects.all()
    return User.objects.filter(org=get_request_org(request))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def user_list_create(request):
    """List or create users of the organisation"""
    if request.method == 'GET':
        serializer = UserSerializer(_users_for(request).order_by('username'), many=True)
        return Response(serializer.data)

    data = request.data.copy()
    if not request.user.is_superuser:
        data['org'] = get_request_org(request).id
    serializer = UserCreateSerializer(data=data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    user = serializer.save()
    create_audit_log(request, 'create', 'User', user.id, object_name=user.username)
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def user_detail(request, pk):
    """Retrieve, update or delete a user of the organisation"""
    user = _users_for(request).filter(pk=pk).first()
    if user is None:
        return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(UserSerializer(user).data)
    elif request.method == 'PATCH':
        serializer = UserSerializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        return Response(serializer.data)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request, 'delete', 'User', user.id, object_name=user.username)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def setting_list_create(request):
    """List the organisation's settings; admins may add one"""
    if request.method == 'GET':
        return Response(SettingSerializer(org_queryset(Setting, request), many=True).data)

    if not _is_admin(request.user):
        return Response({'error': 'Only administrators can change settings'}, status=status.HTTP_403_FORBIDDEN)
    org = get_request_org(request)
    serializer = SettingSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        with transaction.atomic():
            setting = serializer.save(org=org)
    except IntegrityError:
        return Response({'error': f"Setting '{request.data.get('key')}' already exists"}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request, 'create', 'Setting', setting.id, object_name=setting.key)
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting"""
    setting = get_org_object_or_404(Setting, request, pk)

    if request.method == 'GET':
        return Response(SettingSerializer(setting).data)
    if not _is_admin(request.user):
        return Response({'error': 'Only administrators can change settings'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'PATCH':
        old_value = setting.value
        serializer = SettingSerializer(setting, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            with transaction.atomic():
                serializer.save()
        except IntegrityError:
            return Response({'error': f"Setting '{request.data.get('key')}' already exists"}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request, 'update', 'Setting', setting.id, object_name=setting.key,
                         changes={'value': {'old': old_value, 'new': setting.value}})
        return Response(serializer.data)

    create_audit_log(request, 'delete', 'Setting', setting.id, object_name=setting.key)
    setting.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """
    The organisation's audit trail, newest first

    Query params: action, model, reference, object_id, date_from, date_to.
    Non-admins only see their own entries.
    """
    queryset = org_queryset(AuditLog, request).select_related('user')
    if not _is_admin(request.user):
        queryset = queryset.filter(user=request.user)

    params = request.query_params
    filters = {
        'action': 'action',
        'model': 'model_name',
        'reference': 'object_reference',
        'object_id': 'object_id',
        'date_from': 'created_at__date__gte',
        'date_to': 'created_at__date__lte',
    }
    for param, lookup in filters.items():
        value = params.get(param)
        if value:
            queryset = queryset.filter(**{lookup: value})

    return Response(AuditLogSerializer(queryset.order_by('-created_at'), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """A single audit entry"""
    audit_log = get_org_object_or_404(AuditLog, request, pk)
    if not _is_admin(request.user) and audit_log.user_id != request.user.id:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    return Response(AuditLogSerializer(audit_log).data)
