import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import IntegrityError, transaction
from django.db.models import Q
from nursery.core.tenancy import get_request_org, org_queryset, get_org_object_or_404
from .models import NurseryLocation
from .serializers import NurseryLocationSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def location_list_create(request):
    """List the organisation's locations or create a new one"""
    if request.method == 'GET':
        locations = org_queryset(NurseryLocation, request)

        search = request.query_params.get('search', '').strip()
        if search:
            locations = locations.filter(
                Q(name__icontains=search) | Q(code__icontains=search) | Q(site__icontains=search)
            )
        if request.query_params.get('active') in ('true', '1'):
            locations = locations.filter(is_active=True)

        serializer = NurseryLocationSerializer(locations, many=True)
        return Response(serializer.data)
    else:
        org = get_request_org(request)
        serializer = NurseryLocationSerializer(data=request.data)
        if serializer.is_valid():
            try:
                with transaction.atomic():
                    location = serializer.save(org=org)
            except IntegrityError as e:
                logger.error(f"IntegrityError creating location: {str(e)}")
                return Response({'error': 'A location with this code already exists'}, status=status.HTTP_400_BAD_REQUEST)
            logger.info(f"Location '{location.code}' created by {request.user.username}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def location_detail(request, pk):
    """Retrieve, update or delete a location"""
    location = get_org_object_or_404(NurseryLocation, request, pk)

    if request.method == 'GET':
        serializer = NurseryLocationSerializer(location)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = NurseryLocationSerializer(location, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            try:
                with transaction.atomic():
                    serializer.save()
            except IntegrityError:
                return Response({'error': 'A location with this code already exists'}, status=status.HTTP_400_BAD_REQUEST)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        location.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
