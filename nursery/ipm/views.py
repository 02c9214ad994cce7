import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import ProtectedError
from django.http import Http404
from nursery.core.tenancy import get_request_org, org_queryset, get_org_object_or_404
from nursery.core.utils import create_audit_log
from .models import IpmProduct, IpmProgram, IpmBottle
from .serializers import (
    IpmProductSerializer, IpmProgramSerializer, IpmBottleSerializer, BottleCreateSerializer,
    UsageSerializer, AdjustSerializer, IpmStockMovementSerializer
)
from .services import (
    BottleError, create_bottles, get_bottle_by_code, record_usage, adjust_bottle_level,
    dispose_bottle, available_bottles, stock_summary
)

logger = logging.getLogger(__name__)


# IpmProduct views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def ipm_product_list_create(request):
    """List all IPM products or create a new one"""
    if request.method == 'GET':
        products = org_queryset(IpmProduct, request)
        if request.query_params.get('active') in ('true', '1'):
            products = products.filter(is_active=True)
        search = request.query_params.get('search', '').strip()
        if search:
            products = products.filter(name__icontains=search)
        serializer = IpmProductSerializer(products, many=True)
        return Response(serializer.data)
    else:
        serializer = IpmProductSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(org=get_request_org(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def ipm_product_detail(request, pk):
    """Retrieve, update or delete an IPM product"""
    product = get_org_object_or_404(IpmProduct, request, pk)

    if request.method == 'GET':
        serializer = IpmProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = IpmProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            product.delete()
        except ProtectedError:
            return Response({'error': 'Product is used by a programme; deactivate it instead'}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ipm_product_available_bottles(request, pk):
    product = get_org_object_or_404(IpmProduct, request, pk)
    serializer = IpmBottleSerializer(available_bottles(product).select_related('product'), many=True)
    return Response(serializer.data)


# IpmProgram views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def ipm_program_list_create(request):
    """List all programmes or create one with its steps"""
    org = get_request_org(request)
    if request.method == 'GET':
        programs = IpmProgram.objects.filter(org=org).prefetch_related('steps__product')
        serializer = IpmProgramSerializer(programs, many=True)
        return Response(serializer.data)
    else:
        serializer = IpmProgramSerializer(data=request.data, context={'org': org})
        if serializer.is_valid():
            serializer.save(org=org)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def ipm_program_detail(request, pk):
    """Retrieve, update or delete a programme"""
    org = get_request_org(request)
    program = get_org_object_or_404(IpmProgram, request, pk)

    if request.method == 'GET':
        serializer = IpmProgramSerializer(program)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = IpmProgramSerializer(program, data=request.data, partial=request.method == 'PATCH', context={'org': org})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        program.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Bottle views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def bottle_list_create(request):
    """List bottles or register new sealed bottles"""
    org = get_request_org(request)
    if request.method == 'GET':
        bottles = IpmBottle.objects.filter(org=org).select_related('product')
        product_id = request.query_params.get('product')
        if product_id:
            bottles = bottles.filter(product_id=product_id)
        status_filter = request.query_params.get('status')
        if status_filter:
            bottles = bottles.filter(status=status_filter)
        serializer = IpmBottleSerializer(bottles, many=True)
        return Response(serializer.data)

    serializer = BottleCreateSerializer(data=request.data, context={'org': org})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = dict(serializer.validated_data)
    product = data.pop('product')
    quantity = data.pop('quantity')
    try:
        bottles = create_bottles(product, quantity=quantity, user=request.user, **data)
    except BottleError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(IpmBottleSerializer(bottles, many=True).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def bottle_detail(request, pk):
    bottle = get_org_object_or_404(IpmBottle, request, pk)
    return Response(IpmBottleSerializer(bottle).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def bottle_by_code(request, code):
    """Look up a scanned bottle code"""
    bottle = get_bottle_by_code(get_request_org(request), code)
    if bottle is None:
        raise Http404('Bottle not found')
    return Response(IpmBottleSerializer(bottle).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def bottle_usage(request, pk):
    """Record product taken from a bottle"""
    org = get_request_org(request)
    bottle = get_org_object_or_404(IpmBottle, request, pk)
    serializer = UsageSerializer(data=request.data, context={'org': org})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        movement = record_usage(bottle, data['quantity_ml'], user=request.user,
                                location=data.get('location'), notes=data.get('notes'))
    except BottleError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'bottle_usage', 'IpmBottle', bottle.id, object_name=bottle.product.name,
                     object_reference=bottle.bottle_code,
                     changes={'quantity_ml': str(data['quantity_ml']), 'remaining_after_ml': str(movement.remaining_after_ml)})
    return Response(IpmStockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def bottle_adjust(request, pk):
    """Correct a bottle's level after a manual check"""
    bottle = get_org_object_or_404(IpmBottle, request, pk)
    serializer = AdjustSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        movement = adjust_bottle_level(bottle, serializer.validated_data['remaining_ml'], user=request.user,
                                       notes=serializer.validated_data.get('notes'))
    except BottleError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request, 'update', 'IpmBottle', bottle.id, object_reference=bottle.bottle_code,
                     changes={'remaining_ml': str(movement.remaining_after_ml)})
    return Response(IpmStockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def bottle_dispose(request, pk):
    bottle = get_org_object_or_404(IpmBottle, request, pk)
    try:
        movement = dispose_bottle(bottle, user=request.user, notes=request.data.get('notes'))
    except BottleError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request, 'update', 'IpmBottle', bottle.id, object_reference=bottle.bottle_code,
                     changes={'status': 'disposed', 'disposed_ml': str(-movement.quantity_ml)})
    return Response(IpmStockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def bottle_movements(request, pk):
    bottle = get_org_object_or_404(IpmBottle, request, pk)
    movements = bottle.movements.select_related('bottle', 'location', 'recorded_by')
    return Response(IpmStockMovementSerializer(movements, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ipm_stock_summary(request):
    """
    Stock position per product.

    ``?low=true`` returns only products at or below their low-stock threshold;
    ``?product=<id>`` returns one product.
    """
    org = get_request_org(request)
    product = None
    product_id = request.query_params.get('product')
    if product_id:
        product = get_org_object_or_404(IpmProduct, request, product_id)
    rows = stock_summary(org, product=product)
    if request.query_params.get('low') in ('true', '1'):
        rows = [row for row in rows if row['is_low_stock']]
    return Response(rows)
