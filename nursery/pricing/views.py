import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import IntegrityError, transaction
from nursery.catalog.models import Product
from nursery.core.tenancy import get_request_org, org_queryset, get_org_object_or_404
from nursery.parties.models import Customer
from .calculations import order_totals
from .models import OrgFee, PriceList
from .serializers import OrgFeeSerializer, PriceListSerializer
from .services import build_line, default_fees

logger = logging.getLogger(__name__)


def _as_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# OrgFee views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def fee_list_create(request):
    """List the organisation's fees or create a new fee"""
    if request.method == 'GET':
        fees = org_queryset(OrgFee, request)
        if request.query_params.get('active') in ('true', '1'):
            fees = fees.filter(is_active=True)
        fee_type = request.query_params.get('fee_type')
        if fee_type:
            fees = fees.filter(fee_type=fee_type)
        serializer = OrgFeeSerializer(fees, many=True)
        return Response(serializer.data)
    else:
        serializer = OrgFeeSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(org=get_request_org(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def fee_detail(request, pk):
    """Retrieve, update or delete a fee"""
    fee = get_org_object_or_404(OrgFee, request, pk)

    if request.method == 'GET':
        serializer = OrgFeeSerializer(fee)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = OrgFeeSerializer(fee, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        fee.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# PriceList views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def price_list_list_create(request):
    """List all price lists or create a new price list"""
    org = get_request_org(request)
    if request.method == 'GET':
        price_lists = PriceList.objects.filter(org=org).prefetch_related('items__product')
        serializer = PriceListSerializer(price_lists, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = PriceListSerializer(data=request.data, context={'org': org})
        if serializer.is_valid():
            try:
                with transaction.atomic():
                    serializer.save(org=org)
            except IntegrityError:
                return Response({'error': 'A price list with this name already exists'}, status=status.HTTP_400_BAD_REQUEST)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def price_list_detail(request, pk):
    """Retrieve, update or delete a price list"""
    org = get_request_org(request)
    price_list = get_org_object_or_404(PriceList, request, pk)

    if request.method == 'GET':
        serializer = PriceListSerializer(price_list)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PriceListSerializer(price_list, data=request.data, partial=request.method == 'PATCH', context={'org': org})
        if serializer.is_valid():
            try:
                with transaction.atomic():
                    serializer.save()
            except IntegrityError:
                return Response({'error': 'A price list with this name already exists'}, status=status.HTTP_400_BAD_REQUEST)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        price_list.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_quote(request):
    """
    Price an order form without saving anything.

    Body::

        {
            "customer": 3,                  # optional
            "lines": [{"product": 7, "quantity": 40}, {"quantity": "2", "unit_price": "9.5", "vat_rate": 13.5}],
            "fees": [1, 2],                 # optional; default fees when omitted
            "distance_km": 18
        }

    Unparseable numbers count as zero.
    """
    org = get_request_org(request)
    lines_data = request.data.get('lines', [])
    if not isinstance(lines_data, list):
        return Response({'error': 'lines must be a list'}, status=status.HTTP_400_BAD_REQUEST)

    customer = None
    customer_id = request.data.get('customer')
    if customer_id:
        if _as_id(customer_id) is None:
            return Response({'error': 'customer must be a customer id'}, status=status.HTTP_400_BAD_REQUEST)
        customer = get_org_object_or_404(Customer, request, _as_id(customer_id))

    product_ids = [_as_id(line.get('product')) for line in lines_data if isinstance(line, dict)]
    product_ids = [pid for pid in product_ids if pid is not None]
    products = Product.objects.filter(org=org, id__in=product_ids).in_bulk()

    lines = []
    for line_data in lines_data:
        if not isinstance(line_data, dict):
            continue
        data = {key: value for key, value in line_data.items() if key not in ('product', 'customer')}
        lines.append(build_line(product=products.get(_as_id(line_data.get('product'))), customer=customer, **data))

    fee_ids = request.data.get('fees')
    if fee_ids is None:
        fees = default_fees(org)
    else:
        if not isinstance(fee_ids, list):
            return Response({'error': 'fees must be a list of fee ids'}, status=status.HTTP_400_BAD_REQUEST)
        fee_ids = [fid for fid in (_as_id(value) for value in fee_ids) if fid is not None]
        fees = OrgFee.objects.filter(org=org, is_active=True, id__in=fee_ids)

    totals = order_totals(lines, fees, distance_km=request.data.get('distance_km'), customer=customer)
    return Response(totals.as_dict())
