import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import IntegrityError, transaction
from django.db.models import Q
from nursery.catalog.models import Product
from nursery.core.tenancy import get_request_org, get_org_object_or_404
from .allocation import BatchAvailability, suggest_allocation, allocation_to_selections, summarize_selection
from .models import Batch
from .queries import saleable_batches, to_availability
from .serializers import BatchSerializer, AllocationRequestSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def batch_list_create(request):
    """List batches or create a new batch"""
    org = get_request_org(request)
    if request.method == 'GET':
        batches = Batch.objects.filter(org=org).select_related('product', 'variety', 'size', 'location')

        search = request.query_params.get('search', '').strip()
        if search:
            batches = batches.filter(
                Q(batch_number__icontains=search) | Q(variety__name__icontains=search) | Q(product__name__icontains=search)
            )
        status_filter = request.query_params.get('status')
        if status_filter:
            batches = batches.filter(status=status_filter)
        for field in ('product', 'variety', 'size', 'location'):
            value = request.query_params.get(field)
            if value:
                batches = batches.filter(**{f'{field}_id': value})
        if request.query_params.get('saleable') in ('true', '1'):
            batches = batches.filter(quantity__gt=0, status__in=Batch.SALEABLE_STATUSES)

        serializer = BatchSerializer(batches, many=True)
        return Response(serializer.data)
    else:
        serializer = BatchSerializer(data=request.data, context={'org': org})
        if serializer.is_valid():
            try:
                with transaction.atomic():
                    batch = serializer.save(org=org)
            except IntegrityError as e:
                logger.error(f"IntegrityError creating batch: {str(e)}")
                return Response({'error': 'A batch with this number already exists'}, status=status.HTTP_400_BAD_REQUEST)
            logger.info(f"Batch {batch.batch_number} created by {request.user.username}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def batch_detail(request, pk):
    """Retrieve, update or delete a batch"""
    org = get_request_org(request)
    batch = get_org_object_or_404(Batch, request, pk)

    if request.method == 'GET':
        serializer = BatchSerializer(batch)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = BatchSerializer(batch, data=request.data, partial=request.method == 'PATCH', context={'org': org})
        if serializer.is_valid():
            try:
                with transaction.atomic():
                    serializer.save()
            except IntegrityError:
                return Response({'error': 'A batch with this number already exists'}, status=status.HTTP_400_BAD_REQUEST)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        batch.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_available_batches(request, pk):
    """Saleable batches for a product in FEFO order"""
    org = get_request_org(request)
    product = get_org_object_or_404(Product, request, pk)
    batches = saleable_batches(org, product=product)
    return Response([to_availability(batch).to_dict() for batch in batches])


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def allocation_suggest(request):
    """
    Suggest how to split a quantity across batches.

    Body: ``{"target": 40, "batches": [{"batch_id": 1, "available": 25}, ...]}``
    or ``{"target": 40, "product": 7}`` to use the product's saleable batches.
    """
    org = get_request_org(request)
    serializer = AllocationRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    target = serializer.validated_data['target']
    if 'batches' in serializer.validated_data:
        batches = [
            BatchAvailability(batch_id=item['batch_id'], available=item['available'])
            for item in serializer.validated_data['batches']
        ]
    else:
        product = get_org_object_or_404(Product, request, serializer.validated_data['product'])
        batches = [to_availability(batch) for batch in saleable_batches(org, product=product)]

    allocation = suggest_allocation(target, batches)
    selections = allocation_to_selections(allocation, batches)
    summary = summarize_selection(selections, target)

    if summary['is_short']:
        logger.warning(f"Short allocation: {summary['total_selected']} of {target} available")

    return Response({
        'allocation': [selection.to_dict() for selection in selections.values()],
        'batches': [batch.to_dict() for batch in batches],
        **summary,
    })
