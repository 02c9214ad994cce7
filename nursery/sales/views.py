import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, Count
from django.shortcuts import get_object_or_404
from nursery.core.tenancy import get_request_org, get_org_object_or_404
from nursery.core.utils import create_audit_log
from nursery.inventory.serializers import BatchSerializer
from nursery.pricing.models import OrgFee
from .models import Order, PickList, PickItem, PickItemBatch
from .serializers import (
    OrderSerializer, OrderListSerializer, OrderCreateSerializer, OrderUpdateSerializer, OrderStatusSerializer,
    PickListSerializer, PickItemSerializer, MultiBatchPickSerializer
)
from .services import (
    OrderError, create_order, change_order_status, void_order,
    create_pick_list, start_pick_list, available_batches, suggest_pick,
    pick_item_multi_batch, mark_pick_item_short, remove_batch_pick, complete_pick_list
)

logger = logging.getLogger(__name__)


def _error(e):
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


def _order_queryset(org):
    return Order.objects.filter(org=org).select_related('customer', 'created_by').prefetch_related('items__product', 'fees')


def _pick_list_queryset(org):
    return PickList.objects.filter(org=org).select_related('order__customer').prefetch_related(
        'items__order_item', 'items__batch_picks__batch__location', 'items__batch_picks__picked_by'
    )


def _get_pick_item(request, pk):
    org = get_request_org(request)
    return get_object_or_404(PickItem.objects.select_related('pick_list__org', 'order_item__product'), pk=pk, pick_list__org=org)


# Order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List orders or create a new order"""
    org = get_request_org(request)
    if request.method == 'GET':
        orders = Order.objects.filter(org=org).select_related('customer').annotate(item_count=Count('items'))

        search = request.query_params.get('search', '').strip()
        if search:
            orders = orders.filter(Q(order_number__icontains=search) | Q(customer__name__icontains=search))
        status_filter = request.query_params.get('status')
        if status_filter:
            orders = orders.filter(status=status_filter)
        customer_id = request.query_params.get('customer')
        if customer_id:
            orders = orders.filter(customer_id=customer_id)
        date_from = request.query_params.get('date_from')
        if date_from:
            orders = orders.filter(created_at__date__gte=date_from)
        date_to = request.query_params.get('date_to')
        if date_to:
            orders = orders.filter(created_at__date__lte=date_to)

        serializer = OrderListSerializer(orders, many=True)
        return Response(serializer.data)

    serializer = OrderCreateSerializer(data=request.data, context={'org': org})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    fees = None
    if data.get('fees') is not None:
        fees = OrgFee.objects.filter(org=org, is_active=True, id__in=data['fees'])

    try:
        order = create_order(
            org,
            data['customer'],
            data['lines'],
            user=request.user,
            ship_to_address=data.get('ship_to_address'),
            requested_delivery_date=data.get('requested_delivery_date'),
            notes=data.get('notes', ''),
            fees=fees,
            distance_km=data.get('distance_km'),
        )
    except OrderError as e:
        return _error(e)

    create_audit_log(request, 'order_create', 'Order', order.id, object_name=order.customer.name,
                     object_reference=order.order_number,
                     changes={'total_inc_vat': str(order.total_inc_vat), 'lines': len(data['lines'])})
    return Response(OrderSerializer(_order_queryset(org).get(pk=order.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """
    Retrieve an order, edit its notes and delivery date, or delete a draft.

    Status changes go through the status and void endpoints.
    """
    org = get_request_org(request)
    order = get_org_object_or_404(Order, request, pk, queryset=_order_queryset(org))

    if request.method == 'GET':
        return Response(OrderSerializer(order).data)
    elif request.method == 'PATCH':
        serializer = OrderUpdateSerializer(order, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'Order', order.id, changes=dict(request.data),
                             object_reference=order.order_number)
            return Response(OrderSerializer(order).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if order.status != 'draft':
            return Response({'error': 'Only draft orders can be deleted; void the order instead'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request, 'delete', 'Order', order.id, object_reference=order.order_number)
        order.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_status_update(request, pk):
    """Move an order to a new status"""
    order = get_org_object_or_404(Order, request, pk)
    serializer = OrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    new_status = serializer.validated_data['status']
    try:
        order, old_status = change_order_status(order, new_status, request.user)
    except OrderError as e:
        logger.warning(f"Rejected status change on order {order.order_number}: {str(e)}")
        return _error(e)

    create_audit_log(request, 'order_status', 'Order', order.id, object_reference=order.order_number,
                     changes={'status': {'old': old_status, 'new': new_status}})
    return Response(OrderSerializer(_order_queryset(order.org).get(pk=order.pk)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_void(request, pk):
    """Void an order and put any picked stock back"""
    order = get_org_object_or_404(Order, request, pk)
    old_status = order.status
    try:
        order, released = void_order(order, request.user)
    except OrderError as e:
        return _error(e)

    create_audit_log(request, 'order_void', 'Order', order.id, object_reference=order.order_number,
                     changes={'status': {'old': old_status, 'new': 'void'}, 'units_released': released})
    return Response({'order': OrderSerializer(_order_queryset(order.org).get(pk=order.pk)).data, 'units_released': released})


# Pick list views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pick_list_list(request):
    """List pick lists, optionally filtered by status"""
    org = get_request_org(request)
    pick_lists = _pick_list_queryset(org)
    status_filter = request.query_params.get('status')
    if status_filter:
        pick_lists = pick_lists.filter(status=status_filter)
    return Response(PickListSerializer(pick_lists, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_pick_list_create(request, pk):
    """Create (or fetch) the pick list for an order and move the order to picking"""
    org = get_request_org(request)
    order = get_org_object_or_404(Order, request, pk)
    try:
        pick_list, created = create_pick_list(order, request.user)
    except OrderError as e:
        return _error(e)
    data = PickListSerializer(_pick_list_queryset(org).get(pk=pick_list.pk)).data
    return Response(data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pick_list_detail(request, pk):
    org = get_request_org(request)
    pick_list = get_org_object_or_404(PickList, request, pk, queryset=_pick_list_queryset(org))
    return Response(PickListSerializer(pick_list).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def pick_list_start(request, pk):
    org = get_request_org(request)
    pick_list = get_org_object_or_404(PickList, request, pk)
    try:
        start_pick_list(pick_list, request.user)
    except OrderError as e:
        return _error(e)
    return Response(PickListSerializer(_pick_list_queryset(org).get(pk=pick_list.pk)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def pick_list_complete(request, pk):
    """Finish picking; the order becomes packed"""
    org = get_request_org(request)
    pick_list = get_org_object_or_404(PickList, request, pk)
    try:
        pick_list, short_items = complete_pick_list(pick_list, request.user)
    except OrderError as e:
        return _error(e)

    create_audit_log(request, 'pick', 'PickList', pick_list.id, object_reference=pick_list.order.order_number,
                     changes={'status': 'completed', 'short_items': short_items})
    data = PickListSerializer(_pick_list_queryset(org).get(pk=pick_list.pk)).data
    return Response({'pick_list': data, 'short_items': short_items})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pick_item_available_batches(request, pk):
    """Saleable batches for a pick item in FEFO order"""
    pick_item = _get_pick_item(request, pk)
    return Response(BatchSerializer(available_batches(pick_item), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pick_item_suggest(request, pk):
    pick_item = _get_pick_item(request, pk)
    return Response(suggest_pick(pick_item))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def pick_item_pick(request, pk):
    """
    Pick a line from one or more batches.

    Body: ``{"batches": [{"batch_id": 4, "quantity": 25}, {"batch_id": 9, "quantity": 15}]}``
    """
    pick_item = _get_pick_item(request, pk)
    serializer = MultiBatchPickSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        result = pick_item_multi_batch(pick_item, serializer.validated_data['batches'], request.user)
    except OrderError as e:
        return _error(e)

    order = pick_item.pick_list.order
    create_audit_log(request, 'pick', 'PickItem', pick_item.id, object_reference=order.order_number,
                     changes={'batches': [{'batch_id': b['batch_id'], 'quantity': b['quantity']} for b in serializer.validated_data['batches']],
                              'picked_qty': result['picked_qty'], 'is_short': result['is_short']})
    return Response({
        'pick_item': PickItemSerializer(result['pick_item']).data,
        'picked': result['picked'],
        'picked_qty': result['picked_qty'],
        'target_qty': result['target_qty'],
        'is_short': result['is_short'],
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def pick_item_short(request, pk):
    """Close a line that cannot be filled; body may carry ``notes``"""
    pick_item = _get_pick_item(request, pk)
    try:
        pick_item = mark_pick_item_short(pick_item, request.user, request.data.get('notes'))
    except OrderError as e:
        return _error(e)

    create_audit_log(request, 'pick', 'PickItem', pick_item.id, object_reference=pick_item.pick_list.order.order_number,
                     changes={'status': 'short', 'picked_qty': pick_item.picked_qty})
    return Response(PickItemSerializer(pick_item).data)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def pick_item_batch_remove(request, pk):
    """Undo one batch pick"""
    org = get_request_org(request)
    batch_pick = get_object_or_404(PickItemBatch, pk=pk, pick_item__pick_list__org=org)
    try:
        pick_item = remove_batch_pick(batch_pick)
    except OrderError as e:
        return _error(e)
    return Response(PickItemSerializer(pick_item).data)
