"""
Order lifecycle and picking.

Orders move through ``VALID_TRANSITIONS``; anything else is an
``OrderStatusError``. Confirming an order prepares its pick list. Picking
takes units out of batches under row locks and records which batch each
unit came from, so a pick can be undone and a void can put stock back.
"""
import logging
import uuid
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from nursery.inventory.allocation import suggest_allocation, allocation_to_selections, summarize_selection
from nursery.inventory.models import Batch
from nursery.inventory.queries import saleable_batches, to_availability
from nursery.pricing.calculations import order_totals, line_needs_labels, quantize_money, to_decimal
from nursery.pricing.services import build_line, default_fees
from .models import Order, OrderItem, OrderFee, PickList, PickItem, PickItemBatch

logger = logging.getLogger(__name__)

VALID_TRANSITIONS = {
    'draft': ['confirmed', 'void'],
    'confirmed': ['picking', 'void'],
    'picking': ['packed', 'void'],
    'ready': ['dispatched', 'void'],
    'packed': ['dispatched', 'void'],
    'dispatched': ['delivered'],
    'delivered': [],
    'cancelled': [],
    'void': [],
}

# Moving into these needs a completed pick list, when the order has one
REQUIRES_COMPLETED_PICK = ('packed', 'dispatched')


class OrderError(Exception):
    """An order operation that cannot be carried out"""


class OrderStatusError(OrderError):
    pass


class PickingError(OrderError):
    pass


def generate_order_number():
    return f"ORD-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"


def _quantize(value, places):
    return to_decimal(value).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def create_order(org, customer, lines, user=None, ship_to_address=None, requested_delivery_date=None,
                 notes='', fees=None, distance_km=None, currency=None):
    """
    Create an order with its lines and fees in one transaction.

    ``lines`` are dicts with a ``product`` instance, a ``quantity`` and
    optional overrides (``unit_price``, ``vat_rate``, ``rrp``, multibuy,
    ``requires_pre_pricing``, ``description``). When ``fees`` is None the
    organisation's default fees apply.
    """
    if not lines:
        raise OrderError('An order needs at least one line.')

    built = []
    for line in lines:
        data = {key: value for key, value in line.items() if key != 'product'}
        product = line.get('product')
        if product is None:
            raise OrderError('Every order line needs a product.')
        if int(data.get('quantity') or 0) <= 0:
            raise OrderError(f'Quantity for {product.name} must be greater than zero.')
        data = build_line(product=product, customer=customer, **data)
        data['product'] = product
        # totals are computed on the stored price
        data['unit_price'] = quantize_money(data['unit_price'])
        built.append(data)

    if fees is None:
        fees = default_fees(org)
    totals = order_totals(built, fees, distance_km=distance_km, customer=customer)

    with transaction.atomic():
        order = Order.objects.create(
            org=org,
            order_number=generate_order_number(),
            customer=customer,
            ship_to_address=ship_to_address,
            requested_delivery_date=requested_delivery_date,
            currency=currency or customer.currency or org.currency,
            notes=notes or '',
            created_by=user,
            subtotal_ex_vat=quantize_money(totals.subtotal),
            fees_ex_vat=quantize_money(totals.fees_net),
            vat_amount=quantize_money(totals.vat),
            total_inc_vat=quantize_money(totals.total),
        )

        for line, line_total in zip(built, totals.lines):
            product = line['product']
            OrderItem.objects.create(
                order=order,
                product=product,
                description=line.get('description') or product.name,
                quantity=int(line['quantity']),
                unit_price=line['unit_price'],
                vat_rate=to_decimal(line.get('vat_rate')),
                rrp=line.get('rrp') or None,
                multibuy_qty_2=line.get('multibuy_qty_2') or None,
                multibuy_price_2=line.get('multibuy_price_2') or None,
                requires_pre_pricing=line_needs_labels(line),
                line_net=quantize_money(line_total.net),
                line_vat=quantize_money(line_total.vat),
                line_total=quantize_money(line_total.total),
            )

        for charge in totals.fees:
            OrderFee.objects.create(
                order=order,
                fee_id=charge.fee_id,
                fee_type=charge.fee_type,
                name=charge.name,
                quantity=_quantize(charge.quantity, '0.001'),
                unit_amount=_quantize(charge.unit_amount, '0.0001'),
                vat_rate=charge.vat_rate,
                net=quantize_money(charge.net),
                vat=quantize_money(charge.vat),
                total=quantize_money(charge.total),
                waived=charge.waived,
            )

    logger.info(f"Order {order.order_number} created for customer {customer.id}: {len(built)} lines, total {order.total_inc_vat}")
    return order


def change_order_status(order, new_status, user=None):
    """
    Move an order to ``new_status``.

    Returns ``(order, old_status)``. Voiding goes through ``void_order`` so
    picked stock is released.
    """
    if new_status == 'void':
        old_status = order.status
        order, _ = void_order(order, user)
        return order, old_status

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        old_status = order.status
        if new_status not in VALID_TRANSITIONS.get(old_status, []):
            raise OrderStatusError(f'Cannot change order status from {old_status} to {new_status}.')

        if new_status in REQUIRES_COMPLETED_PICK:
            pick_list = PickList.objects.filter(order=order).first()
            if pick_list is not None and pick_list.status != 'completed':
                raise OrderStatusError(f'Pick list must be completed before the order is {new_status}.')

        order.status = new_status
        order.save(update_fields=['status', 'updated_at'])

    if new_status == 'confirmed':
        try:
            with transaction.atomic():
                create_pick_list(order, user, mark_picking=False)
        except Exception as e:
            logger.error(f"Could not create pick list for order {order.order_number}: {str(e)}")

    logger.info(f"Order {order.order_number} status {old_status} -> {new_status}")
    return order, old_status


def void_order(order, user=None):
    """
    Void an order and return any picked units to their batches.

    Returns ``(order, units_released)``.
    """
    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        if 'void' not in VALID_TRANSITIONS.get(order.status, []):
            raise OrderStatusError(f'An order that is {order.status} cannot be voided.')

        released = 0
        pick_list = PickList.objects.filter(order=order).first()
        if pick_list is not None:
            batch_picks = PickItemBatch.objects.filter(pick_item__pick_list=pick_list)
            for batch_pick in batch_picks:
                Batch.objects.filter(pk=batch_pick.batch_id).update(quantity=F('quantity') + batch_pick.quantity)
                released += batch_pick.quantity
            batch_picks.delete()
            pick_list.items.update(picked_qty=0, status='pending')
            pick_list.status = 'cancelled'
            pick_list.save(update_fields=['status', 'updated_at'])

        order.status = 'void'
        order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Order {order.order_number} voided, {released} units returned to stock")
    return order, released


def create_pick_list(order, user=None, mark_picking=True):
    """
    Pick list with one item per order line.

    Returns ``(pick_list, created)``; an order keeps a single pick list.
    With ``mark_picking`` a confirmed order moves to picking.
    """
    existing = PickList.objects.filter(order=order).first()
    if existing is not None:
        if mark_picking and order.status == 'confirmed' and existing.status != 'cancelled':
            order.status = 'picking'
            order.save(update_fields=['status', 'updated_at'])
        return existing, False
    if order.status not in ('confirmed', 'picking'):
        raise PickingError(f'Pick lists can only be created for confirmed orders, not {order.status}.')

    with transaction.atomic():
        pick_list = PickList.objects.create(org=order.org, order=order)
        PickItem.objects.bulk_create([
            PickItem(pick_list=pick_list, order_item=item, target_qty=item.quantity)
            for item in order.items.all() if item.quantity > 0
        ])
        if mark_picking and order.status == 'confirmed':
            order.status = 'picking'
            order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Pick list {pick_list.id} created for order {order.order_number}")
    return pick_list, True


def start_pick_list(pick_list, user=None):
    if pick_list.status not in ('pending', 'in_progress'):
        raise PickingError(f'A {pick_list.status} pick list cannot be started.')

    with transaction.atomic():
        if pick_list.status == 'pending':
            pick_list.status = 'in_progress'
            pick_list.started_at = timezone.now()
            pick_list.started_by = user
            pick_list.save(update_fields=['status', 'started_at', 'started_by', 'updated_at'])
        order = pick_list.order
        if order.status == 'confirmed':
            order.status = 'picking'
            order.save(update_fields=['status', 'updated_at'])
    return pick_list


def available_batches(pick_item):
    """Saleable batches of the line's product, oldest first"""
    product = pick_item.order_item.product
    if product is None:
        return []
    return list(saleable_batches(pick_item.pick_list.org, product=product))


def suggest_pick(pick_item):
    """Greedy FEFO suggestion for what is still left to pick"""
    remaining = max(0, pick_item.target_qty - pick_item.picked_qty)
    batches = [to_availability(batch) for batch in available_batches(pick_item)]
    selections = allocation_to_selections(suggest_allocation(remaining, batches), batches)
    return {
        'allocation': [selection.to_dict() for selection in selections.values()],
        'batches': [batch.to_dict() for batch in batches],
        **summarize_selection(selections, remaining),
    }


def _item_status(pick_item):
    if pick_item.picked_qty == 0:
        return 'pending'
    return 'picked' if pick_item.picked_qty >= pick_item.target_qty else 'short'


def _check_open(pick_list):
    if pick_list.status in ('completed', 'cancelled'):
        raise PickingError(f'Pick list is {pick_list.status}.')


def pick_item_multi_batch(pick_item, picks, user=None):
    """
    Take units for one pick item from one or more batches.

    ``picks`` is a list of ``{"batch_id": ..., "quantity": ...}``. Every
    batch is locked for the transaction; a quantity that is not positive or
    exceeds what the batch holds rejects the whole pick.
    """
    if not picks:
        raise PickingError('Select at least one batch to pick from.')

    with transaction.atomic():
        item = PickItem.objects.select_for_update().select_related('pick_list', 'order_item').get(pk=pick_item.pk)
        pick_list = item.pick_list
        _check_open(pick_list)

        batch_ids = [pick['batch_id'] for pick in picks]
        batches = Batch.objects.select_for_update().filter(org=pick_list.org, pk__in=batch_ids).in_bulk()

        picked = 0
        for pick in picks:
            batch = batches.get(pick['batch_id'])
            if batch is None:
                raise PickingError(f"Batch {pick['batch_id']} not found.")
            if batch.product_id != item.order_item.product_id:
                raise PickingError(f'Batch {batch.batch_number} does not belong to the ordered product.')
            quantity = int(pick['quantity'])
            if quantity <= 0:
                raise PickingError('Pick quantity must be greater than zero.')
            if quantity > batch.quantity:
                raise PickingError(f'Batch {batch.batch_number} only has {batch.quantity} available.')

            batch.quantity -= quantity
            batch.save(update_fields=['quantity', 'updated_at'])
            PickItemBatch.objects.create(pick_item=item, batch=batch, quantity=quantity, picked_by=user)
            picked += quantity

        item.picked_qty += picked
        item.status = _item_status(item)
        item.save(update_fields=['picked_qty', 'status', 'updated_at'])

        if pick_list.status == 'pending':
            start_pick_list(pick_list, user)

    is_short = item.picked_qty < item.target_qty
    if is_short:
        logger.warning(f"Short pick on item {item.id}: {item.picked_qty} of {item.target_qty}")
    return {
        'pick_item': item,
        'picked': picked,
        'picked_qty': item.picked_qty,
        'target_qty': item.target_qty,
        'is_short': is_short,
    }


def mark_pick_item_short(pick_item, user=None, notes=None):
    """
    Close a pick item with whatever has been picked so far, possibly nothing.

    Used when a line cannot be filled, e.g. the product has no saleable stock.
    """
    with transaction.atomic():
        item = PickItem.objects.select_for_update().select_related('pick_list').get(pk=pick_item.pk)
        _check_open(item.pick_list)
        if item.picked_qty >= item.target_qty:
            raise PickingError('Item is already fully picked.')

        item.status = 'short'
        fields = ['status', 'updated_at']
        if notes:
            item.notes = notes
            fields.append('notes')
        item.save(update_fields=fields)

        if item.pick_list.status == 'pending':
            start_pick_list(item.pick_list, user)

    logger.warning(f"Pick item {item.id} marked short: {item.picked_qty} of {item.target_qty}")
    return item


def remove_batch_pick(batch_pick):
    """Undo one batch pick and put its units back on the batch"""
    with transaction.atomic():
        batch_pick = PickItemBatch.objects.select_for_update().select_related('pick_item__pick_list').get(pk=batch_pick.pk)
        item = batch_pick.pick_item
        _check_open(item.pick_list)

        Batch.objects.filter(pk=batch_pick.batch_id).update(quantity=F('quantity') + batch_pick.quantity)
        batch_pick.delete()

        item.picked_qty = item.batch_picks.aggregate(total=Sum('quantity'))['total'] or 0
        item.status = _item_status(item)
        item.save(update_fields=['picked_qty', 'status', 'updated_at'])
    return item


def complete_pick_list(pick_list, user=None):
    """
    Finish picking and mark the order packed.

    Every item must be picked or short. Returns the number of short items.
    """
    with transaction.atomic():
        pick_list = PickList.objects.select_for_update().select_related('order').get(pk=pick_list.pk)
        _check_open(pick_list)

        pending = pick_list.items.filter(status='pending').count()
        if pending:
            raise PickingError(f'{pending} item(s) have not been picked yet.')

        pick_list.status = 'completed'
        pick_list.completed_at = timezone.now()
        pick_list.completed_by = user
        pick_list.save(update_fields=['status', 'completed_at', 'completed_by', 'updated_at'])

        order = pick_list.order
        if order.status in ('confirmed', 'picking'):
            order.status = 'packed'
            order.save(update_fields=['status', 'updated_at'])

    short_items = pick_list.items.filter(status='short').count()
    logger.info(f"Pick list {pick_list.id} completed for order {pick_list.order.order_number} ({short_items} short)")
    return pick_list, short_items
