"""
IPM bottle stock.

Every change to a bottle's contents is written as an ``IpmStockMovement``
with a signed ``quantity_ml`` and the level left afterwards, so a bottle's
history can be replayed from its movements.
"""
import logging
import re
from datetime import timedelta
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from .models import IpmProduct, IpmBottle, IpmStockMovement

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
USAGE_WINDOW_DAYS = 30


class BottleError(Exception):
    """A bottle operation that cannot be carried out"""


def bottle_code_prefix(product_name):
    """First four letters or digits of the product name, upper-cased"""
    cleaned = re.sub(r'[^A-Za-z0-9]', '', product_name or '').upper()
    return cleaned[:4] or 'IPM'


def next_bottle_codes(product, count):
    """``count`` unused codes of the form ``<PREFIX>-<NNN>`` for the product's organisation"""
    prefix = bottle_code_prefix(product.name)
    pattern = re.compile(rf'^{re.escape(prefix)}-(\d+)$')
    highest = 0
    for code in IpmBottle.objects.filter(org=product.org, bottle_code__startswith=f'{prefix}-').values_list('bottle_code', flat=True):
        match = pattern.match(code)
        if match:
            highest = max(highest, int(match.group(1)))
    return [f'{prefix}-{number:03d}' for number in range(highest + 1, highest + count + 1)]


def create_bottles(product, quantity=1, volume_ml=None, user=None, batch_number=None,
                   expiry_date=None, purchase_date=None, notes=None):
    """Register ``quantity`` sealed bottles of a product"""
    if quantity < 1:
        raise BottleError('Quantity must be at least 1.')
    volume = Decimal(volume_ml) if volume_ml is not None else Decimal(product.default_bottle_volume_ml)
    if volume <= ZERO:
        raise BottleError('Bottle volume must be greater than zero.')

    with transaction.atomic():
        # serialise code generation per product
        IpmProduct.objects.select_for_update().filter(pk=product.pk).first()
        bottles = [
            IpmBottle.objects.create(
                org=product.org,
                product=product,
                bottle_code=code,
                volume_ml=volume,
                remaining_ml=volume,
                batch_number=batch_number,
                expiry_date=expiry_date,
                purchase_date=purchase_date or timezone.localdate(),
                status='sealed',
                notes=notes,
                created_by=user,
            )
            for code in next_bottle_codes(product, quantity)
        ]

    logger.info(f"Created {len(bottles)} bottle(s) of {product.name}: {', '.join(b.bottle_code for b in bottles)}")
    return bottles


def get_bottle_by_code(org, bottle_code):
    return IpmBottle.objects.select_related('product').filter(org=org, bottle_code__iexact=(bottle_code or '').strip()).first()


def _lock(bottle):
    return IpmBottle.objects.select_for_update().get(pk=bottle.pk)


def _movement(bottle, movement_type, quantity_ml, user=None, location=None, notes=None):
    return IpmStockMovement.objects.create(
        org=bottle.org,
        bottle=bottle,
        product_id=bottle.product_id,
        movement_type=movement_type,
        quantity_ml=quantity_ml,
        remaining_after_ml=bottle.remaining_ml,
        location=location,
        notes=notes,
        recorded_by=user,
    )


def record_usage(bottle, quantity_ml, user=None, location=None, notes=None):
    """
    Take product out of a bottle.

    A sealed bottle is opened first (an ``open`` movement of 0 ml). Usage beyond
    what is left takes only the remainder; the movement records the amount
    actually taken and notes the amount requested. A bottle that reaches zero
    becomes ``empty``.
    """
    quantity_ml = Decimal(quantity_ml)
    if quantity_ml <= ZERO:
        raise BottleError('Usage must be greater than zero.')

    with transaction.atomic():
        bottle = _lock(bottle)
        if bottle.status not in IpmBottle.IN_STOCK_STATUSES:
            raise BottleError(f'Bottle {bottle.bottle_code} is {bottle.status}.')

        now = timezone.now()
        if bottle.status == 'sealed':
            bottle.status = 'open'
            bottle.opened_at = now
            _movement(bottle, 'open', ZERO, user=user, location=location, notes='Bottle opened for use')

        taken = min(quantity_ml, bottle.remaining_ml)
        if taken < quantity_ml:
            logger.warning(f"Bottle {bottle.bottle_code}: {quantity_ml} ml requested, only {taken} ml left")
            notes = f"{notes + '; ' if notes else ''}requested {quantity_ml} ml"
        bottle.remaining_ml -= taken
        if bottle.remaining_ml == ZERO:
            bottle.status = 'empty'
            bottle.emptied_at = now
        bottle.save()

        movement = _movement(bottle, 'usage', -taken, user=user, location=location, notes=notes)

    if bottle.status == 'empty':
        logger.info(f"Bottle {bottle.bottle_code} is now empty")
    return movement


def adjust_bottle_level(bottle, new_remaining_ml, user=None, notes=None):
    """Set a bottle's level after a manual check; the difference is recorded"""
    new_remaining_ml = Decimal(new_remaining_ml)

    with transaction.atomic():
        bottle = _lock(bottle)
        if bottle.status == 'disposed':
            raise BottleError(f'Bottle {bottle.bottle_code} has been disposed.')
        if new_remaining_ml < ZERO or new_remaining_ml > bottle.volume_ml:
            raise BottleError(f'Level must be between 0 and {bottle.volume_ml} ml.')

        previous = bottle.remaining_ml
        bottle.remaining_ml = new_remaining_ml
        if new_remaining_ml == ZERO:
            bottle.status = 'empty'
            bottle.emptied_at = timezone.now()
        elif bottle.status == 'empty':
            bottle.status = 'open'
            bottle.emptied_at = None
        bottle.save()

        movement = _movement(
            bottle, 'adjustment', new_remaining_ml - previous, user=user,
            notes=notes or f'Manual adjustment from {previous}ml to {new_remaining_ml}ml',
        )
    return movement


def dispose_bottle(bottle, user=None, notes=None):
    """Write off whatever is left in a bottle"""
    with transaction.atomic():
        bottle = _lock(bottle)
        if bottle.status == 'disposed':
            raise BottleError(f'Bottle {bottle.bottle_code} is already disposed.')

        disposed_ml = bottle.remaining_ml
        bottle.remaining_ml = ZERO
        bottle.status = 'disposed'
        bottle.save()
        movement = _movement(bottle, 'disposal', -disposed_ml, user=user, notes=notes or 'Disposed')

    logger.info(f"Bottle {bottle.bottle_code} disposed with {disposed_ml}ml remaining")
    return movement


def available_bottles(product):
    """Bottles that can be used, open ones first, then the emptiest"""
    return product.bottles.filter(status__in=IpmBottle.IN_STOCK_STATUSES, remaining_ml__gt=0).order_by('status', 'remaining_ml', 'id')


def stock_summary(org, product=None):
    """
    Stock position per product.

    A product is low on stock when its bottles in stock (sealed or open)
    are at or below its ``low_stock_threshold``.
    """
    in_stock = Q(bottles__status__in=IpmBottle.IN_STOCK_STATUSES)
    products = IpmProduct.objects.filter(org=org).annotate(
        bottles_in_stock=Count('bottles', filter=in_stock),
        bottles_sealed=Count('bottles', filter=Q(bottles__status='sealed')),
        bottles_open=Count('bottles', filter=Q(bottles__status='open')),
        total_remaining_ml=Sum('bottles__remaining_ml', filter=in_stock),
    ).order_by('name')
    if product is not None:
        products = products.filter(pk=product.pk)

    since = timezone.now() - timedelta(days=USAGE_WINDOW_DAYS)
    usage = dict(
        IpmStockMovement.objects.filter(org=org, movement_type='usage', recorded_at__gte=since)
        .values('product').annotate(total=Sum('quantity_ml')).values_list('product', 'total')
    )

    rows = []
    for item in products:
        rows.append({
            'product_id': item.id,
            'product_name': item.name,
            'target_stock_bottles': item.target_stock_bottles,
            'low_stock_threshold': item.low_stock_threshold,
            'default_bottle_volume_ml': item.default_bottle_volume_ml,
            'bottles_in_stock': item.bottles_in_stock,
            'bottles_sealed': item.bottles_sealed,
            'bottles_open': item.bottles_open,
            'total_remaining_ml': item.total_remaining_ml or ZERO,
            'is_low_stock': item.bottles_in_stock <= item.low_stock_threshold,
            'usage_last_30_days_ml': abs(usage.get(item.id) or ZERO),
        })
    return rows
