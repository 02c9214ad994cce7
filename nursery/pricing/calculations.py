"""
Order pricing.

Line and order totals for the order form and for persisted orders:

    net   = quantity x unit_price
    vat   = net x vat_rate / 100
    total = net + vat

Fees (pre-pricing labels, delivery, handling, rush) are added as extra lines
with their own VAT rate. A fee with a ``min_order_value`` is waived once the
goods net reaches that value.

Everything is computed in Decimal at full precision. Money is only rounded
(2 dp, half up) by ``quantize_money`` when it is stored or rendered.
Numbers that cannot be parsed count as zero; nothing here raises on bad
input because the form calls it on every keystroke.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional

ZERO = Decimal('0')
HUNDRED = Decimal('100')
CENT = Decimal('0.01')

FEE_PRE_PRICING = 'pre_pricing'
FEE_DELIVERY_FLAT = 'delivery_flat'
FEE_DELIVERY_PER_KM = 'delivery_per_km'
FEE_HANDLING = 'handling'
FEE_RUSH_ORDER = 'rush_order'

UNIT_PER_UNIT = 'per_unit'
UNIT_FLAT = 'flat'
UNIT_PER_KM = 'per_km'


def to_decimal(value) -> Decimal:
    """Parse a number leniently; None, blanks, junk and non-finite values become 0"""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not result.is_finite():
        return ZERO
    return result


def quantize_money(value) -> Decimal:
    """Round to cents, half up"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _get(obj, name, default=None):
    """Read a field from a dict (form state) or a model instance"""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


@dataclass
class LineTotals:
    net: Decimal
    vat: Decimal
    total: Decimal

    def as_dict(self):
        return {
            'net': quantize_money(self.net),
            'vat': quantize_money(self.vat),
            'total': quantize_money(self.total),
        }


@dataclass
class FeeCharge:
    fee_type: str
    name: str
    quantity: Decimal
    unit_amount: Decimal
    vat_rate: Decimal
    net: Decimal
    vat: Decimal
    total: Decimal
    waived: bool = False
    fee_id: Optional[int] = None

    def as_dict(self):
        return {
            'fee_id': self.fee_id,
            'fee_type': self.fee_type,
            'name': self.name,
            'quantity': self.quantity,
            'unit_amount': quantize_money(self.unit_amount),
            'vat_rate': self.vat_rate,
            'net': quantize_money(self.net),
            'vat': quantize_money(self.vat),
            'total': quantize_money(self.total),
            'waived': self.waived,
        }


@dataclass
class OrderTotals:
    lines: List[LineTotals] = field(default_factory=list)
    fees: List[FeeCharge] = field(default_factory=list)
    subtotal: Decimal = ZERO
    fees_net: Decimal = ZERO
    vat: Decimal = ZERO
    total: Decimal = ZERO

    def as_dict(self):
        return {
            'lines': [line.as_dict() for line in self.lines],
            'fees': [fee.as_dict() for fee in self.fees],
            'subtotal_ex_vat': quantize_money(self.subtotal),
            'fees_ex_vat': quantize_money(self.fees_net),
            'vat_amount': quantize_money(self.vat),
            'total_inc_vat': quantize_money(self.total),
        }


def line_totals(quantity, unit_price, vat_rate) -> LineTotals:
    net = to_decimal(quantity) * to_decimal(unit_price)
    vat = net * to_decimal(vat_rate) / HUNDRED
    return LineTotals(net=net, vat=vat, total=net + vat)


def line_needs_labels(line) -> bool:
    """A line is pre-priced when flagged, or, without a flag, when it carries an RRP"""
    flag = _get(line, 'requires_pre_pricing')
    if flag is None:
        return to_decimal(_get(line, 'rrp')) > ZERO
    return bool(flag)


def fee_charge(fee, goods_net=ZERO, labelled_units=0, total_units=0, distance_km=ZERO, customer=None) -> FeeCharge:
    """
    Price one fee for an order.

    ``per_unit`` pre-pricing fees count labelled units; other ``per_unit`` fees
    count all units. ``per_km`` fees multiply by the distance. Any other unit
    is charged once. A customer flagged ``pre_pricing_foc`` pays nothing for
    pre-pricing and ``pre_pricing_cost_per_label`` replaces the fee amount.
    """
    fee_type = _get(fee, 'fee_type', '') or ''
    unit = _get(fee, 'unit', UNIT_FLAT)
    unit_amount = to_decimal(_get(fee, 'amount'))
    vat_rate = to_decimal(_get(fee, 'vat_rate'))
    waived = False

    if unit == UNIT_PER_UNIT:
        quantity = to_decimal(labelled_units if fee_type == FEE_PRE_PRICING else total_units)
    elif unit == UNIT_PER_KM:
        quantity = to_decimal(distance_km)
    else:
        quantity = Decimal('1')

    if fee_type == FEE_PRE_PRICING and customer is not None:
        if _get(customer, 'pre_pricing_foc'):
            waived = True
        else:
            override = _get(customer, 'pre_pricing_cost_per_label')
            if override is not None:
                unit_amount = to_decimal(override)

    min_order_value = _get(fee, 'min_order_value')
    if min_order_value is not None and to_decimal(goods_net) >= to_decimal(min_order_value):
        waived = True

    if waived:
        net = vat = ZERO
    else:
        net = quantity * unit_amount
        vat = net * vat_rate / HUNDRED

    return FeeCharge(
        fee_type=fee_type,
        name=_get(fee, 'name', '') or '',
        quantity=quantity,
        unit_amount=unit_amount,
        vat_rate=vat_rate,
        net=net,
        vat=vat,
        total=net + vat,
        waived=waived,
        fee_id=_get(fee, 'id'),
    )


def delivery_fee(amount, min_order_value, goods_net) -> Decimal:
    """Flat delivery charge, free once the goods net reaches the threshold"""
    if min_order_value is not None and to_decimal(goods_net) >= to_decimal(min_order_value):
        return ZERO
    return to_decimal(amount)


def order_totals(lines, fees=(), distance_km=ZERO, customer=None) -> OrderTotals:
    """
    Totals for a whole order.

    ``lines`` hold ``quantity``, ``unit_price``, ``vat_rate`` and optionally
    ``rrp`` / ``requires_pre_pricing``; ``fees`` are OrgFee rows or dicts.
    Grand total = goods subtotal + fees + VAT on both.
    """
    result = OrderTotals()
    labelled_units = ZERO
    total_units = ZERO

    for line in lines:
        quantity = to_decimal(_get(line, 'quantity'))
        totals = line_totals(quantity, _get(line, 'unit_price'), _get(line, 'vat_rate'))
        result.lines.append(totals)
        result.subtotal += totals.net
        result.vat += totals.vat
        total_units += quantity
        if line_needs_labels(line):
            labelled_units += quantity

    for fee in fees:
        if _get(fee, 'fee_type') == FEE_PRE_PRICING and labelled_units == ZERO:
            continue
        charge = fee_charge(
            fee,
            goods_net=result.subtotal,
            labelled_units=labelled_units,
            total_units=total_units,
            distance_km=distance_km,
            customer=customer,
        )
        result.fees.append(charge)
        result.fees_net += charge.net
        result.vat += charge.vat

    result.total = result.subtotal + result.fees_net + result.vat
    return result
