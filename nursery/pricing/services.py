"""Price lookups shared by quotes and order entry"""
from .calculations import to_decimal
from .models import OrgFee


def resolve_unit_price(product, customer=None, price_list=None):
    """
    Wholesale unit price for a product.

    The explicit price list wins, then the customer's default price list,
    then the product's own price.
    """
    price_list = price_list or (customer.default_price_list if customer is not None else None)
    if price_list is not None and price_list.is_active:
        price = price_list.price_for(product)
        if price is not None:
            return price
    return product.unit_price


def default_fees(org):
    return OrgFee.objects.filter(org=org, is_active=True, is_default=True)


def build_line(product=None, customer=None, **data):
    """
    Complete one order line from user input and the catalogue.

    Missing unit price and VAT rate come from the catalogue; missing RRP
    comes from the product. Pre-pricing follows the customer unless the
    line says otherwise.
    """
    line = dict(data)
    if product is not None:
        if line.get('unit_price') in (None, ''):
            line['unit_price'] = resolve_unit_price(product, customer)
        if line.get('vat_rate') in (None, ''):
            line['vat_rate'] = product.vat_rate
        if line.get('rrp') in (None, ''):
            line['rrp'] = product.rrp
        line.setdefault('description', product.name)
    if line.get('requires_pre_pricing') is None and customer is not None:
        line['requires_pre_pricing'] = bool(customer.requires_pre_pricing and to_decimal(line.get('rrp')) > 0)
    return line
