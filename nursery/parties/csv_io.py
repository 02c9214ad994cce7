"""
Customer CSV template, export and import.

Column names are camelCase in the file. On import, headers are matched
case- and whitespace-insensitively, so "Delivery Line1" and "deliveryline1"
both work.
"""
import csv
import io
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List

from django.db import transaction

from .models import Customer, CustomerAddress, CustomerContact

logger = logging.getLogger(__name__)


class CsvImportError(Exception):
    """The file as a whole cannot be imported"""


CSV_HEADERS = [
    # Basic info
    'name', 'code', 'email', 'phone', 'store', 'accountsEmail',
    # Country & VAT
    'countryCode', 'vatNumber', 'currency',
    # Payment
    'paymentTermsDays', 'creditLimit', 'pricingTier', 'accountCode', 'defaultPriceList',
    # Delivery address
    'deliveryStoreName', 'deliveryLine1', 'deliveryLine2', 'deliveryCity', 'deliveryCounty',
    'deliveryEircode', 'deliveryCountryCode', 'deliveryContactName', 'deliveryContactPhone',
    'deliveryContactEmail',
    # Contact
    'contactName', 'contactRole', 'contactEmail', 'contactPhone', 'contactMobile',
    'notes',
]

EXPORT_HEADERS = CSV_HEADERS + ['addressCount', 'contactCount']


def template_rows(price_list_name=''):
    return [
        [
            'Garden Centre HQ', 'GC-001', 'orders@gardencentrehq.ie', '+3531234567', "Woodie's",
            'accounts@gardencentrehq.ie',
            'IE', 'IE1234567X', 'EUR',
            '30', '10000', 'Tier A', '4000', price_list_name or 'Wholesale',
            'Head Office', 'Unit 1 Business Park', '', 'Dublin', 'Dublin', 'D01 AB12', 'IE',
            'John Smith', '+3531234568', 'john@gardencentrehq.ie',
            'Mary Jones', 'Buyer', 'mary@gardencentrehq.ie', '+3531234569', '+353861234567',
            'Prefers deliveries on Mondays',
        ],
        [
            'British Garden Supplies', 'BGS-001', 'orders@britishgarden.co.uk', '+441612345670', '',
            'accounts@britishgarden.co.uk',
            'GB', 'GB123456789', 'GBP',
            '45', '', 'Tier B', '4100', price_list_name,
            'Main Warehouse', '123 Industrial Estate', 'Building C', 'Manchester', 'Greater Manchester',
            'M1 1AA', 'GB', 'David Brown', '+441612345671', '',
            'Sarah Wilson', 'Owner', 'sarah@britishgarden.co.uk', '+441612345672', '',
            'UK export - zero-rated VAT',
        ],
    ]


def write_csv(headers, rows):
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def template_csv(price_list_name=''):
    return write_csv(CSV_HEADERS, template_rows(price_list_name))


def _text(value):
    return '' if value is None else str(value)


def customer_to_row(customer):
    """One export row; uses the default shipping address and primary contact"""
    address = customer.primary_address
    contact = customer.primary_contact
    addresses = customer.addresses.all()
    contacts = customer.contacts.all()
    return [
        customer.name, _text(customer.code), _text(customer.email), _text(customer.phone),
        _text(customer.store), _text(customer.accounts_email),
        _text(customer.country_code), _text(customer.vat_number), _text(customer.currency),
        str(customer.payment_terms_days if customer.payment_terms_days is not None else 30),
        _text(customer.credit_limit), _text(customer.pricing_tier), _text(customer.account_code),
        customer.default_price_list.name if customer.default_price_list else '',
        _text(address.store_name) if address else '',
        _text(address.line1) if address else '',
        _text(address.line2) if address else '',
        _text(address.city) if address else '',
        _text(address.county) if address else '',
        _text(address.eircode) if address else '',
        _text(address.country_code) if address else '',
        _text(address.contact_name) if address else '',
        _text(address.contact_phone) if address else '',
        _text(address.contact_email) if address else '',
        _text(contact.name) if contact else '',
        _text(contact.role) if contact else '',
        _text(contact.email) if contact else '',
        _text(contact.phone) if contact else '',
        _text(contact.mobile) if contact else '',
        _text(customer.notes),
        str(len(addresses)),
        str(len(contacts)),
    ]


def export_csv(customers):
    return write_csv(EXPORT_HEADERS, [customer_to_row(customer) for customer in customers])


def normalize_header(header):
    """Lower-case and strip all whitespace"""
    return ''.join((header or '').lower().split())


def parse_csv(text):
    """
    Read CSV text into dicts keyed by normalised header.

    Raises CsvImportError when the file has no rows or no name column.
    """
    if text.startswith('\ufeff'):
        text = text[1:]
    rows = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
    if not rows:
        raise CsvImportError('The CSV file is empty.')

    headers = [normalize_header(header) for header in rows[0]]
    if 'name' not in headers:
        raise CsvImportError('CSV must include a "name" column.')

    records = []
    for values in rows[1:]:
        records.append({header: (values[index].strip() if index < len(values) else '') for index, header in enumerate(headers)})
    return records


def _or_none(value):
    return value or None


def _payment_terms(value):
    try:
        days = int(value)
    except (TypeError, ValueError):
        return 30
    return days if days > 0 else 30


def _credit_limit(value):
    if not value:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        return None


def resolve_price_list(value, price_lists):
    """Match a price list by id, then by name ignoring case"""
    if not value:
        return None
    for price_list in price_lists:
        if str(price_list.id) == value:
            return price_list
    lowered = value.lower()
    for price_list in price_lists:
        if price_list.name.lower() == lowered:
            return price_list
    return None


def customer_fields(record, price_lists=()):
    return {
        'name': record['name'],
        'code': _or_none(record.get('code')),
        'email': _or_none(record.get('email')),
        'phone': _or_none(record.get('phone')),
        'store': _or_none(record.get('store')),
        'accounts_email': _or_none(record.get('accountsemail')),
        'country_code': record.get('countrycode') or 'IE',
        'vat_number': _or_none(record.get('vatnumber')),
        'currency': record.get('currency') or 'EUR',
        'payment_terms_days': _payment_terms(record.get('paymenttermsdays')),
        'credit_limit': _credit_limit(record.get('creditlimit')),
        'pricing_tier': _or_none(record.get('pricingtier')),
        'account_code': _or_none(record.get('accountcode')),
        'default_price_list': resolve_price_list(
            record.get('defaultpricelistid') or record.get('defaultpricelist'), price_lists
        ),
        'notes': _or_none(record.get('notes')),
    }


def address_fields(record):
    return {
        'label': record.get('deliverystorename') or 'Main',
        'store_name': _or_none(record.get('deliverystorename')),
        'line1': record['deliveryline1'],
        'line2': _or_none(record.get('deliveryline2')),
        'city': _or_none(record.get('deliverycity')),
        'county': _or_none(record.get('deliverycounty')),
        'eircode': _or_none(record.get('deliveryeircode')),
        'country_code': record.get('deliverycountrycode') or record.get('countrycode') or 'IE',
        'is_default_shipping': True,
        'is_default_billing': True,
        'contact_name': _or_none(record.get('deliverycontactname')),
        'contact_email': _or_none(record.get('deliverycontactemail')),
        'contact_phone': _or_none(record.get('deliverycontactphone')),
    }


def contact_fields(record):
    return {
        'name': record['contactname'],
        'role': _or_none(record.get('contactrole')),
        'email': _or_none(record.get('contactemail')),
        'phone': _or_none(record.get('contactphone')),
        'mobile': _or_none(record.get('contactmobile')),
        'is_primary': True,
    }


@dataclass
class ImportResult:
    created: int = 0
    updated: int = 0
    addresses: int = 0
    contacts: int = 0
    failures: List[str] = field(default_factory=list)

    def as_dict(self):
        return {
            'created': self.created,
            'updated': self.updated,
            'addresses': self.addresses,
            'contacts': self.contacts,
            'failed': len(self.failures),
            'failures': self.failures,
        }


def _find_existing(org, fields):
    customers = Customer.objects.filter(org=org)
    if fields['code']:
        match = customers.filter(code=fields['code']).first()
        if match:
            return match
    return customers.filter(name__iexact=fields['name']).first()


def import_customers(org, text):
    """
    Create or update customers from CSV text.

    Customers are matched by code, then by name ignoring case. A row adds a
    delivery address when deliveryLine1 is set and a contact when
    contactName is set. Bad rows are recorded as failures; the rest still
    import.
    """
    records = parse_csv(text)
    price_lists = list(org.price_lists.all())
    result = ImportResult()

    for record in records:
        name = record.get('name', '')
        if not name:
            result.failures.append('(missing name)')
            continue

        fields = customer_fields(record, price_lists)
        try:
            with transaction.atomic():
                customer = _find_existing(org, fields)
                if customer is None:
                    customer = Customer.objects.create(org=org, **fields)
                    result.created += 1
                else:
                    for key, value in fields.items():
                        setattr(customer, key, value)
                    customer.save()
                    result.updated += 1

                if record.get('deliveryline1'):
                    address_data = address_fields(record)
                    address = customer.addresses.filter(line1__iexact=address_data['line1']).first()
                    if address is None:
                        address = CustomerAddress(customer=customer)
                    for key, value in address_data.items():
                        setattr(address, key, value)
                    address.save()
                    result.addresses += 1

                if record.get('contactname'):
                    contact_data = contact_fields(record)
                    contact = customer.contacts.filter(name__iexact=contact_data['name']).first()
                    if contact is None:
                        contact = CustomerContact(customer=customer)
                    for key, value in contact_data.items():
                        setattr(contact, key, value)
                    contact.save()
                    result.contacts += 1
        except Exception as e:
            logger.error(f"Customer import failed for '{name}': {str(e)}")
            result.failures.append(name)

    logger.info(
        f"Customer CSV import for org {org.id}: {result.created} created, {result.updated} updated, "
        f"{result.addresses} addresses, {result.contacts} contacts, {len(result.failures)} failed"
    )
    return result
