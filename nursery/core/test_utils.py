"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from nursery.core.models import Organisation
from nursery.locations.models import NurseryLocation
from nursery.catalog.models import PlantVariety, PlantSize, Product
from nursery.inventory.models import Batch
from nursery.pricing.models import OrgFee, PriceList, PriceListItem
from nursery.parties.models import Customer, CustomerAddress
from nursery.ipm.models import IpmProduct
from nursery.labels.models import LabelPrinter
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_org(name=None, slug=None, currency='EUR'):
        """Create a test organisation"""
        if not name:
            name = f'Nursery_{TestDataFactory.random_string(6)}'
        if not slug:
            slug = f'nursery-{TestDataFactory.random_string(8).lower()}'
        return Organisation.objects.create(name=name, slug=slug, currency=currency)

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', org=None, is_staff=False, is_superuser=False):
        """Create a test user; a fresh organisation is created unless one is given"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        if org is None and not is_superuser:
            org = TestDataFactory.create_org()
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            org=org,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_location(org, name=None, code=None, is_covered=False):
        """Create a test nursery location"""
        if not name:
            name = f'Tunnel {TestDataFactory.random_string(4)}'
        if not code:
            code = f'LOC_{TestDataFactory.random_string(6).upper()}'
        return NurseryLocation.objects.create(org=org, name=name, code=code, site='Main Site', is_covered=is_covered)

    @staticmethod
    def create_variety(org, name=None, family='Ericaceae'):
        """Create a test plant variety"""
        if not name:
            name = f'Variety_{TestDataFactory.random_string(6)}'
        return PlantVariety.objects.create(org=org, name=name, family=family)

    @staticmethod
    def create_size(org, name=None):
        """Create a test pot size"""
        if not name:
            name = f'{random.randint(9, 30)}cm'
        return PlantSize.objects.create(org=org, name=name, container_type='Pot', shelf_quantity=40)

    @staticmethod
    def create_product(org, name=None, sku=None, unit_price=None, vat_rate=None, rrp=None, variety=None, size=None, barcode=None):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU_{TestDataFactory.random_string(8)}'
        return Product.objects.create(
            org=org,
            name=name,
            sku=sku,
            variety=variety,
            size=size,
            unit_price=unit_price if unit_price is not None else Decimal('10.00'),
            vat_rate=vat_rate if vat_rate is not None else Decimal('13.50'),
            rrp=rrp,
            barcode=barcode,
        )

    @staticmethod
    def create_batch(org, product=None, quantity=100, status=Batch.STATUS_READY, planted_at=None, batch_number=None, location=None):
        """Create a test batch"""
        if not batch_number:
            batch_number = f'B{random.randint(100000, 999999)}'
        return Batch.objects.create(
            org=org,
            batch_number=batch_number,
            product=product,
            variety=product.variety if product else None,
            size=product.size if product else None,
            location=location,
            quantity=quantity,
            status=status,
            planted_at=planted_at,
        )

    @staticmethod
    def create_customer(org, name=None, code=None, **extra):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        return Customer.objects.create(org=org, name=name, code=code, email=f'{name.lower()}@test.com', **extra)

    @staticmethod
    def create_address(customer, line1=None, is_default_shipping=True):
        """Create a test customer address"""
        return CustomerAddress.objects.create(
            customer=customer,
            line1=line1 or f'{random.randint(1, 99)} Main Street',
            city='Dublin',
            is_default_shipping=is_default_shipping,
        )

    @staticmethod
    def create_price_list(org, name=None, prices=None):
        """Create a test price list; ``prices`` maps products to prices"""
        if not name:
            name = f'PriceList_{TestDataFactory.random_string(6)}'
        price_list = PriceList.objects.create(org=org, name=name)
        for product, price in (prices or {}).items():
            PriceListItem.objects.create(price_list=price_list, product=product, price=price)
        return price_list

    @staticmethod
    def create_fee(org, fee_type='delivery_flat', amount=None, unit='flat', vat_rate=None,
                   min_order_value=None, is_default=True, name=None):
        """Create a test organisation fee"""
        return OrgFee.objects.create(
            org=org,
            fee_type=fee_type,
            name=name or fee_type.replace('_', ' ').title(),
            amount=amount if amount is not None else Decimal('5.00'),
            unit=unit,
            vat_rate=vat_rate if vat_rate is not None else Decimal('23.00'),
            min_order_value=min_order_value,
            is_default=is_default,
        )

    @staticmethod
    def create_ipm_product(org, name=None, low_stock_threshold=2, default_bottle_volume_ml=1000):
        """Create a test IPM product"""
        if not name:
            name = f'Spray {TestDataFactory.random_string(4)}'
        return IpmProduct.objects.create(
            org=org,
            name=name,
            low_stock_threshold=low_stock_threshold,
            default_bottle_volume_ml=default_bottle_volume_ml,
        )

    @staticmethod
    def create_printer(org, name=None, host='192.0.2.10', port=9100, dpi=203, is_default=True):
        """Create a test label printer"""
        return LabelPrinter.objects.create(
            org=org,
            name=name or f'Zebra {TestDataFactory.random_string(4)}',
            host=host,
            port=port,
            dpi=dpi,
            is_default=is_default,
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
