"""
Tests for order pricing
Tests: line and order totals, fee charges, price resolution, fee / price list API, and quotes
"""
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from rest_framework import status

from nursery.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from nursery.pricing.calculations import (
    to_decimal, quantize_money, line_totals, line_needs_labels, fee_charge, delivery_fee, order_totals
)
from nursery.pricing.models import PriceList
from nursery.pricing.services import resolve_unit_price, build_line


class CalculationTests(SimpleTestCase):
    """Pure pricing arithmetic"""

    def test_to_decimal_is_lenient(self):
        """Test junk, blanks and non-finite numbers become zero"""
        self.assertEqual(to_decimal('12.5'), Decimal('12.5'))
        self.assertEqual(to_decimal(' 3 '), Decimal('3'))
        self.assertEqual(to_decimal(None), Decimal('0'))
        self.assertEqual(to_decimal(''), Decimal('0'))
        self.assertEqual(to_decimal('abc'), Decimal('0'))
        self.assertEqual(to_decimal('NaN'), Decimal('0'))
        self.assertEqual(to_decimal(float('inf')), Decimal('0'))

    def test_quantize_rounds_half_up(self):
        """Test money rounds half up to cents"""
        self.assertEqual(quantize_money('2.345'), Decimal('2.35'))
        self.assertEqual(quantize_money('2.344'), Decimal('2.34'))

    def test_line_totals(self):
        """Test 3 x 10.00 at 13.5% VAT"""
        totals = line_totals(3, '10.00', '13.5')
        self.assertEqual(quantize_money(totals.net), Decimal('30.00'))
        self.assertEqual(quantize_money(totals.vat), Decimal('4.05'))
        self.assertEqual(quantize_money(totals.total), Decimal('34.05'))

    def test_line_totals_with_junk_quantity(self):
        """Test an unparseable quantity prices the line at zero"""
        totals = line_totals('lots', '10.00', '13.5')
        self.assertEqual(totals.total, Decimal('0'))

    def test_line_needs_labels(self):
        """Test the explicit flag wins, otherwise an RRP implies labels"""
        self.assertTrue(line_needs_labels({'rrp': '5.99'}))
        self.assertFalse(line_needs_labels({'rrp': None}))
        self.assertFalse(line_needs_labels({'rrp': '5.99', 'requires_pre_pricing': False}))
        self.assertTrue(line_needs_labels({'requires_pre_pricing': True}))

    def test_delivery_fee_threshold(self):
        """Test delivery is charged below the threshold and free at or above it"""
        self.assertEqual(delivery_fee('5.00', '50.00', '49.99'), Decimal('5.00'))
        self.assertEqual(delivery_fee('5.00', '50.00', '50.00'), Decimal('0'))
        self.assertEqual(delivery_fee('5.00', None, '500'), Decimal('5.00'))

    def test_order_total_with_delivery(self):
        """Test 3 x 10.00 at 13.5% plus 5.00 delivery at 23%"""
        lines = [{'quantity': 3, 'unit_price': '10.00', 'vat_rate': '13.5'}]
        fees = [{'fee_type': 'delivery_flat', 'name': 'Delivery', 'amount': '5.00', 'unit': 'flat',
                 'vat_rate': '23', 'min_order_value': '50.00'}]
        totals = order_totals(lines, fees).as_dict()
        self.assertEqual(totals['subtotal_ex_vat'], Decimal('30.00'))
        self.assertEqual(totals['fees_ex_vat'], Decimal('5.00'))
        self.assertEqual(totals['vat_amount'], Decimal('5.20'))
        self.assertEqual(totals['total_inc_vat'], Decimal('40.20'))

    def test_delivery_waived_over_threshold(self):
        """Test the delivery fee is waived once goods net reaches the minimum order value"""
        lines = [{'quantity': 5, 'unit_price': '10.00', 'vat_rate': '13.5'}]
        fees = [{'fee_type': 'delivery_flat', 'name': 'Delivery', 'amount': '5.00', 'unit': 'flat',
                 'vat_rate': '23', 'min_order_value': '50.00'}]
        totals = order_totals(lines, fees)
        self.assertTrue(totals.fees[0].waived)
        self.assertEqual(quantize_money(totals.total), Decimal('56.75'))

    def test_total_is_subtotal_plus_fees_plus_vat(self):
        """Test the grand total always adds up"""
        lines = [
            {'quantity': 7, 'unit_price': '3.333', 'vat_rate': '13.5'},
            {'quantity': 2, 'unit_price': '12.10', 'vat_rate': '23'},
        ]
        fees = [{'fee_type': 'handling', 'name': 'Handling', 'amount': '2.50', 'unit': 'flat', 'vat_rate': '23'}]
        totals = order_totals(lines, fees)
        self.assertEqual(totals.total, totals.subtotal + totals.fees_net + totals.vat)

    def test_pre_pricing_per_labelled_unit(self):
        """Test pre-pricing is charged per unit that needs a label"""
        lines = [
            {'quantity': 10, 'unit_price': '4.00', 'vat_rate': '13.5', 'rrp': '6.99'},
            {'quantity': 5, 'unit_price': '4.00', 'vat_rate': '13.5'},
        ]
        fees = [{'fee_type': 'pre_pricing', 'name': 'Labels', 'amount': '0.10', 'unit': 'per_unit', 'vat_rate': '23'}]
        charge = order_totals(lines, fees).fees[0]
        self.assertEqual(charge.quantity, Decimal('10'))
        self.assertEqual(quantize_money(charge.net), Decimal('1.00'))

    def test_pre_pricing_skipped_without_labels(self):
        """Test no pre-pricing line appears when nothing needs labels"""
        lines = [{'quantity': 5, 'unit_price': '4.00', 'vat_rate': '13.5'}]
        fees = [{'fee_type': 'pre_pricing', 'name': 'Labels', 'amount': '0.10', 'unit': 'per_unit', 'vat_rate': '23'}]
        self.assertEqual(order_totals(lines, fees).fees, [])

    def test_pre_pricing_customer_overrides(self):
        """Test free-of-charge customers and per-label overrides"""
        fee = {'fee_type': 'pre_pricing', 'name': 'Labels', 'amount': '0.10', 'unit': 'per_unit', 'vat_rate': '23'}
        free = fee_charge(fee, labelled_units=20, customer={'pre_pricing_foc': True})
        self.assertTrue(free.waived)
        self.assertEqual(free.total, Decimal('0'))

        cheaper = fee_charge(fee, labelled_units=20, customer={'pre_pricing_cost_per_label': '0.05'})
        self.assertEqual(quantize_money(cheaper.net), Decimal('1.00'))

    def test_per_km_fee(self):
        """Test per-km fees multiply by distance"""
        fee = {'fee_type': 'delivery_per_km', 'name': 'Mileage', 'amount': '0.50', 'unit': 'per_km', 'vat_rate': '23'}
        charge = fee_charge(fee, distance_km='18')
        self.assertEqual(quantize_money(charge.net), Decimal('9.00'))
        self.assertEqual(quantize_money(charge.vat), Decimal('2.07'))

    def test_empty_order(self):
        """Test an order with no lines totals zero"""
        totals = order_totals([]).as_dict()
        self.assertEqual(totals['total_inc_vat'], Decimal('0.00'))
        self.assertEqual(totals['lines'], [])


class PriceResolutionTests(TestCase):
    """Unit price lookup from price lists and the catalogue"""

    def setUp(self):
        self.org = TestDataFactory.create_org()
        self.product = TestDataFactory.create_product(self.org, unit_price=Decimal('10.00'), rrp=Decimal('14.99'))

    def test_product_price_by_default(self):
        """Test the product's own price is used without a price list"""
        self.assertEqual(resolve_unit_price(self.product), Decimal('10.00'))

    def test_customer_price_list_wins(self):
        """Test the customer's default price list overrides the product price"""
        price_list = TestDataFactory.create_price_list(self.org, prices={self.product: Decimal('8.50')})
        customer = TestDataFactory.create_customer(self.org, default_price_list=price_list)
        self.assertEqual(resolve_unit_price(self.product, customer), Decimal('8.50'))

    def test_inactive_price_list_ignored(self):
        """Test an inactive price list falls back to the product price"""
        price_list = TestDataFactory.create_price_list(self.org, prices={self.product: Decimal('8.50')})
        PriceList.objects.filter(pk=price_list.pk).update(is_active=False)
        price_list.refresh_from_db()
        self.assertEqual(resolve_unit_price(self.product, price_list=price_list), Decimal('10.00'))

    def test_build_line_fills_from_catalogue(self):
        """Test missing price, VAT and RRP come from the product"""
        customer = TestDataFactory.create_customer(self.org, requires_pre_pricing=True)
        line = build_line(product=self.product, customer=customer, quantity=4)
        self.assertEqual(line['unit_price'], Decimal('10.00'))
        self.assertEqual(line['vat_rate'], Decimal('13.50'))
        self.assertEqual(line['rrp'], Decimal('14.99'))
        self.assertEqual(line['description'], self.product.name)
        self.assertTrue(line['requires_pre_pricing'])

    def test_build_line_keeps_explicit_price(self):
        """Test a price typed on the line is kept"""
        line = build_line(product=self.product, quantity=4, unit_price='9.00')
        self.assertEqual(line['unit_price'], '9.00')


class PricingAPITests(TestCase):
    """Fee, price list and quote endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.org, unit_price=Decimal('10.00'), vat_rate=Decimal('13.50'))

    def test_create_fee(self):
        """Test creating an organisation fee"""
        data = {'fee_type': 'handling', 'name': 'Handling', 'amount': '2.50', 'unit': 'flat', 'vat_rate': '23.00'}
        response = self.client.post('/api/v1/fees/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['fee_type_display'], 'Handling')

    def test_fees_are_scoped_to_org(self):
        """Test another organisation's fees are neither listed nor readable"""
        other = TestDataFactory.create_fee(TestDataFactory.create_org())
        response = self.client.get('/api/v1/fees/')
        self.assertEqual(response.data, [])
        response = self.client.get(f'/api/v1/fees/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_create_price_list_with_items(self):
        """Test a price list is created with its items"""
        data = {'name': 'Trade', 'items': [{'product': self.product.id, 'price': '8.00'}]}
        response = self.client.post('/api/v1/price-lists/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 1)

    def test_price_list_rejects_foreign_product(self):
        """Test a product from another organisation cannot be listed"""
        foreign = TestDataFactory.create_product(TestDataFactory.create_org())
        data = {'name': 'Trade', 'items': [{'product': foreign.id, 'price': '8.00'}]}
        response = self.client.post('/api/v1/price-lists/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quote_worked_example(self):
        """Test quoting 3 units with a default delivery fee"""
        TestDataFactory.create_fee(self.org, amount=Decimal('5.00'), vat_rate=Decimal('23.00'),
                                   min_order_value=Decimal('50.00'))
        data = {'lines': [{'product': self.product.id, 'quantity': 3}]}
        response = self.client.post('/api/v1/orders/quote/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['subtotal_ex_vat'], Decimal('30.00'))
        self.assertEqual(response.data['fees_ex_vat'], Decimal('5.00'))
        self.assertEqual(response.data['total_inc_vat'], Decimal('40.20'))

    def test_quote_with_junk_numbers(self):
        """Test unparseable numbers quote as zero rather than failing"""
        data = {'lines': [{'quantity': 'abc', 'unit_price': '9.5', 'vat_rate': 13.5}], 'fees': []}
        response = self.client.post('/api/v1/orders/quote/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_inc_vat'], Decimal('0.00'))

    def test_quote_rejects_bad_lines(self):
        """Test lines must be a list"""
        response = self.client.post('/api/v1/orders/quote/', {'lines': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quote_rejects_non_numeric_customer(self):
        """Test a customer that is not an id is a 400, an unknown one a 404"""
        data = {'customer': 'abc', 'lines': [], 'fees': []}
        response = self.client.post('/api/v1/orders/quote/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        data['customer'] = 999999
        response = self.client.post('/api/v1/orders/quote/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
