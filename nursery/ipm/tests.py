"""
Tests for IPM products and bottle stock
Tests: bottle codes, usage, adjustments, disposal, stock summary, and the IPM API
"""
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from rest_framework import status

from nursery.core.models import AuditLog
from nursery.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from nursery.ipm.models import IpmBottle, IpmStockMovement, IpmProgram
from nursery.ipm.services import (
    BottleError, bottle_code_prefix, create_bottles, get_bottle_by_code, record_usage,
    adjust_bottle_level, dispose_bottle, available_bottles, stock_summary
)


class BottleCodePrefixTests(SimpleTestCase):
    def test_prefix_from_product_name(self):
        """Test the prefix is the first four letters or digits, upper-cased"""
        self.assertEqual(bottle_code_prefix('Decis Protech'), 'DECI')
        self.assertEqual(bottle_code_prefix('K-Obiol 2.5'), 'KOBI')
        self.assertEqual(bottle_code_prefix('Ab'), 'AB')

    def test_prefix_fallback(self):
        """Test a name with no letters or digits falls back to IPM"""
        self.assertEqual(bottle_code_prefix('---'), 'IPM')
        self.assertEqual(bottle_code_prefix(None), 'IPM')


class BottleServiceTests(TestCase):
    """Bottle stock movements"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.product = TestDataFactory.create_ipm_product(self.org, name='Decis Protech', default_bottle_volume_ml=1000)

    def test_create_bottles_numbers_codes(self):
        """Test new bottles are sealed, full and numbered in sequence"""
        bottles = create_bottles(self.product, quantity=3, user=self.user)
        self.assertEqual([b.bottle_code for b in bottles], ['DECI-001', 'DECI-002', 'DECI-003'])
        for bottle in bottles:
            self.assertEqual(bottle.status, 'sealed')
            self.assertEqual(bottle.remaining_ml, Decimal('1000'))

        more = create_bottles(self.product, quantity=1)
        self.assertEqual(more[0].bottle_code, 'DECI-004')

    def test_create_bottles_rejects_bad_input(self):
        """Test zero quantity and zero volume are rejected"""
        with self.assertRaises(BottleError):
            create_bottles(self.product, quantity=0)
        with self.assertRaises(BottleError):
            create_bottles(self.product, volume_ml=0)

    def test_lookup_by_code_is_case_insensitive(self):
        """Test scanned codes match regardless of case"""
        bottle = create_bottles(self.product)[0]
        self.assertEqual(get_bottle_by_code(self.org, ' deci-001 '), bottle)
        self.assertIsNone(get_bottle_by_code(TestDataFactory.create_org(), 'DECI-001'))

    def test_first_usage_opens_bottle(self):
        """Test using a sealed bottle records an open movement then the usage"""
        bottle = create_bottles(self.product)[0]
        movement = record_usage(bottle, '150', user=self.user)

        bottle.refresh_from_db()
        self.assertEqual(bottle.status, 'open')
        self.assertIsNotNone(bottle.opened_at)
        self.assertEqual(bottle.remaining_ml, Decimal('850'))
        self.assertEqual(movement.quantity_ml, Decimal('-150'))
        self.assertEqual(movement.remaining_after_ml, Decimal('850'))
        types = list(IpmStockMovement.objects.filter(bottle=bottle).order_by('id').values_list('movement_type', flat=True))
        self.assertEqual(types, ['open', 'usage'])

    def test_usage_empties_bottle_and_clamps(self):
        """Test over-use leaves the bottle at zero and marks it empty"""
        bottle = create_bottles(self.product, volume_ml=200)[0]
        movement = record_usage(bottle, '250')
        bottle.refresh_from_db()
        self.assertEqual(bottle.remaining_ml, Decimal('0'))
        self.assertEqual(bottle.status, 'empty')
        self.assertIsNotNone(bottle.emptied_at)
        self.assertEqual(movement.quantity_ml, Decimal('-200'))
        self.assertIn('requested 250', movement.notes)

    def test_movements_add_up_to_level(self):
        """Test the signed movements of a bottle account for its remaining volume"""
        bottle = create_bottles(self.product, volume_ml=500)[0]
        record_usage(bottle, '120')
        record_usage(bottle, '900')
        bottle.refresh_from_db()
        moved = sum(IpmStockMovement.objects.filter(bottle=bottle).values_list('quantity_ml', flat=True))
        self.assertEqual(bottle.volume_ml + moved, bottle.remaining_ml)

    def test_usage_on_empty_bottle_rejected(self):
        """Test an empty bottle cannot be used"""
        bottle = create_bottles(self.product, volume_ml=100)[0]
        record_usage(bottle, '100')
        with self.assertRaises(BottleError):
            record_usage(bottle, '10')

    def test_usage_must_be_positive(self):
        """Test zero usage is rejected"""
        bottle = create_bottles(self.product)[0]
        with self.assertRaises(BottleError):
            record_usage(bottle, '0')

    def test_adjust_level(self):
        """Test an adjustment sets the level and records the difference"""
        bottle = create_bottles(self.product)[0]
        record_usage(bottle, '100')
        movement = adjust_bottle_level(bottle, '800', user=self.user)
        bottle.refresh_from_db()
        self.assertEqual(bottle.remaining_ml, Decimal('800'))
        self.assertEqual(movement.quantity_ml, Decimal('-100'))
        self.assertEqual(movement.movement_type, 'adjustment')

    def test_adjust_refills_empty_bottle(self):
        """Test raising an empty bottle's level reopens it"""
        bottle = create_bottles(self.product, volume_ml=100)[0]
        adjust_bottle_level(bottle, '0')
        bottle.refresh_from_db()
        self.assertEqual(bottle.status, 'empty')

        adjust_bottle_level(bottle, '40')
        bottle.refresh_from_db()
        self.assertEqual(bottle.status, 'open')
        self.assertIsNone(bottle.emptied_at)

    def test_adjust_out_of_range_rejected(self):
        """Test a level above the bottle volume is rejected"""
        bottle = create_bottles(self.product, volume_ml=500)[0]
        with self.assertRaises(BottleError):
            adjust_bottle_level(bottle, '501')
        with self.assertRaises(BottleError):
            adjust_bottle_level(bottle, '-1')

    def test_dispose_bottle(self):
        """Test disposal writes off the remaining volume"""
        bottle = create_bottles(self.product, volume_ml=500)[0]
        record_usage(bottle, '200')
        movement = dispose_bottle(bottle, user=self.user)
        bottle.refresh_from_db()
        self.assertEqual(bottle.status, 'disposed')
        self.assertEqual(bottle.remaining_ml, Decimal('0'))
        self.assertEqual(movement.quantity_ml, Decimal('-300'))
        with self.assertRaises(BottleError):
            dispose_bottle(bottle)

    def test_available_bottles_open_first(self):
        """Test open bottles are offered before sealed ones"""
        sealed, opened = create_bottles(self.product, quantity=2)
        record_usage(opened, '10')
        empty = create_bottles(self.product, volume_ml=10)[0]
        record_usage(empty, '10')
        self.assertEqual(list(available_bottles(self.product)), [opened, sealed])

    def test_stock_summary(self):
        """Test stock counts, usage in the last 30 days and the low-stock flag"""
        bottles = create_bottles(self.product, quantity=3)
        record_usage(bottles[0], '250')
        dispose_bottle(bottles[2])

        row = stock_summary(self.org)[0]
        self.assertEqual(row['product_id'], self.product.id)
        self.assertEqual(row['bottles_in_stock'], 2)
        self.assertEqual(row['bottles_sealed'], 1)
        self.assertEqual(row['bottles_open'], 1)
        self.assertEqual(row['total_remaining_ml'], Decimal('1750'))
        self.assertEqual(row['usage_last_30_days_ml'], Decimal('250'))
        self.assertTrue(row['is_low_stock'])

    def test_stock_summary_without_bottles(self):
        """Test a product with no bottles reports zero stock"""
        row = stock_summary(self.org)[0]
        self.assertEqual(row['bottles_in_stock'], 0)
        self.assertEqual(row['total_remaining_ml'], Decimal('0'))
        self.assertEqual(row['usage_last_30_days_ml'], Decimal('0'))


class IpmAPITests(TestCase):
    """IPM product, programme and bottle endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_ipm_product(self.org, name='Conserve', low_stock_threshold=1)
        self.location = TestDataFactory.create_location(self.org)

    def test_create_product(self):
        """Test creating an IPM product with default application methods"""
        data = {'name': 'Nemasys', 'active_ingredient': 'Steinernema feltiae', 'target_pests': ['Vine weevil']}
        response = self.client.post('/api/v1/ipm/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['application_methods'], ['Foliar Spray'])
        self.assertEqual(response.data['target_pests'], ['Vine weevil'])

    def test_create_program_with_steps(self):
        """Test a programme is created with ordered steps"""
        data = {
            'name': 'Spring rotation',
            'interval_days': 14,
            'steps': [{'product': self.product.id, 'week_number': 1}, {'product': self.product.id, 'week_number': 3}],
        }
        response = self.client.post('/api/v1/ipm/programs/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual([step['step_order'] for step in response.data['steps']], [1, 2])

    def test_program_product_in_use_cannot_be_deleted(self):
        """Test deleting a product used by a programme is a 400"""
        self.client.post('/api/v1/ipm/programs/', {'name': 'P', 'steps': [{'product': self.product.id}]}, format='json')
        response = self.client.delete(f'/api/v1/ipm/products/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(IpmProgram.objects.filter(org=self.org).exists())

    def test_register_bottles(self):
        """Test registering several bottles at once"""
        response = self.client.post('/api/v1/ipm/bottles/', {'product': self.product.id, 'quantity': 2, 'volume_ml': '500'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual([row['bottle_code'] for row in response.data], ['CONS-001', 'CONS-002'])
        self.assertEqual(response.data[0]['remaining_ml'], '500.00')

    def test_register_bottles_for_foreign_product_rejected(self):
        """Test bottles cannot be registered against another organisation's product"""
        foreign = TestDataFactory.create_ipm_product(TestDataFactory.create_org())
        response = self.client.post('/api/v1/ipm/bottles/', {'product': foreign.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_scan_and_use_bottle(self):
        """Test looking up a scanned code and recording usage against it"""
        bottle = create_bottles(self.product)[0]
        response = self.client.get('/api/v1/ipm/bottles/code/cons-001/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], bottle.id)

        response = self.client.post(f'/api/v1/ipm/bottles/{bottle.id}/usage/',
                                    {'quantity_ml': '75', 'location': self.location.id, 'notes': 'Tunnel 3'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity_ml'], '-75.00')
        self.assertEqual(response.data['location_name'], self.location.name)
        self.assertTrue(AuditLog.objects.filter(action='bottle_usage', object_reference='CONS-001').exists())

        response = self.client.get(f'/api/v1/ipm/bottles/{bottle.id}/movements/')
        self.assertEqual(len(response.data), 2)

    def test_unknown_code_is_404(self):
        """Test an unknown bottle code is not found"""
        response = self.client.get('/api/v1/ipm/bottles/code/NOPE-001/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_usage_on_disposed_bottle_is_400(self):
        """Test a disposed bottle cannot be used"""
        bottle = create_bottles(self.product)[0]
        self.client.post(f'/api/v1/ipm/bottles/{bottle.id}/dispose/', {}, format='json')
        response = self.client.post(f'/api/v1/ipm/bottles/{bottle.id}/usage/', {'quantity_ml': '5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_adjust_endpoint(self):
        """Test adjusting a bottle's level through the API"""
        bottle = create_bottles(self.product, volume_ml=1000)[0]
        response = self.client.post(f'/api/v1/ipm/bottles/{bottle.id}/adjust/', {'remaining_ml': '600'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(IpmBottle.objects.get(pk=bottle.pk).remaining_ml, Decimal('600'))

    def test_bottle_of_other_org_is_404(self):
        """Test another organisation's bottle cannot be used"""
        foreign_product = TestDataFactory.create_ipm_product(TestDataFactory.create_org())
        bottle = create_bottles(foreign_product)[0]
        response = self.client.post(f'/api/v1/ipm/bottles/{bottle.id}/usage/', {'quantity_ml': '5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_stock_summary_low_filter(self):
        """Test only low-stock products are returned with ?low=true"""
        stocked = TestDataFactory.create_ipm_product(self.org, name='Stocked', low_stock_threshold=1)
        create_bottles(stocked, quantity=3)
        create_bottles(self.product, quantity=1)

        response = self.client.get('/api/v1/ipm/stock-summary/', {'low': 'true'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['product_id'] for row in response.data], [self.product.id])

        response = self.client.get('/api/v1/ipm/stock-summary/', {'product': stocked.id})
        self.assertEqual(response.data[0]['bottles_in_stock'], 3)
