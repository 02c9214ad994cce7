"""
Tests for batches and batch allocation
Tests: greedy allocation, selection helpers, saleable batch ordering, and the batch / allocation API
"""
import random
from datetime import date

from django.test import SimpleTestCase, TestCase
from rest_framework import status

from nursery.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from nursery.inventory.allocation import (
    BatchAvailability, BatchSelection, suggest_allocation, allocation_to_selections,
    toggle_batch, set_batch_quantity, fill_from_batch, summarize_selection, total_selected
)
from nursery.inventory.models import Batch
from nursery.inventory.queries import saleable_batches


def _batches(*available):
    return [BatchAvailability(batch_id=index + 1, available=value) for index, value in enumerate(available)]


class SuggestAllocationTests(SimpleTestCase):
    """Greedy allocation over batches in FEFO order"""

    def test_fills_oldest_batches_first(self):
        """Test the first batch is drained before the next is touched"""
        allocation = suggest_allocation(40, _batches(25, 30, 10))
        self.assertEqual(allocation, {1: 25, 2: 15})

    def test_exact_fit_uses_single_batch(self):
        """Test a target that fits in the first batch only takes from it"""
        self.assertEqual(suggest_allocation(20, _batches(20, 50)), {1: 20})

    def test_shortfall_allocates_everything_available(self):
        """Test a target above total stock allocates all of it"""
        allocation = suggest_allocation(100, _batches(10, 5))
        self.assertEqual(allocation, {1: 10, 2: 5})
        self.assertEqual(sum(allocation.values()), 15)

    def test_zero_target_is_empty(self):
        """Test a zero target allocates nothing"""
        self.assertEqual(suggest_allocation(0, _batches(10, 20)), {})

    def test_no_stock_is_empty(self):
        """Test batches with nothing available give an empty allocation"""
        self.assertEqual(suggest_allocation(15, _batches(0, 0)), {})
        self.assertEqual(suggest_allocation(15, []), {})

    def test_empty_batches_are_skipped(self):
        """Test zero-stock batches never appear in the allocation"""
        allocation = suggest_allocation(12, _batches(0, 8, 0, 10))
        self.assertEqual(allocation, {2: 8, 4: 4})
        self.assertNotIn(1, allocation)

    def test_junk_quantities_count_as_zero(self):
        """Test negative and unparseable inputs are treated as zero"""
        self.assertEqual(suggest_allocation(-5, _batches(10)), {})
        self.assertEqual(suggest_allocation('abc', _batches(10)), {})
        self.assertEqual(suggest_allocation(5, [BatchAvailability(batch_id=1, available=-3)]), {})

    def test_allocated_total_matches_min_of_target_and_stock(self):
        """Test sum(allocated) == min(target, sum(available)) and no batch is over-allocated"""
        rng = random.Random(42)
        for _ in range(200):
            batches = _batches(*[rng.randint(0, 50) for _ in range(rng.randint(0, 6))])
            target = rng.randint(0, 150)
            allocation = suggest_allocation(target, batches)
            available = {batch.batch_id: batch.available for batch in batches}
            self.assertEqual(sum(allocation.values()), min(target, sum(available.values())))
            for batch_id, quantity in allocation.items():
                self.assertGreater(quantity, 0)
                self.assertLessEqual(quantity, available[batch_id])


class SelectionHelperTests(SimpleTestCase):
    """Selection editing used by the picking screen"""

    def setUp(self):
        self.batches = _batches(25, 30, 10)
        self.selections = allocation_to_selections(suggest_allocation(40, self.batches), self.batches)

    def test_allocation_to_selections_keeps_batch_order(self):
        """Test selections follow batch order and carry availability"""
        self.assertEqual(list(self.selections), [1, 2])
        self.assertEqual(self.selections[2], BatchSelection(batch_id=2, quantity=15, max_available=30))

    def test_toggle_removes_selected_batch(self):
        """Test toggling a selected batch deselects it"""
        updated = toggle_batch(self.selections, self.batches[0], 40)
        self.assertNotIn(1, updated)
        self.assertIn(1, self.selections)

    def test_toggle_adds_only_what_is_still_needed(self):
        """Test toggling an unselected batch takes the remaining need"""
        selections = toggle_batch(self.selections, self.batches[0], 40)
        updated = toggle_batch(selections, self.batches[2], 40)
        self.assertEqual(updated[3].quantity, 10)
        self.assertEqual(total_selected(updated), 25)

    def test_toggle_adds_nothing_when_target_met(self):
        """Test a covered target does not grow"""
        updated = toggle_batch(self.selections, self.batches[2], 40)
        self.assertNotIn(3, updated)

    def test_set_quantity_clamps_to_available(self):
        """Test quantities are clamped to the batch's availability"""
        updated = set_batch_quantity(self.selections, 2, 999)
        self.assertEqual(updated[2].quantity, 30)

    def test_set_quantity_zero_removes(self):
        """Test setting zero removes the selection"""
        self.assertNotIn(2, set_batch_quantity(self.selections, 2, 0))

    def test_set_quantity_unknown_batch_ignored(self):
        """Test an unselected batch id leaves selections unchanged"""
        self.assertEqual(set_batch_quantity(self.selections, 99, 5), self.selections)

    def test_fill_from_batch_tops_up(self):
        """Test fill tops up a batch to cover what is still needed"""
        selections = set_batch_quantity(self.selections, 2, 5)
        updated = fill_from_batch(selections, self.batches[1], 40)
        self.assertEqual(updated[2].quantity, 15)

    def test_summary_short(self):
        """Test summary flags a partial selection as short"""
        summary = summarize_selection(allocation_to_selections({1: 25}, self.batches), 40)
        self.assertEqual(summary['total_selected'], 25)
        self.assertEqual(summary['progress'], 63)
        self.assertTrue(summary['is_short'])
        self.assertFalse(summary['is_complete'])
        self.assertTrue(summary['can_submit'])
        self.assertEqual(summary['short_by'], 15)

    def test_summary_complete_and_zero_target(self):
        """Test summary of a full selection and of a zero target"""
        summary = summarize_selection(self.selections, 40)
        self.assertEqual(summary['progress'], 100)
        self.assertTrue(summary['is_complete'])
        self.assertFalse(summary['is_short'])

        empty = summarize_selection({}, 0)
        self.assertEqual(empty['progress'], 0)
        self.assertFalse(empty['can_submit'])


class SaleableBatchQueryTests(TestCase):
    """Saleable batch lookup"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.product = TestDataFactory.create_product(self.org)

    def test_fefo_order_and_filters(self):
        """Test only saleable stock is returned, oldest planting first and undated last"""
        undated = TestDataFactory.create_batch(self.org, self.product, quantity=5)
        newer = TestDataFactory.create_batch(self.org, self.product, quantity=5, planted_at=date(2024, 5, 1))
        older = TestDataFactory.create_batch(self.org, self.product, quantity=5, planted_at=date(2023, 5, 1),
                                             status=Batch.STATUS_LOOKING_GOOD)
        TestDataFactory.create_batch(self.org, self.product, quantity=0)
        TestDataFactory.create_batch(self.org, self.product, quantity=9, status=Batch.STATUS_GROWING)

        result = list(saleable_batches(self.org, product=self.product))
        self.assertEqual(result, [older, newer, undated])

    def test_other_org_batches_hidden(self):
        """Test batches of another organisation are never offered"""
        other_org = TestDataFactory.create_org()
        TestDataFactory.create_batch(other_org, self.product, quantity=10)
        self.assertEqual(list(saleable_batches(self.org, product=self.product)), [])


class BatchAPITests(TestCase):
    """Batch and allocation endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.org)

    def test_create_batch(self):
        """Test creating a batch"""
        data = {'batch_number': 'B-1001', 'product': self.product.id, 'quantity': 120, 'status': 'Ready'}
        response = self.client.post('/api/v1/batches/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Batch.objects.filter(org=self.org, batch_number='B-1001').exists())

    def test_duplicate_batch_number_rejected(self):
        """Test batch numbers are unique per organisation"""
        TestDataFactory.create_batch(self.org, self.product, batch_number='B-1')
        response = self.client.post('/api/v1/batches/', {'batch_number': 'B-1', 'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_batch_of_other_org_is_404(self):
        """Test another organisation's batch cannot be read"""
        other = TestDataFactory.create_batch(TestDataFactory.create_org(), None)
        response = self.client.get(f'/api/v1/batches/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unauthenticated_rejected(self):
        """Test the API requires authentication"""
        self.client.logout()
        response = self.client.get('/api/v1/batches/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_suggest_with_explicit_batches(self):
        """Test allocation suggestion from explicit availability"""
        data = {'target': 40, 'batches': [{'batch_id': 1, 'available': 25}, {'batch_id': 2, 'available': 30}]}
        response = self.client.post('/api/v1/allocations/suggest/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([(a['batch_id'], a['quantity']) for a in response.data['allocation']], [(1, 25), (2, 15)])
        self.assertTrue(response.data['is_complete'])

    def test_suggest_for_product_reports_short(self):
        """Test a product-based suggestion that cannot be met is flagged short"""
        TestDataFactory.create_batch(self.org, self.product, quantity=8)
        response = self.client.post('/api/v1/allocations/suggest/', {'target': 10, 'product': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_short'])
        self.assertEqual(response.data['short_by'], 2)

    def test_suggest_requires_batches_or_product(self):
        """Test the request must name batches or a product"""
        response = self.client.post('/api/v1/allocations/suggest/', {'target': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
