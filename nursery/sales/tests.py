"""
Tests for orders and picking
Tests: order creation, status transitions, multi-batch picking, short picks, voids, and the order / pick list API
"""
import re
from datetime import date
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from nursery.core.models import AuditLog
from nursery.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from nursery.sales.models import Order, PickList, PickItemBatch
from nursery.sales.services import (
    OrderError, OrderStatusError, PickingError, create_order, change_order_status, void_order,
    create_pick_list, pick_item_multi_batch, mark_pick_item_short, remove_batch_pick, complete_pick_list, suggest_pick
)


class OrderServiceTests(TestCase):
    """Order creation and lifecycle without the API"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.customer = TestDataFactory.create_customer(self.org)
        self.product = TestDataFactory.create_product(self.org, unit_price=Decimal('10.00'), vat_rate=Decimal('13.50'))
        self.old_batch = TestDataFactory.create_batch(self.org, self.product, quantity=25, planted_at=date(2023, 4, 1))
        self.new_batch = TestDataFactory.create_batch(self.org, self.product, quantity=30, planted_at=date(2024, 4, 1))

    def _order(self, quantity=40, fees=()):
        return create_order(self.org, self.customer, [{'product': self.product, 'quantity': quantity}],
                            user=self.user, fees=list(fees))

    def _confirmed_pick_item(self, quantity=40):
        order = self._order(quantity)
        order, _ = change_order_status(order, 'confirmed', self.user)
        return order, order.pick_list.items.get()

    def test_create_order_totals(self):
        """Test an order stores its line and order totals"""
        order = self._order(quantity=3)
        self.assertEqual(order.status, 'draft')
        self.assertEqual(order.subtotal_ex_vat, Decimal('30.00'))
        self.assertEqual(order.vat_amount, Decimal('4.05'))
        self.assertEqual(order.total_inc_vat, Decimal('34.05'))
        item = order.items.get()
        self.assertEqual(item.line_total, Decimal('34.05'))
        self.assertEqual(item.description, self.product.name)

    def test_order_number_format(self):
        """Test order numbers are ORD-<date>-<8 characters>"""
        order = self._order()
        self.assertRegex(order.order_number, r'^ORD-\d{8}-[0-9A-F]{8}$')

    def test_default_fees_applied(self):
        """Test the organisation's default fees are added when none are given"""
        TestDataFactory.create_fee(self.org, amount=Decimal('5.00'), vat_rate=Decimal('23.00'),
                                   min_order_value=Decimal('50.00'))
        order = create_order(self.org, self.customer, [{'product': self.product, 'quantity': 3}])
        fee = order.fees.get()
        self.assertEqual(fee.net, Decimal('5.00'))
        self.assertEqual(order.total_inc_vat, Decimal('40.20'))

    def test_fee_waived_over_threshold(self):
        """Test a fee with a reached minimum order value is stored as waived"""
        TestDataFactory.create_fee(self.org, min_order_value=Decimal('50.00'))
        order = create_order(self.org, self.customer, [{'product': self.product, 'quantity': 10}])
        fee = order.fees.get()
        self.assertTrue(fee.waived)
        self.assertEqual(fee.total, Decimal('0.00'))

    def test_create_order_requires_lines(self):
        """Test an order without lines or with a zero quantity is rejected"""
        with self.assertRaises(OrderError):
            create_order(self.org, self.customer, [])
        with self.assertRaises(OrderError):
            create_order(self.org, self.customer, [{'product': self.product, 'quantity': 0}])
        self.assertFalse(Order.objects.exists())

    def test_confirm_creates_pick_list(self):
        """Test confirming prepares a pick list with one item per line"""
        order, item = self._confirmed_pick_item()
        self.assertEqual(order.status, 'confirmed')
        self.assertEqual(order.pick_list.status, 'pending')
        self.assertEqual(item.target_qty, 40)
        self.assertEqual(item.picked_qty, 0)

    def test_invalid_transition_rejected(self):
        """Test a transition outside the table raises and leaves the order alone"""
        order = self._order()
        with self.assertRaises(OrderStatusError):
            change_order_status(order, 'dispatched', self.user)
        order.refresh_from_db()
        self.assertEqual(order.status, 'draft')

    def test_terminal_states_have_no_exit(self):
        """Test delivered and void orders cannot move"""
        order = self._order()
        void_order(order, self.user)
        with self.assertRaises(OrderStatusError):
            change_order_status(order, 'confirmed', self.user)
        with self.assertRaises(OrderStatusError):
            void_order(order, self.user)

    def test_packed_requires_completed_pick_list(self):
        """Test an order cannot be packed while its pick list is open"""
        order, _ = self._confirmed_pick_item()
        change_order_status(order, 'picking', self.user)
        with self.assertRaises(OrderStatusError):
            change_order_status(order, 'packed', self.user)

    def test_multi_batch_pick(self):
        """Test picking across two batches decrements both and records each batch"""
        order, item = self._confirmed_pick_item()
        result = pick_item_multi_batch(item, [
            {'batch_id': self.old_batch.id, 'quantity': 25},
            {'batch_id': self.new_batch.id, 'quantity': 15},
        ], self.user)

        self.assertEqual(result['picked_qty'], 40)
        self.assertFalse(result['is_short'])
        self.assertEqual(result['pick_item'].status, 'picked')
        self.old_batch.refresh_from_db()
        self.new_batch.refresh_from_db()
        self.assertEqual(self.old_batch.quantity, 0)
        self.assertEqual(self.new_batch.quantity, 15)
        self.assertEqual(PickItemBatch.objects.filter(pick_item=item).count(), 2)

        order.refresh_from_db()
        self.assertEqual(order.status, 'picking')
        self.assertEqual(PickList.objects.get(order=order).status, 'in_progress')

    def test_pick_over_batch_quantity_rejected(self):
        """Test a pick larger than the batch holds rejects the whole pick"""
        _, item = self._confirmed_pick_item()
        with self.assertRaises(PickingError):
            pick_item_multi_batch(item, [
                {'batch_id': self.new_batch.id, 'quantity': 10},
                {'batch_id': self.old_batch.id, 'quantity': 26},
            ], self.user)
        self.new_batch.refresh_from_db()
        self.assertEqual(self.new_batch.quantity, 30)
        self.assertFalse(PickItemBatch.objects.exists())

    def test_pick_from_foreign_batch_rejected(self):
        """Test batches of another organisation cannot be picked"""
        _, item = self._confirmed_pick_item()
        foreign = TestDataFactory.create_batch(TestDataFactory.create_org(), None, quantity=50)
        with self.assertRaises(PickingError):
            pick_item_multi_batch(item, [{'batch_id': foreign.id, 'quantity': 5}], self.user)

    def test_pick_from_other_product_batch_rejected(self):
        """Test a batch of a different product cannot fill the line"""
        _, item = self._confirmed_pick_item()
        other_batch = TestDataFactory.create_batch(self.org, TestDataFactory.create_product(self.org), quantity=50)
        with self.assertRaises(PickingError):
            pick_item_multi_batch(item, [{'batch_id': other_batch.id, 'quantity': 5}], self.user)
        other_batch.refresh_from_db()
        self.assertEqual(other_batch.quantity, 50)
        self.assertFalse(PickItemBatch.objects.exists())

    def test_out_of_stock_line_marked_short_then_completed(self):
        """Test a line with no stock can be closed short and the order packed"""
        no_stock = TestDataFactory.create_product(self.org)
        order = create_order(self.org, self.customer,
                             [{'product': self.product, 'quantity': 10}, {'product': no_stock, 'quantity': 5}],
                             user=self.user, fees=[])
        order, _ = change_order_status(order, 'confirmed', self.user)
        pick_list = PickList.objects.get(order=order)
        stocked, empty = pick_list.items.order_by('id')

        pick_item_multi_batch(stocked, [{'batch_id': self.old_batch.id, 'quantity': 10}], self.user)
        with self.assertRaises(PickingError):
            complete_pick_list(pick_list, self.user)

        empty = mark_pick_item_short(empty, self.user, notes='No stock')
        self.assertEqual((empty.status, empty.picked_qty), ('short', 0))

        _, short_items = complete_pick_list(pick_list, self.user)
        self.assertEqual(short_items, 1)
        order.refresh_from_db()
        self.assertEqual(order.status, 'packed')

    def test_mark_short_rejects_fully_picked_item(self):
        """Test a fully picked item cannot be marked short"""
        _, item = self._confirmed_pick_item(quantity=10)
        pick_item_multi_batch(item, [{'batch_id': self.old_batch.id, 'quantity': 10}], self.user)
        with self.assertRaises(PickingError):
            mark_pick_item_short(item, self.user)

    def test_pick_rejects_non_positive_quantity(self):
        """Test a zero quantity is not a pick"""
        _, item = self._confirmed_pick_item()
        with self.assertRaises(PickingError):
            pick_item_multi_batch(item, [{'batch_id': self.old_batch.id, 'quantity': 0}], self.user)

    def test_short_pick_and_complete(self):
        """Test a short item can still be completed and the order becomes packed"""
        order, item = self._confirmed_pick_item()
        result = pick_item_multi_batch(item, [{'batch_id': self.old_batch.id, 'quantity': 25}], self.user)
        self.assertTrue(result['is_short'])
        self.assertEqual(result['pick_item'].status, 'short')

        pick_list, short_items = complete_pick_list(order.pick_list, self.user)
        self.assertEqual(pick_list.status, 'completed')
        self.assertEqual(short_items, 1)
        order.refresh_from_db()
        self.assertEqual(order.status, 'packed')

        order, _ = change_order_status(order, 'dispatched', self.user)
        self.assertEqual(order.status, 'dispatched')

    def test_complete_with_pending_items_rejected(self):
        """Test a pick list with untouched items cannot be completed"""
        order, _ = self._confirmed_pick_item()
        with self.assertRaises(PickingError):
            complete_pick_list(order.pick_list, self.user)

    def test_void_releases_picked_stock(self):
        """Test voiding puts picked units back on their batches"""
        order, item = self._confirmed_pick_item()
        pick_item_multi_batch(item, [
            {'batch_id': self.old_batch.id, 'quantity': 20},
            {'batch_id': self.new_batch.id, 'quantity': 5},
        ], self.user)

        order, released = void_order(order, self.user)
        self.assertEqual(order.status, 'void')
        self.assertEqual(released, 25)
        self.old_batch.refresh_from_db()
        self.new_batch.refresh_from_db()
        self.assertEqual(self.old_batch.quantity, 25)
        self.assertEqual(self.new_batch.quantity, 30)

        pick_list = PickList.objects.get(order=order)
        self.assertEqual(pick_list.status, 'cancelled')
        self.assertFalse(PickItemBatch.objects.filter(pick_item__pick_list=pick_list).exists())

    def test_void_through_status_change(self):
        """Test a status change to void releases stock too"""
        order, item = self._confirmed_pick_item()
        pick_item_multi_batch(item, [{'batch_id': self.old_batch.id, 'quantity': 10}], self.user)
        change_order_status(order, 'void', self.user)
        self.old_batch.refresh_from_db()
        self.assertEqual(self.old_batch.quantity, 25)

    def test_pick_on_cancelled_list_rejected(self):
        """Test nothing can be picked once the order is void"""
        order, item = self._confirmed_pick_item()
        void_order(order, self.user)
        with self.assertRaises(PickingError):
            pick_item_multi_batch(item, [{'batch_id': self.old_batch.id, 'quantity': 5}], self.user)

    def test_remove_batch_pick(self):
        """Test undoing a batch pick restores the batch and the item's count"""
        _, item = self._confirmed_pick_item()
        pick_item_multi_batch(item, [
            {'batch_id': self.old_batch.id, 'quantity': 25},
            {'batch_id': self.new_batch.id, 'quantity': 15},
        ], self.user)
        batch_pick = PickItemBatch.objects.get(pick_item=item, batch=self.new_batch)

        item = remove_batch_pick(batch_pick)
        self.assertEqual(item.picked_qty, 25)
        self.assertEqual(item.status, 'short')
        self.new_batch.refresh_from_db()
        self.assertEqual(self.new_batch.quantity, 30)

    def test_suggest_pick_uses_fefo(self):
        """Test the pick suggestion drains the oldest batch first"""
        _, item = self._confirmed_pick_item()
        suggestion = suggest_pick(item)
        allocation = [(entry['batch_id'], entry['quantity']) for entry in suggestion['allocation']]
        self.assertEqual(allocation, [(self.old_batch.id, 25), (self.new_batch.id, 15)])
        self.assertTrue(suggestion['is_complete'])

    def test_pick_list_only_for_confirmed_orders(self):
        """Test a draft order cannot get a pick list"""
        order = self._order()
        with self.assertRaises(PickingError):
            create_pick_list(order, self.user)


class OrderAPITests(TestCase):
    """Order and picking endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(self.org)
        self.address = TestDataFactory.create_address(self.customer)
        self.product = TestDataFactory.create_product(self.org, unit_price=Decimal('10.00'), vat_rate=Decimal('13.50'))
        self.batch = TestDataFactory.create_batch(self.org, self.product, quantity=50, planted_at=date(2023, 4, 1))

    def _create_order(self, quantity=20, **extra):
        data = {'customer': self.customer.id, 'lines': [{'product': self.product.id, 'quantity': quantity}], 'fees': []}
        data.update(extra)
        return self.client.post('/api/v1/orders/', data, format='json')

    def _set_status(self, order_id, new_status):
        return self.client.post(f'/api/v1/orders/{order_id}/status/', {'status': new_status}, format='json')

    def test_create_order(self):
        """Test creating an order through the API"""
        response = self._create_order(quantity=3, ship_to_address=self.address.id)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(re.match(r'^ORD-\d{8}-', response.data['order_number']))
        self.assertEqual(response.data['total_inc_vat'], '34.05')
        self.assertEqual(len(response.data['items']), 1)
        self.assertTrue(AuditLog.objects.filter(action='order_create', object_id=str(response.data['id'])).exists())

    def test_create_order_rejects_foreign_customer(self):
        """Test a customer of another organisation cannot be ordered for"""
        foreign = TestDataFactory.create_customer(TestDataFactory.create_org())
        data = {'customer': foreign.id, 'lines': [{'product': self.product.id, 'quantity': 1}]}
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_order_rejects_other_customers_address(self):
        """Test the ship-to address must belong to the customer"""
        other = TestDataFactory.create_customer(self.org)
        response = self._create_order(ship_to_address=TestDataFactory.create_address(other).id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_order_rejects_zero_quantity(self):
        """Test line quantities must be positive"""
        response = self._create_order(quantity=0)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters_by_status(self):
        """Test listing orders filtered by status"""
        first = self._create_order().data
        self._create_order()
        self._set_status(first['id'], 'confirmed')
        response = self.client.get('/api/v1/orders/', {'status': 'confirmed'})
        self.assertEqual([row['id'] for row in response.data], [first['id']])
        self.assertEqual(response.data[0]['item_count'], 1)

    def test_order_of_other_org_is_404(self):
        """Test another organisation's order is not found"""
        other_user = TestDataFactory.create_user()
        other_customer = TestDataFactory.create_customer(other_user.org)
        other_product = TestDataFactory.create_product(other_user.org)
        order = create_order(other_user.org, other_customer, [{'product': other_product, 'quantity': 1}], fees=[])
        response = self.client.get(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_patch_notes(self):
        """Test notes and delivery date can be edited"""
        order = self._create_order().data
        response = self.client.patch(f"/api/v1/orders/{order['id']}/",
                                     {'notes': 'Leave at gate', 'requested_delivery_date': '2025-03-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['notes'], 'Leave at gate')
        self.assertEqual(response.data['requested_delivery_date'], '2025-03-01')

    def test_delete_only_drafts(self):
        """Test a confirmed order cannot be deleted but a draft can"""
        confirmed = self._create_order().data
        self._set_status(confirmed['id'], 'confirmed')
        response = self.client.delete(f"/api/v1/orders/{confirmed['id']}/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        draft = self._create_order().data
        response = self.client.delete(f"/api/v1/orders/{draft['id']}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_invalid_status_change_is_400(self):
        """Test an illegal transition is rejected"""
        order = self._create_order().data
        response = self._set_status(order['id'], 'delivered')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_full_pick_flow(self):
        """Test confirm, pick, complete and dispatch an order"""
        order = self._create_order(quantity=20).data
        response = self._set_status(order['id'], 'confirmed')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['pick_list_id'])

        response = self.client.post(f"/api/v1/orders/{order['id']}/pick-list/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        pick_list = response.data
        item_id = pick_list['items'][0]['id']
        self.assertEqual(Order.objects.get(pk=order['id']).status, 'picking')

        response = self.client.get(f'/api/v1/pick-items/{item_id}/suggest/')
        self.assertEqual(response.data['allocation'][0]['quantity'], 20)

        response = self.client.post(f'/api/v1/pick-items/{item_id}/pick/',
                                    {'batches': [{'batch_id': self.batch.id, 'quantity': 20}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_short'])
        self.assertEqual(response.data['pick_item']['status'], 'picked')

        response = self.client.post(f"/api/v1/pick-lists/{pick_list['id']}/complete/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['short_items'], 0)

        response = self._set_status(order['id'], 'dispatched')
        self.assertEqual(response.data['status'], 'dispatched')
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.quantity, 30)

    def test_pick_more_than_batch_is_400(self):
        """Test over-picking a batch is rejected"""
        order = self._create_order(quantity=60).data
        self._set_status(order['id'], 'confirmed')
        item_id = PickList.objects.get(order_id=order['id']).items.get().id
        response = self.client.post(f'/api/v1/pick-items/{item_id}/pick/',
                                    {'batches': [{'batch_id': self.batch.id, 'quantity': 60}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_void_returns_units_released(self):
        """Test the void endpoint reports the units put back"""
        order = self._create_order(quantity=20).data
        self._set_status(order['id'], 'confirmed')
        item_id = PickList.objects.get(order_id=order['id']).items.get().id
        self.client.post(f'/api/v1/pick-items/{item_id}/pick/',
                         {'batches': [{'batch_id': self.batch.id, 'quantity': 12}]}, format='json')

        response = self.client.post(f"/api/v1/orders/{order['id']}/void/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['units_released'], 12)
        self.assertEqual(response.data['order']['status'], 'void')
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.quantity, 50)

    def test_remove_batch_pick_endpoint(self):
        """Test deleting a batch pick restores stock"""
        order = self._create_order(quantity=20).data
        self._set_status(order['id'], 'confirmed')
        item_id = PickList.objects.get(order_id=order['id']).items.get().id
        self.client.post(f'/api/v1/pick-items/{item_id}/pick/',
                         {'batches': [{'batch_id': self.batch.id, 'quantity': 20}]}, format='json')
        batch_pick = PickItemBatch.objects.get(pick_item_id=item_id)

        response = self.client.delete(f'/api/v1/pick-item-batches/{batch_pick.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['picked_qty'], 0)
        self.assertEqual(response.data['status'], 'pending')
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.quantity, 50)

    def test_mark_item_short_endpoint(self):
        """Test closing an unfillable line short lets the pick list complete"""
        order = self._create_order(quantity=20).data
        self._set_status(order['id'], 'confirmed')
        pick_list = PickList.objects.get(order_id=order['id'])
        item_id = pick_list.items.get().id

        response = self.client.post(f'/api/v1/pick-items/{item_id}/short/', {'notes': 'Frost damage'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'short')

        response = self.client.post(f'/api/v1/pick-lists/{pick_list.id}/complete/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['short_items'], 1)
        self.assertEqual(Order.objects.get(pk=order['id']).status, 'packed')

    def test_pick_other_product_batch_is_400(self):
        """Test picking from another product's batch is rejected"""
        order = self._create_order(quantity=5).data
        self._set_status(order['id'], 'confirmed')
        item_id = PickList.objects.get(order_id=order['id']).items.get().id
        other_batch = TestDataFactory.create_batch(self.org, TestDataFactory.create_product(self.org), quantity=50)
        response = self.client.post(f'/api/v1/pick-items/{item_id}/pick/',
                                    {'batches': [{'batch_id': other_batch.id, 'quantity': 5}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_available_batches_for_pick_item(self):
        """Test a pick item lists its product's saleable batches"""
        order = self._create_order().data
        self._set_status(order['id'], 'confirmed')
        item_id = PickList.objects.get(order_id=order['id']).items.get().id
        response = self.client.get(f'/api/v1/pick-items/{item_id}/available-batches/')
        self.assertEqual([row['id'] for row in response.data], [self.batch.id])
