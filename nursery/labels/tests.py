"""
Tests for label printing
Tests: ZPL layout and escaping, raw TCP printing, barcode previews, printers, and print endpoints
"""
from decimal import Decimal
from unittest.mock import patch, MagicMock

from django.test import SimpleTestCase, TestCase
from rest_framework import status

from nursery.core.models import AuditLog
from nursery.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from nursery.labels.label_generator import render_barcode_png
from nursery.labels.models import LabelPrinter
from nursery.labels.printing import PrinterError, send_zpl
from nursery.sales.services import create_order
from nursery.labels.zpl import (
    escape_zpl, clamp_copies, dots_per_mm, build_sale_label, build_batch_label, batch_payload,
    price_text, multibuy_text
)


class ZplTests(SimpleTestCase):
    """ZPL generation"""

    def test_escape_control_characters(self):
        """Test ^, ~ and backslash are escaped and newlines flattened"""
        self.assertEqual(escape_zpl('50^off ~now'), '50\\^off \\~now')
        self.assertEqual(escape_zpl('a\\b'), 'a\\\\b')
        self.assertEqual(escape_zpl('line one\nline two\r\nthree'), 'line one line two three')
        self.assertEqual(escape_zpl(None), '')

    def test_clamp_copies(self):
        """Test copies stay between 1 and 999"""
        self.assertEqual(clamp_copies(0), 1)
        self.assertEqual(clamp_copies(-4), 1)
        self.assertEqual(clamp_copies(5000), 999)
        self.assertEqual(clamp_copies('12'), 12)
        self.assertEqual(clamp_copies('many'), 1)

    def test_dots_per_mm(self):
        self.assertEqual(dots_per_mm(203), 8)
        self.assertEqual(dots_per_mm(300), 12)
        self.assertEqual(dots_per_mm(600), 24)

    def test_sale_label_layout(self):
        """Test a 50 x 30 mm sale label at 203 dpi with Code 128"""
        zpl = build_sale_label('Skimmia japonica', '5391234567890', '€12.99', size='2L',
                               multibuy_text='3 for €30.00', lot_number='L42')
        self.assertTrue(zpl.startswith('^XA'))
        self.assertTrue(zpl.endswith('^XZ'))
        self.assertIn('^PW400', zpl)
        self.assertIn('^LL240', zpl)
        self.assertIn('^BCN,', zpl)
        self.assertIn('^FD€12.99^FS', zpl)
        self.assertIn('^FD3 for €30.00^FS', zpl)
        self.assertIn('^FDL42^FS', zpl)
        self.assertNotIn('^PQ', zpl)

    def test_sale_label_copies_and_escaping(self):
        """Test copies add a print quantity and user text is escaped"""
        zpl = build_sale_label('Half^price', 'ABC123', '€1.00', copies=25)
        self.assertIn('^PQ25,0,1,Y', zpl)
        self.assertIn('^FDHalf\\^price^FS', zpl)

    def test_optional_sale_fields_omitted(self):
        """Test size, multibuy and lot lines are left out when empty"""
        zpl = build_sale_label('Heather', 'ABC', '€2.50')
        self.assertEqual(zpl.count('^FD'), 3)

    def test_batch_label(self):
        """Test a 70 x 50 mm batch label at 300 dpi with DataMatrix"""
        zpl = build_batch_label('2401', 'Calluna vulgaris', 'Ericaceae', 120, '10.5cm', location='Tunnel 2', copies=3)
        self.assertIn('^PW840', zpl)
        self.assertIn('^LL600', zpl)
        self.assertIn('^BXN,10,200', zpl)
        self.assertIn(f'^FD{batch_payload("2401")}^FS', zpl)
        self.assertIn('^FD#2401^FS', zpl)
        self.assertIn('^PQ3,0,1,Y', zpl)
        self.assertIn('Tunnel 2', zpl)

    def test_price_text(self):
        """Test prices carry the currency symbol"""
        self.assertEqual(price_text(Decimal('5.99'), 'EUR'), '€5.99')
        self.assertEqual(price_text(Decimal('5'), 'GBP'), '£5.00')
        self.assertEqual(price_text(Decimal('5'), 'USD'), 'USD 5.00')

    def test_multibuy_text(self):
        """Test multibuy wording, empty without an offer"""
        self.assertEqual(multibuy_text(3, Decimal('10'), 'EUR'), '3 for €10.00')
        self.assertEqual(multibuy_text(None, Decimal('10')), '')
        self.assertEqual(multibuy_text(3, None), '')


class SendZplTests(SimpleTestCase):
    """Raw TCP printing"""

    @patch('nursery.labels.printing.socket.create_connection')
    def test_sends_payload(self, create_connection):
        """Test the payload is written to the printer socket"""
        connection = MagicMock()
        create_connection.return_value.__enter__.return_value = connection

        sent = send_zpl('192.0.2.10', 9100, '^XA^XZ', timeout=2)

        create_connection.assert_called_once_with(('192.0.2.10', 9100), timeout=2)
        connection.sendall.assert_called_once_with(b'^XA^XZ')
        self.assertEqual(sent, 6)

    @patch('nursery.labels.printing.socket.create_connection', side_effect=ConnectionRefusedError('refused'))
    def test_connection_failure_raises_printer_error(self, create_connection):
        """Test socket errors surface as PrinterError"""
        with self.assertRaises(PrinterError):
            send_zpl('192.0.2.10', 9100, '^XA^XZ', timeout=1)


class BarcodePreviewTests(SimpleTestCase):
    def test_renders_png_data_url(self):
        """Test a Code 128 value renders to a PNG data URL"""
        image = render_barcode_png('SKU-1001')
        self.assertTrue(image.startswith('data:image/png;base64,'))

    def test_rejects_bad_input(self):
        """Test empty values, unknown symbologies and unencodable values"""
        with self.assertRaises(ValueError):
            render_barcode_png('')
        with self.assertRaises(ValueError):
            render_barcode_png('123', symbology='qr')
        with self.assertRaises(ValueError):
            render_barcode_png('not-digits', symbology='ean13')


@patch('nursery.labels.views.print_to', return_value=100)
class LabelAPITests(TestCase):
    """Printer and print endpoints, with the printer connection mocked"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.org = self.user.org
        self.client.authenticate_user(self.user)
        self.printer = TestDataFactory.create_printer(self.org, name='Shed Zebra')
        self.size = TestDataFactory.create_size(self.org, name='2L')
        self.product = TestDataFactory.create_product(self.org, name='Skimmia', rrp=Decimal('12.99'),
                                                      size=self.size, barcode='5391234567890')

    def test_only_one_default_printer(self, print_to):
        """Test adding a default printer clears the previous default"""
        response = self.client.post('/api/v1/printers/', {'name': 'Office', 'host': '192.0.2.20', 'is_default': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(LabelPrinter.objects.get(pk=self.printer.pk).is_default)
        self.assertEqual(LabelPrinter.objects.filter(org=self.org, is_default=True).count(), 1)

    def test_printer_test_page(self, print_to):
        """Test a test label is sent to the printer"""
        response = self.client.post(f'/api/v1/printers/{self.printer.id}/test/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        printer, payload = print_to.call_args[0]
        self.assertEqual(printer, self.printer)
        self.assertIn('Test print Shed Zebra', payload)

    def test_print_sale_label_for_product(self, print_to):
        """Test a product's RRP, size and barcode go on the label"""
        response = self.client.post('/api/v1/labels/print-sale/', {'product': self.product.id, 'copies': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['copies'], 4)
        payload = print_to.call_args[0][1]
        self.assertIn('^FDSkimmia^FS', payload)
        self.assertIn('^FD€12.99^FS', payload)
        self.assertIn('^FD5391234567890^FS', payload)
        self.assertIn('^PQ4,0,1,Y', payload)
        self.assertTrue(AuditLog.objects.filter(action='label_print', object_reference='5391234567890').exists())

    def test_print_sale_label_for_order_line(self, print_to):
        """Test an order line's multibuy offer is printed"""
        customer = TestDataFactory.create_customer(self.org)
        order = create_order(self.org, customer, [{
            'product': self.product, 'quantity': 10, 'rrp': Decimal('11.99'),
            'multibuy_qty_2': 3, 'multibuy_price_2': Decimal('30.00'),
        }], fees=[])
        item = order.items.get()

        response = self.client.post('/api/v1/labels/print-sale/', {'order_item': item.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        payload = print_to.call_args[0][1]
        self.assertIn('^FD€11.99^FS', payload)
        self.assertIn('^FD3 for €30.00^FS', payload)

    def test_copies_are_clamped(self, print_to):
        """Test an oversized copy count is clamped rather than rejected"""
        response = self.client.post('/api/v1/labels/print-sale/', {'product': self.product.id, 'copies': 5000}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['copies'], 999)

    def test_manual_label_requires_text(self, print_to):
        """Test title, barcode and price are required without a product"""
        response = self.client.post('/api/v1/labels/print-sale/', {'title': 'Heather'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('barcode', response.data)
        self.assertIn('price', response.data)
        print_to.assert_not_called()

    def test_product_without_rrp_is_400(self, print_to):
        """Test a product with no retail price cannot be labelled"""
        product = TestDataFactory.create_product(self.org)
        response = self.client.post('/api/v1/labels/print-sale/', {'product': product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_no_default_printer_is_400(self, print_to):
        """Test printing without a printer or default printer fails cleanly"""
        LabelPrinter.objects.filter(pk=self.printer.pk).update(is_default=False)
        response = self.client.post('/api/v1/labels/print-sale/', {'product': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        print_to.assert_not_called()

    def test_foreign_printer_not_usable(self, print_to):
        """Test another organisation's printer cannot be chosen"""
        foreign = TestDataFactory.create_printer(TestDataFactory.create_org())
        data = {'product': self.product.id, 'printer': foreign.id}
        response = self.client.post('/api/v1/labels/print-sale/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_printer_failure_is_502(self, print_to):
        """Test an unreachable printer returns 502"""
        print_to.side_effect = PrinterError('Could not print to 192.0.2.10:9100: timed out')
        response = self.client.post('/api/v1/labels/print-sale/', {'product': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertIn('timed out', response.data['error'])

    def test_print_batch_label(self, print_to):
        """Test a batch label carries the batch number and DataMatrix payload"""
        variety = TestDataFactory.create_variety(self.org, name='Calluna vulgaris')
        product = TestDataFactory.create_product(self.org, variety=variety, size=self.size)
        batch = TestDataFactory.create_batch(self.org, product, quantity=120, batch_number='2401')
        response = self.client.post(f'/api/v1/labels/print-batch/{batch.id}/', {'copies': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        payload = print_to.call_args[0][1]
        self.assertIn('^FDht:batch:2401^FS', payload)
        self.assertIn('^FDCalluna vulgaris^FS', payload)
        self.assertIn('^FD#2401^FS', payload)

    def test_batch_of_other_org_is_404(self, print_to):
        """Test another organisation's batch cannot be labelled"""
        batch = TestDataFactory.create_batch(TestDataFactory.create_org())
        response = self.client.post(f'/api/v1/labels/print-batch/{batch.id}/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_barcode_preview(self, print_to):
        """Test barcode previews over GET and POST"""
        response = self.client.get('/api/v1/labels/barcode/', {'value': 'SKU-1001'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['image'].startswith('data:image/png;base64,'))

        response = self.client.post('/api/v1/labels/barcode/', {'value': 'abc', 'symbology': 'ean13'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
