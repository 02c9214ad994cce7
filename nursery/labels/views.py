import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from nursery.catalog.models import Product
from nursery.core.tenancy import get_request_org, org_queryset, get_org_object_or_404
from nursery.core.utils import create_audit_log
from nursery.inventory.models import Batch
from nursery.sales.models import OrderItem
from .label_generator import render_barcode_png
from .models import LabelPrinter
from .printing import PrinterError, print_to
from .serializers import LabelPrinterSerializer, PrintJobSerializer, SaleLabelSerializer, BarcodeRequestSerializer
from .zpl import build_sale_label, build_batch_label, build_test_label, price_text, multibuy_text

logger = logging.getLogger(__name__)


class NoPrinterError(Exception):
    pass


def resolve_printer(org, printer_id=None):
    """The requested printer, else the organisation's default printer"""
    printers = LabelPrinter.objects.filter(org=org, is_active=True)
    if printer_id:
        printer = printers.filter(pk=printer_id).first()
        if printer is None:
            raise NoPrinterError('Printer not found.')
        return printer
    printer = printers.filter(is_default=True).first()
    if printer is None:
        raise NoPrinterError('No printer selected and no default printer is configured.')
    return printer


def _send(printer, payload):
    try:
        print_to(printer, payload)
    except PrinterError as e:
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
    return None


# LabelPrinter views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def printer_list_create(request):
    """List label printers or add one"""
    if request.method == 'GET':
        printers = org_queryset(LabelPrinter, request)
        if request.query_params.get('active') in ('true', '1'):
            printers = printers.filter(is_active=True)
        serializer = LabelPrinterSerializer(printers, many=True)
        return Response(serializer.data)
    else:
        serializer = LabelPrinterSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(org=get_request_org(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def printer_detail(request, pk):
    """Retrieve, update or delete a label printer"""
    printer = get_org_object_or_404(LabelPrinter, request, pk)

    if request.method == 'GET':
        serializer = LabelPrinterSerializer(printer)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = LabelPrinterSerializer(printer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        printer.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def printer_test(request, pk):
    """Print a test label"""
    printer = get_org_object_or_404(LabelPrinter, request, pk)
    error = _send(printer, build_test_label(printer.name, dpi=printer.dpi))
    if error is not None:
        return error
    return Response({'message': f'Test label sent to {printer.name}'})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def print_sale_label(request):
    """
    Print retail price labels.

    Label text comes from ``order_item`` (its RRP and multibuy offer), from
    ``product`` (its RRP), or from ``title`` / ``barcode`` / ``price`` given
    directly. Explicit fields override what the product supplies.
    """
    org = get_request_org(request)
    serializer = SaleLabelSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    label = {'title': '', 'barcode': '', 'size': None, 'price': None, 'multibuy_qty': None, 'multibuy_price': None}
    product = None
    if data.get('order_item'):
        order_item = get_object_or_404(OrderItem.objects.select_related('product__size', 'order'),
                                       pk=data['order_item'], order__org=org)
        product = order_item.product
        label.update(price=order_item.rrp, multibuy_qty=order_item.multibuy_qty_2,
                     multibuy_price=order_item.multibuy_price_2, title=order_item.description)
    elif data.get('product'):
        product = get_org_object_or_404(Product, request, data['product'],
                                        queryset=Product.objects.filter(org=org).select_related('size'))
        label.update(price=product.rrp)

    if product is not None:
        label['title'] = label['title'] or product.name
        label['barcode'] = product.barcode or product.sku
        label['size'] = product.size.name if product.size else None

    for field in label:
        if data.get(field) not in (None, ''):
            label[field] = data[field]

    if label['price'] is None:
        return Response({'error': 'No retail price to print'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        printer = resolve_printer(org, data.get('printer'))
    except NoPrinterError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    payload = build_sale_label(
        title=label['title'],
        barcode=label['barcode'],
        price_text=price_text(label['price'], org.currency),
        size=label['size'],
        multibuy_text=multibuy_text(label['multibuy_qty'], label['multibuy_price'], org.currency),
        lot_number=data.get('lot_number'),
        copies=data['copies'],
        dpi=printer.dpi,
    )
    error = _send(printer, payload)
    if error is not None:
        return error

    create_audit_log(request, 'label_print', 'Product', product.id if product else label['barcode'],
                     object_name=label['title'], object_reference=label['barcode'],
                     changes={'label': 'sale', 'copies': data['copies'], 'printer': printer.name})
    return Response({'message': f"Sent {data['copies']} label(s) to {printer.name}", 'copies': data['copies']})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def print_batch_label(request, batch_id):
    """Print batch labels with the batch DataMatrix"""
    org = get_request_org(request)
    batch = get_org_object_or_404(Batch, request, batch_id,
                                  queryset=Batch.objects.filter(org=org).select_related('variety', 'size', 'location', 'product'))
    serializer = PrintJobSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    copies = serializer.validated_data['copies']

    try:
        printer = resolve_printer(org, serializer.validated_data.get('printer'))
    except NoPrinterError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    variety = batch.variety.name if batch.variety else (batch.product.name if batch.product else '')
    payload = build_batch_label(
        batch_number=batch.batch_number,
        variety=variety,
        family=batch.variety.family if batch.variety and batch.variety.family else '',
        quantity=batch.quantity,
        size=batch.size.name if batch.size else '',
        location=batch.location.name if batch.location else None,
        copies=copies,
        dpi=printer.dpi,
    )
    error = _send(printer, payload)
    if error is not None:
        return error

    create_audit_log(request, 'label_print', 'Batch', batch.id, object_name=variety,
                     object_reference=batch.batch_number,
                     changes={'label': 'batch', 'copies': copies, 'printer': printer.name})
    return Response({'message': f'Sent {copies} label(s) to {printer.name}', 'copies': copies})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def barcode_preview(request):
    """Barcode image as a PNG data URL; takes ``value`` and ``symbology``"""
    params = request.query_params if request.method == 'GET' else request.data
    serializer = BarcodeRequestSerializer(data=params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        image = render_barcode_png(serializer.validated_data['value'], serializer.validated_data['symbology'])
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response({'image': image, 'value': serializer.validated_data['value'],
                     'symbology': serializer.validated_data['symbology']})
