from rest_framework import serializers
from .models import LabelPrinter
from .zpl import MIN_COPIES, MAX_COPIES


class LabelPrinterSerializer(serializers.ModelSerializer):
    class Meta:
        model = LabelPrinter
        fields = ['id', 'name', 'printer_type', 'connection_type', 'host', 'port', 'dpi',
                  'is_default', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class PrintJobSerializer(serializers.Serializer):
    printer = serializers.IntegerField(required=False, allow_null=True)
    # out-of-range copies are clamped, not rejected
    copies = serializers.IntegerField(required=False, default=MIN_COPIES)

    def validate_copies(self, value):
        return max(MIN_COPIES, min(MAX_COPIES, value))


class SaleLabelSerializer(PrintJobSerializer):
    """Either a product / order line to take the label from, or the label text itself"""
    product = serializers.IntegerField(required=False, allow_null=True)
    order_item = serializers.IntegerField(required=False, allow_null=True)
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)
    barcode = serializers.CharField(max_length=100, required=False, allow_blank=True)
    size = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    multibuy_qty = serializers.IntegerField(min_value=2, required=False, allow_null=True)
    multibuy_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    lot_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if not attrs.get('product') and not attrs.get('order_item'):
            missing = [field for field in ('title', 'barcode') if not attrs.get(field)]
            if attrs.get('price') is None:
                missing.append('price')
            if missing:
                raise serializers.ValidationError({field: 'This field is required without a product.' for field in missing})
        return attrs


class BarcodeRequestSerializer(serializers.Serializer):
    value = serializers.CharField(max_length=100)
    symbology = serializers.CharField(max_length=20, required=False, default='code128')
