from rest_framework import serializers
from nursery.catalog.models import Product
from nursery.parties.models import Customer, CustomerAddress
from .models import Order, OrderItem, OrderFee, PickList, PickItem, PickItemBatch


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True, default=None)
    product_sku = serializers.CharField(source='product.sku', read_only=True, default=None)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'product_name', 'product_sku', 'description', 'quantity', 'unit_price',
                  'vat_rate', 'rrp', 'multibuy_qty_2', 'multibuy_price_2', 'requires_pre_pricing',
                  'line_net', 'line_vat', 'line_total']


class OrderFeeSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderFee
        fields = ['id', 'fee', 'fee_type', 'name', 'quantity', 'unit_amount', 'vat_rate', 'net', 'vat', 'total', 'waived']


class OrderSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)
    items = OrderItemSerializer(many=True, read_only=True)
    fees = OrderFeeSerializer(many=True, read_only=True)
    pick_list_id = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer', 'customer_name', 'ship_to_address', 'status',
            'requested_delivery_date', 'currency', 'subtotal_ex_vat', 'fees_ex_vat', 'vat_amount',
            'total_inc_vat', 'notes', 'created_by', 'created_by_username', 'items', 'fees',
            'pick_list_id', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_pick_list_id(self, obj):
        pick_list = PickList.objects.filter(order=obj).only('id').first()
        return pick_list.id if pick_list else None


class OrderListSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'customer', 'customer_name', 'status', 'requested_delivery_date',
                  'currency', 'total_inc_vat', 'item_count', 'created_at']


class OrderLineInputSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    quantity = serializers.IntegerField(min_value=1)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    vat_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, required=False, allow_null=True)
    rrp = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    multibuy_qty_2 = serializers.IntegerField(min_value=2, required=False, allow_null=True)
    multibuy_price_2 = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    requires_pre_pricing = serializers.BooleanField(required=False, allow_null=True, default=None)


class OrderCreateSerializer(serializers.Serializer):
    customer = serializers.PrimaryKeyRelatedField(queryset=Customer.objects.all())
    ship_to_address = serializers.PrimaryKeyRelatedField(queryset=CustomerAddress.objects.all(), required=False, allow_null=True)
    requested_delivery_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    lines = OrderLineInputSerializer(many=True, allow_empty=False)
    fees = serializers.ListField(child=serializers.IntegerField(), required=False, allow_null=True, default=None)
    distance_km = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0, required=False, allow_null=True)

    def validate(self, attrs):
        org = self.context.get('org')
        customer = attrs['customer']
        if org is not None and customer.org_id != org.id:
            raise serializers.ValidationError({'customer': 'Customer not found.'})
        address = attrs.get('ship_to_address')
        if address is not None and address.customer_id != customer.id:
            raise serializers.ValidationError({'ship_to_address': 'Address does not belong to this customer.'})
        for line in attrs['lines']:
            if org is not None and line['product'].org_id != org.id:
                raise serializers.ValidationError({'lines': f"Product {line['product'].id} not found."})
        return attrs


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[choice[0] for choice in Order.STATUS_CHOICES])


class PickItemBatchSerializer(serializers.ModelSerializer):
    batch_number = serializers.CharField(source='batch.batch_number', read_only=True)
    location_name = serializers.CharField(source='batch.location.name', read_only=True, default=None)
    picked_by_username = serializers.CharField(source='picked_by.username', read_only=True, default=None)

    class Meta:
        model = PickItemBatch
        fields = ['id', 'batch', 'batch_number', 'location_name', 'quantity', 'picked_by', 'picked_by_username', 'picked_at']


class PickItemSerializer(serializers.ModelSerializer):
    description = serializers.CharField(source='order_item.description', read_only=True)
    product = serializers.IntegerField(source='order_item.product_id', read_only=True)
    batch_picks = PickItemBatchSerializer(many=True, read_only=True)

    class Meta:
        model = PickItem
        fields = ['id', 'order_item', 'product', 'description', 'target_qty', 'picked_qty', 'status', 'notes', 'batch_picks']


class PickListSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source='order.order_number', read_only=True)
    customer_name = serializers.CharField(source='order.customer.name', read_only=True)
    items = PickItemSerializer(many=True, read_only=True)

    class Meta:
        model = PickList
        fields = ['id', 'order', 'order_number', 'customer_name', 'status', 'started_at', 'started_by',
                  'completed_at', 'completed_by', 'items', 'created_at', 'updated_at']
        read_only_fields = fields


class BatchPickInputSerializer(serializers.Serializer):
    batch_id = serializers.IntegerField()
    quantity = serializers.IntegerField()


class MultiBatchPickSerializer(serializers.Serializer):
    batches = BatchPickInputSerializer(many=True, allow_empty=False)


class OrderUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = ['notes', 'requested_delivery_date']
