from rest_framework import serializers
from .models import OrgFee, PriceList, PriceListItem


class OrgFeeSerializer(serializers.ModelSerializer):
    fee_type_display = serializers.CharField(source='get_fee_type_display', read_only=True)

    class Meta:
        model = OrgFee
        fields = ['id', 'fee_type', 'fee_type_display', 'name', 'description', 'amount', 'unit',
                  'vat_rate', 'min_order_value', 'is_default', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class PriceListItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)

    class Meta:
        model = PriceListItem
        fields = ['id', 'product', 'product_name', 'product_sku', 'price']


class PriceListSerializer(serializers.ModelSerializer):
    items = PriceListItemSerializer(many=True, required=False)

    class Meta:
        model = PriceList
        fields = [
            'id', 'name', 'description', 'currency', 'is_active',
            'valid_from', 'valid_to', 'created_at', 'updated_at', 'items'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_items(self, items):
        org = self.context.get('org')
        seen = set()
        for item in items:
            product = item['product']
            if org is not None and product.org_id != org.id:
                raise serializers.ValidationError(f'Product {product.id} not found.')
            if product.id in seen:
                raise serializers.ValidationError(f'Product {product.id} is listed twice.')
            seen.add(product.id)
        return items

    def create(self, validated_data):
        items = validated_data.pop('items', [])
        price_list = PriceList.objects.create(**validated_data)
        for item in items:
            PriceListItem.objects.create(price_list=price_list, **item)
        return price_list

    def update(self, instance, validated_data):
        # Items, when sent, replace the whole list
        items = validated_data.pop('items', None)
        instance = super().update(instance, validated_data)
        if items is not None:
            instance.items.all().delete()
            for item in items:
                PriceListItem.objects.create(price_list=instance, **item)
        return instance
