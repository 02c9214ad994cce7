from rest_framework import serializers
from .models import PlantVariety, PlantSize, Product


class PlantVarietySerializer(serializers.ModelSerializer):
    class Meta:
        model = PlantVariety
        fields = ['id', 'name', 'family', 'genus', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class PlantSizeSerializer(serializers.ModelSerializer):
    class Meta:
        model = PlantSize
        fields = ['id', 'name', 'container_type', 'shelf_quantity', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ProductSerializer(serializers.ModelSerializer):
    variety_name = serializers.CharField(source='variety.name', read_only=True, default=None)
    size_name = serializers.CharField(source='size.name', read_only=True, default=None)

    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'variety', 'variety_name', 'size', 'size_name',
                  'unit_price', 'vat_rate', 'rrp', 'barcode', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        # Variety and size must belong to the same organisation as the product
        org = self.context.get('org')
        if org is not None:
            for field in ('variety', 'size'):
                related = attrs.get(field)
                if related is not None and related.org_id != org.id:
                    raise serializers.ValidationError({field: 'Not found.'})
        return attrs
