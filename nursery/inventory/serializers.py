from rest_framework import serializers
from .models import Batch


class BatchSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True, default=None)
    variety_name = serializers.CharField(source='variety.name', read_only=True, default=None)
    size_name = serializers.CharField(source='size.name', read_only=True, default=None)
    location_name = serializers.CharField(source='location.name', read_only=True, default=None)

    class Meta:
        model = Batch
        fields = ['id', 'batch_number', 'product', 'product_name', 'variety', 'variety_name',
                  'size', 'size_name', 'location', 'location_name', 'quantity', 'reserved_quantity',
                  'status', 'planted_at', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        org = self.context.get('org')
        if org is not None:
            for field in ('product', 'variety', 'size', 'location'):
                related = attrs.get(field)
                if related is not None and related.org_id != org.id:
                    raise serializers.ValidationError({field: 'Not found.'})
        return attrs


class BatchAvailabilityInputSerializer(serializers.Serializer):
    batch_id = serializers.IntegerField()
    available = serializers.IntegerField(min_value=0)


class AllocationRequestSerializer(serializers.Serializer):
    """Either explicit batches or a product whose saleable batches are used"""
    target = serializers.IntegerField(min_value=0)
    batches = BatchAvailabilityInputSerializer(many=True, required=False)
    product = serializers.IntegerField(required=False)

    def validate(self, attrs):
        if 'batches' not in attrs and 'product' not in attrs:
            raise serializers.ValidationError('Provide either batches or product.')
        return attrs
