from rest_framework import serializers
from nursery.locations.models import NurseryLocation
from .models import IpmProduct, IpmProgram, IpmProgramStep, IpmBottle, IpmStockMovement


class IpmProductSerializer(serializers.ModelSerializer):
    target_pests = serializers.ListField(child=serializers.CharField(), required=False)
    application_methods = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = IpmProduct
        fields = [
            'id', 'name', 'pcs_number', 'active_ingredient', 'target_pests', 'suggested_rate',
            'suggested_rate_unit', 'max_rate', 'harvest_interval_days', 'rei_hours', 'use_restriction',
            'application_methods', 'target_stock_bottles', 'low_stock_threshold',
            'default_bottle_volume_ml', 'notes', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']


class IpmProgramStepSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    step_order = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = IpmProgramStep
        fields = ['id', 'product', 'product_name', 'step_order', 'week_number', 'rate', 'rate_unit', 'method', 'notes']


class IpmProgramSerializer(serializers.ModelSerializer):
    steps = IpmProgramStepSerializer(many=True, required=False)

    class Meta:
        model = IpmProgram
        fields = ['id', 'name', 'description', 'interval_days', 'duration_weeks', 'schedule_type',
                  'is_active', 'steps', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_steps(self, steps):
        org = self.context.get('org')
        for step in steps:
            if org is not None and step['product'].org_id != org.id:
                raise serializers.ValidationError(f"Product {step['product'].id} not found.")
        return steps

    def _save_steps(self, program, steps):
        for index, step in enumerate(steps):
            step.setdefault('step_order', index + 1)
            IpmProgramStep.objects.create(program=program, **step)

    def create(self, validated_data):
        steps = validated_data.pop('steps', [])
        program = IpmProgram.objects.create(**validated_data)
        self._save_steps(program, steps)
        return program

    def update(self, instance, validated_data):
        # Steps, when sent, replace the whole programme
        steps = validated_data.pop('steps', None)
        instance = super().update(instance, validated_data)
        if steps is not None:
            instance.steps.all().delete()
            self._save_steps(instance, steps)
        return instance


class IpmBottleSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = IpmBottle
        fields = ['id', 'product', 'product_name', 'bottle_code', 'volume_ml', 'remaining_ml', 'batch_number',
                  'expiry_date', 'purchase_date', 'status', 'opened_at', 'emptied_at', 'notes',
                  'created_at', 'updated_at']
        read_only_fields = fields


class BottleCreateSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=IpmProduct.objects.all())
    quantity = serializers.IntegerField(min_value=1, max_value=100, default=1)
    volume_ml = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=1, required=False, allow_null=True)
    batch_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    expiry_date = serializers.DateField(required=False, allow_null=True)
    purchase_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_product(self, value):
        org = self.context.get('org')
        if org is not None and value.org_id != org.id:
            raise serializers.ValidationError('Product not found.')
        return value


class UsageSerializer(serializers.Serializer):
    quantity_ml = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    location = serializers.PrimaryKeyRelatedField(queryset=NurseryLocation.objects.all(), required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_location(self, value):
        org = self.context.get('org')
        if value is not None and org is not None and value.org_id != org.id:
            raise serializers.ValidationError('Location not found.')
        return value


class AdjustSerializer(serializers.Serializer):
    remaining_ml = serializers.DecimalField(max_digits=10, decimal_places=2)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class IpmStockMovementSerializer(serializers.ModelSerializer):
    bottle_code = serializers.CharField(source='bottle.bottle_code', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True, default=None)
    recorded_by_username = serializers.CharField(source='recorded_by.username', read_only=True, default=None)

    class Meta:
        model = IpmStockMovement
        fields = ['id', 'bottle', 'bottle_code', 'product', 'movement_type', 'quantity_ml', 'remaining_after_ml',
                  'location', 'location_name', 'notes', 'recorded_by', 'recorded_by_username', 'recorded_at']
        read_only_fields = fields
