from rest_framework import serializers
from .models import Customer, CustomerAddress, CustomerContact


class CustomerAddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerAddress
        fields = ['id', 'customer', 'label', 'store_name', 'line1', 'line2', 'city', 'county', 'eircode',
                  'country_code', 'is_default_shipping', 'is_default_billing',
                  'contact_name', 'contact_email', 'contact_phone', 'created_at', 'updated_at']
        read_only_fields = ['customer', 'created_at', 'updated_at']


class CustomerContactSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerContact
        fields = ['id', 'customer', 'name', 'role', 'email', 'phone', 'mobile', 'is_primary', 'created_at', 'updated_at']
        read_only_fields = ['customer', 'created_at', 'updated_at']


class CustomerSerializer(serializers.ModelSerializer):
    default_price_list_name = serializers.CharField(source='default_price_list.name', read_only=True, default=None)
    addresses = CustomerAddressSerializer(many=True, read_only=True)
    contacts = CustomerContactSerializer(many=True, read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'code', 'email', 'phone', 'store', 'accounts_email', 'country_code',
            'vat_number', 'currency', 'payment_terms_days', 'credit_limit', 'pricing_tier',
            'account_code', 'default_price_list', 'default_price_list_name', 'notes',
            'requires_pre_pricing', 'pre_pricing_foc', 'pre_pricing_cost_per_label',
            'is_active', 'addresses', 'contacts', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_default_price_list(self, value):
        org = self.context.get('org')
        if value is not None and org is not None and value.org_id != org.id:
            raise serializers.ValidationError('Price list not found.')
        return value


class CustomerListSerializer(serializers.ModelSerializer):
    """Lighter customer rows for lists"""
    address_count = serializers.IntegerField(read_only=True)
    contact_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Customer
        fields = ['id', 'name', 'code', 'email', 'phone', 'store', 'country_code', 'currency',
                  'pricing_tier', 'default_price_list', 'requires_pre_pricing', 'is_active',
                  'address_count', 'contact_count']
