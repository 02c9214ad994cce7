from rest_framework import serializers
from .models import NurseryLocation


class NurseryLocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = NurseryLocation
        fields = ['id', 'name', 'code', 'site', 'is_covered', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
