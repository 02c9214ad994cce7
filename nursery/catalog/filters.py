import django_filters
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for the product list"""

    # Searches name, SKU, barcode and variety name
    search = django_filters.CharFilter(method='filter_search', label='Search')
    variety = django_filters.NumberFilter(field_name='variety_id', lookup_expr='exact')
    size = django_filters.NumberFilter(field_name='size_id', lookup_expr='exact')
    active = django_filters.CharFilter(method='filter_active', label='Active')

    class Meta:
        model = Product
        fields = ['search', 'variety', 'size', 'active']

    def filter_search(self, queryset, name, value):
        """Every word of the search must appear in one of the searchable fields"""
        if not value or not value.strip():
            return queryset
        for word in value.split():
            queryset = queryset.filter(
                Q(name__icontains=word) |
                Q(sku__icontains=word) |
                Q(barcode__icontains=word) |
                Q(variety__name__icontains=word)
            )
        return queryset.distinct()

    def filter_active(self, queryset, name, value):
        """Filter by active status (handles string 'true'/'false')"""
        if value is None or value == '':
            return queryset
        if isinstance(value, str):
            is_active = value.lower() in ('true', '1')
        else:
            is_active = bool(value)
        return queryset.filter(is_active=is_active)
