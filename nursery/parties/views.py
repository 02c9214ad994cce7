import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, Count, ProtectedError
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from nursery.core.tenancy import get_request_org, get_org_object_or_404
from nursery.core.utils import create_audit_log
from .csv_io import CsvImportError, template_csv, export_csv, import_customers
from .models import Customer, CustomerAddress, CustomerContact
from .serializers import (
    CustomerSerializer, CustomerListSerializer,
    CustomerAddressSerializer, CustomerContactSerializer
)

logger = logging.getLogger(__name__)


def _csv_response(content, filename):
    response = HttpResponse(content, content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def _filtered_customers(request):
    queryset = Customer.objects.filter(org=get_request_org(request))
    search = request.query_params.get('search', '').strip()
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) |
            Q(code__icontains=search) |
            Q(email__icontains=search) |
            Q(store__icontains=search) |
            Q(country_code__icontains=search)
        )
    store = request.query_params.get('store')
    if store:
        queryset = queryset.filter(store__iexact=store)
    if request.query_params.get('active') in ('true', '1'):
        queryset = queryset.filter(is_active=True)
    return queryset


# Customer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List all customers or create a new customer"""
    org = get_request_org(request)
    if request.method == 'GET':
        queryset = _filtered_customers(request).annotate(
            address_count=Count('addresses', distinct=True),
            contact_count=Count('contacts', distinct=True),
        ).order_by('name')
        serializer = CustomerListSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = CustomerSerializer(data=request.data, context={'org': org})
        if serializer.is_valid():
            customer = serializer.save(org=org)
            create_audit_log(request, 'create', 'Customer', customer.id, object_name=customer.name,
                             object_reference=customer.code)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve, update or delete a customer"""
    org = get_request_org(request)
    customer = get_org_object_or_404(Customer, request, pk)

    if request.method == 'GET':
        serializer = CustomerSerializer(customer)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CustomerSerializer(customer, data=request.data, partial=request.method == 'PATCH', context={'org': org})
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'Customer', customer.id, changes=dict(request.data),
                             object_name=customer.name, object_reference=customer.code)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            customer.delete()
        except ProtectedError:
            return Response({'error': 'Customer has orders; deactivate it instead'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request, 'delete', 'Customer', pk, object_name=customer.name,
                         object_reference=customer.code)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Address views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_address_list_create(request, customer_pk):
    """List or add addresses for a customer"""
    customer = get_org_object_or_404(Customer, request, customer_pk)
    if request.method == 'GET':
        serializer = CustomerAddressSerializer(customer.addresses.all(), many=True)
        return Response(serializer.data)
    else:
        serializer = CustomerAddressSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(customer=customer)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_address_detail(request, customer_pk, pk):
    """Retrieve, update or delete a customer address"""
    customer = get_org_object_or_404(Customer, request, customer_pk)
    address = get_object_or_404(CustomerAddress, pk=pk, customer=customer)

    if request.method == 'GET':
        serializer = CustomerAddressSerializer(address)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CustomerAddressSerializer(address, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        address.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Contact views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_contact_list_create(request, customer_pk):
    """List or add contacts for a customer"""
    customer = get_org_object_or_404(Customer, request, customer_pk)
    if request.method == 'GET':
        serializer = CustomerContactSerializer(customer.contacts.all(), many=True)
        return Response(serializer.data)
    else:
        serializer = CustomerContactSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(customer=customer)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_contact_detail(request, customer_pk, pk):
    """Retrieve, update or delete a customer contact"""
    customer = get_org_object_or_404(Customer, request, customer_pk)
    contact = get_object_or_404(CustomerContact, pk=pk, customer=customer)

    if request.method == 'GET':
        serializer = CustomerContactSerializer(contact)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CustomerContactSerializer(contact, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        contact.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# CSV views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_csv_template(request):
    """Download an empty import template with two sample rows"""
    org = get_request_org(request)
    first_price_list = org.price_lists.order_by('name').first()
    content = template_csv(first_price_list.name if first_price_list else '')
    return _csv_response(content, 'customers_template.csv')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_export(request):
    """Export the (filtered) customer list as CSV"""
    customers = _filtered_customers(request).select_related('default_price_list').prefetch_related(
        'addresses', 'contacts'
    ).order_by('name')
    return _csv_response(export_csv(customers), 'customers.csv')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def customer_import(request):
    """
    Import customers from an uploaded CSV.

    Accepts a multipart ``file`` upload or the CSV text in ``csv``.
    """
    org = get_request_org(request)
    upload = request.FILES.get('file')
    if upload is not None:
        try:
            text = upload.read().decode('utf-8-sig')
        except UnicodeDecodeError:
            return Response({'error': 'CSV file must be UTF-8 encoded.'}, status=status.HTTP_400_BAD_REQUEST)
    else:
        text = request.data.get('csv', '')

    try:
        result = import_customers(org, text or '')
    except CsvImportError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'csv_import', 'Customer', org.id, changes=result.as_dict(),
                     object_name='Customer CSV import')
    return Response(result.as_dict())
