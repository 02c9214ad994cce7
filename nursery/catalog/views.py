import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import IntegrityError, transaction
from django.db.models import Q
from nursery.core.tenancy import get_request_org, org_queryset, get_org_object_or_404
from .filters import ProductFilter
from .models import PlantVariety, PlantSize, Product
from .serializers import PlantVarietySerializer, PlantSizeSerializer, ProductSerializer

logger = logging.getLogger(__name__)


# PlantVariety views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def variety_list_create(request):
    """List all varieties or create a new variety"""
    if request.method == 'GET':
        varieties = org_queryset(PlantVariety, request)
        search = request.query_params.get('search', '').strip()
        if search:
            varieties = varieties.filter(
                Q(name__icontains=search) | Q(family__icontains=search) | Q(genus__icontains=search)
            )
        serializer = PlantVarietySerializer(varieties, many=True)
        return Response(serializer.data)
    else:
        serializer = PlantVarietySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(org=get_request_org(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def variety_detail(request, pk):
    """Retrieve, update or delete a variety"""
    variety = get_org_object_or_404(PlantVariety, request, pk)

    if request.method == 'GET':
        serializer = PlantVarietySerializer(variety)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PlantVarietySerializer(variety, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        variety.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# PlantSize views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def size_list_create(request):
    """List all sizes or create a new size"""
    if request.method == 'GET':
        sizes = org_queryset(PlantSize, request)
        serializer = PlantSizeSerializer(sizes, many=True)
        return Response(serializer.data)
    else:
        serializer = PlantSizeSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(org=get_request_org(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def size_detail(request, pk):
    """Retrieve, update or delete a size"""
    size = get_org_object_or_404(PlantSize, request, pk)

    if request.method == 'GET':
        serializer = PlantSizeSerializer(size)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PlantSizeSerializer(size, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        size.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List all products or create a new product"""
    org = get_request_org(request)
    if request.method == 'GET':
        queryset = Product.objects.filter(org=org).select_related('variety', 'size')

        filterset = ProductFilter(request.query_params, queryset=queryset)
        queryset = filterset.qs

        serializer = ProductSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = ProductSerializer(data=request.data, context={'org': org})
        if serializer.is_valid():
            try:
                with transaction.atomic():
                    product = serializer.save(org=org)
            except IntegrityError as e:
                logger.error(f"IntegrityError creating product: {str(e)}")
                return Response({'error': 'A product with this SKU already exists'}, status=status.HTTP_400_BAD_REQUEST)
            logger.info(f"Product '{product.sku}' created by {request.user.username}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    org = get_request_org(request)
    product = get_org_object_or_404(Product, request, pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH', context={'org': org})
        if serializer.is_valid():
            try:
                with transaction.atomic():
                    serializer.save()
            except IntegrityError:
                return Response({'error': 'A product with this SKU already exists'}, status=status.HTTP_400_BAD_REQUEST)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
