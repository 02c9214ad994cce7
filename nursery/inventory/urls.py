from django.urls import path
from . import views

urlpatterns = [
    path('batches/', views.batch_list_create, name='batch-list-create'),
    path('batches/<int:pk>/', views.batch_detail, name='batch-detail'),
    path('products/<int:pk>/available-batches/', views.product_available_batches, name='product-available-batches'),
    path('allocations/suggest/', views.allocation_suggest, name='allocation-suggest'),
]
