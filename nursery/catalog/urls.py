from django.urls import path
from . import views

urlpatterns = [
    path('varieties/', views.variety_list_create, name='variety-list-create'),
    path('varieties/<int:pk>/', views.variety_detail, name='variety-detail'),
    path('sizes/', views.size_list_create, name='size-list-create'),
    path('sizes/<int:pk>/', views.size_detail, name='size-detail'),
    path('products/', views.product_list_create, name='product-list-create'),
    path('products/<int:pk>/', views.product_detail, name='product-detail'),
]
