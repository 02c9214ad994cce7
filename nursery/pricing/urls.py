from django.urls import path
from . import views

urlpatterns = [
    path('fees/', views.fee_list_create, name='fee-list-create'),
    path('fees/<int:pk>/', views.fee_detail, name='fee-detail'),
    path('price-lists/', views.price_list_list_create, name='price-list-list-create'),
    path('price-lists/<int:pk>/', views.price_list_detail, name='price-list-detail'),
    path('orders/quote/', views.order_quote, name='order-quote'),
]
