from django.urls import path
from . import views

urlpatterns = [
    # Products and programmes
    path('ipm/products/', views.ipm_product_list_create, name='ipm-product-list-create'),
    path('ipm/products/<int:pk>/', views.ipm_product_detail, name='ipm-product-detail'),
    path('ipm/products/<int:pk>/available-bottles/', views.ipm_product_available_bottles, name='ipm-product-available-bottles'),
    path('ipm/programs/', views.ipm_program_list_create, name='ipm-program-list-create'),
    path('ipm/programs/<int:pk>/', views.ipm_program_detail, name='ipm-program-detail'),

    # Bottle stock
    path('ipm/bottles/', views.bottle_list_create, name='ipm-bottle-list-create'),
    path('ipm/bottles/code/<str:code>/', views.bottle_by_code, name='ipm-bottle-by-code'),
    path('ipm/bottles/<int:pk>/', views.bottle_detail, name='ipm-bottle-detail'),
    path('ipm/bottles/<int:pk>/usage/', views.bottle_usage, name='ipm-bottle-usage'),
    path('ipm/bottles/<int:pk>/adjust/', views.bottle_adjust, name='ipm-bottle-adjust'),
    path('ipm/bottles/<int:pk>/dispose/', views.bottle_dispose, name='ipm-bottle-dispose'),
    path('ipm/bottles/<int:pk>/movements/', views.bottle_movements, name='ipm-bottle-movements'),
    path('ipm/stock-summary/', views.ipm_stock_summary, name='ipm-stock-summary'),
]
