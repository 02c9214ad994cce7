from django.urls import path
from . import views

urlpatterns = [
    # Customer endpoints
    path('customers/', views.customer_list_create, name='customer-list-create'),
    path('customers/csv-template/', views.customer_csv_template, name='customer-csv-template'),
    path('customers/export/', views.customer_export, name='customer-export'),
    path('customers/import/', views.customer_import, name='customer-import'),
    path('customers/<int:pk>/', views.customer_detail, name='customer-detail'),

    # Nested addresses and contacts
    path('customers/<int:customer_pk>/addresses/', views.customer_address_list_create, name='customer-address-list-create'),
    path('customers/<int:customer_pk>/addresses/<int:pk>/', views.customer_address_detail, name='customer-address-detail'),
    path('customers/<int:customer_pk>/contacts/', views.customer_contact_list_create, name='customer-contact-list-create'),
    path('customers/<int:customer_pk>/contacts/<int:pk>/', views.customer_contact_detail, name='customer-contact-detail'),
]
