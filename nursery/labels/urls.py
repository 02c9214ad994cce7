from django.urls import path
from . import views

urlpatterns = [
    # Printer endpoints
    path('printers/', views.printer_list_create, name='printer-list-create'),
    path('printers/<int:pk>/', views.printer_detail, name='printer-detail'),
    path('printers/<int:pk>/test/', views.printer_test, name='printer-test'),

    # Label endpoints
    path('labels/print-sale/', views.print_sale_label, name='label-print-sale'),
    path('labels/print-batch/<int:batch_id>/', views.print_batch_label, name='label-print-batch'),
    path('labels/barcode/', views.barcode_preview, name='label-barcode'),
]
