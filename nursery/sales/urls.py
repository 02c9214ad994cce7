from django.urls import path
from . import views

urlpatterns = [
    # Order endpoints
    path('orders/', views.order_list_create, name='order-list-create'),
    path('orders/<int:pk>/', views.order_detail, name='order-detail'),
    path('orders/<int:pk>/status/', views.order_status_update, name='order-status-update'),
    path('orders/<int:pk>/void/', views.order_void, name='order-void'),
    path('orders/<int:pk>/pick-list/', views.order_pick_list_create, name='order-pick-list-create'),

    # Picking endpoints
    path('pick-lists/', views.pick_list_list, name='pick-list-list'),
    path('pick-lists/<int:pk>/', views.pick_list_detail, name='pick-list-detail'),
    path('pick-lists/<int:pk>/start/', views.pick_list_start, name='pick-list-start'),
    path('pick-lists/<int:pk>/complete/', views.pick_list_complete, name='pick-list-complete'),
    path('pick-items/<int:pk>/available-batches/', views.pick_item_available_batches, name='pick-item-available-batches'),
    path('pick-items/<int:pk>/suggest/', views.pick_item_suggest, name='pick-item-suggest'),
    path('pick-items/<int:pk>/pick/', views.pick_item_pick, name='pick-item-pick'),
    path('pick-items/<int:pk>/short/', views.pick_item_short, name='pick-item-short'),
    path('pick-item-batches/<int:pk>/', views.pick_item_batch_remove, name='pick-item-batch-remove'),
]
