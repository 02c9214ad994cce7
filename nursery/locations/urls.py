from django.urls import path
from . import views

urlpatterns = [
    path('locations/', views.location_list_create, name='location-list-create'),
    path('locations/<int:pk>/', views.location_detail, name='location-detail'),
]
