"""
URL configuration for the nursery project.

Every app mounts its routes under ``api/v1/``.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Nursery Management Admin Panel"
admin.site.site_title = "Nursery Management Admin Portal"
admin.site.index_title = "Welcome to the Nursery Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('nursery.core.urls')),
    path('api/v1/', include('nursery.locations.urls')),
    path('api/v1/', include('nursery.catalog.urls')),
    path('api/v1/', include('nursery.inventory.urls')),
    path('api/v1/', include('nursery.pricing.urls')),
    path('api/v1/', include('nursery.parties.urls')),
    path('api/v1/', include('nursery.sales.urls')),
    path('api/v1/', include('nursery.ipm.urls')),
    path('api/v1/', include('nursery.labels.urls')),
]
