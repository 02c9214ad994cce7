from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'nursery.catalog'
    verbose_name = 'Plant catalogue'
