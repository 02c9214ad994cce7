from django.apps import AppConfig


class IpmConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'nursery.ipm'
    verbose_name = 'Integrated Pest Management'
