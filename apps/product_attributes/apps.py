from django.apps import AppConfig


class ProductAttributesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.product_attributes'
    verbose_name = 'Product Attributes'
