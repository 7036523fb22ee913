from django.contrib import admin
from import_export import resources, fields
from import_export.admin import ImportExportModelAdmin
from import_export.widgets import ForeignKeyWidget, SimpleArrayWidget

from .models import AttributeKey, AttributeValue


# =============================================================================
# Import/Export Resources
# =============================================================================

class AttributeKeyResource(resources.ModelResource):
    """Resource for importing/exporting attribute keys. Options are '|'-separated."""

    options = fields.Field(
        column_name='options',
        attribute='options',
        widget=SimpleArrayWidget(separator='|')
    )

    class Meta:
        model = AttributeKey
        import_id_fields = ['handle']
        fields = ('handle', 'label', 'options')
        export_order = fields


class AttributeValueResource(resources.ModelResource):
    attribute_key = fields.Field(
        column_name='attribute_key',
        attribute='attribute_key',
        widget=ForeignKeyWidget(AttributeKey, 'handle')
    )

    class Meta:
        model = AttributeValue
        import_id_fields = ['attribute_key', 'value']
        fields = ('attribute_key', 'value')


# =============================================================================
# Inlines
# =============================================================================

class AttributeValueInline(admin.TabularInline):
    model = AttributeValue
    extra = 0
    fields = ['value', 'metadata', 'created_at']
    readonly_fields = ['created_at']


# =============================================================================
# Model Admins
# =============================================================================

@admin.register(AttributeKey)
class AttributeKeyAdmin(ImportExportModelAdmin):
    resource_class = AttributeKeyResource
    list_display = ['label', 'handle', 'option_count', 'value_count', 'updated_at']
    search_fields = ['label', 'handle']
    prepopulated_fields = {'handle': ('label',)}
    readonly_fields = ['created_at', 'updated_at']
    inlines = [AttributeValueInline]

    def option_count(self, obj):
        return len(obj.allowed_values)
    option_count.short_description = 'Options'

    def value_count(self, obj):
        return obj.values.count()
    value_count.short_description = 'Registered values'


@admin.register(AttributeValue)
class AttributeValueAdmin(ImportExportModelAdmin):
    resource_class = AttributeValueResource
    list_display = ['value', 'attribute_key', 'created_at']
    list_filter = ['attribute_key']
    search_fields = ['value', 'attribute_key__label', 'attribute_key__handle']
    autocomplete_fields = ['attribute_key']
