from django.contrib import admin
from django.utils.html import format_html
from simple_history.admin import SimpleHistoryAdmin

from apps.reconciliation.services import ReconciliationRunner

from .models import (
    OrderLineItem,
    PriceHistory,
    PriceSet,
    Product,
    ProductOption,
    ProductOptionValue,
    ProductVariant,
    VariantOptionSelection,
)


# =============================================================================
# Inlines
# =============================================================================

class ProductOptionInline(admin.TabularInline):
    model = ProductOption
    extra = 0
    fields = ['title']
    show_change_link = True


class ProductOptionValueInline(admin.TabularInline):
    model = ProductOptionValue
    extra = 1
    fields = ['value']


class VariantOptionSelectionInline(admin.TabularInline):
    model = VariantOptionSelection
    extra = 0
    autocomplete_fields = ['option', 'option_value']


class VariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ['title', 'sku']
    readonly_fields = ['title', 'sku']
    show_change_link = True
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


# =============================================================================
# Model Admins
# =============================================================================

@admin.register(Product)
class ProductAdmin(SimpleHistoryAdmin):
    list_display = ['title', 'handle', 'variant_count', 'updated_at']
    search_fields = ['title', 'handle']
    prepopulated_fields = {'handle': ('title',)}
    readonly_fields = ['variant_count', 'created_at', 'updated_at']
    filter_horizontal = ['attribute_values']
    inlines = [ProductOptionInline, VariantInline]

    fieldsets = (
        (None, {
            'fields': ('title', 'handle', 'metadata')
        }),
        ('Attributes', {
            'fields': ('attribute_values',),
            'classes': ('collapse',)
        }),
        ('Info', {
            'fields': ('variant_count', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['reconcile_variants', 'preview_reconciliation']

    @admin.action(description='Reconcile variants of selected products')
    def reconcile_variants(self, request, queryset):
        summary = ReconciliationRunner().run(list(queryset.values_list('pk', flat=True)))
        self.message_user(
            request,
            f'{summary.healed_count} variants healed, {summary.error_count} errors.'
        )

    @admin.action(description='Preview reconciliation (dry run)')
    def preview_reconciliation(self, request, queryset):
        summary = ReconciliationRunner(dry_run=True).run(list(queryset.values_list('pk', flat=True)))
        self.message_user(request, f'{summary.healed_count} variants would be healed.')


@admin.register(ProductOption)
class ProductOptionAdmin(admin.ModelAdmin):
    list_display = ['title', 'product', 'value_count']
    search_fields = ['title', 'product__title']
    autocomplete_fields = ['product']
    inlines = [ProductOptionValueInline]

    def value_count(self, obj):
        return obj.values.count()
    value_count.short_description = 'Values'


@admin.register(ProductOptionValue)
class ProductOptionValueAdmin(admin.ModelAdmin):
    list_display = ['value', 'option']
    search_fields = ['value', 'option__title']


@admin.register(ProductVariant)
class ProductVariantAdmin(SimpleHistoryAdmin):
    list_display = ['sku', 'title', 'product', 'price_display', 'selection_count']
    search_fields = ['sku', 'title', 'product__title']
    autocomplete_fields = ['product']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [VariantOptionSelectionInline]
    list_per_page = 50

    def price_display(self, obj):
        if obj.price_set is None or obj.price_set.amount is None:
            return '-'
        return str(obj.price_set)
    price_display.short_description = 'Price'

    def selection_count(self, obj):
        return obj.option_selections.count()
    selection_count.short_description = 'Options'


@admin.register(PriceSet)
class PriceSetAdmin(admin.ModelAdmin):
    list_display = ['id', 'currency_code', 'amount', 'updated_at']
    search_fields = ['variant__sku']


@admin.register(PriceHistory)
class PriceHistoryAdmin(admin.ModelAdmin):
    list_display = [
        'price_set', 'old_amount', 'new_amount',
        'price_diff_display', 'source', 'changed_at'
    ]
    list_filter = ['source', 'changed_at']
    search_fields = ['price_set__variant__sku']
    readonly_fields = [
        'price_set', 'old_amount', 'new_amount', 'source',
        'changed_at', 'price_difference', 'percentage_change'
    ]
    date_hierarchy = 'changed_at'

    def price_diff_display(self, obj):
        diff = obj.price_difference
        if diff is None:
            return '-'
        if diff > 0:
            return format_html('<span style="color: green;">+{}</span>', f'{diff:.2f}')
        elif diff < 0:
            return format_html('<span style="color: red;">{}</span>', f'{diff:.2f}')
        return '0.00'
    price_diff_display.short_description = 'Difference'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(OrderLineItem)
class OrderLineItemAdmin(admin.ModelAdmin):
    list_display = ['order_id', 'variant', 'title', 'quantity', 'created_at']
    search_fields = ['order_id', 'variant__sku', 'title']
    raw_id_fields = ['variant']


admin.site.site_header = 'Storefront Admin'
admin.site.site_title = 'Storefront'
admin.site.index_title = 'Catalog Maintenance'
