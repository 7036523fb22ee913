from .attribute_catalog import AttributeCatalog
from .attribute_sync import AttributeVariantSync
from .batch_applier import ReconciliationRunner, ReconciliationSummary
from .duplicate_variants import DuplicateVariantCleanup
from .option_matcher import match_options
from .product_store import ALL_PRODUCTS, ProductStore
from .safe_deletion import SafeOptionDeletion, SafeDeletionResult
from .variant_generator import VariantGenerator
from .variant_reconciler import reconcile_product, derive_sku, slug

__all__ = [
    'AttributeCatalog',
    'AttributeVariantSync',
    'ReconciliationRunner',
    'ReconciliationSummary',
    'DuplicateVariantCleanup',
    'match_options',
    'ALL_PRODUCTS',
    'ProductStore',
    'SafeOptionDeletion',
    'SafeDeletionResult',
    'VariantGenerator',
    'reconcile_product',
    'derive_sku',
    'slug',
]
