"""
Errors raised by the reconciliation services.

Per-entity errors are caught by the batch runners, logged and counted; only
database connectivity errors are allowed to abort a whole run.
"""


class ReconciliationError(Exception):
    """Base class for reconciliation errors."""


class NotFoundError(ReconciliationError):
    """A referenced product, option or attribute key does not exist."""

    def __init__(self, entity, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ValidationError(ReconciliationError):
    """
    An entity cannot be processed as stored: a legacy row that fails model
    validation, a value the database rejects, or an attribute set that cannot
    generate variants. Ambiguous option matches are resolved by policy in the
    matcher and never raise this.
    """

    def __init__(self, entity, entity_id, detail=''):
        self.entity = entity
        self.entity_id = entity_id
        self.detail = detail
        message = f"invalid {entity} {entity_id}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConflictError(ReconciliationError):
    """The store rejected a mutation because of a uniqueness violation."""

    def __init__(self, entity, entity_id, detail=''):
        self.entity = entity
        self.entity_id = entity_id
        self.detail = detail
        message = f"conflict updating {entity} {entity_id}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ProtectedEntityError(ReconciliationError):
    """
    A variant with sales history that the safe-deletion workflow refused to
    delete. Collected in the deletion result, never raised.
    """

    def __init__(self, variant_id, order_count):
        self.variant_id = variant_id
        self.order_count = order_count
        super().__init__(
            f"variant {variant_id} is referenced by {order_count} order line item(s)"
        )

    def to_dict(self):
        return {'variant_id': self.variant_id, 'order_count': self.order_count}


class BridgeError(ReconciliationError):
    """The QuickBooks bridge could not deliver an operation result."""


class BridgeOperationFailed(BridgeError):
    """The bridge reported the operation as failed."""


class BridgeTimeout(BridgeError):
    """The operation did not reach a terminal state within the poll policy."""


class BridgeCancelled(BridgeError):
    """Polling was cancelled by the caller."""
