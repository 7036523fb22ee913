"""
Tagged metadata schemas.

Every model that carries a ``metadata`` JSON column declares which keys it
recognizes and what type each one holds. Unknown keys are never dropped: they
are moved under ``extension`` so imports from other systems stay visible
without becoming part of the schema.
"""

from typing import Any, Dict, Optional, Tuple, Type

from django.core.exceptions import ValidationError

EXTENSION_KEY = 'extension'


class MetadataSchema:
    """Recognized metadata keys for one entity type."""

    def __init__(self, entity: str, fields: Dict[str, Tuple[Type, ...]]):
        self.entity = entity
        self.fields = fields

    def __repr__(self):
        return f"<MetadataSchema {self.entity}: {', '.join(sorted(self.fields))}>"

    def normalize(self, raw: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """
        Validate known keys and route unknown ones to ``extension``.

        Returns None for empty input so blank metadata stays NULL in the database.
        Raises ValidationError when a recognized key holds the wrong type.
        """
        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise ValidationError(
                f'{self.entity} metadata must be an object, got {type(raw).__name__}'
            )

        cleaned = {}
        extension = dict(raw.get(EXTENSION_KEY) or {})
        errors = {}

        for key, value in raw.items():
            if key == EXTENSION_KEY:
                continue
            expected = self.fields.get(key)
            if expected is None:
                extension[key] = value
                continue
            # bool is an int subclass; never accept it for numeric ids
            if value is not None and (
                not isinstance(value, expected)
                or (isinstance(value, bool) and bool not in expected)
            ):
                names = ' or '.join(t.__name__ for t in expected)
                errors[key] = f'expected {names}, got {type(value).__name__}'
                continue
            cleaned[key] = value

        if errors:
            raise ValidationError(
                {f'metadata.{key}': message for key, message in errors.items()}
            )

        if extension:
            cleaned[EXTENSION_KEY] = extension

        return cleaned or None


PRODUCT_METADATA = MetadataSchema('product', {
    'variant_attributes': (list,),
    'wc_id': (int,),
    'wc_type': (str,),
    'short_description': (str,),
    'quickbooks_id': (str,),
})

VARIANT_METADATA = MetadataSchema('variant', {
    'quickbooks_id': (str,),
    'mpn': (str,),
    'wc_id': (int,),
    'managed_by': (str,),
    'variation': (str,),
})

ATTRIBUTE_KEY_METADATA = MetadataSchema('attribute_key', {
    'wc_id': (int,),
    'wc_slug': (str,),
})

ATTRIBUTE_VALUE_METADATA = MetadataSchema('attribute_value', {
    'created_by': (str,),
})
