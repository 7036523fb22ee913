"""
Attribute catalog models.

Model Hierarchy:
- AttributeKey: A classification axis independent of any product (e.g., "Color Temperature")
- AttributeValue: One concrete value registered under a key (e.g., "5000K")
"""

from .attribute import AttributeKey, AttributeValue

__all__ = [
    'AttributeKey',
    'AttributeValue',
]
