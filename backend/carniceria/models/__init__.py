from .inventory import Product, PRODUCT_UNITS, format_decimal
from .sales import Sale

__all__ = [
    'Product', 'PRODUCT_UNITS', 'format_decimal',
    'Sale',
]
