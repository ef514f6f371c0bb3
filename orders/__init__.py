from orders.address import (
    AddressValidation,
    address_confirmation_message,
    has_complete_customer_info,
    missing_customer_info,
    validate_address,
)
from orders.catalog import OrderLine, Product, ProductCatalog, format_rupiah

__all__ = [
    "AddressValidation",
    "OrderLine",
    "Product",
    "ProductCatalog",
    "address_confirmation_message",
    "format_rupiah",
    "has_complete_customer_info",
    "missing_customer_info",
    "validate_address",
]
