"""
Catalog — Selectors

@file catalog/selectors.py
"""

from core.exceptions import BusinessRuleViolation

from .models import Product, Warehouse


def resolve_line_refs(items):
    """
    Load the live products and warehouses referenced by document lines.
    Raises BusinessRuleViolation naming any unknown or deleted id.
    Line ids are normalised to UUIDs in place.
    """
    for item in items:
        item['product_id'] = Product._meta.pk.to_python(item['product_id'])
        item['warehouse_id'] = Warehouse._meta.pk.to_python(item['warehouse_id'])
    product_ids = {item['product_id'] for item in items}
    warehouse_ids = {item['warehouse_id'] for item in items}
    products = Product.objects.filter(is_deleted=False).in_bulk(product_ids)
    warehouses = Warehouse.objects.filter(is_deleted=False).in_bulk(warehouse_ids)
    missing = [str(pk) for pk in product_ids if pk not in products]
    if missing:
        raise BusinessRuleViolation(detail=f'Unknown product(s): {", ".join(missing)}')
    missing = [str(pk) for pk in warehouse_ids if pk not in warehouses]
    if missing:
        raise BusinessRuleViolation(detail=f'Unknown warehouse(s): {", ".join(missing)}')
    return products, warehouses
