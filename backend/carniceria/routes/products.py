# Overview: Flask API routes for the product catalog; parses input and returns JSON responses.

# backend/carniceria/routes/products.py
from flask import Blueprint, current_app, jsonify, request

from ..models import Product, PRODUCT_UNITS
from ..services import products_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    aliases={
        "name": "name",
        "description": "description",
        "unit": "unit",
        "quantity": "quantity",
        "costPrice": "cost_price",
        "salePrice": "sale_price",
        "minStock": "min_stock",
        "isActive": "is_active",
    },
    required_on_create=("name", "unit"),
    choices={"unit": PRODUCT_UNITS},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _parse_patch(partial: bool) -> dict:
    payload = request.get_json(silent=True)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=partial)
    enforce_rules_product(patch)
    return patch


@products_bp.get("")
def list_products():
    """List the whole catalog ordered by name."""
    return jsonify(products_service.list_products()), 200


@products_bp.get("/<int:product_id>")
def get_product(product_id: int):
    product = products_service.get_product(product_id)
    if product is None:
        return jsonify({"error": "Product not found"}), 404
    return jsonify(product), 200


@products_bp.post("")
def create_product_route():
    """Create a new product. `name` and `unit` are required."""
    try:
        patch = _parse_patch(partial=False)
    except ValidationError as e:
        return jsonify(e.to_dict()), 400

    try:
        created = products_service.create_product(patch=patch)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(created), 201


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    """Update a product. Only the fields present in the body are changed."""
    try:
        patch = _parse_patch(partial=True)
    except ValidationError as e:
        return jsonify(e.to_dict()), 400

    try:
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500

    if updated is None:
        return jsonify({"error": "Product not found"}), 404

    return jsonify(updated), 200


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    """
    Hard-delete a product. Irreversible; its historical sales are kept.
    """
    try:
        deleted = products_service.delete_product(product_id=product_id)
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500

    if not deleted:
        return jsonify({"error": "Product not found"}), 404

    return "", 204
