# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/carniceria/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, current_app, jsonify, request

from ..models import Sale
from ..services import sales_service
from ..services.sales_service import InsufficientStockError, ProductNotFoundError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_sale,
    ValidationError,
)

SALE_POLICY = ModelValidationPolicy(
    aliases={
        "productId": "product_id",
        "quantity": "quantity",
        "totalPrice": "total_price",
    },
    required_on_create=("productId", "quantity", "totalPrice"),
)

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
def list_sales_route():
    """All sales, newest first, each with its product (null once deleted)."""
    sales = sales_service.list_sales()
    return jsonify([sale.to_dict(include_product=True) for sale in sales]), 200


@sales_bp.post("")
def create_sale_route():
    """
    Register a sale and decrement stock.

    Body: {productId, quantity, totalPrice}
    Returns: 201 sale | 400 validation | 404 product | 422 insufficient stock
    """
    try:
        patch = validate_payload(
            model=Sale, payload=request.get_json(silent=True), policy=SALE_POLICY, partial=False
        )
        enforce_rules_sale(patch)
    except ValidationError as e:
        return jsonify(e.to_dict()), 400

    try:
        sale = sales_service.register_sale(
            product_id=patch["product_id"],
            quantity=patch["quantity"],
            total_price=patch["total_price"],
        )
        return jsonify(sale.to_dict()), 201

    except ProductNotFoundError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except InsufficientStockError as e:
        return jsonify({"error": str(e), **e.details}), 422
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500
