"""
Cart Routes
The customer's shopping cart; one row per product
"""
import logging

from flask import Blueprint, jsonify, request, g
from flask_jwt_extended import jwt_required

from extensions import db
from shopnish.models.cart import CartItem
from shopnish.models.catalog import Product
from shopnish.auth.decorators import login_required
from shopnish.services.pricing_service import PricingService
from shopnish.validators.order_validators import OrderValidator

logger = logging.getLogger(__name__)

cart_bp = Blueprint('cart', __name__, url_prefix='/api/cart')


def _cart_payload(user):
    items = CartItem.query.filter_by(user_id=user.id).order_by(CartItem.created_at.asc()).all()
    subtotal = PricingService.calculate_subtotal(
        (item.product.price, item.quantity) for item in items if item.product
    )
    return {
        'items': [item.to_dict() for item in items],
        'count': sum(item.quantity for item in items),
        'subtotal': float(subtotal),
    }


# ============================================================================
# GET CART
# ============================================================================
@cart_bp.route('', methods=['GET'])
@jwt_required()
@login_required
def get_cart():
    """
    GET /api/cart
    """
    return jsonify(_cart_payload(g.current_user)), 200


# ============================================================================
# ADD TO CART
# ============================================================================
@cart_bp.route('', methods=['POST'])
@jwt_required()
@login_required
def add_to_cart():
    """
    Add a product to the cart; adding it again increases the quantity

    POST /api/cart
    Body:
    {
        "product_id": 12,
        "quantity": 2      (optional, default 1)
    }
    """
    user = g.current_user

    is_valid, validated_data, errors = OrderValidator.validate_cart_item(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    product = db.session.get(Product, validated_data['product_id'])
    if not product:
        return jsonify({'error': 'Product not found'}), 404
    if not product.is_purchasable:
        return jsonify({'error': 'This product is not available for purchase'}), 400

    item = CartItem.query.filter_by(user_id=user.id, product_id=product.id).first()
    new_quantity = validated_data['quantity'] + (item.quantity if item else 0)
    if new_quantity > product.stock:
        return jsonify({'error': f'Only {product.stock} unit(s) of {product.name} in stock'}), 400

    try:
        if item:
            item.quantity = new_quantity
        else:
            item = CartItem(user_id=user.id, product_id=product.id, quantity=new_quantity)
            db.session.add(item)
        db.session.commit()

        return jsonify({'message': 'Added to cart', 'item': item.to_dict()}), 201

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to add product #%s to cart", product.id)
        return jsonify({'error': f'Failed to add to cart: {str(e)}'}), 500


# ============================================================================
# UPDATE / REMOVE CART ITEM
# ============================================================================
@cart_bp.route('/<int:item_id>', methods=['PUT'])
@jwt_required()
@login_required
def update_cart_item(item_id):
    """
    Set the quantity of a cart line

    PUT /api/cart/:id
    Body:
    {
        "quantity": 3
    }
    """
    user = g.current_user
    item = db.session.get(CartItem, item_id)
    if not item or item.user_id != user.id:
        return jsonify({'error': 'Cart item not found'}), 404

    is_valid, validated_data, errors = OrderValidator.validate_cart_item(
        request.get_json(silent=True), require_product=False)
    if not is_valid:
        return jsonify({'errors': errors}), 400

    quantity = validated_data['quantity']
    if quantity > item.product.stock:
        return jsonify({'error': f'Only {item.product.stock} unit(s) of {item.product.name} in stock'}), 400

    try:
        item.quantity = quantity
        db.session.commit()
        return jsonify({'message': 'Cart updated', 'item': item.to_dict()}), 200

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update cart item #%s", item_id)
        return jsonify({'error': f'Failed to update cart: {str(e)}'}), 500


@cart_bp.route('/<int:item_id>', methods=['DELETE'])
@jwt_required()
@login_required
def remove_cart_item(item_id):
    """
    DELETE /api/cart/:id
    """
    user = g.current_user
    item = db.session.get(CartItem, item_id)
    if not item or item.user_id != user.id:
        return jsonify({'error': 'Cart item not found'}), 404

    try:
        db.session.delete(item)
        db.session.commit()
        return '', 204

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to remove cart item #%s", item_id)
        return jsonify({'error': f'Failed to remove cart item: {str(e)}'}), 500


@cart_bp.route('', methods=['DELETE'])
@jwt_required()
@login_required
def clear_cart():
    """
    DELETE /api/cart
    """
    user = g.current_user

    try:
        CartItem.query.filter_by(user_id=user.id).delete()
        db.session.commit()
        return '', 204

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to clear cart of user #%s", user.id)
        return jsonify({'error': f'Failed to clear cart: {str(e)}'}), 500
