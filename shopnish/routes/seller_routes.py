"""
Seller Routes
Seller registration, profile management and the seller's order view
"""
import logging

from flask import Blueprint, jsonify, request, g
from flask_jwt_extended import jwt_required

from extensions import db
from shopnish.models.approval import ApprovalStatus
from shopnish.models.order import Order, OrderItem, OrderStatus
from shopnish.models.seller import Seller
from shopnish.auth.decorators import login_required, seller_required
from shopnish.validators.seller_validators import SellerValidator
from shopnish.utils.pagination import paginate

logger = logging.getLogger(__name__)

sellers_bp = Blueprint('sellers', __name__, url_prefix='/api')


# ============================================================================
# REGISTER AS SELLER
# ============================================================================
@sellers_bp.route('/sellers', methods=['POST'])
@jwt_required()
@login_required
def register_seller():
    """
    Register the current user as a seller; the account starts pending approval

    POST /api/sellers
    Body:
    {
        "business_name": "Sharma Kitchenware",
        "business_address": "12 MG Road",
        "city": "Pune",
        "pincode": "411001",
        "business_phone": "+919876543210",
        "gst_number": "27ABCDE1234F1Z5"    (optional)
    }
    """
    user = g.current_user
    if user.seller is not None:
        return jsonify({'error': 'You are already registered as a seller'}), 400

    is_valid, validated_data, errors = SellerValidator.validate_seller(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    try:
        seller = Seller(user_id=user.id, **validated_data)
        db.session.add(seller)
        db.session.commit()

        logger.info("User #%s registered seller #%s (pending approval)", user.id, seller.id)
        return jsonify({
            'message': 'Seller account created and sent for approval',
            'seller': seller.to_dict(include_private=True)
        }), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 422
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to register seller")
        return jsonify({'error': f'Failed to register seller: {str(e)}'}), 500


# ============================================================================
# SELLER PROFILE
# ============================================================================
@sellers_bp.route('/sellers/me', methods=['GET'])
@jwt_required()
@seller_required
def get_my_seller_profile():
    """
    GET /api/sellers/me
    """
    return jsonify({'seller': g.profile.to_dict(include_private=True)}), 200


@sellers_bp.route('/sellers/me', methods=['PUT'])
@jwt_required()
@seller_required
def update_my_seller_profile():
    """
    Update editable seller profile fields

    PUT /api/sellers/me

    Approval columns cannot be changed here. Editing a rejected profile
    sends it back to the admin queue.
    """
    seller = g.profile

    is_valid, validated_data, errors = SellerValidator.validate_seller(
        request.get_json(silent=True), partial=True)
    if not is_valid:
        return jsonify({'errors': errors}), 400

    try:
        for field, value in validated_data.items():
            if field in Seller.EDITABLE_FIELDS:
                setattr(seller, field, value)

        resubmitted = False
        if validated_data and seller.approval_status == ApprovalStatus.REJECTED:
            seller.resubmit()
            resubmitted = True

        db.session.commit()

        return jsonify({
            'message': 'Profile updated and resubmitted for approval' if resubmitted else 'Profile updated',
            'seller': seller.to_dict(include_private=True)
        }), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 422
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update seller #%s", seller.id)
        return jsonify({'error': f'Failed to update seller profile: {str(e)}'}), 500


# ============================================================================
# SELLER ORDERS
# ============================================================================
@sellers_bp.route('/seller/orders', methods=['GET'])
@jwt_required()
@seller_required
def get_seller_orders():
    """
    Orders that contain this seller's items; each lists only the seller's lines

    GET /api/seller/orders
    Query Parameters:
    - status: Filter by order status
    - page, limit: Pagination
    """
    seller = g.profile

    try:
        query = Order.query.filter(
            Order.id.in_(db.session.query(OrderItem.order_id).filter(OrderItem.seller_id == seller.id))
        )

        status_filter = request.args.get('status')
        if status_filter:
            try:
                query = query.filter(Order.status == OrderStatus(status_filter))
            except ValueError:
                return jsonify({
                    'error': f'Invalid status. Valid options: {[s.value for s in OrderStatus]}'
                }), 400

        orders, pagination = paginate(query, Order.created_at.desc())

        return jsonify({
            'orders': [order.to_dict(include_items=True, seller_id=seller.id) for order in orders],
            'pagination': pagination
        }), 200

    except ValueError as e:
        return jsonify({'error': f'Invalid parameter: {str(e)}'}), 400
