"""
Food Routes
Food vendors (restaurants, home kitchens), their menus and food orders
"""
import logging

from flask import Blueprint, jsonify, request, g
from flask_jwt_extended import jwt_required

from extensions import db
from shopnish.models.approval import ApprovalStatus
from shopnish.models.food import FoodVendor, FoodItem, FoodOrder, FoodOrderStatus
from shopnish.models.notification import Notification
from shopnish.auth.decorators import (
    login_required, food_vendor_required, approved_food_vendor_required,
)
from shopnish.services.pricing_service import PricingService, to_money
from shopnish.validators.order_validators import OrderValidator
from shopnish.validators.vendor_validators import VendorValidator
from shopnish.utils.pagination import paginate

logger = logging.getLogger(__name__)

food_bp = Blueprint('food', __name__, url_prefix='/api/food')


# ============================================================================
# FOOD VENDORS
# ============================================================================
@food_bp.route('/vendors', methods=['POST'])
@jwt_required()
@login_required
def register_food_vendor():
    """
    Register the current user as a food vendor; starts pending approval

    POST /api/food/vendors
    Body:
    {
        "restaurant_name": "Annapurna Mess",
        "address": "3rd Cross, Jayanagar",
        "city": "Bengaluru",
        "phone": "+919876543210",
        "cuisine": "South Indian",      (optional)
        "opening_time": "08:00",        (optional)
        "closing_time": "22:00"         (optional)
    }
    """
    user = g.current_user
    if user.food_vendor is not None:
        return jsonify({'error': 'You are already registered as a food vendor'}), 400

    is_valid, validated_data, errors = VendorValidator.validate_food_vendor(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    try:
        vendor = FoodVendor(user_id=user.id, **validated_data)
        db.session.add(vendor)
        db.session.commit()

        logger.info("User #%s registered food vendor #%s", user.id, vendor.id)
        return jsonify({
            'message': 'Food vendor created and sent for approval',
            'vendor': vendor.to_dict()
        }), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 422
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to register food vendor")
        return jsonify({'error': f'Failed to register food vendor: {str(e)}'}), 500


@food_bp.route('/vendors', methods=['GET'])
def list_food_vendors():
    """
    List approved vendors that are open

    GET /api/food/vendors
    Query Parameters:
    - city: Filter by city (case-insensitive)
    """
    query = FoodVendor.query.filter(
        FoodVendor.approval_status == ApprovalStatus.APPROVED,
        FoodVendor.is_open.is_(True),
    )

    city = (request.args.get('city') or '').strip()
    if city:
        query = query.filter(FoodVendor.city.ilike(city))

    vendors = query.order_by(FoodVendor.restaurant_name.asc()).all()
    return jsonify({'vendors': [v.to_dict() for v in vendors]}), 200


@food_bp.route('/vendors/me', methods=['GET'])
@jwt_required()
@food_vendor_required
def get_my_food_vendor():
    """
    GET /api/food/vendors/me
    """
    return jsonify({'vendor': g.profile.to_dict()}), 200


@food_bp.route('/vendors/me', methods=['PUT'])
@jwt_required()
@food_vendor_required
def update_my_food_vendor():
    """
    Update the vendor profile; a rejected profile is resubmitted

    PUT /api/food/vendors/me
    """
    vendor = g.profile

    is_valid, validated_data, errors = VendorValidator.validate_food_vendor(
        request.get_json(silent=True), partial=True)
    if not is_valid:
        return jsonify({'errors': errors}), 400

    try:
        for field, value in validated_data.items():
            if field in FoodVendor.EDITABLE_FIELDS:
                setattr(vendor, field, value)

        if validated_data and vendor.approval_status == ApprovalStatus.REJECTED:
            vendor.resubmit()

        db.session.commit()
        return jsonify({'message': 'Vendor profile updated', 'vendor': vendor.to_dict()}), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 422
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update food vendor #%s", vendor.id)
        return jsonify({'error': f'Failed to update vendor profile: {str(e)}'}), 500


@food_bp.route('/vendors/<int:vendor_id>/items', methods=['GET'])
def list_vendor_items(vendor_id):
    """
    Menu of an approved vendor: approved, available items only

    GET /api/food/vendors/:id/items
    """
    vendor = db.session.get(FoodVendor, vendor_id)
    if not vendor or not vendor.is_approved:
        return jsonify({'error': 'Food vendor not found'}), 404

    items = FoodItem.query.filter(
        FoodItem.vendor_id == vendor.id,
        FoodItem.approval_status == ApprovalStatus.APPROVED,
        FoodItem.is_available.is_(True),
    ).order_by(FoodItem.name.asc()).all()

    return jsonify({
        'vendor': vendor.to_dict(),
        'items': [item.to_dict() for item in items]
    }), 200


# ============================================================================
# FOOD ITEMS (VENDOR MENU MANAGEMENT)
# ============================================================================
@food_bp.route('/items', methods=['POST'])
@jwt_required()
@approved_food_vendor_required
def create_food_item():
    """
    Add a menu item (approved vendors only); starts pending review

    POST /api/food/items
    Body:
    {
        "name": "Masala Dosa",
        "price": 80,
        "is_veg": true,
        "description": "...",
        "image_url": "https://..."
    }
    """
    vendor = g.profile

    is_valid, validated_data, errors = VendorValidator.validate_food_item(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    try:
        item = FoodItem(vendor_id=vendor.id, **validated_data)
        db.session.add(item)
        db.session.commit()

        return jsonify({
            'message': 'Food item created and submitted for review',
            'item': item.to_dict()
        }), 201

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to create food item for vendor #%s", vendor.id)
        return jsonify({'error': f'Failed to create food item: {str(e)}'}), 500


@food_bp.route('/items/<int:item_id>', methods=['PUT'])
@jwt_required()
@food_vendor_required
def update_food_item(item_id):
    """
    Update a menu item (owning vendor only)

    PUT /api/food/items/:id

    Name, description, price or image changes send the item back to review.
    """
    vendor = g.profile
    item = db.session.get(FoodItem, item_id)
    if not item:
        return jsonify({'error': 'Food item not found'}), 404
    if item.vendor_id != vendor.id:
        return jsonify({'error': 'You can only edit your own menu items'}), 403

    is_valid, validated_data, errors = VendorValidator.validate_food_item(
        request.get_json(silent=True), partial=True)
    if not is_valid:
        return jsonify({'errors': errors}), 400

    try:
        resubmitted = item.apply_update(validated_data)
        db.session.commit()

        return jsonify({
            'message': 'Food item updated and resubmitted for review' if resubmitted else 'Food item updated',
            'resubmitted': resubmitted,
            'item': item.to_dict()
        }), 200

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update food item #%s", item_id)
        return jsonify({'error': f'Failed to update food item: {str(e)}'}), 500


@food_bp.route('/items/<int:item_id>', methods=['DELETE'])
@jwt_required()
@food_vendor_required
def delete_food_item(item_id):
    """
    DELETE /api/food/items/:id
    """
    vendor = g.profile
    item = db.session.get(FoodItem, item_id)
    if not item:
        return jsonify({'error': 'Food item not found'}), 404
    if item.vendor_id != vendor.id:
        return jsonify({'error': 'You can only delete your own menu items'}), 403

    try:
        db.session.delete(item)
        db.session.commit()
        return '', 204

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to delete food item #%s", item_id)
        return jsonify({'error': f'Failed to delete food item: {str(e)}'}), 500


# ============================================================================
# FOOD ORDERS
# ============================================================================
@food_bp.route('/orders', methods=['POST'])
@jwt_required()
@login_required
def place_food_order():
    """
    Order food from one vendor

    POST /api/food/orders
    Body:
    {
        "vendor_id": 2,
        "items": [{"food_item_id": 5, "quantity": 2}],
        "delivery_address": {
            "full_name": "Asha Rao",
            "phone": "+919876543210",
            "address_line": "Flat 4B, Lake View Apartments",
            "city": "Bengaluru",
            "pincode": "560001"
        },
        "payment_method": "cod"
    }
    """
    user = g.current_user

    is_valid, validated_data, errors = OrderValidator.validate_food_order(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    vendor = db.session.get(FoodVendor, validated_data['vendor_id'])
    if not vendor or not vendor.is_approved:
        return jsonify({'error': 'Food vendor not found'}), 404
    if not vendor.is_open:
        return jsonify({'error': f'{vendor.restaurant_name} is not taking orders right now'}), 400

    # Every line must be an orderable item of this vendor
    snapshot = []
    problems = {}
    for line in validated_data['items']:
        item = db.session.get(FoodItem, line['food_item_id'])
        if not item or item.vendor_id != vendor.id:
            problems[str(line['food_item_id'])] = 'Item does not belong to this vendor'
        elif not item.is_orderable:
            problems[str(line['food_item_id'])] = f'{item.name} is not available'
        else:
            snapshot.append({
                'food_item_id': item.id,
                'name': item.name,
                'price': float(item.price),
                'quantity': line['quantity'],
                'total': float(to_money(item.price * line['quantity'])),
            })
    if problems:
        return jsonify({'error': 'Some items cannot be ordered', 'items': problems}), 400

    try:
        totals = PricingService.calculate_food_totals((s['price'], s['quantity']) for s in snapshot)

        order = FoodOrder(
            user_id=user.id,
            vendor_id=vendor.id,
            items=snapshot,
            payment_method=validated_data['payment_method'],
            delivery_address=validated_data['delivery_address'],
            notes=validated_data['notes'],
            **totals
        )
        db.session.add(order)
        db.session.flush()

        Notification.notify(vendor.user_id, 'food_order_new',
                            f'New food order {order.order_number} ({len(snapshot)} item(s))')
        Notification.notify(user.id, 'food_order_placed',
                            f'Your order {order.order_number} from {vendor.restaurant_name} has been placed')
        db.session.commit()

        logger.info("Food order %s placed by user #%s at vendor #%s", order.order_number, user.id, vendor.id)
        return jsonify({
            'message': 'Food order placed successfully',
            'order': order.to_dict()
        }), 201

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to place food order for user #%s", user.id)
        return jsonify({'error': f'Failed to place food order: {str(e)}'}), 500


@food_bp.route('/orders', methods=['GET'])
@jwt_required()
@login_required
def get_my_food_orders():
    """
    GET /api/food/orders
    Query Parameters:
    - page, limit: Pagination
    """
    try:
        query = FoodOrder.query.filter_by(user_id=g.current_user.id)
        orders, pagination = paginate(query, FoodOrder.created_at.desc())
        return jsonify({
            'orders': [o.to_dict() for o in orders],
            'pagination': pagination
        }), 200

    except ValueError as e:
        return jsonify({'error': f'Invalid parameter: {str(e)}'}), 400


@food_bp.route('/vendors/me/orders', methods=['GET'])
@jwt_required()
@food_vendor_required
def get_vendor_food_orders():
    """
    Orders received by the current vendor

    GET /api/food/vendors/me/orders
    Query Parameters:
    - status: Filter by food order status
    - page, limit: Pagination
    """
    try:
        query = FoodOrder.query.filter_by(vendor_id=g.profile.id)

        status_filter = request.args.get('status')
        if status_filter:
            try:
                query = query.filter_by(status=FoodOrderStatus(status_filter))
            except ValueError:
                return jsonify({
                    'error': f'Invalid status. Valid options: {[s.value for s in FoodOrderStatus]}'
                }), 400

        orders, pagination = paginate(query, FoodOrder.created_at.desc())
        return jsonify({
            'orders': [o.to_dict() for o in orders],
            'pagination': pagination
        }), 200

    except ValueError as e:
        return jsonify({'error': f'Invalid parameter: {str(e)}'}), 400


@food_bp.route('/orders/<int:order_id>/status', methods=['PATCH'])
@jwt_required()
@login_required
def update_food_order_status(order_id):
    """
    Move a food order along the kitchen workflow

    PATCH /api/food/orders/:id/status
    Body:
    {
        "status": "preparing"
    }

    The vendor drives pending → preparing → ready → out_for_delivery → delivered
    and may cancel a pending order. The customer may only cancel while pending.
    """
    user = g.current_user
    order = db.session.get(FoodOrder, order_id)
    if not order:
        return jsonify({'error': 'Food order not found'}), 404

    data = request.get_json(silent=True) or {}
    try:
        new_status = FoodOrderStatus(data.get('status'))
    except ValueError:
        return jsonify({
            'error': f'Invalid status. Valid options: {[s.value for s in FoodOrderStatus]}'
        }), 400

    is_vendor = user.food_vendor is not None and user.food_vendor.id == order.vendor_id
    is_customer = order.user_id == user.id
    if not is_vendor and not is_customer:
        return jsonify({'error': 'Unauthorized to update this order'}), 403

    if not is_vendor and new_status != FoodOrderStatus.CANCELLED:
        return jsonify({'error': 'Customers can only cancel an order'}), 403

    try:
        order.update_status(new_status)

        readable = new_status.value.replace('_', ' ')
        if is_vendor:
            Notification.notify(order.user_id, 'food_order_status',
                                f'Your order {order.order_number} is {readable}')
        else:
            Notification.notify(order.vendor.user_id, 'food_order_cancelled',
                                f'Order {order.order_number} was cancelled by the customer')
        db.session.commit()

        return jsonify({
            'message': f'Order status updated to {new_status.value}',
            'order': order.to_dict()
        }), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update food order #%s", order_id)
        return jsonify({'error': f'Failed to update order status: {str(e)}'}), 500
