"""
Order Routes
Checkout from the cart and the customer's order history
"""
import logging

from flask import Blueprint, jsonify, request, g
from flask_jwt_extended import jwt_required

from extensions import db
from shopnish.models.cart import CartItem
from shopnish.models.delivery import AssignmentStatus
from shopnish.models.notification import Notification
from shopnish.models.order import Order, OrderItem, OrderStatus
from shopnish.auth.decorators import login_required
from shopnish.services.email_service import EmailService
from shopnish.services.pricing_service import PricingService, to_money
from shopnish.validators.order_validators import OrderValidator
from shopnish.utils.pagination import paginate

logger = logging.getLogger(__name__)

orders_bp = Blueprint('orders', __name__, url_prefix='/api')


# ============================================================================
# CHECKOUT
# ============================================================================
@orders_bp.route('/checkout', methods=['POST'])
@orders_bp.route('/create-payment-intent', methods=['POST'])
@jwt_required()
@login_required
def checkout():
    """
    Turn the cart into an order

    POST /api/checkout
    Body:
    {
        "shipping_address": {
            "full_name": "Asha Rao",
            "phone": "+919876543210",
            "address_line": "Flat 4B, Lake View Apartments",
            "city": "Bengaluru",
            "pincode": "560001",
            "state": "Karnataka",      (optional)
            "landmark": "Near park"    (optional)
        },
        "payment_method": "cod",       (cod, card or upi; default cod)
        "notes": "Ring twice"          (optional)
    }

    Stock is re-checked and decremented, the cart emptied and the customer
    and every seller in the order notified, all in one transaction.
    """
    user = g.current_user

    is_valid, validated_data, errors = OrderValidator.validate_checkout(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    cart_items = CartItem.query.filter_by(user_id=user.id).order_by(CartItem.id.asc()).all()
    if not cart_items:
        return jsonify({'error': 'Your cart is empty'}), 400

    # Re-check every line against the live catalog
    problems = {}
    for item in cart_items:
        product = item.product
        if not product.is_purchasable:
            problems[str(product.id)] = f'{product.name} is no longer available'
        elif item.quantity > product.stock:
            problems[str(product.id)] = f'Only {product.stock} unit(s) of {product.name} left in stock'
    if problems:
        return jsonify({'error': 'Some items in your cart cannot be ordered', 'items': problems}), 400

    try:
        totals = PricingService.calculate_order_totals(
            (item.product.price, item.quantity) for item in cart_items
        )

        order = Order(
            user_id=user.id,
            payment_method=validated_data['payment_method'],
            shipping_address=validated_data['shipping_address'],
            notes=validated_data['notes'],
            **totals
        )
        db.session.add(order)

        for item in cart_items:
            product = item.product
            order.items.append(OrderItem(
                product_id=product.id,
                seller_id=product.seller_id,
                quantity=item.quantity,
                price=product.price,
                total=to_money(product.price * item.quantity),
            ))
            product.decrease_stock(item.quantity)
            db.session.delete(item)

        db.session.flush()

        Notification.notify(user.id, 'order_placed',
                            f'Your order {order.order_number} has been placed', order_id=order.id)
        sellers = {line.seller_id: line.seller for line in order.items}
        for seller in sellers.values():
            Notification.notify(seller.user_id, 'new_order',
                                f'New order {order.order_number} contains your products', order_id=order.id)

        db.session.commit()

        logger.info("Order %s placed by user #%s (total %s)", order.order_number, user.id, order.total)
        EmailService.send_order_placed(user.email, order.order_number, order.total)

        return jsonify({
            'message': 'Order placed successfully',
            'order_id': order.id,
            'order_number': order.order_number,
            'order': order.to_dict(include_items=True)
        }), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception("Checkout failed for user #%s", user.id)
        return jsonify({'error': f'Failed to place order: {str(e)}'}), 500


# ============================================================================
# ORDER HISTORY
# ============================================================================
@orders_bp.route('/orders', methods=['GET'])
@jwt_required()
@login_required
def get_my_orders():
    """
    Get the current user's orders, newest first

    GET /api/orders
    Query Parameters:
    - status: Filter by order status
    - page, limit: Pagination
    """
    user = g.current_user

    try:
        query = Order.query.filter_by(user_id=user.id)

        status_filter = request.args.get('status')
        if status_filter:
            try:
                query = query.filter_by(status=OrderStatus(status_filter))
            except ValueError:
                return jsonify({
                    'error': f'Invalid status. Valid options: {[s.value for s in OrderStatus]}'
                }), 400

        orders, pagination = paginate(query, Order.created_at.desc())

        return jsonify({
            'orders': [order.to_dict(include_items=True) for order in orders],
            'pagination': pagination
        }), 200

    except ValueError as e:
        return jsonify({'error': f'Invalid parameter: {str(e)}'}), 400


@orders_bp.route('/orders/<int:order_id>', methods=['GET'])
@jwt_required()
@login_required
def get_order(order_id):
    """
    Get one order with its items and delivery assignment

    GET /api/orders/:id

    Visible to the buyer, admins, sellers with items in the order (who only
    see their own lines) and the assigned delivery agent.
    """
    user = g.current_user
    order = db.session.get(Order, order_id)
    if not order:
        return jsonify({'error': 'Order not found'}), 404

    if order.user_id == user.id or user.is_admin:
        return jsonify({'order': order.to_dict(include_items=True)}), 200

    if user.seller is not None and user.seller.id in order.seller_ids():
        return jsonify({'order': order.to_dict(include_items=True, seller_id=user.seller.id)}), 200

    agent = user.delivery_boy
    if agent is not None and order.assignment is not None and order.assignment.delivery_boy_id == agent.id:
        return jsonify({'order': order.to_dict(include_items=True)}), 200

    return jsonify({'error': 'Unauthorized to view this order'}), 403


# ============================================================================
# CANCEL ORDER
# ============================================================================
@orders_bp.route('/orders/<int:order_id>/cancel', methods=['POST'])
@jwt_required()
@login_required
def cancel_order(order_id):
    """
    Cancel an order before it is picked up (buyer only)

    POST /api/orders/:id/cancel

    Products are restocked. A paid order is marked refunded, otherwise the
    payment is cancelled. A pending delivery assignment is dropped.
    """
    user = g.current_user
    order = db.session.get(Order, order_id)
    if not order:
        return jsonify({'error': 'Order not found'}), 404

    if order.user_id != user.id:
        return jsonify({'error': 'You can only cancel your own orders'}), 403

    assignment = order.assignment
    if not order.can_cancel() or (assignment is not None and assignment.status != AssignmentStatus.PENDING):
        return jsonify({
            'error': f'Order can no longer be cancelled (status: {order.status.value})'
        }), 400

    try:
        order.cancel()

        if assignment is not None:
            Notification.notify(assignment.delivery_boy.user_id, 'assignment_cancelled',
                                f'Order {order.order_number} was cancelled by the customer', order_id=order.id)
            order.assignment = None

        for seller in {line.seller_id: line.seller for line in order.items}.values():
            Notification.notify(seller.user_id, 'order_cancelled',
                                f'Order {order.order_number} was cancelled by the customer', order_id=order.id)

        db.session.commit()

        logger.info("Order %s cancelled by user #%s", order.order_number, user.id)
        return jsonify({
            'message': 'Order cancelled successfully',
            'order': order.to_dict(include_items=True)
        }), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to cancel order #%s", order_id)
        return jsonify({'error': f'Failed to cancel order: {str(e)}'}), 500
