"""
Admin Routes
Approval queues, order management, delivery assignment and system statistics
"""
import logging
from datetime import datetime, timedelta

from flask import Blueprint, jsonify, request, g
from flask_jwt_extended import jwt_required
from sqlalchemy import func

from extensions import db
from shopnish.models.approval import ApprovalStatus
from shopnish.models.catalog import Product
from shopnish.models.delivery import DeliveryBoy, DeliveryAssignment, AssignmentStatus
from shopnish.models.food import FoodVendor, FoodItem
from shopnish.models.notification import Notification
from shopnish.models.order import Order, OrderStatus, PaymentStatus
from shopnish.models.seller import Seller
from shopnish.models.service import ServiceProvider
from shopnish.models.user import User
from shopnish.auth.decorators import admin_required
from shopnish.services.email_service import EmailService
from shopnish.services.maps_service import MapsService
from shopnish.services.pricing_service import PricingService
from shopnish.utils.pagination import paginate

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


# ============================================================================
# APPROVAL QUEUES
# ============================================================================
# url name -> (model, label, owner user id, serializer)
APPROVAL_TARGETS = {
    'vendor': (Seller, 'Seller', lambda r: r.user_id, lambda r: r.to_dict(include_private=True)),
    'product': (Product, 'Product', lambda r: r.seller.user_id, lambda r: r.to_dict(include_details=True)),
    'food-vendor': (FoodVendor, 'Food vendor', lambda r: r.user_id, lambda r: r.to_dict()),
    'food-item': (FoodItem, 'Food item', lambda r: r.vendor.user_id, lambda r: r.to_dict(include_vendor=True)),
    'service-provider': (ServiceProvider, 'Service provider', lambda r: r.user_id, lambda r: r.to_dict()),
    'delivery-boy': (DeliveryBoy, 'Delivery agent', lambda r: r.user_id, lambda r: r.to_dict()),
}


def _display_name(record):
    for attr in ('business_name', 'restaurant_name', 'name'):
        value = getattr(record, attr, None)
        if value:
            return value
    if isinstance(record, DeliveryBoy) and record.user:
        return record.user.full_name
    return f'#{record.id}'


def list_pending(kind):
    """
    List records waiting for approval, oldest first

    GET /api/admin/pending-<kind>s
    """
    model, _, _, serialize = APPROVAL_TARGETS[kind]
    records = model.query.filter(model.approval_status == ApprovalStatus.PENDING)\
                         .order_by(model.created_at.asc())\
                         .all()
    return jsonify({'items': [serialize(r) for r in records], 'count': len(records)}), 200


def decide(kind, record_id, approve):
    """
    Approve or reject a pending record

    POST /api/admin/approve-<kind>/:id
    POST /api/admin/reject-<kind>/:id
    Body (reject only):
    {
        "reason": "GST number does not match business name"
    }
    """
    model, label, owner_id, serialize = APPROVAL_TARGETS[kind]
    admin = g.current_user

    record = db.session.get(model, record_id)
    if not record:
        return jsonify({'error': f'{label} not found'}), 404

    data = request.get_json(silent=True) or {}
    reason = str(data.get('reason') or '').strip()
    if not approve and not reason:
        return jsonify({'error': 'A rejection reason is required'}), 400

    try:
        name = _display_name(record)
        if approve:
            record.approve(admin.id)
            message = f'{label} "{name}" has been approved'
        else:
            record.reject(reason, admin.id)
            message = f'{label} "{name}" was rejected: {reason}'

        Notification.notify(owner_id(record), f'{kind.replace("-", "_")}_{"approved" if approve else "rejected"}',
                            message)
        db.session.commit()

        logger.info("Admin #%s %s %s #%s", admin.id, 'approved' if approve else 'rejected', kind, record.id)

        if isinstance(record, Seller):
            EmailService.send_seller_decision(record.user.email, record.business_name, approve, reason or None)

        return jsonify({
            'message': f'{label} {"approved" if approve else "rejected"}',
            'item': serialize(record)
        }), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update %s #%s approval", kind, record_id)
        return jsonify({'error': f'Failed to update {label.lower()}: {str(e)}'}), 500


def _register_approval_routes():
    def make_view(view, kind, **options):
        @jwt_required()
        @admin_required
        def route(**kwargs):
            return view(kind, *kwargs.values(), **options)
        return route

    for kind in APPROVAL_TARGETS:
        slug = kind.replace('-', '_')
        admin_bp.add_url_rule(f'/pending-{kind}s', f'pending_{slug}s',
                              make_view(list_pending, kind), methods=['GET'])
        admin_bp.add_url_rule(f'/approve-{kind}/<int:record_id>', f'approve_{slug}',
                              make_view(decide, kind, approve=True), methods=['POST'])
        admin_bp.add_url_rule(f'/reject-{kind}/<int:record_id>', f'reject_{slug}',
                              make_view(decide, kind, approve=False), methods=['POST'])


_register_approval_routes()


# ============================================================================
# GET ALL ORDERS
# ============================================================================
@admin_bp.route('/orders', methods=['GET'])
@jwt_required()
@admin_required
def get_all_orders():
    """
    Get all orders in the system with optional filters

    GET /api/admin/orders
    Query Parameters:
    - status: Filter by order status
    - payment_status: Filter by payment status
    - date_from: Filter orders from this date (YYYY-MM-DD)
    - date_to: Filter orders until this date (YYYY-MM-DD)
    - limit: Number of orders per page (default: 20)
    - page: Page number (default: 1)
    """
    try:
        status_filter = request.args.get('status')
        payment_filter = request.args.get('payment_status')
        date_from = request.args.get('date_from')
        date_to = request.args.get('date_to')

        query = Order.query

        if status_filter:
            try:
                query = query.filter_by(status=OrderStatus(status_filter))
            except ValueError:
                return jsonify({
                    'error': f'Invalid status. Valid options: {[s.value for s in OrderStatus]}'
                }), 400

        if payment_filter:
            try:
                query = query.filter_by(payment_status=PaymentStatus(payment_filter))
            except ValueError:
                return jsonify({
                    'error': f'Invalid payment status. Valid options: {[s.value for s in PaymentStatus]}'
                }), 400

        if date_from:
            date_from_obj = datetime.strptime(date_from, '%Y-%m-%d')
            query = query.filter(Order.created_at >= date_from_obj)

        if date_to:
            date_to_obj = datetime.strptime(date_to, '%Y-%m-%d') + timedelta(days=1)
            query = query.filter(Order.created_at < date_to_obj)

        orders, pagination = paginate(query, Order.created_at.desc())

        return jsonify({
            'orders': [order.to_dict(include_items=True) for order in orders],
            'pagination': pagination
        }), 200

    except ValueError as e:
        return jsonify({'error': f'Invalid parameter: {str(e)}'}), 400


# ============================================================================
# UPDATE ORDER STATUS (ADMIN OVERRIDE)
# ============================================================================
@admin_bp.route('/orders/<int:order_id>/status', methods=['PATCH'])
@jwt_required()
@admin_required
def update_order_status(order_id):
    """
    Move an order along its status flow

    PATCH /api/admin/orders/:id/status
    Body:
    {
        "status": "confirmed"
    }
    """
    order = db.session.get(Order, order_id)
    if not order:
        return jsonify({'error': 'Order not found'}), 404

    data = request.get_json(silent=True) or {}
    try:
        new_status = OrderStatus(data.get('status'))
    except ValueError:
        return jsonify({
            'error': f'Invalid status. Valid options: {[s.value for s in OrderStatus]}'
        }), 400

    try:
        if new_status == OrderStatus.CANCELLED:
            order.cancel()
            if order.assignment is not None:
                Notification.notify(order.assignment.delivery_boy.user_id, 'assignment_cancelled',
                                    f'Order {order.order_number} was cancelled', order_id=order.id)
                order.assignment = None
        else:
            order.update_status(new_status)

        Notification.notify(order.user_id, 'order_status',
                            f'Your order {order.order_number} is now {new_status.value.replace("_", " ")}',
                            order_id=order.id)
        db.session.commit()

        logger.info("Admin #%s set order %s to %s", g.current_user.id, order.order_number, new_status.value)
        return jsonify({
            'message': 'Order status updated',
            'order': order.to_dict(include_items=True)
        }), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update order #%s status", order_id)
        return jsonify({'error': f'Failed to update order status: {str(e)}'}), 500


@admin_bp.route('/orders/<int:order_id>/payment-status', methods=['PATCH'])
@jwt_required()
@admin_required
def update_payment_status(order_id):
    """
    Record a payment outcome

    PATCH /api/admin/orders/:id/payment-status
    Body:
    {
        "payment_status": "paid"      (paid, failed or refunded)
    }
    """
    order = db.session.get(Order, order_id)
    if not order:
        return jsonify({'error': 'Order not found'}), 404

    allowed = (PaymentStatus.PAID, PaymentStatus.FAILED, PaymentStatus.REFUNDED)
    data = request.get_json(silent=True) or {}
    try:
        new_status = PaymentStatus(data.get('payment_status', data.get('status')))
    except ValueError:
        new_status = None
    if new_status not in allowed:
        return jsonify({'error': f'Invalid payment status. Valid options: {[s.value for s in allowed]}'}), 400

    try:
        order.update_payment_status(new_status)
        Notification.notify(order.user_id, 'payment_status',
                            f'Payment for order {order.order_number} is {new_status.value}', order_id=order.id)
        db.session.commit()

        return jsonify({
            'message': 'Payment status updated',
            'order': order.to_dict()
        }), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update payment status of order #%s", order_id)
        return jsonify({'error': f'Failed to update payment status: {str(e)}'}), 500


# ============================================================================
# ASSIGN DELIVERY AGENT TO ORDER
# ============================================================================
@admin_bp.route('/orders/<int:order_id>/assign', methods=['POST'])
@jwt_required()
@admin_required
def assign_delivery_boy(order_id):
    """
    Assign a delivery agent to an order

    POST /api/admin/orders/:id/assign
    Body:
    {
        "delivery_boy_id": 3,
        "notes": "Fragile"     (optional)
    }

    A pending assignment can be handed to another agent. Once the agent has
    accepted, the assignment can no longer be changed here.
    """
    admin = g.current_user
    data = request.get_json(silent=True) or {}

    if data.get('delivery_boy_id') in (None, ''):
        return jsonify({'error': 'delivery_boy_id is required'}), 400

    order = db.session.get(Order, order_id)
    if not order:
        return jsonify({'error': 'Order not found'}), 404

    # Check if order can be assigned
    if order.status not in (OrderStatus.PENDING, OrderStatus.CONFIRMED):
        return jsonify({
            'error': f'Cannot assign delivery agent. Order status is {order.status.value}'
        }), 400

    assignment = order.assignment
    if assignment is not None and assignment.status != AssignmentStatus.PENDING:
        return jsonify({
            'error': f'Order already has an active delivery assignment ({assignment.status.value})'
        }), 400

    try:
        agent = db.session.get(DeliveryBoy, int(data['delivery_boy_id']))
    except (TypeError, ValueError):
        return jsonify({'error': 'delivery_boy_id must be a whole number'}), 400
    if not agent:
        return jsonify({'error': 'Delivery agent not found'}), 404

    if not agent.can_take_assignment():
        return jsonify({'error': 'Delivery agent must be approved, active and available'}), 400

    try:
        pickup_address = ' | '.join(
            sorted({f'{s.business_name}, {s.business_address}, {s.city} - {s.pincode}'
                    for s in (item.seller for item in order.items) if s is not None})
        )
        delivery_address = MapsService.format_address(order.shipping_address)

        route = MapsService().calculate_distance(pickup_address, delivery_address)
        distance_km = route['distance_km'] if route.get('status') == 'success' else 0
        earning = PricingService.calculate_delivery_earning(distance_km)

        previous_agent = None
        if assignment is None:
            assignment = DeliveryAssignment()
            order.assignment = assignment
        elif assignment.delivery_boy_id != agent.id:
            previous_agent = assignment.delivery_boy

        assignment.delivery_boy_id = agent.id
        assignment.assigned_by = admin.id
        assignment.status = AssignmentStatus.PENDING
        assignment.pickup_address = pickup_address
        assignment.delivery_address = delivery_address
        assignment.distance_km = distance_km
        assignment.earning = earning
        assignment.notes = data.get('notes')
        assignment.assigned_at = datetime.utcnow()

        if order.status == OrderStatus.PENDING:
            order.update_status(OrderStatus.CONFIRMED)

        if previous_agent is not None:
            Notification.notify(previous_agent.user_id, 'assignment_removed',
                                f'Order {order.order_number} was reassigned', order_id=order.id)
        Notification.notify(agent.user_id, 'assignment_new',
                            f'New delivery assigned: order {order.order_number}', order_id=order.id)
        Notification.notify(order.user_id, 'order_assigned',
                            f'{agent.user.full_name} will deliver your order {order.order_number}',
                            order_id=order.id)

        db.session.commit()

        logger.info("Admin #%s assigned order %s to agent #%s (%.2f km)",
                    admin.id, order.order_number, agent.id, float(distance_km))
        EmailService.send_delivery_update(order.customer.email, order.order_number, 'assigned',
                                          agent_name=agent.user.full_name, agent_phone=agent.user.phone)

        return jsonify({
            'message': 'Delivery agent assigned successfully',
            'assignment': assignment.to_dict(include_order=True)
        }), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to assign order #%s", order_id)
        return jsonify({'error': f'Failed to assign delivery agent: {str(e)}'}), 500


# ============================================================================
# GET SYSTEM STATISTICS
# ============================================================================
@admin_bp.route('/stats', methods=['GET'])
@jwt_required()
@admin_required
def get_system_stats():
    """
    Get system-wide statistics for the admin dashboard

    GET /api/admin/stats
    """
    try:
        users_by_role = dict(
            db.session.query(User.role, func.count(User.id)).group_by(User.role).all()
        )
        orders_by_status = {
            status.value: count
            for status, count in db.session.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
        }
        revenue = db.session.query(func.coalesce(func.sum(Order.total), 0))\
                            .filter(Order.payment_status == PaymentStatus.PAID)\
                            .scalar()

        pending_approvals = {
            kind: model.query.filter(model.approval_status == ApprovalStatus.PENDING).count()
            for kind, (model, _, _, _) in APPROVAL_TARGETS.items()
        }

        active_agents = DeliveryBoy.query.filter(
            DeliveryBoy.approval_status == ApprovalStatus.APPROVED,
            DeliveryBoy.is_available.is_(True),
        ).count()

        return jsonify({
            'users': {
                'total': sum(users_by_role.values()),
                'customers': users_by_role.get('customer', 0),
                'delivery': users_by_role.get('delivery', 0),
                'admins': users_by_role.get('admin', 0),
            },
            'sellers': {
                'total': Seller.query.count(),
                'approved': Seller.query.filter(Seller.approval_status == ApprovalStatus.APPROVED).count(),
            },
            'products': {
                'total': Product.query.count(),
                'approved': Product.query.filter(Product.approval_status == ApprovalStatus.APPROVED).count(),
            },
            'orders': {
                'total': sum(orders_by_status.values()),
                'by_status': {s.value: orders_by_status.get(s.value, 0) for s in OrderStatus},
            },
            'pending_approvals': pending_approvals,
            'revenue': float(revenue or 0),
            'active_delivery_agents': active_agents,
        }), 200

    except Exception as e:
        logger.exception("Failed to fetch stats")
        return jsonify({'error': f'Failed to fetch stats: {str(e)}'}), 500
