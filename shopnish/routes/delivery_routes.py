"""
Delivery Routes
Delivery agent sign-up, availability and the assignment hand-off workflow
"""
import logging
from datetime import datetime

from flask import Blueprint, jsonify, request, g
from flask_jwt_extended import jwt_required
from sqlalchemy import func

from extensions import db
from shopnish.models.delivery import DeliveryBoy, DeliveryAssignment, AssignmentStatus
from shopnish.models.notification import Notification
from shopnish.models.order import Order, OrderStatus
from shopnish.auth.decorators import (
    login_required, delivery_boy_required, approved_delivery_boy_required,
)
from shopnish.services.email_service import EmailService
from shopnish.validators.vendor_validators import VendorValidator
from shopnish.utils.pagination import paginate
from shopnish.utils.role_guards import delivery_role_required

logger = logging.getLogger(__name__)

delivery_bp = Blueprint('delivery', __name__, url_prefix='/api/delivery')

# Order status the marketplace order moves to when the parcel reaches a step
ORDER_STATUS_FOR_STEP = {
    AssignmentStatus.PICKED_UP: OrderStatus.OUT_FOR_DELIVERY,
    AssignmentStatus.DELIVERED: OrderStatus.DELIVERED,
}


# ============================================================================
# REGISTER AS DELIVERY AGENT
# ============================================================================
@delivery_bp.route('/register', methods=['POST'])
@jwt_required()
@delivery_role_required
@login_required
def register_delivery_boy():
    """
    Create the delivery agent profile; it starts pending approval

    POST /api/delivery/register
    Body:
    {
        "vehicle_type": "scooter",
        "vehicle_number": "KA01AB1234",
        "city": "Bengaluru"
    }
    """
    user = g.current_user
    if user.delivery_boy is not None:
        return jsonify({'error': 'Delivery profile already exists'}), 400

    is_valid, validated_data, errors = VendorValidator.validate_delivery_boy(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    try:
        agent = DeliveryBoy(user_id=user.id, **validated_data)
        db.session.add(agent)
        db.session.commit()

        logger.info("User #%s registered as delivery agent #%s", user.id, agent.id)
        return jsonify({
            'message': 'Delivery profile created and sent for approval',
            'delivery_boy': agent.to_dict()
        }), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 422
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to register delivery agent")
        return jsonify({'error': f'Failed to register delivery agent: {str(e)}'}), 500


# ============================================================================
# PROFILE AND AVAILABILITY
# ============================================================================
@delivery_bp.route('/me', methods=['GET'])
@jwt_required()
@delivery_role_required
@delivery_boy_required
def get_my_profile():
    """
    GET /api/delivery/me
    """
    return jsonify({'delivery_boy': g.profile.to_dict()}), 200


@delivery_bp.route('/me/availability', methods=['PATCH'])
@jwt_required()
@delivery_role_required
@delivery_boy_required
def update_availability():
    """
    Go online or offline for new assignments

    PATCH /api/delivery/me/availability
    Body:
    {
        "is_available": false
    }
    """
    agent = g.profile
    data = request.get_json(silent=True) or {}

    if not isinstance(data.get('is_available'), bool):
        return jsonify({'error': 'is_available must be true or false'}), 400

    try:
        agent.is_available = data['is_available']
        db.session.commit()
        return jsonify({
            'message': 'Availability updated',
            'delivery_boy': agent.to_dict()
        }), 200

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update availability of agent #%s", agent.id)
        return jsonify({'error': f'Failed to update availability: {str(e)}'}), 500


# ============================================================================
# GET ASSIGNMENTS
# ============================================================================
@delivery_bp.route('/assignments', methods=['GET'])
@jwt_required()
@delivery_role_required
@delivery_boy_required
def get_my_assignments():
    """
    Get all assignments of the current agent, newest first

    GET /api/delivery/assignments
    Query Parameters:
    - status: Filter by assignment status (pending, accepted, picked_up, on_the_way, delivered)
    - limit: Number of assignments per page (default: 20)
    - page: Page number (default: 1)
    """
    agent = g.profile

    try:
        query = DeliveryAssignment.query.filter_by(delivery_boy_id=agent.id)

        status_filter = request.args.get('status')
        if status_filter:
            try:
                query = query.filter_by(status=AssignmentStatus(status_filter))
            except ValueError:
                return jsonify({
                    'error': f'Invalid status. Valid options: {[s.value for s in AssignmentStatus]}'
                }), 400

        assignments, pagination = paginate(query, DeliveryAssignment.assigned_at.desc())

        return jsonify({
            'assignments': [a.to_dict(include_order=True) for a in assignments],
            'pagination': pagination
        }), 200

    except ValueError as e:
        return jsonify({'error': f'Invalid parameter: {str(e)}'}), 400


# ============================================================================
# UPDATE ASSIGNMENT STATUS
# ============================================================================
@delivery_bp.route('/assignments/<int:assignment_id>/status', methods=['PATCH'])
@jwt_required()
@delivery_role_required
@approved_delivery_boy_required
def update_assignment_status(assignment_id):
    """
    Advance an assignment one step
    pending → accepted → picked_up → on_the_way → delivered

    PATCH /api/delivery/assignments/:id/status
    Body:
    {
        "status": "picked_up",
        "notes": "Optional notes about the hand-off"
    }

    picked_up moves the order out for delivery; delivered completes the
    order and settles a cash-on-delivery payment.
    """
    agent = g.profile
    data = request.get_json(silent=True) or {}

    if not data.get('status'):
        return jsonify({'error': 'status is required'}), 400

    try:
        new_status = AssignmentStatus(data['status'])
    except ValueError:
        return jsonify({
            'error': f'Invalid status. Valid options: {[s.value for s in AssignmentStatus]}'
        }), 400

    assignment = db.session.get(DeliveryAssignment, assignment_id)
    if not assignment:
        return jsonify({'error': 'Assignment not found'}), 404

    # Verify the agent owns this assignment
    if assignment.delivery_boy_id != agent.id:
        return jsonify({'error': 'You are not assigned to this delivery'}), 403

    if new_status not in assignment.next_statuses():
        return jsonify({
            'error': f'Invalid transition from {assignment.status.value} to {new_status.value}. '
                     f'Valid next status: {[s.value for s in assignment.next_statuses()]}'
        }), 400

    order = assignment.order
    try:
        assignment.update_status(new_status)
        if data.get('notes'):
            assignment.notes = str(data['notes']).strip()

        # An admin override may already have moved the order past this step
        order_status = ORDER_STATUS_FOR_STEP.get(new_status)
        if order_status in Order.STATUS_FLOW.get(order.status, []):
            order.update_status(order_status)

        readable = new_status.value.replace('_', ' ')
        Notification.notify(order.user_id, 'delivery_update',
                            f'Your order {order.order_number} is {readable}', order_id=order.id)
        if new_status == AssignmentStatus.DELIVERED:
            for seller in {item.seller_id: item.seller for item in order.items}.values():
                Notification.notify(seller.user_id, 'order_delivered',
                                    f'Order {order.order_number} was delivered', order_id=order.id)

        db.session.commit()

        logger.info("Agent #%s moved assignment #%s to %s", agent.id, assignment.id, new_status.value)
        EmailService.send_delivery_update(order.customer.email, order.order_number, new_status.value,
                                          agent_name=agent.user.full_name, agent_phone=agent.user.phone)

        return jsonify({
            'message': f'Assignment status updated to {new_status.value}',
            'assignment': assignment.to_dict(include_order=True)
        }), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update assignment #%s", assignment_id)
        return jsonify({'error': f'Failed to update status: {str(e)}'}), 500


# ============================================================================
# GET DELIVERY STATISTICS
# ============================================================================
@delivery_bp.route('/stats', methods=['GET'])
@jwt_required()
@delivery_role_required
@delivery_boy_required
def get_delivery_stats():
    """
    Get statistics for the current agent

    GET /api/delivery/stats
    """
    agent = g.profile

    try:
        base = DeliveryAssignment.query.filter_by(delivery_boy_id=agent.id)

        total = base.count()
        completed = base.filter(DeliveryAssignment.status == AssignmentStatus.DELIVERED).count()
        active = base.filter(DeliveryAssignment.status.in_([
            AssignmentStatus.ACCEPTED,
            AssignmentStatus.PICKED_UP,
            AssignmentStatus.ON_THE_WAY,
        ])).count()
        pending = base.filter(DeliveryAssignment.status == AssignmentStatus.PENDING).count()

        earnings = db.session.query(func.coalesce(func.sum(DeliveryAssignment.earning), 0))\
                             .filter(DeliveryAssignment.delivery_boy_id == agent.id,
                                     DeliveryAssignment.status == AssignmentStatus.DELIVERED)\
                             .scalar()

        today_start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        todays_deliveries = base.filter(DeliveryAssignment.delivered_at >= today_start).count()

        return jsonify({
            'summary': {
                'total_assignments': total,
                'completed_deliveries': completed,
                'active_deliveries': active,
                'pending_assignments': pending,
                'todays_deliveries': todays_deliveries,
                'total_earnings': float(earnings or 0),
            }
        }), 200

    except Exception as e:
        logger.exception("Failed to fetch delivery stats for agent #%s", agent.id)
        return jsonify({'error': f'Failed to fetch statistics: {str(e)}'}), 500
