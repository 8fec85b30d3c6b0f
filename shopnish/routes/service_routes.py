"""
Service Routes
Local service providers (plumbers, electricians, tutors...) and bookings
"""
import logging

from flask import Blueprint, jsonify, request, g
from flask_jwt_extended import jwt_required

from extensions import db
from shopnish.models.approval import ApprovalStatus
from shopnish.models.notification import Notification
from shopnish.models.service import ServiceProvider, ServiceBooking, BookingStatus
from shopnish.auth.decorators import login_required, service_provider_required
from shopnish.validators.vendor_validators import VendorValidator
from shopnish.utils.pagination import paginate

logger = logging.getLogger(__name__)

services_bp = Blueprint('services', __name__, url_prefix='/api/services')


# ============================================================================
# SERVICE PROVIDERS
# ============================================================================
@services_bp.route('/providers', methods=['POST'])
@jwt_required()
@login_required
def register_provider():
    """
    Register the current user as a service provider; starts pending approval

    POST /api/services/providers
    Body:
    {
        "business_name": "Ravi Electricals",
        "service_type": "electrician",
        "city": "Pune",
        "phone": "+919876543210",
        "hourly_rate": 300,
        "experience_years": 6      (optional)
    }
    """
    user = g.current_user
    if user.service_provider is not None:
        return jsonify({'error': 'You are already registered as a service provider'}), 400

    is_valid, validated_data, errors = VendorValidator.validate_service_provider(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    try:
        provider = ServiceProvider(user_id=user.id, **validated_data)
        db.session.add(provider)
        db.session.commit()

        logger.info("User #%s registered service provider #%s", user.id, provider.id)
        return jsonify({
            'message': 'Service provider created and sent for approval',
            'provider': provider.to_dict()
        }), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 422
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to register service provider")
        return jsonify({'error': f'Failed to register service provider: {str(e)}'}), 500


@services_bp.route('/providers', methods=['GET'])
def list_providers():
    """
    List approved providers

    GET /api/services/providers
    Query Parameters:
    - service_type: Filter by service type (e.g. plumber)
    - city: Filter by city (case-insensitive)
    """
    query = ServiceProvider.query.filter(ServiceProvider.approval_status == ApprovalStatus.APPROVED)

    service_type = (request.args.get('service_type') or '').strip().lower()
    if service_type:
        query = query.filter(ServiceProvider.service_type == service_type)

    city = (request.args.get('city') or '').strip()
    if city:
        query = query.filter(ServiceProvider.city.ilike(city))

    providers = query.order_by(ServiceProvider.business_name.asc()).all()
    return jsonify({'providers': [p.to_dict() for p in providers]}), 200


@services_bp.route('/providers/me', methods=['GET'])
@jwt_required()
@service_provider_required
def get_my_provider():
    """
    GET /api/services/providers/me
    """
    return jsonify({'provider': g.profile.to_dict()}), 200


@services_bp.route('/providers/me', methods=['PUT'])
@jwt_required()
@service_provider_required
def update_my_provider():
    """
    Update the provider profile; a rejected profile is resubmitted

    PUT /api/services/providers/me
    """
    provider = g.profile

    is_valid, validated_data, errors = VendorValidator.validate_service_provider(
        request.get_json(silent=True), partial=True)
    if not is_valid:
        return jsonify({'errors': errors}), 400

    try:
        for field, value in validated_data.items():
            if field in ServiceProvider.EDITABLE_FIELDS:
                setattr(provider, field, value)

        if validated_data and provider.approval_status == ApprovalStatus.REJECTED:
            provider.resubmit()

        db.session.commit()
        return jsonify({'message': 'Provider profile updated', 'provider': provider.to_dict()}), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 422
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update service provider #%s", provider.id)
        return jsonify({'error': f'Failed to update provider profile: {str(e)}'}), 500


# ============================================================================
# BOOKINGS
# ============================================================================
@services_bp.route('/bookings', methods=['POST'])
@jwt_required()
@login_required
def create_booking():
    """
    Book an approved provider

    POST /api/services/bookings
    Body:
    {
        "provider_id": 4,
        "scheduled_at": "2026-05-01T10:00:00",
        "hours": 2,                 (optional, default 1)
        "address": "12 MG Road, Pune",
        "notes": "Bring a ladder"    (optional)
    }
    """
    user = g.current_user

    is_valid, validated_data, errors = VendorValidator.validate_booking(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    provider = db.session.get(ServiceProvider, validated_data['provider_id'])
    if not provider or not provider.is_approved:
        return jsonify({'error': 'Service provider not found'}), 404
    if not provider.is_available:
        return jsonify({'error': f'{provider.business_name} is not taking bookings right now'}), 400
    if provider.user_id == user.id:
        return jsonify({'error': 'You cannot book your own service'}), 400

    try:
        booking = ServiceBooking(
            user_id=user.id,
            price=ServiceBooking.quote(provider, validated_data['hours']),
            **validated_data
        )
        db.session.add(booking)

        Notification.notify(provider.user_id, 'booking_new',
                            f'New booking from {user.full_name} for '
                            f'{validated_data["scheduled_at"]:%d %b %Y %H:%M}')
        db.session.commit()

        logger.info("User #%s booked provider #%s", user.id, provider.id)
        return jsonify({
            'message': 'Booking requested',
            'booking': booking.to_dict()
        }), 201

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to create booking for user #%s", user.id)
        return jsonify({'error': f'Failed to create booking: {str(e)}'}), 500


@services_bp.route('/bookings', methods=['GET'])
@jwt_required()
@login_required
def get_my_bookings():
    """
    GET /api/services/bookings
    Query Parameters:
    - page, limit: Pagination
    """
    try:
        query = ServiceBooking.query.filter_by(user_id=g.current_user.id)
        bookings, pagination = paginate(query, ServiceBooking.scheduled_at.desc())
        return jsonify({
            'bookings': [b.to_dict() for b in bookings],
            'pagination': pagination
        }), 200

    except ValueError as e:
        return jsonify({'error': f'Invalid parameter: {str(e)}'}), 400


@services_bp.route('/providers/me/bookings', methods=['GET'])
@jwt_required()
@service_provider_required
def get_provider_bookings():
    """
    Bookings received by the current provider

    GET /api/services/providers/me/bookings
    Query Parameters:
    - status: Filter by booking status
    - page, limit: Pagination
    """
    try:
        query = ServiceBooking.query.filter_by(provider_id=g.profile.id)

        status_filter = request.args.get('status')
        if status_filter:
            try:
                query = query.filter_by(status=BookingStatus(status_filter))
            except ValueError:
                return jsonify({
                    'error': f'Invalid status. Valid options: {[s.value for s in BookingStatus]}'
                }), 400

        bookings, pagination = paginate(query, ServiceBooking.scheduled_at.asc())
        return jsonify({
            'bookings': [b.to_dict() for b in bookings],
            'pagination': pagination
        }), 200

    except ValueError as e:
        return jsonify({'error': f'Invalid parameter: {str(e)}'}), 400


@services_bp.route('/bookings/<int:booking_id>/status', methods=['PATCH'])
@jwt_required()
@login_required
def update_booking_status(booking_id):
    """
    Update a booking

    PATCH /api/services/bookings/:id/status
    Body:
    {
        "status": "accepted"
    }

    Provider: pending → accepted | rejected, accepted → completed
    Customer: pending | accepted → cancelled
    """
    user = g.current_user
    booking = db.session.get(ServiceBooking, booking_id)
    if not booking:
        return jsonify({'error': 'Booking not found'}), 404

    data = request.get_json(silent=True) or {}
    try:
        new_status = BookingStatus(data.get('status'))
    except ValueError:
        return jsonify({
            'error': f'Invalid status. Valid options: {[s.value for s in BookingStatus]}'
        }), 400

    is_provider = user.service_provider is not None and user.service_provider.id == booking.provider_id
    is_customer = booking.user_id == user.id
    if not is_provider and not is_customer:
        return jsonify({'error': 'Unauthorized to update this booking'}), 403

    try:
        booking.update_status(new_status, by_provider=is_provider)

        readable = new_status.value
        if is_provider:
            Notification.notify(booking.user_id, 'booking_status',
                                f'Your booking with {booking.provider.business_name} was {readable}')
        else:
            Notification.notify(booking.provider.user_id, 'booking_cancelled',
                                f'{user.full_name} cancelled the booking #{booking.id}')
        db.session.commit()

        return jsonify({
            'message': f'Booking {readable}',
            'booking': booking.to_dict()
        }), 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update booking #%s", booking_id)
        return jsonify({'error': f'Failed to update booking: {str(e)}'}), 500
