"""
Notification Routes
In-app notifications of the current user
"""
import logging
from datetime import datetime

from flask import Blueprint, jsonify, request, g
from flask_jwt_extended import jwt_required

from extensions import db
from shopnish.models.notification import Notification
from shopnish.auth.decorators import login_required
from shopnish.utils.pagination import paginate

logger = logging.getLogger(__name__)

notifications_bp = Blueprint('notifications', __name__, url_prefix='/api/notifications')


@notifications_bp.route('', methods=['GET'])
@jwt_required()
@login_required
def get_notifications():
    """
    Get the current user's notifications, newest first

    GET /api/notifications
    Query Parameters:
    - unread: "true" to only return unread notifications
    - page, limit: Pagination
    """
    user = g.current_user

    try:
        query = Notification.query.filter_by(user_id=user.id)
        if (request.args.get('unread') or '').lower() == 'true':
            query = query.filter(Notification.is_read.is_(False))

        notifications, pagination = paginate(query, Notification.created_at.desc())
        unread_count = Notification.query.filter_by(user_id=user.id, is_read=False).count()

        return jsonify({
            'notifications': [n.to_dict() for n in notifications],
            'unread_count': unread_count,
            'pagination': pagination
        }), 200

    except ValueError as e:
        return jsonify({'error': f'Invalid parameter: {str(e)}'}), 400


@notifications_bp.route('/<int:notification_id>/read', methods=['PATCH'])
@jwt_required()
@login_required
def mark_notification_read(notification_id):
    """
    PATCH /api/notifications/:id/read
    """
    notification = db.session.get(Notification, notification_id)
    if not notification or notification.user_id != g.current_user.id:
        return jsonify({'error': 'Notification not found'}), 404

    try:
        notification.mark_read()
        db.session.commit()
        return jsonify({'notification': notification.to_dict()}), 200

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to mark notification #%s read", notification_id)
        return jsonify({'error': f'Failed to update notification: {str(e)}'}), 500


@notifications_bp.route('/read-all', methods=['PATCH'])
@jwt_required()
@login_required
def mark_all_read():
    """
    PATCH /api/notifications/read-all
    """
    user = g.current_user

    try:
        updated = Notification.query.filter_by(user_id=user.id, is_read=False)\
                                    .update({'is_read': True, 'read_at': datetime.utcnow()},
                                            synchronize_session=False)
        db.session.commit()
        return jsonify({'message': 'All notifications marked as read', 'updated': updated}), 200

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to mark notifications read for user #%s", user.id)
        return jsonify({'error': f'Failed to update notifications: {str(e)}'}), 500
