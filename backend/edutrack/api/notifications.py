"""Notification API."""
from flask import Blueprint, g, request
from edutrack.services import notification_service
from edutrack.utils.decorators import login_required
from edutrack.utils.helpers import success_response

notifications_bp = Blueprint('notifications', __name__)

@notifications_bp.route('/', methods=['GET'])
@login_required
def list_notifications():
    """Latest notifications for the current user."""
    unread_only = request.args.get('unread_only', 'false').lower() in ('1', 'true', 'yes')
    notifications = notification_service().for_user(g.current_user.id, unread_only=unread_only)

    return success_response(data={
        'notifications': [notification.to_dict() for notification in notifications],
        'unread_count': sum(1 for notification in notifications if not notification.is_read)
    })

@notifications_bp.route('/<int:notification_id>/read', methods=['PATCH'])
@login_required
def mark_read(notification_id):
    notification = notification_service().mark_read(g.current_user.id, notification_id)
    return success_response(data=notification.to_dict(), message='Notification marked as read')
