"""In-app notification service."""
from typing import List, Optional

from edutrack.models.notification import Notification, NotificationType
from edutrack.services.exceptions import ServiceError


class NotificationNotFound(ServiceError):
    status_code = 404
    code = 'NOTIFICATION_NOT_FOUND'
    default_message = 'Notification not found'


class NotificationService:
    """Creates and reads notifications. Callers own the commit."""

    def __init__(self, session):
        self.session = session

    def notify(self, user_id: int, title: str, message: str,
               type: NotificationType = NotificationType.ALERT,
               link: Optional[str] = None, report_id: Optional[int] = None) -> Notification:
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            link=link,
            report_id=report_id
        )
        self.session.add(notification)
        return notification

    def for_user(self, user_id: int, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        query = self.session.query(Notification).filter_by(user_id=user_id)
        if unread_only:
            query = query.filter_by(is_read=False)
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    def mark_read(self, user_id: int, notification_id: int) -> Notification:
        notification = self.session.get(Notification, notification_id)
        if not notification or notification.user_id != user_id:
            raise NotificationNotFound()

        notification.is_read = True
        self.session.commit()
        return notification
