"""
Employee inbox notifications.

``notify`` only stages the row on the session so the notification commits
or rolls back together with the operation that raised it.
"""
from tourbook.database import transaction
from tourbook.errors import NotFoundError
from tourbook.extensions import db
from tourbook.models import Notification

REFUND_REQUEST = 'refund_request'
CHANGE_REQUEST = 'change_request'


class NotificationService:

    @staticmethod
    def notify(type, booking, customer, message):
        notification = Notification(
            type=type,
            booking_id=booking.booking_id if booking else None,
            customer_id=customer.user_id if customer else None,
            customer_name=(customer.full_name or customer.username) if customer else None,
            customer_email=customer.email if customer else None,
            message=message,
            is_read=False,
        )
        db.session.add(notification)
        return notification

    @staticmethod
    def list_for_employees(type=REFUND_REQUEST):
        """Newest first, with the unread count for the badge"""
        query = Notification.query
        if type:
            query = query.filter(Notification.type == type)
        notifications = query.order_by(
            Notification.created_at.desc(), Notification.notification_id.desc()
        ).all()
        unread = sum(1 for n in notifications if not n.is_read)
        return {
            "notifications": [n.to_dict() for n in notifications],
            "unreadCount": unread,
        }

    @staticmethod
    def mark_read(notification_id):
        with transaction():
            notification = db.session.get(Notification, notification_id)
            if not notification:
                raise NotFoundError('Notification not found')
            notification.is_read = True
        return notification

    @staticmethod
    def mark_all_read(type=REFUND_REQUEST):
        with transaction():
            query = Notification.query.filter(Notification.is_read.is_(False))
            if type:
                query = query.filter(Notification.type == type)
            count = query.update({Notification.is_read: True}, synchronize_session=False)
        return count

    @staticmethod
    def delete(notification_id):
        with transaction():
            notification = db.session.get(Notification, notification_id)
            if not notification:
                raise NotFoundError('Notification not found')
            db.session.delete(notification)
