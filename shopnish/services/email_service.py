"""
Email Notification Service
Sends emails for seller approvals, placed orders and delivery updates
"""
import logging
from smtplib import SMTPException

from flask import current_app
from flask_mail import Message

from extensions import mail

logger = logging.getLogger(__name__)


class EmailService:

    @staticmethod
    def _send(subject, recipient, body):
        """Send one plain-text email; failures are logged, never raised"""
        if not recipient:
            return {'status': 'skipped', 'message': 'No recipient'}
        try:
            msg = Message(subject=subject, recipients=[recipient])
            msg.body = body
            mail.send(msg)
            return {'status': 'success', 'message': 'Email sent'}
        except (SMTPException, OSError) as e:
            logger.warning("Failed to send email '%s' to %s: %s", subject, recipient, e)
            return {'status': 'error', 'message': str(e)}

    @staticmethod
    def send_seller_decision(user_email, business_name, approved, reason=None):
        """
        Send email when an admin approves or rejects a seller account

        Args:
            user_email (str): Seller's login email
            business_name (str): Store name
            approved (bool): Decision
            reason (str): Rejection reason, if rejected
        """
        if approved:
            subject = f'Shopnish - {business_name} is approved'
            outcome = ("Your seller account has been approved. You can now list products;\n"
                       "each product is reviewed before it goes live.")
        else:
            subject = f'Shopnish - {business_name} needs changes'
            outcome = (f"Your seller application was not approved.\n\nReason: {reason}\n\n"
                       "Update your profile from the seller dashboard to submit it again.")

        body = f"""
Hello,

{outcome}

Seller dashboard: {current_app.config.get('FRONTEND_URL')}/seller

Best regards,
Shopnish Team
        """
        return EmailService._send(subject, user_email, body)

    @staticmethod
    def send_order_placed(user_email, order_number, total):
        """
        Send order confirmation after checkout

        Args:
            user_email (str): Customer's email
            order_number (str): Order number
            total (Decimal): Order total
        """
        body = f"""
Hello,

Thank you for shopping with Shopnish! Your order {order_number} has been placed.

Order total: ₹{total}

Track your order at: {current_app.config.get('FRONTEND_URL')}/orders

Best regards,
Shopnish Team
        """
        return EmailService._send(f'Shopnish - Order {order_number} placed', user_email, body)

    @staticmethod
    def send_delivery_update(user_email, order_number, status, agent_name=None, agent_phone=None):
        """
        Send email when the delivery assignment of an order changes

        Args:
            user_email (str): Customer's email
            order_number (str): Order number
            status (str): New assignment status
            agent_name (str): Delivery agent's name
            agent_phone (str): Delivery agent's phone number
        """
        readable = status.replace('_', ' ')
        agent_details = ''
        if agent_name:
            agent_details = f"\nDelivery partner: {agent_name}\nPhone: {agent_phone or 'N/A'}\n"

        body = f"""
Hello,

Your order {order_number} is now: {readable}.
{agent_details}
Track your order at: {current_app.config.get('FRONTEND_URL')}/orders

Best regards,
Shopnish Team
        """
        return EmailService._send(f'Shopnish - Order {order_number} {readable}', user_email, body)
