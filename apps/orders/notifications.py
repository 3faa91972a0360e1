"""
Order confirmation email - best effort
"""
import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

from apps.core.utils import get_storefront_setting

logger = logging.getLogger(__name__)


class OrderNotifier:
    """
    Sends order emails. Delivery failures are logged and never raised:
    an order stands whether or not its confirmation goes out.
    """

    def send_order_confirmation(self, order) -> bool:
        if not get_storefront_setting('SEND_ORDER_CONFIRMATION'):
            logger.debug(f"Order confirmation disabled, skipping {order.order_number}")
            return False

        try:
            context = {"order": order, "items": order.line_items}
            sent = send_mail(
                subject=f"Order Confirmation - {order.order_number}",
                message=render_to_string('orders/emails/order_confirmation.txt', context),
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[order.customer_email],
                html_message=render_to_string('orders/emails/order_confirmation.html', context),
            )
        except Exception:
            logger.exception(f"Failed to send confirmation email for order {order.order_number}")
            return False

        logger.info(f"Confirmation email sent for order {order.order_number}")
        return bool(sent)


order_notifier = OrderNotifier()
