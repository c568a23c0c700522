import logging
import threading
from flask import current_app, render_template
from flask_mail import Message

logger = logging.getLogger(__name__)


class EmailService:
    @staticmethod
    def send_async_email(app, msg):
        with app.app_context():
            try:
                from workdesk import mail
                mail.send(msg)
                logger.info("Email sent to %s", msg.recipients)
            except Exception as e:
                logger.exception("Failed to send email to %s: %s", msg.recipients, e)

    @staticmethod
    def send_email(subject, recipients, template, sender=None, **kwargs):
        app = current_app._get_current_object()
        msg = Message(subject, recipients=recipients, sender=sender)
        msg.html = render_template(template, **kwargs)

        thr = threading.Thread(target=EmailService.send_async_email, args=[app, msg])
        thr.start()
        logger.info("Queued '%s' for %s", subject, recipients)
        return thr

    @staticmethod
    def send_payment_received_email(payment, invoice, client, gateway_name, app_name=None):
        if not client or not client.email:
            logger.info("Invoice %s has no client email; receipt skipped", invoice.invoice_number)
            return None

        from workdesk.utils.routes import route
        return EmailService.send_email(
            f"Payment Received for Invoice #{invoice.invoice_number}",
            [client.email],
            'email/payment_received.html',
            payment=payment,
            invoice=invoice,
            client_name=client.name,
            gateway_name=gateway_name,
            payment_link=route('invoices.payment', token=invoice.payment_token),
            app_name=app_name or current_app.config.get('APP_NAME', 'Workdesk'),
        )
