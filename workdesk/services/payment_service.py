import hashlib
import hmac
import logging
from decimal import Decimal

from flask import current_app

from workdesk.database.models.activity_model import ActivityLog
from workdesk.database.models.invoice import Invoice
from workdesk.database.models.payment import Payment
from workdesk.database.models.setting import PaymentSetting
from workdesk.database.models.user import User
from workdesk.payments.dispatcher import PaymentDispatcher
from workdesk.payments.gateways import enabled_gateways, get_descriptor, public_credentials

logger = logging.getLogger(__name__)


class PaymentService:
    """Glue between invoices, the owner's payment settings and the dispatcher."""

    @staticmethod
    def payment_context(invoice):
        """
        Enabled gateways and browser-safe credentials for the invoice owner.
        """
        settings = PaymentSetting.get_all(invoice.created_by)
        gateways = enabled_gateways(settings)
        return {
            'enabledGateways': [g.to_dict() for g in gateways],
            'credentials': public_credentials(settings),
            'currency': settings.get('currency'),
        }

    @staticmethod
    def build_dispatcher(invoice, client=None, sdk_loader=None):
        settings = PaymentSetting.get_all(invoice.created_by)
        extensions = current_app.extensions
        return PaymentDispatcher(
            invoice_token=invoice.payment_token,
            remaining_amount=invoice.remaining_amount,
            enabled_gateways=[g.id for g in enabled_gateways(settings)],
            client=client or extensions.get('gateway_client'),
            sdk_loader=sdk_loader or extensions.get('sdk_loader'),
            credentials=public_credentials(settings),
            currency=settings.get('currency'),
        )

    @staticmethod
    def verify_webhook_signature(raw_body: bytes, signature: str) -> bool:
        """HMAC-SHA256 of the raw body, hex encoded, keyed with PAYMENT_WEBHOOK_SECRET."""
        secret = current_app.config.get('PAYMENT_WEBHOOK_SECRET')
        if not secret or not signature:
            return False
        expected = hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, signature)

    @staticmethod
    def record_gateway_payment(invoice, gateway_id, transaction_id, amount):
        """
        Record a settled gateway charge once per transaction id.

        Returns (payment, created). A repeated notification returns the
        existing payment with created=False and changes nothing.
        """
        existing = Payment.find_by_transaction_id(transaction_id)
        if existing:
            logger.info("Duplicate notification for transaction %s ignored", transaction_id)
            return existing, False

        payment_id = Payment.record_payment({
            'invoice_id': invoice.id,
            'amount': Decimal(amount).quantize(Decimal('0.01')),
            'payment_method': gateway_id,
            'transaction_id': transaction_id,
            'created_by': invoice.created_by,
        })
        new_status = Invoice.apply_payment_totals(invoice.id, Payment.get_total_paid(invoice.id))

        ActivityLog.create_log(
            action='payment_received',
            entity_type='invoice',
            entity_id=invoice.id,
            details={
                'gateway': gateway_id,
                'transaction_id': transaction_id,
                'amount': str(amount),
                'old_status': invoice.status,
                'new_status': new_status,
            },
        )
        logger.info("Invoice %s: %s payment %s recorded, status %s -> %s",
                    invoice.invoice_number, gateway_id, transaction_id, invoice.status, new_status)

        payment = Payment.find_by_transaction_id(transaction_id)
        try:
            from workdesk.services.email_service import EmailService
            refreshed = Invoice.find_by_id(invoice.id) or invoice
            client = User.find_by_id(invoice.client_id) if invoice.client_id else None
            descriptor = get_descriptor(gateway_id)
            EmailService.send_payment_received_email(
                payment, refreshed, client, descriptor.name if descriptor else gateway_id
            )
        except Exception as e:
            logger.error("Receipt email for payment %s failed: %s", payment_id, e)

        return payment, True
