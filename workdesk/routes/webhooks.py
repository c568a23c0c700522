import logging

from flask import Blueprint, request
from marshmallow import ValidationError

from workdesk.database.models.invoice import Invoice
from workdesk.payments.gateways import get_config
from workdesk.schemas.payment_schema import payment_webhook_schema
from workdesk.services.payment_service import PaymentService
from workdesk.utils.error_messages import ERROR_MESSAGES
from workdesk.utils.response import success_response, error_response

logger = logging.getLogger(__name__)

webhooks_bp = Blueprint('webhooks', __name__)


@webhooks_bp.route('/webhooks/payments/<string:gateway>', methods=['POST'])
def payment_webhook(gateway):
    """
    Settled-charge notification from the billing API.
    Signed with HMAC-SHA256 over the raw body (X-Signature header).
    """
    raw_body = request.get_data()
    signature = request.headers.get('X-Signature')
    if not signature:
        return error_response(error_code='unauthorized', message='Missing X-Signature header', status=401)
    if not PaymentService.verify_webhook_signature(raw_body, signature):
        logger.warning("Rejected %s webhook with a bad signature", gateway)
        return error_response(error_code='unauthorized', message=ERROR_MESSAGES["payment"]["invalid_signature"], status=401)

    if get_config(gateway) is None:
        return error_response('not_found', ERROR_MESSAGES["not_found"]["gateway"], status=404)

    try:
        data = payment_webhook_schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return error_response('validation_error', 'Invalid webhook payload', details=err.messages, status=400)

    try:
        invoice = Invoice.find_by_token(data['invoice_token'])
        if not invoice:
            return error_response('not_found', ERROR_MESSAGES["not_found"]["invoice"], status=404)

        if data['status'] != 'success':
            logger.info("%s reported %s for invoice %s (%s)", gateway, data['status'],
                        invoice.invoice_number, data['transaction_id'])
            return success_response(
                result={'status': data['status'], 'recorded': False},
                message='Notification acknowledged'
            )

        payment, created = PaymentService.record_gateway_payment(
            invoice, gateway, data['transaction_id'], data['amount']
        )
        if not created:
            return success_response(
                result={'payment_id': payment.id, 'recorded': False},
                message='Duplicate webhook ignored'
            )
        return success_response(
            result={'payment_id': payment.id, 'invoice_id': invoice.id, 'amount': payment.amount, 'recorded': True},
            message='Payment recorded',
            status=201
        )
    except Exception as e:
        logger.exception("Failed to process %s webhook", gateway)
        return error_response('server_error', 'Failed to process webhook.', details=str(e), status=500)
