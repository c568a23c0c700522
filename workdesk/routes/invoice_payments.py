import logging

from flask import Blueprint

from workdesk.database.models.invoice import Invoice
from workdesk.database.models.setting import Setting
from workdesk.database.models.user import User
from workdesk.payments.errors import PaymentError
from workdesk.schemas.payment_schema import checkout_schema, confirm_schema
from workdesk.services.payment_service import PaymentService
from workdesk.utils.error_messages import ERROR_MESSAGES
from workdesk.utils.helpers import validate_request
from workdesk.utils.response import success_response, error_response

logger = logging.getLogger(__name__)

# Public routes: the payment token in the URL is the credential.
invoice_payments_blueprint = Blueprint('invoice_payments', __name__)


def _payable_invoice(token):
    invoice = Invoice.find_by_token(token)
    if not invoice or invoice.status in ('draft', 'cancelled'):
        return None, error_response('not_found', ERROR_MESSAGES["not_found"]["invoice"], status=404)
    return invoice, None


def _flow_response(dispatcher, ok, status_ok=200):
    result = dispatcher.to_dict()
    if ok:
        return success_response(result, message="Payment step completed.", status=status_ok)
    # Toasts describe the failure; the envelope keeps the flow state for the browser
    last_error = next((t['message'] for t in reversed(result['toasts']) if t['type'] == 'error'), 'Payment failed')
    return error_response('payment_failed', last_error, details=result, status=422)


@invoice_payments_blueprint.route('/pay/<string:token>', methods=['GET'])
def payment_page(token):
    """Props for the public invoice payment page."""
    try:
        invoice, error = _payable_invoice(token)
        if error:
            return error
        company = User.find_by_id(invoice.created_by)
        settings = Setting.get_all(invoice.created_by)
        context = PaymentService.payment_context(invoice)
        return success_response({
            'invoice': invoice.to_dict(),
            'remainingAmount': float(invoice.remaining_amount),
            'enabledGateways': context['enabledGateways'],
            'credentials': context['credentials'],
            'currency': context['currency'],
            'company': {
                'name': settings.get('company_name') or (company.name if company else None),
                'email': company.email if company else None,
            },
        }, message="Invoice retrieved successfully.")
    except Exception as e:
        return error_response('server_error', 'Failed to load invoice.', details=str(e), status=500)


@invoice_payments_blueprint.route('/pay/<string:token>/checkout', methods=['POST'])
def checkout(token):
    """
    Open the payment dialog, select the gateway and submit it in one step.
    The response lists the toasts and the browser actions to perform.
    """
    try:
        data = validate_request(checkout_schema)
    except ValueError as e:
        return error_response('validation_error', 'Invalid checkout request.', details=e.args[0], status=400)

    try:
        invoice, error = _payable_invoice(token)
        if error:
            return error
        if invoice.remaining_amount <= 0:
            return error_response('conflict', ERROR_MESSAGES["payment"]["invoice_paid"], status=409)

        dispatcher = PaymentService.build_dispatcher(invoice).open()
        if not dispatcher.select_gateway(data['gateway'], data['amount']):
            return _flow_response(dispatcher, False)
        return _flow_response(dispatcher, dispatcher.pay(**data['fields']))
    except PaymentError as e:
        return error_response(e.error_code, e.message, details=e.details, status=e.status)
    except Exception as e:
        logger.exception("Checkout for %s failed", token)
        return error_response('server_error', 'Failed to start payment.', details=str(e), status=500)


@invoice_payments_blueprint.route('/pay/<string:token>/confirm', methods=['POST'])
def confirm(token):
    """SDK callback: confirm a charge the provider reported as successful."""
    try:
        data = validate_request(confirm_schema)
    except ValueError as e:
        return error_response('validation_error', 'Invalid confirmation request.', details=e.args[0], status=400)

    try:
        invoice, error = _payable_invoice(token)
        if error:
            return error
        dispatcher = PaymentService.build_dispatcher(invoice).open()
        if not dispatcher.select_gateway(data['gateway'], data['amount']):
            return _flow_response(dispatcher, False)
        return _flow_response(dispatcher, dispatcher.confirm(data['payment_id'], **data['extra']))
    except PaymentError as e:
        return error_response(e.error_code, e.message, details=e.details, status=e.status)
    except Exception as e:
        logger.exception("Payment confirmation for %s failed", token)
        return error_response('server_error', 'Failed to confirm payment.', details=str(e), status=500)
