from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_current_user

from workdesk.database.models.invoice import Invoice
from workdesk.database.models.payment import Payment
from workdesk.schemas.filter_schema import INVOICE_PER_PAGE, invoice_filter_schema
from workdesk.services.payment_service import PaymentService
from workdesk.utils.authorization import require_permission
from workdesk.utils.error_messages import ERROR_MESSAGES
from workdesk.utils.helpers import bulk_action_handler
from workdesk.utils.pagination import list_page_response
from workdesk.utils.response import success_response, error_response

invoices_blueprint = Blueprint('invoices', __name__)


def _visible_invoice(invoice_id):
    """The invoice if it belongs to the current user's company (and to them, for clients)."""
    user = get_current_user()
    invoice = Invoice.find_by_id(invoice_id)
    if not invoice or (not user.is_superadmin and invoice.created_by != user.company_id):
        return None
    if user.type == 'client' and invoice.client_id != user.id:
        return None
    return invoice


@invoices_blueprint.route('/invoices', methods=['GET'])
@jwt_required()
@require_permission('invoice_view_any')
def list_invoices():
    """
    Paginated invoice list.
    Filters: status (partial_paid alias accepted), search, project_id, client_id, per_page (12), view.
    """
    user = get_current_user()
    client_id = user.id if user.type == 'client' else None

    def fetch(filters, offset, limit):
        return Invoice.list_filtered(user.company_id, filters, offset=offset, limit=limit, client_id=client_id)

    return list_page_response(invoice_filter_schema, INVOICE_PER_PAGE, fetch, message="Invoices retrieved successfully.")


@invoices_blueprint.route('/invoices/<string:invoice_id>', methods=['GET'])
@jwt_required()
@require_permission('invoice_view_any')
def get_invoice(invoice_id):
    try:
        invoice = _visible_invoice(invoice_id)
        if not invoice:
            return error_response('not_found', ERROR_MESSAGES["not_found"]["invoice"], status=404)
        result = invoice.to_dict()
        result['payments'] = [p.to_dict() for p in Payment.find_by_invoice_id(invoice.id)]
        return success_response(result, message="Invoice retrieved successfully.")
    except Exception as e:
        return error_response('server_error', 'Failed to retrieve invoice.', details=str(e), status=500)


@invoices_blueprint.route('/invoices/<string:invoice_id>/payment-methods', methods=['GET'])
@jwt_required()
@require_permission('invoice_view_any')
def get_payment_methods(invoice_id):
    """Enabled gateways plus the public credentials their checkouts need."""
    try:
        invoice = _visible_invoice(invoice_id)
        if not invoice:
            return error_response('not_found', ERROR_MESSAGES["not_found"]["invoice"], status=404)
        context = PaymentService.payment_context(invoice)
        context['remainingAmount'] = float(invoice.remaining_amount)
        return success_response(context, message="Payment methods retrieved successfully.")
    except Exception as e:
        return error_response('server_error', 'Failed to retrieve payment methods.', details=str(e), status=500)


@invoices_blueprint.route('/invoices/bulk-delete', methods=['POST'])
@jwt_required()
@require_permission('invoice_delete')
def bulk_delete_invoices():
    data = request.get_json(silent=True) or {}
    owner_id = get_current_user().company_id
    return bulk_action_handler(
        data.get('ids'),
        lambda ids: Invoice.bulk_soft_delete(ids, owner_id=owner_id),
        "{count} invoice(s) deleted successfully.",
        "No matching invoices found."
    )
