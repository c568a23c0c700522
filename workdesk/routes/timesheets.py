from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_current_user

from workdesk.database.models.timesheet import Timesheet
from workdesk.schemas.filter_schema import TIMESHEET_PER_PAGE, timesheet_filter_schema
from workdesk.utils.authorization import require_permission
from workdesk.utils.helpers import bulk_action_handler
from workdesk.utils.pagination import list_page_response

timesheets_blueprint = Blueprint('timesheets', __name__)


@timesheets_blueprint.route('/timesheets', methods=['GET'])
@jwt_required()
@require_permission('timesheet_view_any')
def list_timesheets():
    """Members only see their own sheets; managers and owners may filter by user_id."""
    user = get_current_user()
    own_only = user.id if user.type == 'member' else None

    def fetch(filters, offset, limit):
        return Timesheet.list_filtered(user.company_id, filters, offset=offset, limit=limit, user_id=own_only)

    return list_page_response(timesheet_filter_schema, TIMESHEET_PER_PAGE, fetch, message="Timesheets retrieved successfully.")


@timesheets_blueprint.route('/timesheets/bulk-delete', methods=['POST'])
@jwt_required()
@require_permission('timesheet_delete')
def bulk_delete_timesheets():
    data = request.get_json(silent=True) or {}
    owner_id = get_current_user().company_id
    return bulk_action_handler(
        data.get('ids'),
        lambda ids: Timesheet.bulk_soft_delete(ids, owner_id=owner_id),
        "{count} timesheet(s) deleted successfully.",
        "No matching timesheets found."
    )
