import json

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_current_user

from workdesk.database.models.activity_model import ActivityLog
from workdesk.database.models.project import Project
from workdesk.schemas.filter_schema import PROJECT_PER_PAGE, project_filter_schema
from workdesk.schemas.import_schema import import_mapping_schema
from workdesk.services.project_import import ImportFileError, import_projects, preview
from workdesk.utils.authorization import require_permission
from workdesk.utils.helpers import bulk_action_handler, client_ip, validate_request
from workdesk.utils.pagination import list_page_response
from workdesk.utils.response import success_response, error_response

projects_blueprint = Blueprint('projects', __name__)


@projects_blueprint.route('/projects', methods=['GET'])
@jwt_required()
@require_permission('project_view_any')
def list_projects():
    company_id = get_current_user().company_id

    def fetch(filters, offset, limit):
        return Project.list_filtered(company_id, filters, offset=offset, limit=limit)

    return list_page_response(project_filter_schema, PROJECT_PER_PAGE, fetch, message="Projects retrieved successfully.")


@projects_blueprint.route('/projects/bulk-delete', methods=['POST'])
@jwt_required()
@require_permission('project_delete')
def bulk_delete_projects():
    data = request.get_json(silent=True) or {}
    owner_id = get_current_user().company_id
    return bulk_action_handler(
        data.get('ids'),
        lambda ids: Project.bulk_soft_delete(ids, owner_id=owner_id),
        "{count} project(s) deleted successfully.",
        "No matching projects found."
    )


# ---------------- CSV import (preview -> map columns -> import) ----------------
@projects_blueprint.route('/imports/projects/preview', methods=['POST'])
@jwt_required()
@require_permission('project_import')
def preview_project_import():
    try:
        return success_response(preview(request.files.get('file')), message="File parsed successfully.")
    except ImportFileError as e:
        return error_response('validation_error', str(e), status=400)


@projects_blueprint.route('/imports/projects', methods=['POST'])
@jwt_required()
@require_permission('project_import')
def run_project_import():
    """
    multipart/form-data: `file` (CSV) and `mapping` (JSON object field -> column index).
    """
    try:
        mapping = json.loads(request.form.get('mapping') or '{}')
    except ValueError:
        return error_response('validation_error', "'mapping' must be a JSON object.", status=400)

    try:
        data = validate_request(import_mapping_schema, {'mapping': mapping})
    except ValueError as e:
        return error_response('validation_error', 'Invalid column mapping.', details=e.args[0], status=400)

    user = get_current_user()
    try:
        result = import_projects(request.files.get('file'), data['mapping'], user.company_id)
    except ImportFileError as e:
        return error_response('validation_error', str(e), status=400)
    except Exception as e:
        return error_response('server_error', 'Failed to import projects.', details=str(e), status=500)

    ActivityLog.create_log(
        action='import', entity_type='project', user_id=user.id,
        details={'created': result['created'], 'skipped': result['skipped'], 'errors': len(result['errors'])},
        ip_address=client_ip()
    )
    return success_response(result, message=f"{result['created']} project(s) imported.")
