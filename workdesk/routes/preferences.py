from flask import Blueprint
from flask_jwt_extended import jwt_required, get_current_user

from workdesk.database.models.ui_preference import UIPreference
from workdesk.schemas.preference_schema import preference_schema
from workdesk.utils.helpers import validate_request
from workdesk.utils.response import success_response, error_response

preferences_blueprint = Blueprint('preferences', __name__)


@preferences_blueprint.route('/preferences', methods=['GET'])
@jwt_required()
def get_preferences():
    try:
        return success_response(UIPreference.get_for_user(get_current_user().id), message="Preferences retrieved successfully.")
    except Exception as e:
        return error_response('server_error', 'Failed to load preferences.', details=str(e), status=500)


@preferences_blueprint.route('/preferences', methods=['PUT'])
@jwt_required()
def update_preferences():
    """Partial update of sidebar_expanded, language, layout_direction, theme."""
    try:
        data = validate_request(preference_schema)
    except ValueError as e:
        return error_response('validation_error', 'Invalid preferences.', details=e.args[0], status=400)

    try:
        prefs = UIPreference.save_for_user(get_current_user().id, data)
        return success_response(prefs, message="Preferences saved successfully.")
    except Exception as e:
        return error_response('server_error', 'Failed to save preferences.', details=str(e), status=500)
