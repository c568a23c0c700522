from flask import Blueprint, current_app
from flask_jwt_extended import jwt_required, get_current_user

from workdesk.database.models.setting import Setting
from workdesk.services.navigation import build_navigation, navigation_flags
from workdesk.services.page_props import build_page_props
from workdesk.utils.response import success_response, error_response

navigation_blueprint = Blueprint('navigation', __name__)


@navigation_blueprint.route('/navigation', methods=['GET'])
@jwt_required()
def get_navigation():
    try:
        user = get_current_user()
        flags = navigation_flags(Setting.get_all(user.company_id), current_app.config.get('SAAS_MODE', False))
        items = build_navigation(user.get_permissions(), flags, user.type, base_url=current_app.config.get('APP_URL', ''))
        return success_response(items, message="Navigation retrieved successfully.")
    except Exception as e:
        return error_response('server_error', 'Failed to build navigation.', details=str(e), status=500)


@navigation_blueprint.route('/page-props', methods=['GET'])
@jwt_required()
def get_page_props():
    try:
        return success_response(build_page_props(get_current_user()), message="Page props retrieved successfully.")
    except Exception as e:
        return error_response('server_error', 'Failed to load page props.', details=str(e), status=500)
