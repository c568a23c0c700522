from flask import Blueprint
from flask_jwt_extended import jwt_required, get_current_user
from marshmallow import ValidationError

from workdesk.database.models.permission_model import RolePermission, UserPermission
from workdesk.database.models.user import User
from workdesk.schemas.permission_schema import permission_grant_schema, permission_set_schema, role_validator
from workdesk.utils.authorization import require_permission, require_type
from workdesk.utils.error_messages import ERROR_MESSAGES
from workdesk.utils.helpers import validate_request
from workdesk.utils.permissions import PERMISSIONS, PERMISSION_CATEGORIES, ROLES
from workdesk.utils.response import success_response, error_response

permissions_blueprint = Blueprint('permissions', __name__)


def _managed_user(user_id):
    """The target user if the current user may edit them, else an error response."""
    current_user = get_current_user()
    user = User.find_by_id(user_id)
    if not user or (not current_user.is_superadmin and user.created_by != current_user.company_id):
        return None, error_response('not_found', ERROR_MESSAGES["not_found"]["user"], status=404)
    if user.is_superadmin:
        return None, error_response('validation_error', 'Cannot modify permissions for superadmin users.', status=400)
    return user, None


def _user_payload(user):
    return {
        'user_id': user.id,
        'type': user.type,
        'permissions': user.get_permissions(),
        'direct_permissions': UserPermission.get_user_permissions(user.id),
    }


# ---------------- Catalogue ----------------
@permissions_blueprint.route('/permissions', methods=['GET'])
@jwt_required()
def list_permissions():
    return success_response({
        'permissions': PERMISSIONS,
        'categories': PERMISSION_CATEGORIES,
        'roles': list(ROLES),
    }, message="Permissions retrieved successfully.")


# ---------------- User permissions ----------------
@permissions_blueprint.route('/users/<string:user_id>/permissions', methods=['GET'])
@jwt_required()
@require_permission('user_manage_permissions')
def get_user_permissions(user_id: str):
    try:
        user, error = _managed_user(user_id)
        if error:
            return error
        return success_response(_user_payload(user), message="User permissions retrieved successfully.")
    except Exception as e:
        return error_response('server_error', 'Failed to retrieve user permissions.', details=str(e), status=500)


@permissions_blueprint.route('/users/<string:user_id>/permissions', methods=['PUT'])
@jwt_required()
@require_permission('user_manage_permissions')
def update_user_permissions(user_id: str):
    """
    Replace the permissions granted directly to a user.
    Role permissions are not touched.
    """
    try:
        data = validate_request(permission_set_schema)
    except ValueError as e:
        return error_response('validation_error', 'Invalid permissions.', details=e.args[0], status=400)

    try:
        user, error = _managed_user(user_id)
        if error:
            return error
        count = UserPermission.sync_permissions(user.id, data['permissions'], get_current_user().id)
        return success_response(_user_payload(user), message=f"User permissions updated ({count} granted).")
    except Exception as e:
        return error_response('server_error', 'Failed to update user permissions.', details=str(e), status=500)


@permissions_blueprint.route('/users/<string:user_id>/permissions/grant', methods=['POST'])
@jwt_required()
@require_permission('user_manage_permissions')
def grant_user_permission(user_id: str):
    try:
        data = validate_request(permission_grant_schema)
    except ValueError as e:
        return error_response('validation_error', 'Invalid permission.', details=e.args[0], status=400)

    try:
        user, error = _managed_user(user_id)
        if error:
            return error
        UserPermission.grant_permission(user.id, data['permission'], get_current_user().id)
        return success_response(_user_payload(user), message="Permission granted.", status=201)
    except ValueError as e:
        return error_response('conflict', str(e), status=409)
    except Exception as e:
        return error_response('server_error', 'Failed to grant permission.', details=str(e), status=500)


@permissions_blueprint.route('/users/<string:user_id>/permissions/revoke', methods=['POST'])
@jwt_required()
@require_permission('user_manage_permissions')
def revoke_user_permission(user_id: str):
    try:
        data = validate_request(permission_grant_schema)
    except ValueError as e:
        return error_response('validation_error', 'Invalid permission.', details=e.args[0], status=400)

    try:
        user, error = _managed_user(user_id)
        if error:
            return error
        if not UserPermission.revoke_permission(user.id, data['permission']):
            return error_response('not_found', 'Permission was not granted to this user.', status=404)
        return success_response(_user_payload(user), message="Permission revoked.")
    except Exception as e:
        return error_response('server_error', 'Failed to revoke permission.', details=str(e), status=500)


# ---------------- Role permissions ----------------
@permissions_blueprint.route('/roles/<string:role>/permissions', methods=['GET'])
@jwt_required()
@require_permission('role_manage_permissions')
def get_role_permissions(role: str):
    try:
        role_validator(role)
    except ValidationError as e:
        return error_response('not_found', e.messages[0], status=404)
    return success_response({'role': role, 'permissions': RolePermission.get_role_permissions(role)},
                            message="Role permissions retrieved successfully.")


@permissions_blueprint.route('/roles/<string:role>/permissions', methods=['PUT'])
@jwt_required()
@require_permission('role_manage_permissions')
@require_type('superadmin')
def update_role_permissions(role: str):
    try:
        role_validator(role)
    except ValidationError as e:
        return error_response('not_found', e.messages[0], status=404)

    try:
        data = validate_request(permission_set_schema)
    except ValueError as e:
        return error_response('validation_error', 'Invalid permissions.', details=e.args[0], status=400)

    try:
        RolePermission.sync_permissions(role, data['permissions'])
        return success_response({'role': role, 'permissions': RolePermission.get_role_permissions(role)},
                                message="Role permissions updated successfully.")
    except Exception as e:
        return error_response('server_error', 'Failed to update role permissions.', details=str(e), status=500)
