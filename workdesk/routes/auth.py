from flask import Blueprint, current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt,
    get_jwt_identity,
    get_current_user
)
from workdesk.database.models.user import User
from workdesk.database.token_blocklist import BLOCKLIST
from workdesk.schemas.user_schema import login_schema
from workdesk.services.page_props import build_page_props
from workdesk.utils.error_messages import ERROR_MESSAGES
from workdesk.utils.helpers import validate_request
from workdesk.utils.response import success_response, error_response

auth_blueprint = Blueprint('auth', __name__)


def _expires_in():
    return int(current_app.config['JWT_ACCESS_TOKEN_EXPIRES'].total_seconds())


@auth_blueprint.route('/sign-in', methods=['POST'])
def sign_in():
    """
    Authenticates a user and returns JWT access and refresh tokens.
    """
    try:
        data = validate_request(login_schema)
    except ValueError as e:
        return error_response(error_code='validation_error', message="Invalid credentials payload.", details=e.args[0], status=400)

    user = User.find_by_email(data['email'])
    if not user or not user.check_password(data['password']):
        return error_response(error_code='invalid_credentials', message=ERROR_MESSAGES["auth"]["invalid_credentials"], status=401)

    if not getattr(user, 'is_active', 1):
        return error_response(error_code='account_disabled', message=ERROR_MESSAGES["auth"]["account_disabled"], status=403)

    additional_claims = {"type": user.type}
    user_dict = user.to_dict()
    user_dict['permissions'] = user.get_permissions()

    return success_response({
        'access_token': create_access_token(identity=str(user.id), additional_claims=additional_claims),
        'refresh_token': create_refresh_token(identity=str(user.id), additional_claims=additional_claims),
        'token_type': 'Bearer',
        'expires_in': _expires_in(),
        'user': user_dict
    }, message="Authentication successful.")


@auth_blueprint.route('/sign-out', methods=['POST'])
@jwt_required()
def sign_out():
    """
    Signs out the user by adding the token's JTI to the blocklist.
    """
    BLOCKLIST.add(get_jwt()["jti"])
    return success_response(message="Successfully signed out.")


@auth_blueprint.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    try:
        identity = get_jwt_identity()
        user = User.find_by_id(identity)
        if not user:
            return error_response(error_code='user_not_found', message=ERROR_MESSAGES["not_found"]["user"], status=404)

        return success_response({
            'access_token': create_access_token(identity=identity, additional_claims={"type": user.type}),
            'token_type': 'Bearer',
            'expires_in': _expires_in()
        }, message="Token refreshed successfully.")
    except Exception as e:
        return error_response(error_code='server_error', message="Failed to refresh token.", details=str(e), status=500)


@auth_blueprint.route('/me', methods=['GET'])
@jwt_required()
def get_current_user_info():
    """
    The signed-in user with their permissions and sidebar.
    """
    try:
        current_user = get_current_user()
        props = build_page_props(current_user)
        user_dict = current_user.to_dict()
        user_dict['permissions'] = props['auth']['permissions']
        user_dict['navigation'] = props['navigation']
        return success_response(user_dict, message="User data retrieved successfully.")
    except Exception as e:
        return error_response(error_code='server_error', message="Failed to retrieve user data.", details=str(e), status=500)
