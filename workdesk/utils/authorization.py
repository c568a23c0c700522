from functools import wraps
from typing import Iterable, Optional

from flask_jwt_extended import get_current_user
from workdesk.utils.response import error_response


def has_permission(permission_list: Optional[Iterable[str]], name: str) -> bool:
    """True iff `name` is in `permission_list`. A missing list grants nothing."""
    if not permission_list:
        return False
    return name in permission_list


def has_any_permission(permission_list: Optional[Iterable[str]], names: Iterable[str]) -> bool:
    return any(has_permission(permission_list, name) for name in names)


def require_type(*user_types):
    """
    Allow the wrapped route only for the given user types.
    Must be placed after @jwt_required().
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            current_user = get_current_user()
            if not current_user or current_user.type not in user_types:
                return error_response(
                    error_code='forbidden',
                    message=f"Access forbidden: requires one of: {', '.join(user_types)}.",
                    status=403
                )
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def require_permission(permission: str):
    """
    Reject the request with 403 unless the current user holds `permission`.
    Must be used after @jwt_required().

    Usage:
        @bp.route('/invoices', methods=['GET'])
        @jwt_required()
        @require_permission('invoice_view_any')
        def list_invoices():
            ...
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            current_user = get_current_user()

            if not current_user:
                return error_response(
                    error_code='unauthorized',
                    message='Authentication required.',
                    status=401
                )

            if not has_permission(current_user.get_permissions(), permission):
                return error_response(
                    error_code='forbidden',
                    message=f'Permission denied. Required permission: {permission}',
                    status=403
                )

            return fn(*args, **kwargs)
        return wrapper
    return decorator
