from typing import Any, Callable, Dict, List, Optional
from flask import request
from marshmallow import ValidationError, Schema
from workdesk.utils.response import error_response, success_response
from workdesk.utils.error_messages import ERROR_MESSAGES


def validate_request(schema: Schema, data: Optional[Dict[str, Any]] = None, partial: bool = False) -> Dict[str, Any]:
    """
    Validate request data against a marshmallow schema.
    Uses the JSON body when `data` is not given. Raises ValueError(messages).
    """
    if data is None:
        data = request.get_json(silent=True) or {}

    if not isinstance(data, dict):
        raise ValueError({"_schema": [ERROR_MESSAGES["validation"]["request_body_empty"]]})

    try:
        return schema.load(data, partial=partial)
    except ValidationError as err:
        raise ValueError(err.messages)


def client_ip():
    forwarded = request.headers.get('X-Forwarded-For', '')
    return forwarded.split(',')[0].strip() if forwarded else request.remote_addr


def bulk_action_handler(ids: List[str], action_func: Callable[[List[str]], int], success_msg_template: str, not_found_msg: str):
    """
    Generic handler for bulk soft-delete actions.
    """
    if not ids or not isinstance(ids, list):
        return error_response('validation_error', ERROR_MESSAGES["validation"]["invalid_ids"], status=400)

    try:
        affected_count = action_func(ids)
        if affected_count > 0:
            return success_response(
                result={"affected": affected_count},
                message=success_msg_template.format(count=affected_count)
            )
        return error_response('not_found', not_found_msg, status=404)
    except Exception as e:
        return error_response(
            'server_error',
            f"Error performing bulk action: {str(e)}",
            details=str(e),
            status=500
        )
