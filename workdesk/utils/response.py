from flask import current_app
import json
from decimal import Decimal
from datetime import date, datetime


class CustomJSONEncoder(json.JSONEncoder):
    """
    JSON encoder for Decimal and date/datetime values coming out of the models.
    """
    def default(self, o):
        if isinstance(o, Decimal):
            if o == o.to_integral_value():
                return int(o)
            return float(o)
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        return super().default(o)


def success_response(result=None, message="Success", meta=None, status=200):
    """
    Standard success envelope: {"success": true, "message", "data": {"results", "meta"}}.
    """
    return (
        current_app.response_class(
            response=json.dumps(
                {
                    "success": True,
                    "message": message,
                    "data": {"results": result if result is not None else [], "meta": meta or {}},
                },
                cls=CustomJSONEncoder
            ),
            status=status,
            mimetype="application/json",
        ),
        status,
    )


def error_response(error_code="bad_request", message="An error occurred.", details=None, status=400):
    """
    Standard error envelope: {"success": false, "error": {"code", "message", "details"}}.
    """
    return (
        current_app.response_class(
            response=json.dumps(
                {
                    "success": False,
                    "error": {
                        "code": error_code,
                        "message": message,
                        "details": details or {},
                    },
                },
                cls=CustomJSONEncoder
            ),
            status=status,
            mimetype="application/json",
        ),
        status,
    )
