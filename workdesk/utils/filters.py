from datetime import date
from urllib.parse import urlencode

from marshmallow import Schema


def _is_empty(value):
    return value is None or value == "" or value == [] or value == "all"


def clean_args(args):
    """Drop empty query values ('' / None / 'all') before validation."""
    return {key: value for key, value in args.items() if not _is_empty(value)}


def load_filters(schema: Schema, args):
    """
    Validate list-page query arguments against `schema`.
    Raises marshmallow.ValidationError on bad input.
    """
    return schema.load(clean_args(args))


def to_query_string(filters, page=None):
    """
    Serialise filter state to a query string.
    Empty values are dropped and keys are emitted in sorted order.
    """
    pairs = []
    for key in sorted(filters):
        value = filters[key]
        if _is_empty(value) or key == "page":
            continue
        if isinstance(value, bool):
            value = "1" if value else "0"
        elif isinstance(value, date):
            value = value.isoformat()
        pairs.append((key, value))
    if page is not None:
        pairs.append(("page", page))
    return urlencode(pairs)
