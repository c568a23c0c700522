import math
from flask import request
from marshmallow import ValidationError
from workdesk.utils.filters import load_filters, to_query_string
from workdesk.utils.response import error_response, success_response


def get_pagination(default_per_page=10):
    try:
        page = int(request.args.get("page", 1))
        per_page = int(request.args.get("per_page", default_per_page))
    except ValueError:
        page, per_page = 1, default_per_page
    page = max(page, 1)
    per_page = max(min(per_page, 100), 1)
    return page, per_page


# Numbered links: every page when there are few, otherwise the first and
# last pages plus ON_EACH_SIDE pages around the current one.
ON_EACH_SIDE = 3
GAP = "..."


def page_window(current_page, last_page, on_each_side=ON_EACH_SIDE):
    """Page numbers to link, with GAP where pages are left out."""
    if last_page < on_each_side * 2 + 8:
        return list(range(1, last_page + 1))

    window = on_each_side + 4
    head, tail = [1, 2], [last_page - 1, last_page]
    if current_page <= window:
        return list(range(1, window + on_each_side + 1)) + [GAP] + tail
    if current_page > last_page - window:
        return head + [GAP] + list(range(last_page - (window + on_each_side - 1), last_page + 1))
    slider = list(range(current_page - on_each_side, current_page + on_each_side + 1))
    return head + [GAP] + slider + [GAP] + tail


def build_links(path, filters, current_page, last_page):
    """Previous / numbered pages / next, each {url, label, active}."""
    def url_for_page(number):
        return f"{path}?{to_query_string(filters, page=number)}"

    links = [{
        "url": url_for_page(current_page - 1) if current_page > 1 else None,
        "label": "&laquo; Previous",
        "active": False,
    }]
    for number in page_window(current_page, last_page):
        if number == GAP:
            links.append({"url": None, "label": GAP, "active": False})
        else:
            links.append({"url": url_for_page(number), "label": str(number), "active": number == current_page})
    links.append({
        "url": url_for_page(current_page + 1) if current_page < last_page else None,
        "label": "Next &raquo;",
        "active": False,
    })
    return links


def build_page(items, total, page, per_page, filters, path=None, seq=None):
    """
    Paginator payload for list pages: data, links, meta and the echoed filters.
    `seq` is the caller's request counter, returned as meta.request_seq.
    """
    path = path or request.path
    last_page = max(int(math.ceil(total / float(per_page))), 1) if per_page else 1
    meta = {
        "current_page": page,
        "last_page": last_page,
        "per_page": per_page,
        "total": total,
        "from": (page - 1) * per_page + 1 if items else None,
        "to": (page - 1) * per_page + len(items) if items else None,
        "path": path,
    }
    if seq is not None:
        meta["request_seq"] = seq
    return {
        "data": items,
        "links": build_links(path, filters, page, last_page),
        "meta": meta,
        "filters": filters,
    }


def list_page_response(schema, default_per_page, fetch, message="Records retrieved successfully."):
    """
    Run a list page: validate filters from the query string, fetch one page
    with fetch(filters, offset, limit) -> (records, total), and answer with
    the paginator payload.
    """
    try:
        filters = load_filters(schema, request.args.to_dict())
    except ValidationError as err:
        return error_response('validation_error', 'Invalid filters.', details=err.messages, status=400)

    page, per_page = get_pagination(filters.get("per_page", default_per_page))
    try:
        seq = int(request.args["seq"]) if "seq" in request.args else None
    except ValueError:
        seq = None

    try:
        records, total = fetch(filters, (page - 1) * per_page, per_page)
    except Exception as e:
        return error_response('server_error', 'Failed to load records.', details=str(e), status=500)

    payload = build_page([r.to_dict() for r in records], total, page, per_page, filters, seq=seq)
    return success_response(payload, message=message)
