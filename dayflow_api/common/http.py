# dayflow_api/common/http.py
from flask import jsonify


def ok(data=None, status=200, **meta):
    payload = {"success": True, "data": data}
    if meta:
        payload["meta"] = meta
    return jsonify(payload), status


def paged(rows, page: int, size: int, total: int, status=200):
    """List envelope: data is the page of rows, meta carries page/size/total."""
    return ok(list(rows), status, page=page, size=size, total=total)


def fail(message="Bad Request", status=400, code=None, detail=None, errors=None):
    err = {"message": message}
    if code:
        err["code"] = code
    if detail:
        err["detail"] = detail
    if errors:
        # field -> message, for 422 validation answers
        err["errors"] = errors
    return jsonify({"success": False, "error": err}), status
