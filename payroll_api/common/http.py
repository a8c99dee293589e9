# payroll_api/common/http.py
from flask import jsonify


def ok(data=None, status=200, **meta):
    body = {"success": True, "data": data}
    if meta:
        body["meta"] = meta
    return jsonify(body), status


def multi_status(records, errors, message=None):
    """207: batch applied to some members; `errors` lists the ones left out."""
    meta = {"message": message} if message else {}
    return ok({"payrolls": records, "errors": errors}, 207, **meta)


def fail(message="Bad Request", status=400, code=None, detail=None, errors=None):
    error = {"message": message}
    for key, value in (("code", code), ("detail", detail), ("errors", errors)):
        if value:
            error[key] = value
    return jsonify({"success": False, "error": error}), status
