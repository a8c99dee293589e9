# payroll_api/common/auth.py
from __future__ import annotations

from functools import wraps
from typing import Set

from flask import current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity

from payroll_api.common.http import fail
from payroll_api.extensions import db
from payroll_api.models.user import User

SUPERUSER_ROLE = "admin_principal"


def _roles_from_db(uid) -> Set[str]:
    try:
        user = db.session.get(User, int(uid))
    except (TypeError, ValueError):
        return set()
    return {user.role} if user else set()


def requires_roles(*codes: str):
    """
    Require that the current user has AT LEAST ONE of the given role codes.
    - Uses the 'roles' claim of the JWT if present; falls back to DB.
    - 'admin_principal' always passes.
    - PAYROLL_AUTH_REQUIRED=False turns the gate off (local tooling, tests).
    """
    def outer(fn):
        @wraps(fn)
        def inner(*args, **kwargs):
            if not current_app.config.get("PAYROLL_AUTH_REQUIRED", True):
                return fn(*args, **kwargs)

            verify_jwt_in_request()
            claims = get_jwt() or {}
            roles = set(claims.get("roles") or [])
            if not roles:
                uid = get_jwt_identity()
                if uid is None:
                    return fail("Unauthorized", status=401)
                roles = _roles_from_db(uid)
                if not roles:
                    return fail("Unauthorized", status=401)

            if SUPERUSER_ROLE in roles:
                return fn(*args, **kwargs)
            if codes and not any(r in roles for r in codes):
                return fail("Forbidden", status=403)
            return fn(*args, **kwargs)
        return inner
    return outer
