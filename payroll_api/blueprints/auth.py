from flask import Blueprint, request
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    jwt_required, get_jwt_identity
)
from payroll_api.common.http import ok, fail
from payroll_api.extensions import db
from payroll_api.models.user import User

bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")

def _user_payload(u: User):
    return {"id": u.id, "username": u.username, "name": u.name, "roles": u.role_codes()}

def _claims(u: User):
    return {"roles": u.role_codes(), "username": u.username, "name": u.name}

@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    if not username or not password:
        return fail("username and password are required", 422)

    u = User.query.filter_by(username=username).first()
    if not u or not u.check_password(password):
        return fail("Invalid credentials", 401)

    access = create_access_token(identity=str(u.id), additional_claims=_claims(u))
    refresh = create_refresh_token(identity=str(u.id), additional_claims={"roles": u.role_codes()})
    return ok({"access": access, "refresh": refresh, "user": _user_payload(u)})

@bp.post("/refresh")
@jwt_required(refresh=True)
def refresh():
    uid = get_jwt_identity()
    u = db.session.get(User, int(uid)) if uid else None
    if not u:
        return fail("User not found", 404)
    return ok({"access": create_access_token(identity=str(u.id), additional_claims=_claims(u))})

@bp.get("/me")
@jwt_required()
def me():
    uid = get_jwt_identity()
    u = db.session.get(User, int(uid)) if uid else None
    if not u:
        return fail("User not found", 404)
    return ok(_user_payload(u))
