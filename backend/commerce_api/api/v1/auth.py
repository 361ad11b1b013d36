"""Authentication endpoints: login, refresh and revoke."""

from __future__ import annotations

from flask import Blueprint, request

from commerce_api.api.deps import auth_service, json_response, timing
from commerce_api.schemas import AuthResultSchema, LoginSchema, RefreshTokenSchema
from commerce_api.services._shared.errors import AuthenticationError
from commerce_api.services.auth import LoginIn, RefreshIn

bp = Blueprint("auth", __name__)

login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
result_schema = AuthResultSchema()


@bp.post("/login")
@timing
def login():
    """Verify credentials and issue an access/refresh token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = auth_service().login(LoginIn(username=data["username"], password=data["password"]))
    return json_response({"data": result_schema.dump(result)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token; the presented one stops working."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    result = auth_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": result_schema.dump(result)})


@bp.post("/revoke")
@timing
def revoke():
    """Revoke a refresh token. No access token is required."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    if not auth_service().revoke(data["refresh_token"]):
        raise AuthenticationError("Invalid refresh token")
    return json_response({"message": "Token revoked successfully"})
