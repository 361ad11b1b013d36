"""User endpoints: registration and profile lookup."""

from __future__ import annotations

from flask import Blueprint, request

from commerce_api.api.deps import json_response, require_auth, timing, user_service
from commerce_api.schemas import RegisterSchema, UserSchema
from commerce_api.services.users import UserRegistrationIn

bp = Blueprint("users", __name__)

register_schema = RegisterSchema()
user_schema = UserSchema()


@bp.post("")
@timing
def register():
    """Register a new user with the default role unless one is given."""

    data = register_schema.load(request.get_json(silent=True) or {})
    user_id = user_service().register(
        UserRegistrationIn(
            username=data["username"],
            password=data["password"],
            role_id=data.get("role_id"),
        )
    )
    return json_response({"data": {"id": user_id}}, status=201)


@bp.get("/<int:user_id>")
@require_auth
@timing
def get_user(user_id: int):
    """Return a user's public profile."""

    profile = user_service().get_profile(user_id)
    return json_response({"data": user_schema.dump(profile)})
