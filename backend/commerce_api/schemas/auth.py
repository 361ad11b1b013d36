"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    username = fields.String(required=True, validate=validate.Length(max=50))
    password = fields.String(required=True, validate=validate.Length(max=128))


class RefreshTokenSchema(Schema):
    """Input payload carrying an opaque refresh token (refresh and revoke)."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class AuthResultSchema(Schema):
    """Response payload for login and refresh."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.Constant("bearer")
    username = fields.String(required=True)
    role = fields.String(required=True)
