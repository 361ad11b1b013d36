"""User-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class RegisterSchema(Schema):
    """Input payload for registration; length rules are enforced by the service."""

    username = fields.String(required=True, validate=validate.Length(max=50))
    password = fields.String(required=True, validate=validate.Length(max=128))
    role_id = fields.Integer(load_default=None, allow_none=True, strict=True)


class UserSchema(Schema):
    """Public user representation (no credentials, no tokens)."""

    id = fields.Integer(dump_only=True)
    username = fields.String()
    role = fields.String()
