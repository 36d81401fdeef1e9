import re

from marshmallow import Schema, fields, pre_load, validate, validates, validates_schema, ValidationError

PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
PASSWORD_RULE = "Password must contain at least one uppercase letter, one lowercase letter, and one number"


def _name_field(required):
    return fields.String(
        required=required,
        validate=validate.Length(min=2, max=100, error="Must be between 2 and 100 characters"),
    )


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def _check_password(value):
    if len(value) < 8:
        raise ValidationError("Password must be at least 8 characters long.")
    if len(value) > 100:
        raise ValidationError("Password must not exceed 100 characters.")
    if not PASSWORD_RE.match(value):
        raise ValidationError(PASSWORD_RULE)


class _TrimMixin:
    trim_fields = ()

    @pre_load
    def normalize(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "email" in data:
            data["email"] = _norm_email(data["email"])
        for key in self.trim_fields:
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
        return data


class RegisterSchema(_TrimMixin, Schema):
    trim_fields = ("first_name", "last_name")

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    first_name = _name_field(True)
    last_name = _name_field(True)

    @validates("password")
    def validate_password(self, value, **kwargs):
        _check_password(value)


class LoginSchema(_TrimMixin, Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)


class RefreshTokenSchema(Schema):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class LogoutSchema(Schema):
    refresh_token = fields.String(load_default=None)


class ChangePasswordSchema(Schema):
    current_password = fields.String(required=True, load_only=True)
    new_password = fields.String(required=True, load_only=True)
    confirm_password = fields.String(required=True, load_only=True)

    @validates("new_password")
    def validate_new_password(self, value, **kwargs):
        _check_password(value)

    @validates_schema
    def validate_confirmation(self, data, **kwargs):
        if data.get("new_password") != data.get("confirm_password"):
            raise ValidationError("Passwords must match", field_name="confirm_password")


class UserUpdateSchema(_TrimMixin, Schema):
    trim_fields = ("first_name", "last_name")

    first_name = _name_field(False)
    last_name = _name_field(False)
    avatar_url = fields.URL(allow_none=True, validate=validate.Length(max=255))


class UserOutSchema(Schema):
    id = fields.String()
    email = fields.String()
    first_name = fields.String()
    last_name = fields.String()
    full_name = fields.String()
    avatar_url = fields.String(allow_none=True)
    role = fields.String()
    is_active = fields.Boolean()
    is_email_verified = fields.Boolean()
    last_login_at = fields.DateTime(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()

