from marshmallow import Schema, fields, pre_load, validate, validates, ValidationError

from models.user import Role

ROLE_NAMES = [role.value for role in Role]


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def _norm_role(v):
    return v.strip().upper() if isinstance(v, str) else v


def _check_password(value):
    if len(value) < 8:
        raise ValidationError("Password must be at least 8 characters long.")


class _NormalizingSchema(Schema):
    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            if "email" in data:
                data["email"] = _norm_email(data["email"])
            if "role" in data:
                data["role"] = _norm_role(data["role"])
        return data


class UserCreateSchema(_NormalizingSchema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

    @validates("password")
    def validate_password(self, value, **kwargs):
        _check_password(value)


class UserLoginSchema(_NormalizingSchema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)


class RefreshSchema(Schema):
    refreshToken = fields.String(load_default=None)


class UserUpdateSchema(_NormalizingSchema):
    name = fields.String(validate=validate.Length(min=1, max=255))
    email = fields.Email()
    password = fields.String(load_only=True)

    @validates("password")
    def validate_password(self, value, **kwargs):
        _check_password(value)


class RoleUpdateSchema(_NormalizingSchema):
    role = fields.String(required=True, validate=validate.OneOf(ROLE_NAMES))


class UserOutSchema(Schema):
    """Dumps an AccountView."""

    id = fields.String()
    name = fields.String(allow_none=True)
    email = fields.String()
    role = fields.Function(lambda view: view.role.value)
    createdAt = fields.DateTime(attribute="created_at", allow_none=True)
    updatedAt = fields.DateTime(attribute="updated_at", allow_none=True)
