"""
Schemas User - Sérialisation et validation des utilisateurs
"""
from marshmallow import Schema, fields, validate, EXCLUDE

from catalog_admin.core.security import UserRoles


class UserSchema(Schema):
    """Schema pour la lecture d'un utilisateur"""
    id = fields.Str(dump_only=True)
    email = fields.Email(required=True)
    name = fields.Str(allow_none=True)
    image = fields.Str(allow_none=True)
    role = fields.Str(required=True)
    is_active = fields.Bool(data_key='isActive')
    last_login = fields.DateTime(data_key='lastLogin', dump_only=True)
    created_at = fields.DateTime(data_key='createdAt', dump_only=True)
    updated_at = fields.DateTime(data_key='updatedAt', dump_only=True)


class UserCreateSchema(Schema):
    """Schema pour la création d'un utilisateur"""
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=6))
    name = fields.Str(allow_none=True, validate=validate.Length(max=200))
    image = fields.Str(allow_none=True, validate=validate.Length(max=500))
    role = fields.Str(validate=validate.OneOf(UserRoles.ALL_ROLES), load_default=UserRoles.USER)
    is_active = fields.Bool(data_key='isActive', load_default=True)


class UserUpdateSchema(Schema):
    """Schema pour la mise à jour d'un utilisateur"""
    class Meta:
        unknown = EXCLUDE

    email = fields.Email()
    password = fields.Str(load_only=True, validate=validate.Length(min=6))
    name = fields.Str(allow_none=True, validate=validate.Length(max=200))
    image = fields.Str(allow_none=True, validate=validate.Length(max=500))
    role = fields.Str(validate=validate.OneOf(UserRoles.ALL_ROLES))
    is_active = fields.Bool(data_key='isActive')


class LoginSchema(Schema):
    """Schema pour le login"""
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True)
