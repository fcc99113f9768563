"""
Schemas Marshmallow - Sérialisation et validation
"""
from .user import UserSchema, UserCreateSchema, UserUpdateSchema, LoginSchema
from .category import (
    CategorySchema, SubcategorySchema, PublicCategorySchema,
    CategoryCreateSchema, CategoryUpdateSchema
)
from .locale import LocaleSchema, LocaleCreateSchema, LocaleUpdateSchema, LocaleSecretsSchema

__all__ = [
    'UserSchema', 'UserCreateSchema', 'UserUpdateSchema', 'LoginSchema',
    'CategorySchema', 'SubcategorySchema', 'PublicCategorySchema',
    'CategoryCreateSchema', 'CategoryUpdateSchema',
    'LocaleSchema', 'LocaleCreateSchema', 'LocaleUpdateSchema', 'LocaleSecretsSchema'
]
