"""
Schemas Category - Sérialisation et validation des catégories

Deux vues en lecture:
    - admin: tous les champs, sous-catégories sur un seul niveau
    - publique: id, name, label, categoryType, sous-catégories réduites
"""
from marshmallow import Schema, fields, validate, EXCLUDE


class _CategoryFieldsSchema(Schema):
    """Champs communs de la vue admin"""
    id = fields.Str(dump_only=True)
    category_id = fields.Str(data_key='categoryId', allow_none=True)
    name = fields.Str()
    category_type = fields.Str(data_key='categoryType', allow_none=True)
    label = fields.Method('get_label')
    description = fields.Str(allow_none=True)
    ai_training_data = fields.Str(data_key='aiTrainingData', allow_none=True)
    parent_id = fields.Str(data_key='parentId', allow_none=True)
    product_ids = fields.Method('get_product_ids', data_key='productIds')
    created_at = fields.DateTime(data_key='createdAt', dump_only=True)
    updated_at = fields.DateTime(data_key='updatedAt', dump_only=True)

    def get_label(self, obj):
        return obj.display_label

    def get_product_ids(self, obj):
        return list(obj.product_ids or [])


class SubcategorySchema(_CategoryFieldsSchema):
    """Sous-catégorie: les petits-enfants ne sont jamais développés"""
    subcategories = fields.Method('get_subcategories')

    def get_subcategories(self, obj):
        return []


class CategorySchema(_CategoryFieldsSchema):
    """Schema pour la lecture d'une catégorie (vue admin)"""
    subcategories = fields.Method('get_subcategories')

    def get_subcategories(self, obj):
        return SubcategorySchema(many=True).dump(obj.children)


class PublicSubcategorySchema(Schema):
    """Sous-catégorie de la vue publique"""
    id = fields.Str()
    name = fields.Str()
    label = fields.Function(lambda obj: obj.display_label)
    category_type = fields.Str(data_key='categoryType', allow_none=True)


class PublicCategorySchema(PublicSubcategorySchema):
    """Schema de la vue publique (sans dates ni champs internes)"""
    subcategories = fields.Method('get_subcategories')

    def get_subcategories(self, obj):
        return PublicSubcategorySchema(many=True).dump(obj.children)


class CategoryCreateSchema(Schema):
    """
    Schema pour la création d'une catégorie.
    Contrôle les types; le nettoyage (trim, champs vides) est fait par CategoryService.
    """
    class Meta:
        unknown = EXCLUDE

    name = fields.Str(required=True, validate=validate.Length(max=200))
    label = fields.Str(required=True, validate=validate.Length(max=200))
    category_id = fields.Str(data_key='categoryId', allow_none=True, validate=validate.Length(max=100))
    category_type = fields.Str(data_key='categoryType', allow_none=True, validate=validate.Length(max=100))
    description = fields.Str(allow_none=True)
    ai_training_data = fields.Str(data_key='aiTrainingData', allow_none=True)
    parent_id = fields.Str(data_key='parentId', allow_none=True)


class CategoryUpdateSchema(Schema):
    """Schema pour la mise à jour partielle d'une catégorie"""
    class Meta:
        unknown = EXCLUDE

    name = fields.Str(validate=validate.Length(max=200))
    label = fields.Str(validate=validate.Length(max=200))
    category_id = fields.Str(data_key='categoryId', allow_none=True, validate=validate.Length(max=100))
    category_type = fields.Str(data_key='categoryType', allow_none=True, validate=validate.Length(max=100))
    description = fields.Str(allow_none=True)
    ai_training_data = fields.Str(data_key='aiTrainingData', allow_none=True)
    parent_id = fields.Str(data_key='parentId', allow_none=True)
