"""
Schemas Locale - Sérialisation et validation des locales

La vue de lecture ne contient jamais les secrets, ni chiffrés ni en clair:
seuls des indicateurs "secret configuré" sont exposés.
"""
from marshmallow import Schema, fields, validate, EXCLUDE

from catalog_admin.core.crypto import is_envelope


class LocaleSchema(Schema):
    """Schema pour la lecture d'une locale (sans secrets)"""
    id = fields.Str(dump_only=True)
    code = fields.Str()
    display_name = fields.Str(data_key='displayName')
    regional_names = fields.Method('get_regional_names', data_key='regionalNames')
    description = fields.Str(allow_none=True)
    bv_client_id = fields.Str(data_key='bvClientId', allow_none=True)
    bazaar_voice_client = fields.Str(data_key='bazaarVoiceClient', allow_none=True)
    has_bazaar_voice_api_key = fields.Function(
        lambda obj: is_envelope(obj.bazaar_voice_api_key), data_key='hasBazaarVoiceApiKey'
    )
    has_bv_response_api_key = fields.Function(
        lambda obj: is_envelope(obj.bv_response_api_key), data_key='hasBvResponseApiKey'
    )
    has_bv_client_secret = fields.Function(
        lambda obj: is_envelope(obj.bv_client_secret), data_key='hasBvClientSecret'
    )
    created_by = fields.Str(data_key='createdBy', allow_none=True, dump_only=True)
    created_at = fields.DateTime(data_key='createdAt', dump_only=True)
    updated_at = fields.DateTime(data_key='updatedAt', dump_only=True)

    def get_regional_names(self, obj):
        return list(obj.regional_names or [])


class LocaleCreateSchema(Schema):
    """Schema pour la création d'une locale"""
    class Meta:
        unknown = EXCLUDE

    code = fields.Str(required=True, validate=validate.Length(max=50))
    display_name = fields.Str(data_key='displayName', required=True, validate=validate.Length(max=200))
    regional_names = fields.List(fields.Raw(), data_key='regionalNames', allow_none=True)
    description = fields.Str(allow_none=True)
    bazaar_voice_api_key = fields.Str(data_key='bazaarVoiceApiKey', allow_none=True, load_only=True)
    bv_response_api_key = fields.Str(data_key='bvResponseApiKey', allow_none=True, load_only=True)
    bv_client_secret = fields.Str(data_key='bvClientSecret', allow_none=True, load_only=True)
    bv_client_id = fields.Str(data_key='bvClientId', allow_none=True, validate=validate.Length(max=255))
    bazaar_voice_client = fields.Str(data_key='bazaarVoiceClient', allow_none=True, validate=validate.Length(max=255))


class LocaleUpdateSchema(Schema):
    """Schema pour la mise à jour partielle d'une locale"""
    class Meta:
        unknown = EXCLUDE

    code = fields.Str(validate=validate.Length(max=50))
    display_name = fields.Str(data_key='displayName', validate=validate.Length(max=200))
    regional_names = fields.List(fields.Raw(), data_key='regionalNames', allow_none=True)
    description = fields.Str(allow_none=True)
    bazaar_voice_api_key = fields.Str(data_key='bazaarVoiceApiKey', allow_none=True, load_only=True)
    bv_response_api_key = fields.Str(data_key='bvResponseApiKey', allow_none=True, load_only=True)
    bv_client_secret = fields.Str(data_key='bvClientSecret', allow_none=True, load_only=True)
    bv_client_id = fields.Str(data_key='bvClientId', allow_none=True, validate=validate.Length(max=255))
    bazaar_voice_client = fields.Str(data_key='bazaarVoiceClient', allow_none=True, validate=validate.Length(max=255))


class LocaleSecretsSchema(Schema):
    """Schema de la réponse de révélation des secrets (déjà déchiffrés)"""
    id = fields.Str()
    code = fields.Str()
    display_name = fields.Str(data_key='displayName')
    bazaar_voice_api_key = fields.Str(data_key='bazaarVoiceApiKey', allow_none=True)
    bv_response_api_key = fields.Str(data_key='bvResponseApiKey', allow_none=True)
    bv_client_secret = fields.Str(data_key='bvClientSecret', allow_none=True)
    bv_client_id = fields.Str(data_key='bvClientId', allow_none=True)
    bazaar_voice_client = fields.Str(data_key='bazaarVoiceClient', allow_none=True)
