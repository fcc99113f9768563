"""
Core module - Utilitaires, mixins et chiffrement
"""
from .audit_mixin import AuditMixin, TimestampMixin, set_current_user_id, get_current_user_id
from .errors import ServiceError, InvalidInput, NotFound, Conflict, EncryptionKeyNotConfigured
from .security import role_required, UserRoles

__all__ = [
    'AuditMixin',
    'TimestampMixin',
    'set_current_user_id',
    'get_current_user_id',
    'ServiceError',
    'InvalidInput',
    'NotFound',
    'Conflict',
    'EncryptionKeyNotConfigured',
    'role_required',
    'UserRoles'
]
