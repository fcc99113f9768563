"""
AuditMixin - Horodatage et auteur des enregistrements
Created_at, Updated_at, Created_by
"""
from datetime import datetime, timezone
from flask import g, has_app_context
from sqlalchemy import Column, String, DateTime, ForeignKey, event
from sqlalchemy.orm import declared_attr, object_session


def utcnow():
    """Date courante UTC (naïve, comme stockée en base)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_current_user_id():
    """Récupère l'ID de l'utilisateur courant depuis le contexte Flask"""
    if not has_app_context():
        return None
    return getattr(g, 'current_user_id', None)


def set_current_user_id(user_id):
    """Définit l'ID de l'utilisateur courant dans le contexte Flask"""
    g.current_user_id = user_id


class TimestampMixin:
    """
    Mixin pour l'horodatage automatique des entités.
    """
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class AuditMixin(TimestampMixin):
    """
    Mixin d'audit: horodatage et auteur de la création.
    created_by est injecté automatiquement via les events SQLAlchemy.
    """

    @declared_attr
    def created_by(cls):
        return Column(String(36), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)


def audit_listener_before_insert(mapper, connection, target):
    """Event listener pour injecter created_by et les dates avant insertion"""
    if hasattr(target, 'created_by') and target.created_by is None:
        target.created_by = get_current_user_id()
    if target.created_at is None:
        target.created_at = utcnow()
    if target.updated_at is None:
        target.updated_at = target.created_at


def audit_listener_before_update(mapper, connection, target):
    """
    Event listener pour rafraîchir updated_at avant mise à jour.
    Une modification limitée aux collections (enfant ajouté ou retiré)
    ne touche pas la ligne.
    """
    session = object_session(target)
    if session is not None and not session.is_modified(target, include_collections=False):
        return
    target.updated_at = utcnow()


def register_audit_listeners(model_class):
    """Enregistre les listeners d'audit pour une classe de modèle"""
    event.listen(model_class, 'before_insert', audit_listener_before_insert)
    event.listen(model_class, 'before_update', audit_listener_before_update)
