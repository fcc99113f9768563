"""
Modèle Locale - Configuration régionale et identifiants chiffrés
"""
from catalog_admin.extensions import db
from catalog_admin.core.audit_mixin import AuditMixin, register_audit_listeners
from catalog_admin.core.utils import generate_id


# Champs stockés sous forme d'enveloppe chiffrée (nonce:tag:ciphertext)
ENCRYPTED_FIELDS = ('bazaar_voice_api_key', 'bv_response_api_key', 'bv_client_secret')


class Locale(db.Model, AuditMixin):
    """
    Modèle Locale (marché / région).
    Le code est unique sans tenir compte de la casse.
    """
    __tablename__ = 'locales'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    code = db.Column(db.String(50), nullable=False)
    display_name = db.Column(db.String(200), nullable=False)
    regional_names = db.Column(db.JSON, nullable=False, default=list)
    description = db.Column(db.Text, nullable=True)

    # Identifiants Bazaarvoice chiffrés
    bazaar_voice_api_key = db.Column(db.Text, nullable=True)
    bv_response_api_key = db.Column(db.Text, nullable=True)
    bv_client_secret = db.Column(db.Text, nullable=True)

    # Identifiants non secrets
    bv_client_id = db.Column(db.String(255), nullable=True)
    bazaar_voice_client = db.Column(db.String(255), nullable=True)

    __table_args__ = (
        db.Index('uq_locales_code_lower', db.func.lower(code), unique=True),
    )

    def __repr__(self):
        return f'<Locale {self.code}>'


# Enregistrer les listeners d'audit
register_audit_listeners(Locale)
