"""
Service Locale - Gestion des locales et de leurs identifiants chiffrés
"""
import json
import logging
from datetime import datetime, timezone

from sqlalchemy import String, cast, func, or_

from catalog_admin.models.locale import Locale, ENCRYPTED_FIELDS
from catalog_admin.schemas.locale import LocaleSchema, LocaleSecretsSchema
from catalog_admin.core.crypto import get_cipher
from catalog_admin.core.errors import InvalidInput, NotFound, Conflict
from catalog_admin.core.utils import clean_str, flush_or_conflict, paginate_by_cursor

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger('catalog_admin.audit')

CODE_CONFLICT_MESSAGE = 'Locale code already exists'

MAX_REGIONAL_NAMES = 5
MAX_REGIONAL_NAME_LENGTH = 200

# Identifiants tiers non secrets, stockés en clair
PLAIN_FIELDS = ('bv_client_id', 'bazaar_voice_client')


def sanitize_regional_names(values):
    """
    Nettoie la liste des noms régionaux:
    chaque entrée est tronquée, les entrées vides retirées, 5 au maximum.
    """
    if not isinstance(values, (list, tuple)):
        return []

    names = []
    for value in values:
        if value is None:
            continue
        name = str(value).strip()[:MAX_REGIONAL_NAME_LENGTH]
        if name:
            names.append(name)

    return names[:MAX_REGIONAL_NAMES]


class LocaleService:
    """Service pour la gestion des locales"""

    def __init__(self, session, cipher=None, audit_enabled=True):
        self.session = session
        self._cipher = cipher
        self.audit_enabled = audit_enabled

    @property
    def cipher(self):
        # Clé dérivée à la première utilisation seulement
        return self._cipher or get_cipher()

    def _encrypt(self, value):
        if value is None:
            return None
        return self.cipher.encrypt(value)

    def _decrypt(self, envelope):
        if not envelope:
            return None
        return self.cipher.decrypt(envelope)

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------

    def list_locales(self, q=None, cursor=None, limit=20):
        """
        Liste les locales par ID croissant, filtrées sur code, nom affiché
        ou noms régionaux. Retourne (locales, next_cursor).
        """
        query = self.session.query(Locale)

        if q:
            search_filter = f'%{q.lower()}%'
            query = query.filter(
                or_(
                    func.lower(Locale.code).like(search_filter),
                    func.lower(Locale.display_name).like(search_filter),
                    func.lower(cast(Locale.regional_names, String)).like(search_filter)
                )
            )

        items, next_cursor = paginate_by_cursor(query, Locale.id, cursor, limit)

        return LocaleSchema(many=True).dump(items), next_cursor

    def get_locale(self, locale_id):
        """Récupère une locale ou lève NotFound"""
        locale = self.session.get(Locale, locale_id) if locale_id else None
        if locale is None:
            raise NotFound('Locale not found')
        return locale

    def get(self, locale_id):
        return LocaleSchema().dump(self.get_locale(locale_id))

    # ------------------------------------------------------------------
    # Écriture
    # ------------------------------------------------------------------

    def create(self, data, created_by=None):
        """
        Crée une locale. Les secrets fournis sont chiffrés avant persistance.
        """
        code = clean_str(data.get('code'))
        if not code:
            raise InvalidInput('code is required')

        display_name = clean_str(data.get('display_name'))
        if not display_name:
            raise InvalidInput('displayName is required')

        self._ensure_unique_code(code)

        locale = Locale(
            code=code,
            display_name=display_name,
            regional_names=sanitize_regional_names(data.get('regional_names')),
            description=clean_str(data.get('description')),
            created_by=created_by
        )

        for field in PLAIN_FIELDS:
            setattr(locale, field, clean_str(data.get(field)))

        for field in ENCRYPTED_FIELDS:
            setattr(locale, field, self._encrypt(data.get(field)))

        self.session.add(locale)
        flush_or_conflict(self.session, CODE_CONFLICT_MESSAGE)

        return LocaleSchema().dump(locale)

    def update(self, locale_id, data):
        """
        Met à jour partiellement une locale.
        Un secret n'est rechiffré que s'il est fourni; None l'efface.
        """
        locale = self.get_locale(locale_id)
        changes = {}

        if 'code' in data:
            code = clean_str(data['code'])
            if not code:
                raise InvalidInput('code cannot be empty')
            if code.lower() != locale.code.lower():
                self._ensure_unique_code(code, exclude_id=locale.id)
            changes['code'] = code

        if 'display_name' in data:
            display_name = clean_str(data['display_name'])
            if not display_name:
                raise InvalidInput('displayName cannot be empty')
            changes['display_name'] = display_name

        if 'regional_names' in data:
            changes['regional_names'] = sanitize_regional_names(data['regional_names'])

        if 'description' in data:
            changes['description'] = clean_str(data['description'])

        for field in PLAIN_FIELDS:
            if field in data:
                changes[field] = clean_str(data[field])

        for field in ENCRYPTED_FIELDS:
            if field in data:
                changes[field] = self._encrypt(data[field])

        if not changes:
            raise InvalidInput('No changes supplied')

        for field, value in changes.items():
            setattr(locale, field, value)

        flush_or_conflict(self.session, CODE_CONFLICT_MESSAGE)

        return LocaleSchema().dump(locale)

    def delete(self, locale_id):
        """Supprime une locale (aucune dépendance en cascade)"""
        locale = self.get_locale(locale_id)
        self.session.delete(locale)
        self.session.flush()
        return locale.id

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    def reveal_secrets(self, locale_id, actor=None, user_agent=None, remote_addr=None):
        """
        Déchiffre les secrets d'une locale.
        Un secret absent, mal formé ou altéré est retourné à None.
        """
        locale = self.get_locale(locale_id)

        secrets = {
            'id': locale.id,
            'code': locale.code,
            'display_name': locale.display_name,
            'bv_client_id': locale.bv_client_id,
            'bazaar_voice_client': locale.bazaar_voice_client
        }
        for field in ENCRYPTED_FIELDS:
            secrets[field] = self._decrypt(getattr(locale, field))

        timestamp = datetime.now(timezone.utc).isoformat()

        if self.audit_enabled:
            self._audit_secret_access(locale, actor, timestamp, user_agent, remote_addr)

        return {
            'secrets': LocaleSecretsSchema().dump(secrets),
            'auditId': f'{timestamp}-{locale.id}'
        }

    @staticmethod
    def _audit_secret_access(locale, actor, timestamp, user_agent, remote_addr):
        """Trace l'accès aux secrets dans le journal d'audit"""
        entry = {
            'timestamp': timestamp,
            'action': 'DECRYPT_LOCALE_SECRETS',
            'adminUser': actor or 'unknown',
            'localeId': locale.id,
            'localeCode': locale.code,
            'userAgent': user_agent or 'unknown',
            'ip': remote_addr or 'unknown'
        }
        try:
            audit_logger.info('[AUDIT] Secret access: %s', json.dumps(entry))
        except Exception:
            # L'échec du journal d'audit ne bloque pas la révélation
            logger.warning('Audit log write failed for locale %s', locale.id, exc_info=True)

    # ------------------------------------------------------------------
    # Contrôles
    # ------------------------------------------------------------------

    def _ensure_unique_code(self, code, exclude_id=None):
        query = self.session.query(Locale.id).filter(func.lower(Locale.code) == code.lower())
        if exclude_id:
            query = query.filter(Locale.id != exclude_id)
        if query.first() is not None:
            raise Conflict(CODE_CONFLICT_MESSAGE)
