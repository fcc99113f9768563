"""
Chiffrement des secrets de locale (AES-256-GCM)

Format d'enveloppe: "<nonce>:<tag>:<ciphertext>" en hexadécimal
(écrit en minuscules, relu sans tenir compte de la casse).
    - nonce: 12 octets (24 caractères hex), tiré au hasard à chaque appel
    - tag: 16 octets (32 caractères hex), tag d'authentification GCM
    - ciphertext: longueur variable (éventuellement vide)

La clé (32 octets) est le SHA-256 de la première source non vide parmi
KEY_SOURCES. L'ordre de ces sources ne doit jamais changer: une autre source
donne une autre clé et rend les données déjà chiffrées illisibles.
"""
import hashlib
import logging
import os
import re
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from catalog_admin.core.errors import EncryptionKeyNotConfigured

logger = logging.getLogger(__name__)

KEY_SOURCES = ('LOCALE_ENCRYPTION_KEY', 'NEXTAUTH_SECRET', 'SESSION_SECRET')

NONCE_LENGTH = 12
TAG_LENGTH = 16

_NONCE_RE = re.compile(r'^[0-9a-fA-F]{%d}$' % (NONCE_LENGTH * 2))
_TAG_RE = re.compile(r'^[0-9a-fA-F]{%d}$' % (TAG_LENGTH * 2))
_CIPHERTEXT_RE = re.compile(r'^(?:[0-9a-fA-F]{2})*$')


def derive_key(environ=None):
    """
    Dérive la clé AES-256 depuis la première source configurée.
    Lève EncryptionKeyNotConfigured si aucune source n'est renseignée.
    """
    environ = os.environ if environ is None else environ

    for name in KEY_SOURCES:
        secret = environ.get(name)
        if secret:
            return hashlib.sha256(secret.encode('utf-8')).digest()

    raise EncryptionKeyNotConfigured(
        f'Encryption key not configured (set one of: {", ".join(KEY_SOURCES)})'
    )


def is_envelope(value):
    """Vérifie la forme d'une enveloppe sans la déchiffrer."""
    return _split_envelope(value) is not None


def _split_envelope(value):
    """Retourne (nonce, tag, ciphertext) en octets, ou None si mal formée."""
    if not value or not isinstance(value, str):
        return None

    parts = value.split(':')
    if len(parts) != 3:
        return None

    nonce_hex, tag_hex, ciphertext_hex = parts
    if not _NONCE_RE.match(nonce_hex) or not _TAG_RE.match(tag_hex):
        return None
    if not _CIPHERTEXT_RE.match(ciphertext_hex):
        return None

    return bytes.fromhex(nonce_hex), bytes.fromhex(tag_hex), bytes.fromhex(ciphertext_hex)


class SecretCipher:
    """
    Chiffrement authentifié de courtes chaînes (identifiants d'API tiers).

    Sans état hormis la clé: utilisable depuis plusieurs requêtes
    concurrentes sans verrou.
    """

    def __init__(self, key: bytes):
        if len(key) != 32:
            raise ValueError('AES-256 key must be 32 bytes')
        self._aesgcm = AESGCM(key)

    @classmethod
    def from_env(cls, environ=None):
        """Construit un chiffreur à partir des variables d'environnement."""
        return cls(derive_key(environ))

    def encrypt(self, plaintext):
        """
        Chiffre une chaîne. None donne None, la chaîne vide est chiffrée.
        """
        if plaintext is None:
            return None

        nonce = os.urandom(NONCE_LENGTH)
        sealed = self._aesgcm.encrypt(nonce, str(plaintext).encode('utf-8'), None)
        # cryptography renvoie ciphertext || tag
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]

        return f'{nonce.hex()}:{tag.hex()}:{ciphertext.hex()}'

    def decrypt(self, envelope):
        """
        Déchiffre une enveloppe.
        Toute enveloppe absente, mal formée ou altérée donne None.
        """
        if not envelope:
            return None

        parts = _split_envelope(envelope)
        if parts is None:
            logger.warning('Secret decrypt failed (reason=format)')
            return None

        nonce, tag, ciphertext = parts
        try:
            plain = self._aesgcm.decrypt(nonce, ciphertext + tag, None)
        except InvalidTag:
            logger.warning('Secret decrypt failed (reason=auth)')
            return None

        try:
            return plain.decode('utf-8')
        except UnicodeDecodeError:
            logger.warning('Secret decrypt failed (reason=encoding)')
            return None


@lru_cache(maxsize=1)
def get_cipher():
    """Chiffreur du processus, clé dérivée une seule fois."""
    return SecretCipher.from_env()


def reset_cipher():
    """Oublie la clé dérivée (changement d'environnement, tests)."""
    get_cipher.cache_clear()


def encrypt(plaintext):
    """Chiffre avec la clé du processus. None donne None."""
    if plaintext is None:
        return None
    return get_cipher().encrypt(plaintext)


def decrypt(envelope):
    """Déchiffre avec la clé du processus. Échec donne None."""
    if not envelope:
        return None
    return get_cipher().decrypt(envelope)
