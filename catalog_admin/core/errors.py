"""
Erreurs métier typées

Les services lèvent ces erreurs sans les journaliser; l'application les
convertit en réponse JSON avec le code HTTP porté par chaque classe.
"""


class ServiceError(Exception):
    """Erreur métier de base"""
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class InvalidInput(ServiceError):
    """Données refusées avant persistance (champ vide, parent invalide...)"""
    status_code = 400


class NotFound(ServiceError):
    """Ressource introuvable"""
    status_code = 404


class Conflict(ServiceError):
    """Violation d'unicité (nom de catégorie, code de locale, email)"""
    status_code = 409


class EncryptionKeyNotConfigured(RuntimeError):
    """Aucune source de clé de chiffrement n'est configurée"""
