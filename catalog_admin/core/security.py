"""
Sécurité - JWT et gestion des rôles
"""
from functools import wraps
from flask import jsonify
from flask_jwt_extended import verify_jwt_in_request, get_jwt


class UserRoles:
    """Constantes pour les rôles utilisateurs"""
    USER = 'user'
    ADMIN = 'admin'

    ALL_ROLES = [USER, ADMIN]


def role_required(*roles):
    """
    Décorateur pour vérifier les rôles requis.
    Le rôle est lu dans les claims du JWT, sans accès à la base.
    Usage: @role_required(UserRoles.ADMIN)
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            claims = get_jwt()
            user_role = claims.get('role', None)

            if user_role not in roles:
                return jsonify({
                    'error': 'Forbidden',
                    'message': f'Rôle requis: {", ".join(roles)}'
                }), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
