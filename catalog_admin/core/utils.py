"""
Utilitaires communs
"""
import uuid

from flask import request, current_app
from sqlalchemy.exc import IntegrityError

from catalog_admin.core.errors import Conflict


def generate_id():
    """Identifiant opaque (uuid4) pour les nouvelles entités"""
    return str(uuid.uuid4())


def clean_str(value):
    """
    Nettoie une chaîne optionnelle.
    Retourne la chaîne sans espaces de bord, ou None si elle est vide.
    """
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def get_cursor_params():
    """
    Récupère les paramètres de pagination par curseur depuis la requête.
    Retourne (cursor, limit)
    """
    default_limit = current_app.config.get('DEFAULT_PAGE_SIZE', 20)
    max_limit = current_app.config.get('MAX_PAGE_SIZE', 100)

    limit = request.args.get('limit', default_limit, type=int)
    if not limit or limit < 1:
        limit = default_limit

    # Limiter au maximum configuré
    limit = min(limit, max_limit)

    cursor = request.args.get('cursor') or None

    return cursor, limit


def paginate_by_cursor(query, id_column, cursor, limit):
    """
    Pagine une requête SQLAlchemy par identifiant croissant.
    Retourne (items, next_cursor); next_cursor est l'ID du dernier élément
    retourné quand d'autres éléments suivent.
    """
    if cursor:
        query = query.filter(id_column > cursor)

    items = query.order_by(id_column.asc()).limit(limit + 1).all()

    next_cursor = None
    if len(items) > limit:
        items = items[:limit]
        next_cursor = items[-1].id

    return items, next_cursor


def flush_or_conflict(session, message):
    """
    Envoie les changements en base.
    Une violation de contrainte d'unicité devient une erreur Conflict:
    la contrainte en base reste la garantie, les pré-contrôles ne sont qu'un raccourci.
    """
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        raise Conflict(message) from exc
