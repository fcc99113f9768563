"""
API Locales - CRUD Locales et révélation des secrets
"""
from flask import request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt
from marshmallow import ValidationError

from . import api_v1
from catalog_admin.extensions import db
from catalog_admin.schemas.locale import LocaleCreateSchema, LocaleUpdateSchema
from catalog_admin.services.locale_service import LocaleService
from catalog_admin.core.audit_mixin import set_current_user_id
from catalog_admin.core.security import role_required, UserRoles
from catalog_admin.core.utils import get_cursor_params


def _locale_service():
    return LocaleService(db.session, audit_enabled=current_app.config.get('AUDIT_SECRET_READS', False))


@api_v1.route('/admin/locales', methods=['GET'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def get_locales():
    """
    Liste les locales (pagination par curseur).
    ---
    tags:
      - Locales
    summary: Liste des locales
    description: |
      Retourne les locales triées par ID, sans aucun secret.
      Recherche insensible à la casse sur le code, le nom affiché et les noms régionaux.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    parameters:
      - name: q
        in: query
        type: string
        description: Texte recherché
      - name: cursor
        in: query
        type: string
        description: ID du dernier élément de la page précédente
      - name: limit
        in: query
        type: integer
        default: 20
    responses:
      200:
        description: Page de locales et curseur suivant
    """
    set_current_user_id(get_jwt_identity())

    cursor, limit = get_cursor_params()
    q = request.args.get('q') or None

    locales, next_cursor = _locale_service().list_locales(q=q, cursor=cursor, limit=limit)

    return jsonify({'locales': locales, 'nextCursor': next_cursor}), 200


@api_v1.route('/admin/locales/<locale_id>', methods=['GET'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def get_locale(locale_id):
    """
    Récupère une locale (sans secrets).
    ---
    tags:
      - Locales
    summary: Détail d'une locale
    security:
      - Bearer: []
    parameters:
      - name: locale_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Détail de la locale
      404:
        description: Locale non trouvée
    """
    set_current_user_id(get_jwt_identity())

    return jsonify({'locale': _locale_service().get(locale_id)}), 200


@api_v1.route('/admin/locales', methods=['POST'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def create_locale():
    """
    Crée une locale.
    ---
    tags:
      - Locales
    summary: Créer une locale
    description: |
      Les identifiants Bazaarvoice secrets (bazaarVoiceApiKey, bvResponseApiKey,
      bvClientSecret) sont chiffrés avant stockage et ne sont jamais renvoyés.
      Le code est unique sans tenir compte de la casse.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - code
            - displayName
          properties:
            code:
              type: string
              example: nl_BE
            displayName:
              type: string
            regionalNames:
              type: array
              items:
                type: string
            description:
              type: string
            bazaarVoiceApiKey:
              type: string
            bvResponseApiKey:
              type: string
            bvClientSecret:
              type: string
            bvClientId:
              type: string
            bazaarVoiceClient:
              type: string
    responses:
      201:
        description: Locale créée
      400:
        description: Données invalides
      409:
        description: Code déjà utilisé
    """
    user_id = get_jwt_identity()
    set_current_user_id(user_id)
    schema = LocaleCreateSchema()

    try:
        data = schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({'error': 'Invalid body', 'details': err.messages}), 400

    locale = _locale_service().create(data, created_by=user_id)
    db.session.commit()

    return jsonify({'locale': locale}), 201


@api_v1.route('/admin/locales/<locale_id>', methods=['PUT', 'PATCH'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def update_locale(locale_id):
    """
    Met à jour partiellement une locale.
    ---
    tags:
      - Locales
    summary: Modifier une locale
    description: |
      Seuls les champs fournis sont modifiés.
      Un secret fourni est rechiffré; null l'efface; absent, il reste inchangé.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    parameters:
      - name: locale_id
        in: path
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
    responses:
      200:
        description: Locale mise à jour
      400:
        description: Données invalides
      404:
        description: Locale non trouvée
      409:
        description: Code déjà utilisé
    """
    set_current_user_id(get_jwt_identity())
    schema = LocaleUpdateSchema()

    try:
        data = schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({'error': 'Invalid body', 'details': err.messages}), 400

    locale = _locale_service().update(locale_id, data)
    db.session.commit()

    return jsonify({'locale': locale}), 200


@api_v1.route('/admin/locales/<locale_id>', methods=['DELETE'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def delete_locale(locale_id):
    """
    Supprime une locale.
    ---
    tags:
      - Locales
    summary: Supprimer une locale
    security:
      - Bearer: []
    parameters:
      - name: locale_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Locale supprimée
      404:
        description: Locale non trouvée
    """
    set_current_user_id(get_jwt_identity())

    _locale_service().delete(locale_id)
    db.session.commit()

    return jsonify({'ok': True}), 200


@api_v1.route('/admin/locales/<locale_id>/secrets', methods=['GET'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def reveal_locale_secrets(locale_id):
    """
    Déchiffre et retourne les secrets d'une locale.
    ---
    tags:
      - Locales
    summary: Révéler les secrets
    description: |
      Retourne les identifiants Bazaarvoice déchiffrés.
      Un secret absent ou illisible (altéré, mauvaise clé) vaut null.
      Hors production, chaque accès est tracé dans le journal d'audit.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    parameters:
      - name: locale_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Secrets déchiffrés et identifiant d'audit
      404:
        description: Locale non trouvée
    """
    user_id = get_jwt_identity()
    set_current_user_id(user_id)

    result = _locale_service().reveal_secrets(
        locale_id,
        actor=get_jwt().get('email') or user_id,
        user_agent=request.headers.get('User-Agent'),
        remote_addr=request.headers.get('X-Forwarded-For') or request.remote_addr
    )

    return jsonify(result), 200
