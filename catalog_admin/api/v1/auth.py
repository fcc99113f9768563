"""
API Auth - Authentification JWT
"""
from flask import request, jsonify
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    jwt_required, get_jwt_identity
)
from marshmallow import ValidationError

from . import api_v1
from catalog_admin.extensions import db
from catalog_admin.models.user import User
from catalog_admin.schemas.user import LoginSchema, UserSchema
from catalog_admin.core.audit_mixin import set_current_user_id


def _token_claims(user):
    """Claims ajoutés aux jetons (le rôle conditionne l'accès admin)"""
    return {
        'role': user.role,
        'email': user.email,
        'name': user.name
    }


@api_v1.route('/auth/login', methods=['POST'])
def login():
    """
    Authentification utilisateur
    ---
    tags:
      - Auth
    summary: Connexion utilisateur
    description: |
      Authentifie un utilisateur avec son email et mot de passe.
      Retourne un access_token JWT et un refresh_token.
      L'access_token doit être envoyé dans le header Authorization: Bearer <token>
    security: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email:
              type: string
              example: admin@example.com
            password:
              type: string
    responses:
      200:
        description: Connexion réussie
      401:
        description: Email ou mot de passe incorrect
      403:
        description: Compte désactivé
    """
    schema = LoginSchema()

    try:
        data = schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({'error': 'Invalid body', 'details': err.messages}), 400

    user = User.query.filter_by(email=data['email']).first()

    if not user or not user.check_password(data['password']):
        return jsonify({'error': 'Email ou mot de passe incorrect'}), 401

    if not user.is_active:
        return jsonify({'error': 'Compte désactivé'}), 403

    # Mettre à jour la dernière connexion
    user.update_last_login()
    db.session.commit()

    claims = _token_claims(user)

    return jsonify({
        'access_token': create_access_token(identity=user.id, additional_claims=claims),
        'refresh_token': create_refresh_token(identity=user.id, additional_claims=claims),
        'token_type': 'Bearer',
        'user': UserSchema().dump(user)
    }), 200


@api_v1.route('/auth/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    """
    Rafraîchir le token d'accès
    ---
    tags:
      - Auth
    summary: Renouveler le token d'accès
    description: |
      Génère un nouveau access_token à partir du refresh_token.
      Le rôle est relu en base: une rétrogradation prend effet au rafraîchissement.
    security:
      - Bearer: []
    responses:
      200:
        description: Token rafraîchi
      401:
        description: Utilisateur invalide ou inactif
    """
    user_id = get_jwt_identity()
    user = db.session.get(User, user_id)

    if not user or not user.is_active:
        return jsonify({'error': 'Utilisateur invalide ou inactif'}), 401

    access_token = create_access_token(
        identity=user.id,
        additional_claims=_token_claims(user)
    )

    return jsonify({
        'access_token': access_token,
        'token_type': 'Bearer'
    }), 200


@api_v1.route('/auth/me', methods=['GET'])
@jwt_required()
def me():
    """
    Récupère le profil de l'utilisateur connecté
    ---
    tags:
      - Auth
    summary: Profil utilisateur courant
    security:
      - Bearer: []
    responses:
      200:
        description: Profil utilisateur
      404:
        description: Utilisateur non trouvé
    """
    user_id = get_jwt_identity()
    set_current_user_id(user_id)

    user = db.session.get(User, user_id)

    if not user:
        return jsonify({'error': 'User not found'}), 404

    return jsonify({'user': UserSchema().dump(user)}), 200
