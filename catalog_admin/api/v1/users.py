"""
API Users - CRUD Utilisateurs (administration)
"""
from flask import request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from . import api_v1
from catalog_admin.extensions import db
from catalog_admin.models.user import User
from catalog_admin.schemas.user import UserSchema, UserCreateSchema, UserUpdateSchema
from catalog_admin.core.audit_mixin import set_current_user_id
from catalog_admin.core.errors import InvalidInput, NotFound, Conflict
from catalog_admin.core.security import role_required, UserRoles
from catalog_admin.core.utils import get_cursor_params, paginate_by_cursor


# Schemas instances
user_schema = UserSchema()
users_schema = UserSchema(many=True)


def _get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound('User not found')
    return user


def _is_last_admin(user):
    """Vrai si l'utilisateur est le dernier administrateur"""
    if user.role != UserRoles.ADMIN:
        return False
    return User.query.filter_by(role=UserRoles.ADMIN).count() <= 1


@api_v1.route('/admin/users', methods=['GET'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def get_users():
    """
    Liste les utilisateurs (pagination par curseur).
    ---
    tags:
      - Users
    summary: Liste des utilisateurs
    description: |
      Retourne les utilisateurs triés par ID.
      Recherche insensible à la casse sur le nom et l'email.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    parameters:
      - name: q
        in: query
        type: string
      - name: cursor
        in: query
        type: string
      - name: limit
        in: query
        type: integer
        default: 20
    responses:
      200:
        description: Page d'utilisateurs et curseur suivant
      403:
        description: Accès refusé (rôle ADMIN requis)
    """
    set_current_user_id(get_jwt_identity())

    query = User.query

    search = request.args.get('q')
    if search:
        search_filter = f'%{search}%'
        query = query.filter(
            db.or_(
                User.name.ilike(search_filter),
                User.email.ilike(search_filter)
            )
        )

    cursor, limit = get_cursor_params()
    users, next_cursor = paginate_by_cursor(query, User.id, cursor, limit)

    return jsonify({'users': users_schema.dump(users), 'nextCursor': next_cursor}), 200


@api_v1.route('/admin/users/<user_id>', methods=['GET'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def get_user(user_id):
    """
    Récupère un utilisateur par son ID.
    ---
    tags:
      - Users
    summary: Détail d'un utilisateur
    description: |
      Le mot de passe n'est jamais retourné.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    parameters:
      - name: user_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Détail de l'utilisateur
      404:
        description: Utilisateur non trouvé
    """
    set_current_user_id(get_jwt_identity())

    return jsonify({'user': user_schema.dump(_get_user_or_404(user_id))}), 200


@api_v1.route('/admin/users', methods=['POST'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def create_user():
    """
    Crée un nouvel utilisateur.
    ---
    tags:
      - Users
    summary: Créer un utilisateur
    description: |
      L'email doit être unique. Rôles disponibles: admin, user.
      Le mot de passe est hashé avant stockage.
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
            - email
            - password
          properties:
            email:
              type: string
            password:
              type: string
            name:
              type: string
            image:
              type: string
            role:
              type: string
              enum: [admin, user]
    responses:
      201:
        description: Utilisateur créé
      400:
        description: Données invalides
      409:
        description: Email déjà utilisé
    """
    set_current_user_id(get_jwt_identity())
    schema = UserCreateSchema()

    try:
        data = schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({'error': 'Invalid body', 'details': err.messages}), 400

    if User.query.filter_by(email=data['email']).first():
        raise Conflict('Email already exists')

    user = User(
        email=data['email'],
        name=data.get('name'),
        image=data.get('image'),
        role=data.get('role', UserRoles.USER),
        is_active=data.get('is_active', True)
    )
    user.set_password(data['password'])

    db.session.add(user)
    db.session.commit()

    return jsonify({'user': user_schema.dump(user)}), 201


@api_v1.route('/admin/users/<user_id>', methods=['PUT', 'PATCH'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def update_user(user_id):
    """
    Met à jour un utilisateur.
    ---
    tags:
      - Users
    summary: Modifier un utilisateur
    description: |
      L'email doit rester unique s'il est modifié.
      Le mot de passe n'est mis à jour que s'il est fourni.
      ATTENTION: le dernier administrateur ne peut pas être rétrogradé.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            email:
              type: string
            password:
              type: string
            name:
              type: string
            image:
              type: string
            role:
              type: string
            isActive:
              type: boolean
    responses:
      200:
        description: Utilisateur mis à jour
      400:
        description: Données invalides ou dernier administrateur
      404:
        description: Utilisateur non trouvé
      409:
        description: Email déjà utilisé
    """
    set_current_user_id(get_jwt_identity())

    user = _get_user_or_404(user_id)
    schema = UserUpdateSchema()

    try:
        data = schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({'error': 'Invalid body', 'details': err.messages}), 400

    # Vérifier l'email s'il est modifié
    if 'email' in data and data['email'] != user.email:
        if User.query.filter_by(email=data['email']).first():
            raise Conflict('Email already exists')

    if data.get('role') and data['role'] != UserRoles.ADMIN and _is_last_admin(user):
        raise InvalidInput('Cannot demote the last admin')

    # Mettre à jour les champs
    for field in ['email', 'name', 'image', 'role', 'is_active']:
        if field in data:
            setattr(user, field, data[field])

    # Mettre à jour le mot de passe si fourni
    if data.get('password'):
        user.set_password(data['password'])

    db.session.commit()

    return jsonify({'user': user_schema.dump(user)}), 200


@api_v1.route('/admin/users/<user_id>', methods=['DELETE'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def delete_user(user_id):
    """
    Supprime un utilisateur.
    ---
    tags:
      - Users
    summary: Supprimer un utilisateur
    description: |
      ATTENTION: le dernier administrateur ne peut pas être supprimé.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    parameters:
      - name: user_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Utilisateur supprimé
      400:
        description: Dernier administrateur
      404:
        description: Utilisateur non trouvé
    """
    set_current_user_id(get_jwt_identity())

    user = _get_user_or_404(user_id)

    if _is_last_admin(user):
        raise InvalidInput('Cannot delete the last admin')

    db.session.delete(user)
    db.session.commit()

    return jsonify({'ok': True}), 200


@api_v1.route('/admin/users/roles', methods=['GET'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def get_roles():
    """
    Liste les rôles disponibles.
    ---
    tags:
      - Users
    summary: Liste des rôles
    security:
      - Bearer: []
    responses:
      200:
        description: Liste des rôles disponibles
    """
    return jsonify({'roles': UserRoles.ALL_ROLES}), 200
