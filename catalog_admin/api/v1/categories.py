"""
API Categories - Arbre de catégories (public et administration)
"""
from flask import request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from . import api_v1
from catalog_admin.extensions import db
from catalog_admin.schemas.category import CategoryCreateSchema, CategoryUpdateSchema
from catalog_admin.services.category_service import CategoryService
from catalog_admin.core.audit_mixin import set_current_user_id
from catalog_admin.core.security import role_required, UserRoles


@api_v1.route('/categories', methods=['GET'])
def get_public_categories():
    """
    Arbre public des catégories.
    ---
    tags:
      - Categories
    summary: Catégories (vue publique)
    description: |
      Retourne les catégories racines avec leurs sous-catégories directes.
      Vue réduite: id, name, label, categoryType, subcategories.
      Aucune authentification requise.
    security: []
    responses:
      200:
        description: Liste des catégories racines
    """
    return jsonify(CategoryService(db.session).list_public_tree()), 200


@api_v1.route('/admin/categories', methods=['GET'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def get_admin_categories():
    """
    Arbre complet des catégories (administration).
    ---
    tags:
      - Categories
    summary: Liste des catégories
    description: |
      Retourne les catégories racines, triées par date de création décroissante,
      chacune avec ses sous-catégories directes.
      Les sous-catégories de second niveau ne sont pas développées.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    responses:
      200:
        description: Arbre des catégories
      403:
        description: Accès refusé (rôle ADMIN requis)
    """
    set_current_user_id(get_jwt_identity())

    return jsonify({'categories': CategoryService(db.session).list_tree()}), 200


@api_v1.route('/admin/categories/<category_id>', methods=['GET'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def get_admin_category(category_id):
    """
    Récupère une catégorie par son ID.
    ---
    tags:
      - Categories
    summary: Détail d'une catégorie
    security:
      - Bearer: []
    parameters:
      - name: category_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Détail de la catégorie
      404:
        description: Catégorie non trouvée
    """
    set_current_user_id(get_jwt_identity())

    return jsonify({'category': CategoryService(db.session).get(category_id)}), 200


@api_v1.route('/admin/categories', methods=['POST'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def create_category():
    """
    Crée une nouvelle catégorie.
    ---
    tags:
      - Categories
    summary: Créer une catégorie
    description: |
      Crée une catégorie racine, ou une sous-catégorie si parentId est fourni.
      name et label sont obligatoires (non vides). Le nom doit être unique.
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
            - name
            - label
          properties:
            name:
              type: string
            label:
              type: string
            categoryId:
              type: string
            categoryType:
              type: string
            description:
              type: string
            aiTrainingData:
              type: string
            parentId:
              type: string
    responses:
      201:
        description: Catégorie créée
      400:
        description: Données invalides ou parent inexistant
      409:
        description: Nom déjà utilisé
    """
    set_current_user_id(get_jwt_identity())
    schema = CategoryCreateSchema()

    try:
        data = schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({'error': 'Invalid body', 'details': err.messages}), 400

    category = CategoryService(db.session).create(data)
    db.session.commit()

    return jsonify({'category': category}), 201


@api_v1.route('/admin/categories/<category_id>', methods=['PUT', 'PATCH'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def update_category(category_id):
    """
    Met à jour partiellement une catégorie.
    ---
    tags:
      - Categories
    summary: Modifier une catégorie
    description: |
      Seuls les champs présents dans le corps sont modifiés.
      parentId vide ou null détache la catégorie (elle devient racine).
      Une catégorie ne peut pas devenir son propre parent ni descendre sous un de ses enfants.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    parameters:
      - in: path
        name: category_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            name:
              type: string
            label:
              type: string
            categoryId:
              type: string
            categoryType:
              type: string
            description:
              type: string
            aiTrainingData:
              type: string
            parentId:
              type: string
    responses:
      200:
        description: Catégorie mise à jour
      400:
        description: Données invalides ou aucun changement
      404:
        description: Catégorie non trouvée
      409:
        description: Nom déjà utilisé
    """
    set_current_user_id(get_jwt_identity())
    schema = CategoryUpdateSchema()

    try:
        data = schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({'error': 'Invalid body', 'details': err.messages}), 400

    category = CategoryService(db.session).update(category_id, data)
    db.session.commit()

    return jsonify({'category': category}), 200


@api_v1.route('/admin/categories/<category_id>', methods=['DELETE'])
@jwt_required()
@role_required(UserRoles.ADMIN)
def delete_category(category_id):
    """
    Supprime une catégorie.
    ---
    tags:
      - Categories
    summary: Supprimer une catégorie
    description: |
      ATTENTION: la suppression est refusée si la catégorie a des sous-catégories.
      Il faut d'abord les supprimer ou les déplacer.
      Requiert le rôle ADMIN.
    security:
      - Bearer: []
    parameters:
      - name: category_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Catégorie supprimée
      400:
        description: Catégorie avec sous-catégories
      404:
        description: Catégorie non trouvée
    """
    set_current_user_id(get_jwt_identity())

    deleted_id = CategoryService(db.session).delete(category_id)
    db.session.commit()

    return jsonify({'id': deleted_id}), 200
