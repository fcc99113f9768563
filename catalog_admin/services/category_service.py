"""
Service Category - Gestion de l'arbre de catégories

Invariants maintenus ici:
    - le nom est unique (contrainte en base, pré-contrôle applicatif)
    - une catégorie n'est jamais son propre parent, ni l'ancêtre de son parent
    - une catégorie ayant des sous-catégories ne peut pas être supprimée
"""
from sqlalchemy.orm import selectinload

from catalog_admin.models.category import Category
from catalog_admin.schemas.category import CategorySchema, PublicCategorySchema
from catalog_admin.core.errors import InvalidInput, NotFound, Conflict
from catalog_admin.core.utils import clean_str, flush_or_conflict


NAME_CONFLICT_MESSAGE = 'Category name must be unique'

# Champs texte facultatifs: chaîne nettoyée ou None
OPTIONAL_TEXT_FIELDS = ('category_id', 'category_type', 'description', 'ai_training_data')


class CategoryService:
    """Service pour la gestion des catégories"""

    def __init__(self, session):
        self.session = session

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------

    def list_roots(self):
        """
        Récupère les catégories racines avec leurs enfants directs,
        triées par date de création décroissante.
        """
        return self.session.query(Category).options(
            selectinload(Category.children)
        ).filter(
            Category.parent_id.is_(None)
        ).order_by(Category.created_at.desc()).all()

    def list_tree(self):
        """Arbre complet, vue admin (deux niveaux)"""
        return CategorySchema(many=True).dump(self.list_roots())

    def list_public_tree(self):
        """Arbre complet, vue publique réduite"""
        return PublicCategorySchema(many=True).dump(self.list_roots())

    def get_category(self, category_id):
        """Récupère une catégorie ou lève NotFound"""
        category = self.session.get(Category, category_id) if category_id else None
        if category is None:
            raise NotFound('Category not found')
        return category

    def get(self, category_id):
        return CategorySchema().dump(self.get_category(category_id))

    # ------------------------------------------------------------------
    # Écriture
    # ------------------------------------------------------------------

    def create(self, data):
        """
        Crée une catégorie, éventuellement rattachée à un parent.
        Retourne la catégorie sérialisée (sans enfants).
        """
        name = clean_str(data.get('name'))
        label = clean_str(data.get('label'))
        if not name or not label:
            raise InvalidInput('Invalid body')

        parent = None
        parent_id = clean_str(data.get('parent_id'))
        if parent_id:
            parent = self._get_parent(parent_id)

        self._ensure_unique_name(name)

        category = Category(
            name=name,
            product_ids=[],
            parent=parent,
            **{field: clean_str(data.get(field)) for field in OPTIONAL_TEXT_FIELDS}
        )
        category.set_label(label)

        self.session.add(category)
        flush_or_conflict(self.session, NAME_CONFLICT_MESSAGE)

        return CategorySchema().dump(category)

    def update(self, category_id, data):
        """
        Met à jour partiellement une catégorie.
        Seuls les champs présents dans data sont modifiés.
        parent_id vide ou None détache la catégorie (elle devient racine).
        """
        changes = {}

        if 'name' in data:
            name = clean_str(data['name'])
            if not name:
                raise InvalidInput('Category name cannot be empty')
            changes['name'] = name

        if 'label' in data:
            label = clean_str(data['label'])
            if not label:
                raise InvalidInput('Category label cannot be empty')
            changes['label'] = label

        for field in OPTIONAL_TEXT_FIELDS:
            if field in data:
                changes[field] = clean_str(data[field])

        new_parent_id = None
        if 'parent_id' in data:
            new_parent_id = clean_str(data['parent_id'])
            if new_parent_id and new_parent_id == category_id:
                raise InvalidInput('Category cannot be its own parent')
            changes['parent_id'] = new_parent_id

        if not changes:
            raise InvalidInput('No changes supplied')

        category = self.get_category(category_id)

        # Tous les contrôles avant la première modification
        parent = None
        if new_parent_id:
            parent = self._get_parent(new_parent_id)
            self._ensure_not_descendant(category, parent)

        if 'name' in changes and changes['name'] != category.name:
            self._ensure_unique_name(changes['name'], exclude_id=category.id)

        if 'parent_id' in changes:
            category.parent = parent
            changes.pop('parent_id')

        if 'label' in changes:
            category.set_label(changes.pop('label'))

        for field, value in changes.items():
            setattr(category, field, value)

        flush_or_conflict(self.session, NAME_CONFLICT_MESSAGE)

        return CategorySchema().dump(category)

    def delete(self, category_id):
        """
        Supprime une catégorie sans enfant.
        Ne touche ni au parent ni aux catégories sœurs.
        """
        category = self.get_category(category_id)

        has_children = self.session.query(Category.id).filter(
            Category.parent_id == category.id
        ).first() is not None
        if has_children:
            raise InvalidInput('Remove subcategories first')

        self.session.delete(category)
        self.session.flush()

        return category.id

    # ------------------------------------------------------------------
    # Contrôles
    # ------------------------------------------------------------------

    def _get_parent(self, parent_id):
        parent = self.session.get(Category, parent_id)
        if parent is None:
            raise InvalidInput('Parent category not found')
        return parent

    def _ensure_unique_name(self, name, exclude_id=None):
        query = self.session.query(Category.id).filter(Category.name == name)
        if exclude_id:
            query = query.filter(Category.id != exclude_id)
        if query.first() is not None:
            raise Conflict(NAME_CONFLICT_MESSAGE)

    @staticmethod
    def _ensure_not_descendant(category, parent):
        """Refuse un parent situé sous la catégorie (cycle)"""
        if any(node.id == category.id for node in parent.iter_ancestors()):
            raise InvalidInput('Category cannot be moved under its own subcategory')
