"""
Modèle Category - Arbre de catégories (parent -> enfants)
"""
from catalog_admin.extensions import db
from catalog_admin.core.audit_mixin import TimestampMixin, register_audit_listeners
from catalog_admin.core.utils import generate_id


# Ordre de résolution du libellé affiché.
# Shim de compatibilité (déprécié): les anciennes lignes ne portent parfois
# que les libellés localisés. Ne pas étendre cette liste.
LABEL_FALLBACK_FIELDS = ('label', 'label_nl_be', 'label_fr_be', 'label_nl_nl')


class Category(db.Model, TimestampMixin):
    """
    Modèle Catégorie.
    parent_id NULL => catégorie racine.
    """
    __tablename__ = 'categories'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    name = db.Column(db.String(200), nullable=False, unique=True)
    category_id = db.Column(db.String(100), nullable=True)
    category_type = db.Column(db.String(100), nullable=True)
    label = db.Column(db.String(200), nullable=True)
    # Libellés localisés historiques
    label_nl_be = db.Column(db.String(200), nullable=True)
    label_fr_be = db.Column(db.String(200), nullable=True)
    label_nl_nl = db.Column(db.String(200), nullable=True)
    description = db.Column(db.Text, nullable=True)
    ai_training_data = db.Column(db.Text, nullable=True)
    product_ids = db.Column(db.JSON, nullable=False, default=list)

    # Foreign Keys
    parent_id = db.Column(db.String(36), db.ForeignKey('categories.id'), nullable=True, index=True)

    # Relations
    parent = db.relationship('Category', remote_side=[id], back_populates='children')
    children = db.relationship(
        'Category',
        back_populates='parent',
        order_by='Category.created_at.desc()',
        passive_deletes='all'
    )

    def __repr__(self):
        return f'<Category {self.name}>'

    @property
    def display_label(self):
        """Premier libellé non vide selon LABEL_FALLBACK_FIELDS, sinon ''"""
        for field in LABEL_FALLBACK_FIELDS:
            value = getattr(self, field, None)
            if value:
                return str(value)
        return ''

    def set_label(self, label):
        """
        Écrit le libellé, recopié dans les champs localisés
        pour rester lisible par les anciens consommateurs.
        """
        self.label = label
        self.label_nl_be = label
        self.label_fr_be = label
        self.label_nl_nl = label

    def iter_ancestors(self):
        """Parcourt les ancêtres, du parent direct vers la racine"""
        seen = set()
        node = self.parent
        while node is not None and node.id not in seen:
            seen.add(node.id)
            yield node
            node = node.parent


# Enregistrer les listeners d'audit
register_audit_listeners(Category)
