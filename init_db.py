"""
Script d'initialisation de la base de données.
Crée les tables, l'administrateur par défaut et un petit arbre de catégories.
"""
import os
import sys

# Ajouter le répertoire parent au path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from catalog_admin.app import create_app
from catalog_admin.extensions import db
from catalog_admin.models import User, Category
from catalog_admin.services.category_service import CategoryService


DEMO_CATEGORIES = [
    {
        'name': 'Televisions',
        'label': 'Televisions',
        'category_type': 'tv',
        'children': [
            {'name': 'QLED TVs', 'label': 'QLED TVs', 'category_type': 'tv'},
            {'name': 'OLED TVs', 'label': 'OLED TVs', 'category_type': 'tv'}
        ]
    },
    {
        'name': 'Audio',
        'label': 'Audio',
        'category_type': 'audio',
        'children': [
            {'name': 'Soundbars', 'label': 'Soundbars', 'category_type': 'audio'}
        ]
    }
]


def init_database(admin_email, admin_password):
    """Initialise la base de données avec les tables et les données de démonstration."""
    app = create_app()

    with app.app_context():
        print("Création des tables...")
        db.create_all()
        print("Tables créées avec succès!")

        if User.query.count() == 0:
            print("Création de l'administrateur...")
            create_admin_user(admin_email, admin_password)
            print("Administrateur créé!")

        if Category.query.count() == 0:
            print("Création des catégories de démonstration...")
            create_demo_categories()
            print("Catégories créées!")

        db.session.commit()
        print("\nBase de données initialisée avec succès!")
        print(f"\nAdministrateur: {admin_email}")


def create_admin_user(email, password):
    """Crée l'administrateur par défaut."""
    user = User(
        email=email,
        name='Admin',
        role='admin',
        is_active=True
    )
    user.set_password(password)
    db.session.add(user)
    db.session.flush()


def create_demo_categories():
    """Crée les catégories racines et leurs sous-catégories."""
    service = CategoryService(db.session)

    for root_data in DEMO_CATEGORIES:
        root_data = dict(root_data)
        children = root_data.pop('children', [])
        root = service.create(root_data)
        for child_data in children:
            service.create(dict(child_data, parent_id=root['id']))


def reset_database(admin_email, admin_password):
    """Supprime et recrée toutes les tables."""
    app = create_app()

    with app.app_context():
        print("Suppression des tables...")
        db.drop_all()
        print("Tables supprimées!")

    init_database(admin_email, admin_password)


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Initialisation de la base de données')
    parser.add_argument('--reset', action='store_true', help='Supprime et recrée toutes les tables')
    parser.add_argument('--admin-email', default=os.getenv('ADMIN_EMAIL', 'admin@example.com'))
    parser.add_argument('--admin-password', default=os.getenv('ADMIN_PASSWORD', 'admin123'))

    args = parser.parse_args()

    if args.reset:
        reset_database(args.admin_email, args.admin_password)
    else:
        init_database(args.admin_email, args.admin_password)
