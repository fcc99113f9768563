"""
Models - Import centralisé de tous les modèles SQLAlchemy
"""
from .user import User
from .category import Category
from .locale import Locale

__all__ = [
    'User',
    'Category',
    'Locale'
]
