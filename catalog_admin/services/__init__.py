"""
Services - Logique métier
"""
from .category_service import CategoryService
from .locale_service import LocaleService

__all__ = [
    'CategoryService',
    'LocaleService'
]
