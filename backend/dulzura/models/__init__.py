from .auth import User, RefreshToken, ROLE_ADMIN, ROLE_USER
from .catalog import Category, Product, Photo
from .kitchen import Ingredient, Recipe, RecipeIngredient
from .sales import Sale, SaleLineItem, SALE_COMPLETED, SALE_CANCELLED
from .media import DigitalContent, CONTENT_TYPES

__all__ = [
    'User', 'RefreshToken', 'ROLE_ADMIN', 'ROLE_USER',
    'Category', 'Product', 'Photo',
    'Ingredient', 'Recipe', 'RecipeIngredient',
    'Sale', 'SaleLineItem', 'SALE_COMPLETED', 'SALE_CANCELLED',
    'DigitalContent', 'CONTENT_TYPES',
]
