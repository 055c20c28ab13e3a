"""SQLAlchemy ORM models used by the API layer."""

from .user import UserModel
from .template import TemplateModel
from .branding import BrandKitModel
from .background import TemplateBackgroundModel

__all__ = [
    "UserModel",
    "TemplateModel",
    "BrandKitModel",
    "TemplateBackgroundModel",
]
