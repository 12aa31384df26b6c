"""Skin package — parsed skins ready for rendering."""

from macroskin.template.core import Skin
from macroskin.template.introspection import SkinIntrospectionMixin

__all__ = [
    "Skin",
    "SkinIntrospectionMixin",
]
