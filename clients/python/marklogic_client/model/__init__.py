"""ORM-style models backed by MarkLogic JSON documents."""

from .attributes import Attribute
from .base import Model

__all__ = ["Attribute", "Model"]
