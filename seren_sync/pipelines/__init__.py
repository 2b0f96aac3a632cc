"""Pipeline de enrutado de valores."""

from .router import DropReason, ValueRouter

__all__ = ["DropReason", "ValueRouter"]
