"""
Read-side queries over a code model.
"""
from .query_model import JavaQueryModel

__all__ = ["JavaQueryModel"]
