"""
Source parsers emitting structural events.
"""

from .base_parser import BaseParser
from .imports import TypeResolver
from .java_parser import JavaParser
from .javadoc import read_javadoc

__all__ = [
    "BaseParser",
    "TypeResolver",
    "JavaParser",
    "read_javadoc",
]
