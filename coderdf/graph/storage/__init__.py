"""
Storage module for triple stores in CodeRDF.
"""
from .base import ALL_MATCH, Triple, TripleStore, BaseTripleStore
from .memory import MemoryTripleStore
from .rdflib_store import RDFLibTripleStore
from .kuzudb import KuzuDBTripleStore
from .factory import get_storage_implementation

__all__ = [
    "ALL_MATCH",
    "Triple",
    "TripleStore",
    "BaseTripleStore",
    "MemoryTripleStore",
    "RDFLibTripleStore",
    "KuzuDBTripleStore",
    "get_storage_implementation",
]
