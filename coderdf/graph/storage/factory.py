"""
Factory module for triple store implementations.
"""
from typing import Any

from .base import BaseTripleStore
from .memory import MemoryTripleStore
from .rdflib_store import RDFLibTripleStore
from .kuzudb import KuzuDBTripleStore


def get_storage_implementation(storage_type: str = "memory", **kwargs: Any) -> BaseTripleStore:
    """
    Factory function to get the appropriate storage implementation.

    Args:
        storage_type: Type of storage ('memory', 'rdflib', 'kuzudb')
        **kwargs: Additional arguments to pass to the storage constructor

    Returns:
        An instance of the appropriate storage implementation
    """
    storage_mapping = {
        "memory": MemoryTripleStore,
        "rdflib": RDFLibTripleStore,
        "kuzudb": KuzuDBTripleStore
    }

    if storage_type not in storage_mapping:
        raise ValueError(f"Unsupported storage type: {storage_type}. Supported types: {list(storage_mapping.keys())}")

    storage_class = storage_mapping[storage_type]
    return storage_class(**kwargs)
