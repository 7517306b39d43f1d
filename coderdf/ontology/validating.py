"""
Store decorator enforcing an ontology on every write.
"""
from typing import Any, Iterator, Optional, Sequence
import logging

from ..core.errors import OntologyValidationError, SchemaViolationError
from ..graph.storage.base import ALL_MATCH, Triple, TripleStore
from .ontology import Ontology


class ValidatingCodeModel:
    """
    Triple store that validates additions against an ontology.

    Additions are checked before being delegated, so a rejected triple never
    reaches the wrapped store. Removals, searches and clearing pass through.
    """

    def __init__(self, store: TripleStore, ontology: Ontology):
        """
        Initialize the decorator.

        Args:
            store: The store receiving the validated triples
            ontology: The ontology enforced on additions
        """
        self.store = store
        self.ontology = ontology
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _reject(self, triple, error: OntologyValidationError) -> SchemaViolationError:
        self.logger.debug(f"Rejected triple {triple}: {error}")
        return SchemaViolationError(triple, error)

    def add_triple(self, subject: str, predicate: str, obj: str) -> None:
        try:
            self.ontology.validate_triple(subject, predicate, obj)
        except OntologyValidationError as e:
            raise self._reject((subject, predicate, obj), e) from e
        self.store.add_triple(subject, predicate, obj)

    def add_triple_literal(self, subject: str, predicate: str, literal: str) -> None:
        try:
            self.ontology.validate_triple_literal(subject, predicate)
        except OntologyValidationError as e:
            raise self._reject((subject, predicate, literal), e) from e
        self.store.add_triple_literal(subject, predicate, literal)

    def add_triple_collection(self, subject: str, predicate: str, values: Sequence[str]) -> None:
        try:
            self.ontology.validate_triple(subject, predicate, list(values))
        except OntologyValidationError as e:
            raise self._reject((subject, predicate, list(values)), e) from e
        self.store.add_triple_collection(subject, predicate, values)

    def remove_triple(self, subject: str, predicate: str, obj: str) -> None:
        self.store.remove_triple(subject, predicate, obj)

    def remove_triple_literal(self, subject: str, predicate: str, literal: str) -> None:
        self.store.remove_triple_literal(subject, predicate, literal)

    def search_triples(self, subject: Optional[str] = ALL_MATCH, predicate: Optional[str] = ALL_MATCH,
                       obj: Optional[str] = ALL_MATCH) -> Iterator[Triple]:
        return self.store.search_triples(subject, predicate, obj)

    def clear_all(self) -> None:
        self.store.clear_all()

    def count_triples(self) -> int:
        return self.store.count_triples()

    def __getattr__(self, name: str) -> Any:
        # Backend specific operations (save, load, get_statistics, close)
        if name == "store":
            raise AttributeError(name)
        return getattr(self.store, name)
