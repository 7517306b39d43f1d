"""
Base storage interface for triple stores in CodeRDF.

This module provides the protocol every store (and store decorator) satisfies
and the abstract class the concrete backends extend.
"""
from typing import Any, Dict, Iterator, NamedTuple, Optional, Protocol, Sequence, runtime_checkable
import logging
import abc

from ...core.errors import MalformedTripleError

# Wildcard accepted in any position of search_triples
ALL_MATCH = None


class Triple(NamedTuple):
    """A single statement. ``literal`` tells whether ``object`` is a literal value."""

    subject: str
    predicate: str
    object: str
    literal: bool = False


@runtime_checkable
class TripleStore(Protocol):
    """Protocol defining the interface of a triple store."""

    def add_triple(self, subject: str, predicate: str, obj: str) -> None:
        """
        Add a triple whose object is a resource.

        Args:
            subject: Subject URI
            predicate: Predicate URI
            obj: Object URI
        """
        ...

    def add_triple_literal(self, subject: str, predicate: str, literal: str) -> None:
        """
        Add a triple whose object is a literal value.

        Args:
            subject: Subject URI
            predicate: Predicate URI
            literal: Literal value
        """
        ...

    def add_triple_collection(self, subject: str, predicate: str, values: Sequence[str]) -> None:
        """
        Add a collection of literal values under the same subject and predicate.

        Args:
            subject: Subject URI
            predicate: Predicate URI
            values: Ordered literal values
        """
        ...

    def remove_triple(self, subject: str, predicate: str, obj: str) -> None:
        """Remove a resource triple, doing nothing if it is not present."""
        ...

    def remove_triple_literal(self, subject: str, predicate: str, literal: str) -> None:
        """Remove a literal triple, doing nothing if it is not present."""
        ...

    def search_triples(self, subject: Optional[str] = ALL_MATCH, predicate: Optional[str] = ALL_MATCH,
                       obj: Optional[str] = ALL_MATCH) -> Iterator[Triple]:
        """
        Search the triples matching a pattern.

        Args:
            subject: Subject to match or ALL_MATCH
            predicate: Predicate to match or ALL_MATCH
            obj: Object (resource or literal value) to match or ALL_MATCH

        Returns:
            A finite, single pass iterator over the matching triples
        """
        ...

    def clear_all(self) -> None:
        """Remove every triple."""
        ...

    def count_triples(self) -> int:
        """Count the stored triples."""
        ...


class BaseTripleStore(abc.ABC):
    """Abstract base class for triple store implementations."""

    def __init__(self, **kwargs: Any):
        """
        Initialize the store.

        Args:
            **kwargs: Implementation-specific arguments, ignored here
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.is_connected = False

    @staticmethod
    def check_term(name: str, value: Any) -> None:
        if not isinstance(value, str) or not value:
            raise MalformedTripleError(f"Invalid {name}: {value!r}")

    def check_triple(self, subject: Any, predicate: Any, obj: Any, literal: bool) -> None:
        """Reject triples with a missing subject, predicate or resource object."""
        self.check_term("subject", subject)
        self.check_term("predicate", predicate)
        if literal:
            if not isinstance(obj, str):
                raise MalformedTripleError(f"Invalid literal: {obj!r}")
        else:
            self.check_term("object", obj)

    def connect(self) -> bool:
        """Connect to the backend. Stores without a connection are always connected."""
        self.is_connected = True
        return True

    def close(self) -> None:
        """Release the backend."""
        self.is_connected = False

    def __enter__(self) -> "BaseTripleStore":
        if not self.is_connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def add_triple(self, subject: str, predicate: str, obj: str) -> None:
        self.check_triple(subject, predicate, obj, False)
        self._add(Triple(subject, predicate, obj, False))

    def add_triple_literal(self, subject: str, predicate: str, literal: str) -> None:
        self.check_triple(subject, predicate, literal, True)
        self._add(Triple(subject, predicate, literal, True))

    def add_triple_collection(self, subject: str, predicate: str, values: Sequence[str]) -> None:
        if isinstance(values, str):
            raise MalformedTripleError(f"Invalid collection: {values!r}")
        for value in values:
            self.check_triple(subject, predicate, value, True)
        for value in values:
            self._add(Triple(subject, predicate, value, True))

    def remove_triple(self, subject: str, predicate: str, obj: str) -> None:
        self.check_triple(subject, predicate, obj, False)
        self._remove(Triple(subject, predicate, obj, False))

    def remove_triple_literal(self, subject: str, predicate: str, literal: str) -> None:
        self.check_triple(subject, predicate, literal, True)
        self._remove(Triple(subject, predicate, literal, True))

    @abc.abstractmethod
    def _add(self, triple: Triple) -> None:
        """Store a checked triple, ignoring duplicates."""
        pass

    @abc.abstractmethod
    def _remove(self, triple: Triple) -> None:
        """Remove a checked triple if present."""
        pass

    @abc.abstractmethod
    def search_triples(self, subject: Optional[str] = ALL_MATCH, predicate: Optional[str] = ALL_MATCH,
                       obj: Optional[str] = ALL_MATCH) -> Iterator[Triple]:
        """Search the triples matching a pattern."""
        pass

    @abc.abstractmethod
    def clear_all(self) -> None:
        """Remove every triple."""
        pass

    def count_triples(self) -> int:
        return sum(1 for _ in self.search_triples())

    def get_statistics(self) -> Dict[str, Any]:
        """Count the stored triples, in total and by predicate."""
        predicate_counts: Dict[str, int] = {}
        total = 0
        for triple in self.search_triples():
            total += 1
            predicate_counts[triple.predicate] = predicate_counts.get(triple.predicate, 0) + 1
        return {
            "total_triples": total,
            "predicate_counts": predicate_counts,
        }
