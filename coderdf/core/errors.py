"""
Exception hierarchy for CodeRDF.
"""
from typing import Any, Optional, Tuple


class CodeRDFError(Exception):
    """Base class for all CodeRDF errors."""
    pass


class EmptyIdentifierError(CodeRDFError):
    """Raised when an operation needs at least one fragment and there is none."""
    pass


class MalformedTripleError(CodeRDFError):
    """Raised when a triple with an empty or missing term reaches a store."""
    pass


class OntologyError(CodeRDFError):
    """Base class for ontology errors."""
    pass


class OntologyDefinitionError(OntologyError):
    """Raised when a relation is defined twice or is incomplete."""
    pass


class OntologyValidationError(OntologyError):
    """Raised when a triple does not match any relation of the ontology."""
    pass


class SchemaViolationError(CodeRDFError):
    """
    Raised by the validating model when a write is rejected.

    The rejected triple is available as ``triple`` and the underlying
    ontology error as ``cause``.
    """

    def __init__(self, triple: Tuple[str, str, Any], cause: Optional[OntologyValidationError] = None):
        subject, predicate, obj = triple
        super().__init__(
            f"An error occurred while validating triple {{ {subject} {predicate} {obj} }}: {cause}"
        )
        self.triple = triple
        self.cause = cause


class UnbalancedScopeError(CodeRDFError):
    """Raised when start/end structural events do not pair up."""
    pass


class CodeHandlerError(CodeRDFError):
    """Raised when a code handler receives an event it cannot accept in its current state."""
    pass


class QueryModelError(CodeRDFError):
    """Raised when a query model lookup addresses a missing entity."""
    pass
