"""
Ontology relations and triple validation.

A relation states that a subject whose qualifier prefix is ``subject_prefix``
may carry ``predicate`` towards either a resource with a given qualifier
prefix, a literal value, or a bounded collection of literal values.
"""
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union
import logging

from pydantic import BaseModel, ConfigDict, model_validator

from ..core.errors import OntologyDefinitionError, OntologyValidationError
from ..core.vocabulary import PACKAGE_SEPARATOR, QUALIFIER_SEPARATOR, URI_PREFIX_SEPARATOR

logger = logging.getLogger(__name__)


class ListBounds(BaseModel):
    """Cardinality bounds of a collection relation; ``max`` None is unbounded."""

    model_config = ConfigDict(frozen=True)

    min: int = 0
    max: Optional[int] = None

    @model_validator(mode="after")
    def _check_range(self) -> "ListBounds":
        if self.min < 0:
            raise ValueError(f"Invalid lower bound {self.min}")
        if self.max is not None and self.max < self.min:
            raise ValueError(f"Invalid bounds [{self.min}, {self.max}]")
        return self

    def contains(self, size: int) -> bool:
        return size >= self.min and (self.max is None or size <= self.max)

    def __str__(self) -> str:
        return f"[{self.min}..{'*' if self.max is None else self.max}]"


# Object constraint of literal relations
LITERAL = None

ObjectConstraint = Union[str, ListBounds, None]


def qualifier_prefix(term: str) -> str:
    """
    Return the qualifier prefix of a term.

    The prefix is computed on the part following the URI ``#`` and is the
    qualifier of its last qualified segment, separator included: both
    ``jclass:`` and ``http://...#jpackage:p.jclass:C`` give ``jclass:``. A
    term without any qualifier is its own prefix.
    """
    index = term.find(URI_PREFIX_SEPARATOR)
    local = term[index + 1:] if index != -1 else term
    for segment in reversed(local.split(PACKAGE_SEPARATOR)):
        if QUALIFIER_SEPARATOR in segment:
            return segment.split(QUALIFIER_SEPARATOR, 1)[0] + QUALIFIER_SEPARATOR
    return local


class Relation(BaseModel):
    """A single ontology rule."""

    model_config = ConfigDict(frozen=True)

    subject_prefix: str
    predicate: str
    object_constraint: ObjectConstraint = LITERAL

    @property
    def is_literal(self) -> bool:
        return self.object_constraint is None

    @property
    def is_collection(self) -> bool:
        return isinstance(self.object_constraint, ListBounds)

    def matches_subject(self, subject: str) -> bool:
        return qualifier_prefix(self.subject_prefix) == qualifier_prefix(subject)

    def matches_object(self, obj: Any) -> bool:
        if isinstance(obj, (list, tuple)):
            return self.is_collection and self.object_constraint.contains(len(obj))
        if self.is_literal or self.is_collection:
            return False
        return qualifier_prefix(self.object_constraint) == qualifier_prefix(obj)

    def describe(self) -> str:
        if self.is_literal:
            target = "'LITERAL'"
        elif self.is_collection:
            target = f"'LITERAL'{self.object_constraint}"
        else:
            target = f"[{self.object_constraint}]"
        return f"[{self.subject_prefix}] --[{self.predicate}]--> {target}"

    def __str__(self) -> str:
        return self.describe()


class Ontology:
    """
    Ordered set of relations.

    Relations are appended during setup and only read afterwards, so a single
    instance can be shared by every model validated against it.
    """

    def __init__(self, name: str = "ontology"):
        self.name = name
        self._relations: List[Relation] = []
        self._by_predicate: Dict[str, List[Relation]] = {}
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def define_relation(self, subject_prefix: str, predicate: str,
                        object_constraint: ObjectConstraint = LITERAL) -> Relation:
        """
        Append a relation to the ontology.

        Args:
            subject_prefix: Qualifier prefix of the subjects, e.g. ``jclass:``
            predicate: Predicate URI
            object_constraint: Object prefix for resource relations, ``ListBounds``
                for collection relations, ``LITERAL`` (None) for literal relations

        Returns:
            The new relation

        Raises:
            OntologyDefinitionError: If the relation is incomplete or already defined
        """
        if not subject_prefix or not predicate:
            raise OntologyDefinitionError(
                f"Invalid relation: subject prefix '{subject_prefix}', predicate '{predicate}'"
            )
        if isinstance(object_constraint, str) and not object_constraint:
            raise OntologyDefinitionError(f"Invalid object prefix for predicate '{predicate}'")
        relation = Relation(subject_prefix=subject_prefix, predicate=predicate,
                            object_constraint=object_constraint)
        if relation in self._by_predicate.get(predicate, ()):
            raise OntologyDefinitionError(f"Relation already defined: {relation.describe()}")
        self._relations.append(relation)
        self._by_predicate.setdefault(predicate, []).append(relation)
        return relation

    def define_literal_relation(self, subject_prefix: str, predicate: str) -> Relation:
        return self.define_relation(subject_prefix, predicate, LITERAL)

    @property
    def relations(self) -> Tuple[Relation, ...]:
        return tuple(self._relations)

    def relations_for(self, predicate: str) -> Tuple[Relation, ...]:
        return tuple(self._by_predicate.get(predicate, ()))

    def get_relations_count(self) -> int:
        return len(self._relations)

    def __len__(self) -> int:
        return len(self._relations)

    def __iter__(self) -> Iterator[Relation]:
        return iter(self._relations)

    def _candidates(self, subject: str, predicate: str) -> List[Relation]:
        relations = self._by_predicate.get(predicate)
        if not relations:
            raise OntologyValidationError(f"Unknown predicate: '{predicate}'")
        candidates = [r for r in relations if r.matches_subject(subject)]
        if not candidates:
            raise OntologyValidationError(
                f"Invalid subject prefix: '{qualifier_prefix(subject)}' for predicate: '{predicate}'"
            )
        return candidates

    def validate_triple(self, subject: str, predicate: str, obj: Union[str, Sequence[str]]) -> Relation:
        """
        Validate a resource or collection triple.

        Args:
            subject: Subject URI
            predicate: Predicate URI
            obj: Object URI, or a list/tuple of literal values for collections

        Returns:
            The matching relation

        Raises:
            OntologyValidationError: If no relation accepts the triple
        """
        for relation in self._candidates(subject, predicate):
            if relation.matches_object(obj):
                return relation
        if isinstance(obj, (list, tuple)):
            raise OntologyValidationError(
                f"Invalid collection of size {len(obj)} for predicate: '{predicate}'"
            )
        raise OntologyValidationError(
            f"Invalid object prefix: '{qualifier_prefix(obj)}' for predicate: '{predicate}'"
        )

    def validate_triple_literal(self, subject: str, predicate: str) -> Relation:
        """
        Validate the placement of a literal triple; the value is never inspected.

        Raises:
            OntologyValidationError: If no literal relation accepts the triple
        """
        for relation in self._candidates(subject, predicate):
            if relation.is_literal:
                return relation
        raise OntologyValidationError(f"Predicate '{predicate}' does not accept literals")

    def describe(self) -> List[str]:
        """Return one printable line per relation, ordered by predicate and subject."""
        ordered = sorted(self._relations, key=lambda r: (r.predicate, r.subject_prefix))
        return [r.describe() for r in ordered]
