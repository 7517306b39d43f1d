"""
Ontology definitions and the validating model decorator.
"""
from .ontology import LITERAL, ListBounds, Ontology, Relation, qualifier_prefix
from .java_ontology import java_ontology
from .validating import ValidatingCodeModel

__all__ = [
    "LITERAL",
    "ListBounds",
    "Ontology",
    "Relation",
    "qualifier_prefix",
    "java_ontology",
    "ValidatingCodeModel",
]
