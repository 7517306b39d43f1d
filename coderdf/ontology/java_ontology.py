"""
The Java profile: relations allowed in a Java code model.
"""
from functools import lru_cache

from ..core.vocabulary import (
    ASSET_PREFIX,
    ATTRIBUTE_PREFIX,
    ATTRIBUTE_TYPE,
    ATTRIBUTE_VALUE,
    CLASS_PREFIX,
    CONSTRUCTOR_PREFIX,
    CONTAINS_ATTRIBUTE,
    CONTAINS_CLASS,
    CONTAINS_CONSTRUCTOR,
    CONTAINS_ELEMENT,
    CONTAINS_ENUMERATION,
    CONTAINS_INTERFACE,
    CONTAINS_LIBRARY,
    CONTAINS_METHOD,
    CONTAINS_PACKAGE,
    CONTAINS_PARAMETER,
    CONTAINS_SIGNATURE,
    ENUMERATION_PREFIX,
    EXTENDS_CLASS,
    EXTENDS_INT,
    HAS_MODIFIERS,
    HAS_VISIBILITY,
    IMPLEMENTS_INT,
    INTERFACE_PREFIX,
    JATTRIBUTE,
    JCLASS,
    JCONSTRUCTOR,
    JENUMERATION,
    JINTERFACE,
    JMETHOD,
    JPACKAGE,
    JPARAMETER,
    JSIGNATURE,
    LIBRARY_DATETIME,
    LIBRARY_LOCATION,
    METHOD_PREFIX,
    PACKAGE_PREFIX,
    PARAMETER_INDEX,
    PARAMETER_PREFIX,
    PARAMETER_TYPE,
    RETURN_TYPE,
    SIGNATURE_PREFIX,
    SUBCLASSOF,
    THROWS,
)
from .ontology import ListBounds, Ontology

TYPE_PREFIXES = (CLASS_PREFIX, INTERFACE_PREFIX, ENUMERATION_PREFIX)


def define_base_relations(ontology: Ontology) -> Ontology:
    """Relations describing the libraries a model was built from."""
    ontology.define_relation(ASSET_PREFIX, CONTAINS_LIBRARY, ASSET_PREFIX)
    ontology.define_literal_relation(ASSET_PREFIX, LIBRARY_LOCATION)
    ontology.define_literal_relation(ASSET_PREFIX, LIBRARY_DATETIME)
    return ontology


def define_java_relations(ontology: Ontology) -> Ontology:
    """Relations of the Java structural model."""
    # Kinds
    for prefix, kind in (
        (PACKAGE_PREFIX, JPACKAGE),
        (CLASS_PREFIX, JCLASS),
        (INTERFACE_PREFIX, JINTERFACE),
        (ENUMERATION_PREFIX, JENUMERATION),
        (ATTRIBUTE_PREFIX, JATTRIBUTE),
        (CONSTRUCTOR_PREFIX, JCONSTRUCTOR),
        (METHOD_PREFIX, JMETHOD),
        (SIGNATURE_PREFIX, JSIGNATURE),
        (PARAMETER_PREFIX, JPARAMETER),
    ):
        ontology.define_relation(prefix, SUBCLASSOF, kind)

    # Containment
    ontology.define_relation(PACKAGE_PREFIX, CONTAINS_PACKAGE, PACKAGE_PREFIX)
    for container in (PACKAGE_PREFIX,) + TYPE_PREFIXES:
        ontology.define_relation(container, CONTAINS_CLASS, CLASS_PREFIX)
        ontology.define_relation(container, CONTAINS_INTERFACE, INTERFACE_PREFIX)
        ontology.define_relation(container, CONTAINS_ENUMERATION, ENUMERATION_PREFIX)
    for container in TYPE_PREFIXES:
        ontology.define_relation(container, CONTAINS_ATTRIBUTE, ATTRIBUTE_PREFIX)
        ontology.define_relation(container, CONTAINS_METHOD, METHOD_PREFIX)
    ontology.define_relation(CLASS_PREFIX, CONTAINS_CONSTRUCTOR, CONSTRUCTOR_PREFIX)
    ontology.define_relation(ENUMERATION_PREFIX, CONTAINS_CONSTRUCTOR, CONSTRUCTOR_PREFIX)
    ontology.define_relation(CONSTRUCTOR_PREFIX, CONTAINS_SIGNATURE, SIGNATURE_PREFIX)
    ontology.define_relation(METHOD_PREFIX, CONTAINS_SIGNATURE, SIGNATURE_PREFIX)
    ontology.define_relation(SIGNATURE_PREFIX, CONTAINS_PARAMETER, PARAMETER_PREFIX)
    ontology.define_relation(ENUMERATION_PREFIX, CONTAINS_ELEMENT, ListBounds(min=0))

    # Type hierarchy
    ontology.define_relation(CLASS_PREFIX, EXTENDS_CLASS, CLASS_PREFIX)
    ontology.define_relation(CLASS_PREFIX, IMPLEMENTS_INT, INTERFACE_PREFIX)
    ontology.define_relation(ENUMERATION_PREFIX, IMPLEMENTS_INT, INTERFACE_PREFIX)
    ontology.define_relation(INTERFACE_PREFIX, EXTENDS_INT, INTERFACE_PREFIX)
    ontology.define_relation(SIGNATURE_PREFIX, THROWS, CLASS_PREFIX)

    # Literals
    for subject in TYPE_PREFIXES + (ATTRIBUTE_PREFIX, CONSTRUCTOR_PREFIX, METHOD_PREFIX):
        ontology.define_literal_relation(subject, HAS_VISIBILITY)
        ontology.define_literal_relation(subject, HAS_MODIFIERS)
    ontology.define_literal_relation(ATTRIBUTE_PREFIX, ATTRIBUTE_TYPE)
    ontology.define_literal_relation(ATTRIBUTE_PREFIX, ATTRIBUTE_VALUE)
    ontology.define_literal_relation(PARAMETER_PREFIX, PARAMETER_TYPE)
    ontology.define_literal_relation(PARAMETER_PREFIX, PARAMETER_INDEX)
    ontology.define_literal_relation(SIGNATURE_PREFIX, RETURN_TYPE)
    return ontology


@lru_cache(maxsize=None)
def java_ontology() -> Ontology:
    """
    Return the shared Java ontology.

    The instance is built once and must be treated as read-only.
    """
    ontology = Ontology("java")
    define_base_relations(ontology)
    define_java_relations(ontology)
    ontology.logger.debug(f"Java ontology defined with {ontology.get_relations_count()} relations")
    return ontology
