"""
Core module for CodeRDF identifiers, types, entities and errors.

``CodeModel`` lives in ``coderdf.core.code_model`` and is exported by the top
level package, since it depends on the storage and pipeline packages.
"""

from .errors import (
    CodeRDFError,
    EmptyIdentifierError,
    MalformedTripleError,
    OntologyError,
    OntologyDefinitionError,
    OntologyValidationError,
    SchemaViolationError,
    UnbalancedScopeError,
    CodeHandlerError,
    QueryModelError
)
from .identifier import (
    DEFAULT_PACKAGE,
    Identifier,
    IdentifierBuilder,
    IdentifierFragment,
    IdentifierReader
)
from .types import (
    JType,
    PrimitiveType,
    ObjectType,
    InterfaceType,
    ExceptionType,
    ArrayType,
    Modifier,
    Visibility,
    primitive_type,
    type_from_identifier
)
from .symbol_table import SymbolOrigin, SymbolTable
from .entities import (
    JEntity,
    JPackage,
    JClass,
    JInterface,
    JEnumeration,
    JAttribute,
    JParameter,
    JSignature,
    JMethod,
    JConstructor,
    JLibrary
)

__all__ = [
    "CodeRDFError",
    "EmptyIdentifierError",
    "MalformedTripleError",
    "OntologyError",
    "OntologyDefinitionError",
    "OntologyValidationError",
    "SchemaViolationError",
    "UnbalancedScopeError",
    "CodeHandlerError",
    "QueryModelError",
    "DEFAULT_PACKAGE",
    "Identifier",
    "IdentifierBuilder",
    "IdentifierFragment",
    "IdentifierReader",
    "JType",
    "PrimitiveType",
    "ObjectType",
    "InterfaceType",
    "ExceptionType",
    "ArrayType",
    "Modifier",
    "Visibility",
    "primitive_type",
    "type_from_identifier",
    "SymbolOrigin",
    "SymbolTable",
    "JEntity",
    "JPackage",
    "JClass",
    "JInterface",
    "JEnumeration",
    "JAttribute",
    "JParameter",
    "JSignature",
    "JMethod",
    "JConstructor",
    "JLibrary"
]
