"""
Read access to a Java code model.

``JavaQueryModel`` turns the triples written by ``ModelBuilderHandler`` back
into entity views. Names may be given in Java dotted form (``p.q.C``) or as
identifier strings.
"""
from typing import Callable, List, Optional, Tuple, Type, TypeVar
import logging

from ..core.entities import (
    JAttribute,
    JClass,
    JConstructor,
    JEnumeration,
    JInterface,
    JLibrary,
    JMember,
    JMethod,
    JPackage,
    JParameter,
    JSignature,
)
from ..core.errors import QueryModelError
from ..core.identifier import DEFAULT_PACKAGE, IdentifierReader
from ..core.symbol_table import identifier_to_name
from ..core.types import JType, Modifier, Visibility, type_from_identifier
from ..core.vocabulary import (
    ASSET,
    ASSET_PREFIX,
    ATTRIBUTE_KEY,
    ATTRIBUTE_TYPE,
    ATTRIBUTE_VALUE,
    CLASS_KEY,
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
    ENUMERATION_KEY,
    EXTENDS_CLASS,
    EXTENDS_INT,
    HAS_MODIFIERS,
    HAS_VISIBILITY,
    IMPLEMENTS_INT,
    INTERFACE_KEY,
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
    METHOD_KEY,
    PARAMETER_INDEX,
    PARAMETER_TYPE,
    QUALIFIER_SEPARATOR,
    RETURN_TYPE,
    SUBCLASSOF,
    THROWS,
    URI_PREFIX_SEPARATOR,
    to_uri,
)

E = TypeVar("E")

TYPE_KINDS = ((CLASS_KEY, JCLASS), (INTERFACE_KEY, JINTERFACE), (ENUMERATION_KEY, JENUMERATION))


def _is_identifier(name: str) -> bool:
    return URI_PREFIX_SEPARATOR in name or QUALIFIER_SEPARATOR in name


def _simple_name(identifier: str) -> str:
    parsed = IdentifierReader.read_identifier(identifier)
    return parsed.tail_fragment.fragment if parsed.fragments else ""


class JavaQueryModel:
    """Queries the packages, types and members stored in a triple store."""

    def __init__(self, store):
        """
        Initialize the query model.

        Args:
            store: Any triple store, validating or not
        """
        self.store = store
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    # Triple helpers

    def _objects(self, subject: str, predicate: str) -> List[str]:
        return [t.object for t in self.store.search_triples(subject, predicate, None)]

    def _subjects(self, predicate: str, obj: str) -> List[str]:
        return [t.subject for t in self.store.search_triples(None, predicate, obj)]

    def _literal(self, subject: str, predicate: str) -> Optional[str]:
        objects = self._objects(subject, predicate)
        return objects[0] if objects else None

    def _has_kind(self, identifier: str, kind: str) -> bool:
        return next(iter(self.store.search_triples(identifier, SUBCLASSOF, kind)), None) is not None

    def _all_of_kind(self, kind: str) -> List[str]:
        return sorted(self._subjects(SUBCLASSOF, kind))

    def _contained(self, container: str, predicate: str, kind: str) -> List[str]:
        return sorted(o for o in self._objects(container, predicate) if self._has_kind(o, kind))

    # Identifier lookups

    @staticmethod
    def _package_identifier(name: str) -> str:
        if _is_identifier(name):
            return IdentifierReader.read_identifier(name).identifier
        return IdentifierReader.read_package(name).identifier

    @staticmethod
    def _type_identifier(name: str, key: str) -> str:
        if _is_identifier(name):
            return IdentifierReader.read_identifier(name).identifier
        return IdentifierReader.read_fully_qualified_type(name, key).identifier

    def _find_type(self, name: str, kinds=TYPE_KINDS) -> Optional[str]:
        """Return the identifier of the type called ``name``, or None."""
        for key, kind in kinds:
            identifier = self._type_identifier(name, key)
            if self._has_kind(identifier, kind):
                return identifier
        if _is_identifier(name):
            return None
        # Nested types carry a type qualifier on their outer segments
        for _, kind in kinds:
            for identifier in self._all_of_kind(kind):
                if identifier_to_name(identifier) == name:
                    return identifier
        return None

    def _require_type(self, name: str, kinds=TYPE_KINDS) -> str:
        identifier = self._find_type(name, kinds)
        if identifier is None:
            raise QueryModelError(f"Type not found: {name}")
        return identifier

    def _container(self, name: str) -> str:
        if not name:
            return DEFAULT_PACKAGE.identifier
        if self.package_exists(name):
            return self._package_identifier(name)
        return self._require_type(name)

    def _member_identifier(self, type_name: str, member_name: str, key: str) -> Optional[str]:
        owner = self._find_type(type_name)
        if owner is None:
            return None
        return IdentifierReader.read_identifier(owner).child(member_name, key).identifier

    def _require(self, identifier: str, kind: str, what: str) -> str:
        if not self._has_kind(identifier, kind):
            raise QueryModelError(f"{what} not found: {identifier}")
        return identifier

    # Entity views

    def _entity_fields(self, identifier: str) -> dict:
        return {
            "id": identifier,
            "name": _simple_name(identifier),
            "qualified_name": identifier_to_name(identifier),
        }

    def _structure_fields(self, identifier: str) -> dict:
        fields = self._entity_fields(identifier)
        fields["visibility"] = self.get_visibility(identifier)
        fields["modifiers"] = self.get_modifiers(identifier)
        return fields

    def _package(self, identifier: str) -> JPackage:
        return JPackage(**self._entity_fields(identifier))

    def _class(self, identifier: str) -> JClass:
        extended = self._objects(identifier, EXTENDS_CLASS)
        return JClass(
            **self._structure_fields(identifier),
            extended_class=extended[0] if extended else None,
            implemented_interfaces=self._objects(identifier, IMPLEMENTS_INT),
        )

    def _interface(self, identifier: str) -> JInterface:
        return JInterface(
            **self._structure_fields(identifier),
            extended_interfaces=self._objects(identifier, EXTENDS_INT),
        )

    def _enumeration(self, identifier: str) -> JEnumeration:
        return JEnumeration(
            **self._structure_fields(identifier),
            elements=self._objects(identifier, CONTAINS_ELEMENT),
            implemented_interfaces=self._objects(identifier, IMPLEMENTS_INT),
        )

    def _attribute(self, identifier: str) -> JAttribute:
        return JAttribute(
            **self._structure_fields(identifier),
            type=self._literal(identifier, ATTRIBUTE_TYPE) or "",
            value=self._literal(identifier, ATTRIBUTE_VALUE),
        )

    def _parameter(self, identifier: str) -> JParameter:
        return JParameter(
            **self._entity_fields(identifier),
            type=self._literal(identifier, PARAMETER_TYPE) or "",
            index=int(self._literal(identifier, PARAMETER_INDEX) or 0),
        )

    def _signature(self, identifier: str) -> JSignature:
        return JSignature(
            **self._entity_fields(identifier),
            parameters=self.get_parameters(identifier),
            return_type=self._literal(identifier, RETURN_TYPE),
            exceptions=self._objects(identifier, THROWS),
        )

    def _member(self, member_class: Type[JMember], identifier: str) -> JMember:
        return member_class(
            **self._structure_fields(identifier),
            signatures=self.get_signatures(identifier),
        )

    def _method(self, identifier: str) -> JMethod:
        return self._member(JMethod, identifier)

    def _constructor(self, identifier: str) -> JConstructor:
        return self._member(JConstructor, identifier)

    @staticmethod
    def _views(identifiers: List[str], view: Callable[[str], E]) -> List[E]:
        return [view(i) for i in identifiers]

    # Existence

    def package_exists(self, name: str) -> bool:
        return self._has_kind(self._package_identifier(name), JPACKAGE)

    def class_exists(self, name: str) -> bool:
        return self._find_type(name, ((CLASS_KEY, JCLASS),)) is not None

    def interface_exists(self, name: str) -> bool:
        return self._find_type(name, ((INTERFACE_KEY, JINTERFACE),)) is not None

    def enumeration_exists(self, name: str) -> bool:
        return self._find_type(name, ((ENUMERATION_KEY, JENUMERATION),)) is not None

    def attribute_exists(self, type_name: str, attribute_name: str) -> bool:
        identifier = self._member_identifier(type_name, attribute_name, ATTRIBUTE_KEY)
        return identifier is not None and self._has_kind(identifier, JATTRIBUTE)

    def method_exists(self, type_name: str, method_name: str) -> bool:
        identifier = self._member_identifier(type_name, method_name, METHOD_KEY)
        return identifier is not None and self._has_kind(identifier, JMETHOD)

    # Listings

    def get_all_packages(self) -> List[JPackage]:
        return self._views(self._all_of_kind(JPACKAGE), self._package)

    def get_all_classes(self) -> List[JClass]:
        return self._views(self._all_of_kind(JCLASS), self._class)

    def get_all_interfaces(self) -> List[JInterface]:
        return self._views(self._all_of_kind(JINTERFACE), self._interface)

    def get_all_enumerations(self) -> List[JEnumeration]:
        return self._views(self._all_of_kind(JENUMERATION), self._enumeration)

    # Single entities

    def get_package(self, name: str) -> JPackage:
        identifier = self._package_identifier(name)
        return self._package(self._require(identifier, JPACKAGE, "Package"))

    def get_class(self, name: str) -> JClass:
        return self._class(self._require_type(name, ((CLASS_KEY, JCLASS),)))

    def get_interface(self, name: str) -> JInterface:
        return self._interface(self._require_type(name, ((INTERFACE_KEY, JINTERFACE),)))

    def get_enumeration(self, name: str) -> JEnumeration:
        return self._enumeration(self._require_type(name, ((ENUMERATION_KEY, JENUMERATION),)))

    def get_attribute(self, type_name: str, attribute_name: str) -> JAttribute:
        identifier = self._member_identifier(type_name, attribute_name, ATTRIBUTE_KEY)
        if identifier is None:
            raise QueryModelError(f"Type not found: {type_name}")
        return self._attribute(self._require(identifier, JATTRIBUTE, "Attribute"))

    def get_method(self, type_name: str, method_name: str) -> JMethod:
        identifier = self._member_identifier(type_name, method_name, METHOD_KEY)
        if identifier is None:
            raise QueryModelError(f"Type not found: {type_name}")
        return self._method(self._require(identifier, JMETHOD, "Method"))

    # Contents

    def get_packages_into(self, package_name: str = "") -> List[JPackage]:
        """
        Return the packages directly contained in a package.

        Args:
            package_name: Dotted package name; ``""`` lists the top level packages

        Returns:
            The contained packages, sorted by identifier
        """
        container = self._container(package_name)
        return self._views(self._contained(container, CONTAINS_PACKAGE, JPACKAGE), self._package)

    def get_classes_into(self, container_name: str = "") -> List[JClass]:
        """Return the classes directly contained in a package or a type."""
        container = self._container(container_name)
        return self._views(self._contained(container, CONTAINS_CLASS, JCLASS), self._class)

    def get_interfaces_into(self, container_name: str = "") -> List[JInterface]:
        container = self._container(container_name)
        return self._views(self._contained(container, CONTAINS_INTERFACE, JINTERFACE), self._interface)

    def get_enumerations_into(self, container_name: str = "") -> List[JEnumeration]:
        container = self._container(container_name)
        return self._views(self._contained(container, CONTAINS_ENUMERATION, JENUMERATION), self._enumeration)

    def get_attributes_into(self, type_name: str) -> List[JAttribute]:
        owner = self._require_type(type_name)
        return self._views(self._contained(owner, CONTAINS_ATTRIBUTE, JATTRIBUTE), self._attribute)

    def get_methods_into(self, type_name: str) -> List[JMethod]:
        owner = self._require_type(type_name)
        return self._views(self._contained(owner, CONTAINS_METHOD, JMETHOD), self._method)

    def get_constructors_into(self, type_name: str) -> List[JConstructor]:
        owner = self._require_type(type_name, ((CLASS_KEY, JCLASS), (ENUMERATION_KEY, JENUMERATION)))
        return self._views(self._contained(owner, CONTAINS_CONSTRUCTOR, JCONSTRUCTOR), self._constructor)

    # Member details

    def get_signatures(self, member: str) -> List[JSignature]:
        """
        Return the signatures of a method or constructor.

        Args:
            member: Identifier of the method or constructor

        Returns:
            One signature per overload, sorted by identifier

        Raises:
            QueryModelError: If ``member`` is neither a method nor a constructor
        """
        if not (self._has_kind(member, JMETHOD) or self._has_kind(member, JCONSTRUCTOR)):
            raise QueryModelError(f"Method or constructor not found: {member}")
        return self._views(self._contained(member, CONTAINS_SIGNATURE, JSIGNATURE), self._signature)

    def get_parameters(self, signature: str) -> List[JParameter]:
        """Return the parameters of a signature, in declaration order."""
        self._require(signature, JSIGNATURE, "Signature")
        parameters = self._views(self._contained(signature, CONTAINS_PARAMETER, JPARAMETER), self._parameter)
        return sorted(parameters, key=lambda p: p.index)

    def get_return_type(self, signature: str) -> Optional[JType]:
        """Return the return type of a signature, None for constructors."""
        self._require(signature, JSIGNATURE, "Signature")
        value = self._literal(signature, RETURN_TYPE)
        return type_from_identifier(value) if value is not None else None

    def get_visibility(self, identifier: str) -> Optional[Visibility]:
        value = self._literal(identifier, HAS_VISIBILITY)
        return Visibility(value) if value is not None else None

    def get_modifiers(self, identifier: str) -> Tuple[Modifier, ...]:
        value = self._literal(identifier, HAS_MODIFIERS)
        return Modifier.from_byte(int(value)) if value else ()

    def get_elements(self, enumeration_name: str) -> List[str]:
        """Return the constants of an enumeration."""
        identifier = self._require_type(enumeration_name, ((ENUMERATION_KEY, JENUMERATION),))
        return self._objects(identifier, CONTAINS_ELEMENT)

    def get_libraries(self) -> List[JLibrary]:
        libraries = []
        prefix = to_uri(ASSET_PREFIX)
        for identifier in sorted(self._objects(ASSET, CONTAINS_LIBRARY)):
            name = identifier[len(prefix):] if identifier.startswith(prefix) else identifier
            libraries.append(JLibrary(
                id=identifier,
                name=name,
                qualified_name=name,
                location=self._literal(identifier, LIBRARY_LOCATION),
                date=self._literal(identifier, LIBRARY_DATETIME),
            ))
        return libraries
