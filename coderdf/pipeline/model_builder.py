"""
Handler turning structural events into validated triples.
"""
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Callable, Iterator, List, NamedTuple, Optional, Sequence, Set

from ..core.errors import CodeHandlerError, UnbalancedScopeError
from ..core.identifier import DEFAULT_PACKAGE, Identifier, IdentifierBuilder, IdentifierReader
from ..core.symbol_table import SymbolTable
from ..core.types import ArrayType, JType, Modifier, ObjectType, Visibility
from ..core.vocabulary import (
    ASSET,
    ASSET_PREFIX,
    ATTRIBUTE_KEY,
    ATTRIBUTE_TYPE,
    ATTRIBUTE_VALUE,
    CLASS_KEY,
    CONSTRUCTOR_KEY,
    CONTAINMENT_PREDICATES,
    CONTAINS_ELEMENT,
    CONTAINS_LIBRARY,
    CONTAINS_PARAMETER,
    CONTAINS_SIGNATURE,
    ENUMERATION_KEY,
    EXTENDS_CLASS,
    EXTENDS_INT,
    HAS_MODIFIERS,
    HAS_VISIBILITY,
    IMPLEMENTS_INT,
    INTERFACE_KEY,
    JCLASS,
    JENUMERATION,
    JINTERFACE,
    KIND_URIS,
    LIBRARY_DATETIME,
    LIBRARY_DATETIME_FORMAT,
    LIBRARY_LOCATION,
    METHOD_KEY,
    PACKAGE_KEY,
    PACKAGE_SEPARATOR,
    PARAMETER_INDEX,
    PARAMETER_KEY,
    PARAMETER_TYPE,
    RETURN_TYPE,
    SIGNATURE_KEY,
    SUBCLASSOF,
    THROWS,
    URI_PREFIX_SEPARATOR,
    to_uri,
)
from ..graph.storage.base import Triple
from .handler import CodeHandler, JavadocEntry

TYPE_KEYS = (CLASS_KEY, INTERFACE_KEY, ENUMERATION_KEY)
TYPE_KINDS = ((CLASS_KEY, JCLASS), (INTERFACE_KEY, JINTERFACE), (ENUMERATION_KEY, JENUMERATION))


class HandlerState(str, Enum):
    IDLE = "idle"
    PARSING = "parsing"


class Scope(NamedTuple):
    """An open container: its kind, identifier, pushed fragments and Java name."""

    kind: str
    identifier: Identifier
    pushed: int
    name: str


class ModelBuilderHandler(CodeHandler):
    """
    Builds the code model of one library.

    Identifiers are computed with a single ``IdentifierBuilder`` whose fragments
    mirror the stack of open scopes. Every fact goes through ``model``, which is
    normally a ``ValidatingCodeModel`` so that the Java ontology is enforced.
    Type references are resolved against the symbol table and the types already
    present in the model; misses are reported to the error listeners and never
    interrupt the run.
    """

    def __init__(self, model, symbol_table: Optional[SymbolTable] = None):
        """
        Initialize the handler.

        Args:
            model: Triple store receiving the facts
            symbol_table: Known type names; an empty table is used when omitted
        """
        super().__init__()
        self.model = model
        self.symbol_table = symbol_table if symbol_table is not None else SymbolTable()
        self.state = HandlerState.IDLE
        self.library_name: Optional[str] = None
        self.location: Optional[str] = None
        self.compilation_unit: Optional[str] = None
        self.unresolved_types: Set[str] = set()
        self.errors: List[str] = []
        self._builder = IdentifierBuilder()
        self._scopes: List[Scope] = []
        self._unit_depth = 0
        self._journal: Optional[List[Triple]] = None
        self._pending_unresolved: List[str] = []

    # State

    @property
    def depth(self) -> int:
        """Number of open container scopes."""
        return len(self._scopes)

    @property
    def current_scope(self) -> Optional[Scope]:
        return self._scopes[-1] if self._scopes else None

    def _require_parsing(self, event: str) -> None:
        if self.state is not HandlerState.PARSING:
            raise CodeHandlerError(f"Cannot handle {event}: parsing not started")

    def _require_type_scope(self, event: str, kinds=TYPE_KEYS) -> Scope:
        self._require_parsing(event)
        scope = self.current_scope
        if scope is None or scope.kind not in kinds:
            raise CodeHandlerError(f"Cannot handle {event} outside of a {' or '.join(kinds)} scope")
        return scope

    @staticmethod
    def library_identifier(library_name: str) -> str:
        return to_uri(ASSET_PREFIX + library_name)

    def _open_scope(self, kind: str, segments: Sequence[str], name: str,
                    writer: Callable[[Identifier], None]) -> Identifier:
        for segment in segments:
            self._builder.push_fragment(segment, kind)
        try:
            identifier = self._builder.build()
            with self._event_writes():
                writer(identifier)
        except Exception:
            for _ in segments:
                self._builder.pop_fragment()
            raise
        self._scopes.append(Scope(kind, identifier, len(segments), name))
        self.logger.debug(f"Opened {kind} scope {identifier}")
        return identifier

    def _close_scope(self, kind: str) -> None:
        self._require_parsing(f"end of {kind}")
        scope = self.current_scope
        if scope is None:
            raise UnbalancedScopeError(f"Cannot close {kind}: no open scope")
        if scope.kind != kind:
            raise UnbalancedScopeError(f"Cannot close {kind}: the open scope is {scope.kind} {scope.name}")
        if self.compilation_unit is not None and self.depth <= self._unit_depth:
            raise UnbalancedScopeError(f"Cannot close {kind} opened outside of {self.compilation_unit}")
        self._scopes.pop()
        for _ in range(scope.pushed):
            self._builder.pop_fragment()
        self.logger.debug(f"Closed {kind} scope {scope.identifier}")

    def _container_identifier(self) -> Identifier:
        scope = self.current_scope
        return scope.identifier if scope is not None else DEFAULT_PACKAGE

    def _simple_name(self, name: str) -> str:
        """Return the last segment of ``name``, reporting an outer part not matching the open scope."""
        if not name:
            raise CodeHandlerError("Name cannot be empty")
        declared, _, simple_name = name.rpartition(PACKAGE_SEPARATOR)
        scope = self.current_scope
        expected = scope.name if scope is not None else ""
        if declared and declared != expected:
            self.logger.warning(f"Declared name {name} does not match enclosing scope '{expected}'")
            self.notify_package_discrepancy(declared, expected)
        return simple_name

    def _scoped_name(self, simple_name: str) -> str:
        scope = self.current_scope
        return f"{scope.name}{PACKAGE_SEPARATOR}{simple_name}" if scope is not None else simple_name

    # Type resolution

    def _has_kind(self, identifier: Identifier, kind: str) -> bool:
        return next(iter(self.model.search_triples(identifier.identifier, SUBCLASSOF, kind)), None) is not None

    def declared_type(self, name: str) -> Optional[Identifier]:
        """
        Return the identifier of the type known under a dotted name.

        The types already in the model are searched first, then the symbol
        table. When an outer part of ``name`` is itself a known type, ``name``
        is read as a type nested in it.

        Args:
            name: Fully qualified type name

        Returns:
            The type identifier, or None if the type is unknown
        """
        enclosing = self._enclosing_type(name)
        simple_name = name.rpartition(PACKAGE_SEPARATOR)[2]
        for key, kind in TYPE_KINDS:
            if enclosing is not None:
                candidate = enclosing.child(simple_name, key)
            else:
                candidate = IdentifierReader.read_fully_qualified_type(name, key)
            if self._has_kind(candidate, kind):
                return candidate
        if self.symbol_table.exists(name):
            if enclosing is not None:
                return enclosing.child(simple_name, CLASS_KEY)
            return IdentifierReader.read_fully_qualified_type(name, CLASS_KEY)
        return None

    def _enclosing_type(self, name: str) -> Optional[Identifier]:
        outer = name.rpartition(PACKAGE_SEPARATOR)[0]
        return self.declared_type(outer) if outer else None

    def bind(self, jtype: JType) -> JType:
        """Return ``jtype`` with its enclosing type set when it names a nested type."""
        if isinstance(jtype, ArrayType):
            element = self.bind(jtype.element)
            return jtype if element is jtype.element else jtype.model_copy(update={"element": element})
        if isinstance(jtype, ObjectType) and jtype.enclosing is None:
            enclosing = self._enclosing_type(jtype.name)
            if enclosing is not None:
                return jtype.model_copy(update={"enclosing": enclosing.identifier})
        return jtype

    def is_resolved(self, jtype: JType) -> bool:
        name = jtype.referenced_name
        return name is None or self.symbol_table.exists(name) or self.declared_type(name) is not None

    def _resolve(self, jtype: JType) -> str:
        bound = self.bind(jtype)
        if not self.is_resolved(bound):
            name = bound.referenced_name
            self.logger.debug(f"Unresolved type {name}")
            self._pending_unresolved.append(name)
        return bound.identifier

    # Writes

    @contextmanager
    def _event_writes(self) -> Iterator[None]:
        """Apply the writes of one event completely or not at all."""
        self._journal = []
        self._pending_unresolved = []
        try:
            yield
        except Exception:
            journal, self._journal = self._journal, None
            self._pending_unresolved = []
            self._rollback(journal)
            raise
        self._journal = None
        pending, self._pending_unresolved = self._pending_unresolved, []
        for name in pending:
            self.unresolved_types.add(name)
            self.notify_unresolved_type(name)

    def _rollback(self, journal: List[Triple]) -> None:
        for triple in reversed(journal):
            if triple.literal:
                self.model.remove_triple_literal(triple.subject, triple.predicate, triple.object)
            else:
                self.model.remove_triple(triple.subject, triple.predicate, triple.object)
        if journal:
            self.logger.debug(f"Rolled back {len(journal)} triples of a rejected event")

    def _is_new(self, triple: Triple) -> bool:
        matches = self.model.search_triples(triple.subject, triple.predicate, triple.object)
        return triple not in list(matches)

    def _journaled(self, triples: List[Triple], write: Callable[[], None]) -> None:
        if self._journal is None:
            write()
            return
        new = [t for t in triples if self._is_new(t)]
        write()
        self._journal.extend(new)

    def _add_triple(self, subject: str, predicate: str, obj: str) -> None:
        self._journaled([Triple(subject, predicate, obj, False)],
                        lambda: self.model.add_triple(subject, predicate, obj))

    def _add_literal(self, subject: str, predicate: str, literal: str) -> None:
        self._journaled([Triple(subject, predicate, literal, True)],
                        lambda: self.model.add_triple_literal(subject, predicate, literal))

    def _add_collection(self, subject: str, predicate: str, values: Sequence[str]) -> None:
        self._journaled([Triple(subject, predicate, value, True) for value in values],
                        lambda: self.model.add_triple_collection(subject, predicate, values))

    def _add_entity(self, identifier: str, key: str, visibility: Optional[Visibility] = None,
                    modifiers: Optional[Sequence[Modifier]] = None) -> None:
        self._add_triple(identifier, SUBCLASSOF, KIND_URIS[key])
        if modifiers is not None:
            self._add_literal(identifier, HAS_MODIFIERS, str(Modifier.to_byte(modifiers)))
        if visibility is not None:
            self._add_literal(identifier, HAS_VISIBILITY, Visibility(visibility).identifier)

    def _add_containment(self, container: Identifier, key: str, identifier: str) -> None:
        self._add_triple(container.identifier, CONTAINMENT_PREDICATES[key], identifier)

    def _add_signature(self, owner: Identifier, signature: Identifier, parameter_names: Sequence[str],
                       parameter_types: Sequence[JType], return_type: Optional[JType],
                       exceptions: Sequence[JType]) -> None:
        if len(parameter_names) != len(parameter_types):
            raise ValueError(
                f"Parameter names and types differ in length: {len(parameter_names)} != {len(parameter_types)}"
            )
        signature_id = signature.identifier
        self._add_entity(signature_id, SIGNATURE_KEY)
        for index, (name, parameter_type) in enumerate(zip(parameter_names, parameter_types)):
            parameter_id = signature.child(name, PARAMETER_KEY).identifier
            self._add_entity(parameter_id, PARAMETER_KEY)
            self._add_literal(parameter_id, PARAMETER_TYPE, self._resolve(parameter_type))
            self._add_literal(parameter_id, PARAMETER_INDEX, str(index))
            self._add_triple(signature_id, CONTAINS_PARAMETER, parameter_id)
        if return_type is not None:
            self._add_literal(signature_id, RETURN_TYPE, self._resolve(return_type))
        for exception in exceptions:
            self._add_triple(signature_id, THROWS, self._resolve(exception))
        self._add_triple(owner.identifier, CONTAINS_SIGNATURE, signature_id)

    # Events

    def start_parsing(self, library_name: str, location: str) -> None:
        if self.state is HandlerState.PARSING:
            raise CodeHandlerError(f"Parsing already started for library {self.library_name}")
        if not library_name or not library_name.strip():
            raise CodeHandlerError("Library name cannot be empty")
        if URI_PREFIX_SEPARATOR in library_name:
            raise CodeHandlerError(f"Invalid library name '{library_name}'")
        if not location or not location.strip():
            raise CodeHandlerError("Library location cannot be empty")
        library = self.library_identifier(library_name)
        if next(iter(self.model.search_triples(ASSET, CONTAINS_LIBRARY, library)), None) is not None:
            raise CodeHandlerError(f"A library with name '{library_name}' already exists in the model")

        self.state = HandlerState.PARSING
        self.library_name = library_name
        self.location = location
        self.compilation_unit = None
        self.unresolved_types = set()
        self.errors = []
        self._builder.clear()
        self._scopes = []
        self.logger.info(f"Started parsing library {library_name} from {location}")

    def end_parsing(self) -> None:
        self._require_parsing("end of parsing")
        if self.compilation_unit is not None:
            raise UnbalancedScopeError(f"Compilation unit {self.compilation_unit} is still open")
        if self._scopes:
            open_scopes = ", ".join(f"{s.kind} {s.name}" for s in self._scopes)
            raise UnbalancedScopeError(f"Cannot end parsing with open scopes: {open_scopes}")

        library = self.library_identifier(self.library_name)
        with self._event_writes():
            self._add_triple(ASSET, CONTAINS_LIBRARY, library)
            self._add_literal(library, LIBRARY_LOCATION, self.location)
            self._add_literal(library, LIBRARY_DATETIME, datetime.now().strftime(LIBRARY_DATETIME_FORMAT))

        self.state = HandlerState.IDLE
        self.logger.info(
            f"Ended parsing library {self.library_name}: {len(self.unresolved_types)} unresolved types"
        )

    def start_compilation_unit(self, identifier: str) -> None:
        self._require_parsing("compilation unit")
        if self.compilation_unit is not None:
            raise UnbalancedScopeError(
                f"Cannot open {identifier}: compilation unit {self.compilation_unit} is still open"
            )
        self.compilation_unit = identifier
        self._unit_depth = self.depth

    def end_compilation_unit(self) -> None:
        self._require_parsing("end of compilation unit")
        if self.compilation_unit is None:
            raise UnbalancedScopeError("No compilation unit to close")
        if self.depth != self._unit_depth:
            raise UnbalancedScopeError(f"Compilation unit {self.compilation_unit} ends with open scopes")
        self.compilation_unit = None

    def start_package(self, name: str) -> None:
        self._require_parsing("package")
        if not name:
            raise CodeHandlerError("Package name cannot be empty")
        scope = self.current_scope
        if scope is None:
            segments = name.split(PACKAGE_SEPARATOR)
        elif scope.kind != PACKAGE_KEY:
            raise CodeHandlerError(f"Cannot open package {name} inside {scope.kind} {scope.name}")
        elif name.startswith(scope.name + PACKAGE_SEPARATOR):
            segments = name[len(scope.name) + 1:].split(PACKAGE_SEPARATOR)
        else:
            raise CodeHandlerError(f"Package {name} is not nested in package {scope.name}")

        container = self._container_identifier()

        def write(identifier: Identifier) -> None:
            self._add_entity(identifier.identifier, PACKAGE_KEY)
            self._add_containment(container, PACKAGE_KEY, identifier.identifier)

        self._open_scope(PACKAGE_KEY, segments, name, write)

    def end_package(self) -> None:
        self._close_scope(PACKAGE_KEY)

    def start_class(self, visibility: Visibility, name: str, modifiers: Sequence[Modifier] = (),
                    extended_class: Optional[JType] = None,
                    implemented_interfaces: Sequence[JType] = ()) -> None:
        self._require_parsing("class")
        simple_name = self._simple_name(name)
        container = self._container_identifier()

        def write(identifier: Identifier) -> None:
            class_id = identifier.identifier
            self._add_entity(class_id, CLASS_KEY, visibility, modifiers)
            if extended_class is not None:
                self._add_triple(class_id, EXTENDS_CLASS, self._resolve(extended_class))
            for interface in implemented_interfaces:
                self._add_triple(class_id, IMPLEMENTS_INT, self._resolve(interface))
            self._add_containment(container, CLASS_KEY, class_id)

        self._open_scope(CLASS_KEY, [simple_name], self._scoped_name(simple_name), write)

    def end_class(self) -> None:
        self._close_scope(CLASS_KEY)

    def start_interface(self, name: str, extended_interfaces: Sequence[JType] = (),
                        visibility: Visibility = Visibility.PUBLIC,
                        modifiers: Sequence[Modifier] = ()) -> None:
        self._require_parsing("interface")
        simple_name = self._simple_name(name)
        container = self._container_identifier()

        def write(identifier: Identifier) -> None:
            interface_id = identifier.identifier
            self._add_entity(interface_id, INTERFACE_KEY, visibility, modifiers)
            for interface in extended_interfaces:
                self._add_triple(interface_id, EXTENDS_INT, self._resolve(interface))
            self._add_containment(container, INTERFACE_KEY, interface_id)

        self._open_scope(INTERFACE_KEY, [simple_name], self._scoped_name(simple_name), write)

    def end_interface(self) -> None:
        self._close_scope(INTERFACE_KEY)

    def start_enumeration(self, visibility: Visibility, name: str, elements: Sequence[str],
                          modifiers: Sequence[Modifier] = (),
                          implemented_interfaces: Sequence[JType] = ()) -> None:
        self._require_parsing("enumeration")
        simple_name = self._simple_name(name)
        container = self._container_identifier()

        def write(identifier: Identifier) -> None:
            enumeration_id = identifier.identifier
            self._add_entity(enumeration_id, ENUMERATION_KEY, visibility, modifiers)
            for interface in implemented_interfaces:
                self._add_triple(enumeration_id, IMPLEMENTS_INT, self._resolve(interface))
            self._add_collection(enumeration_id, CONTAINS_ELEMENT, list(elements))
            self._add_containment(container, ENUMERATION_KEY, enumeration_id)

        self._open_scope(ENUMERATION_KEY, [simple_name], self._scoped_name(simple_name), write)

    def end_enumeration(self) -> None:
        self._close_scope(ENUMERATION_KEY)

    def attribute(self, visibility: Visibility, name: str, attribute_type: JType,
                  modifiers: Sequence[Modifier] = (), value: Optional[str] = None) -> None:
        scope = self._require_type_scope("attribute")
        attribute_id = scope.identifier.child(self._simple_name(name), ATTRIBUTE_KEY).identifier
        with self._event_writes():
            self._add_entity(attribute_id, ATTRIBUTE_KEY, visibility, modifiers)
            self._add_literal(attribute_id, ATTRIBUTE_TYPE, self._resolve(attribute_type))
            if value is not None:
                self._add_literal(attribute_id, ATTRIBUTE_VALUE, value)
            self._add_containment(scope.identifier, ATTRIBUTE_KEY, attribute_id)

    def constructor(self, visibility: Visibility, overload_index: int, parameter_names: Sequence[str],
                    parameter_types: Sequence[JType], modifiers: Sequence[Modifier] = (),
                    exceptions: Sequence[JType] = ()) -> None:
        scope = self._require_type_scope("constructor", (CLASS_KEY, ENUMERATION_KEY))
        fragment = f"_{overload_index}"
        constructor = scope.identifier.child(fragment, CONSTRUCTOR_KEY)
        with self._event_writes():
            self._add_entity(constructor.identifier, CONSTRUCTOR_KEY, visibility, modifiers)
            self._add_signature(constructor, constructor.child(fragment, SIGNATURE_KEY),
                                parameter_names, parameter_types, None, exceptions)
            self._add_containment(scope.identifier, CONSTRUCTOR_KEY, constructor.identifier)

    def method(self, visibility: Visibility, name: str, parameter_names: Sequence[str],
               parameter_types: Sequence[JType], return_type: JType, modifiers: Sequence[Modifier] = (),
               exceptions: Sequence[JType] = (), overload_index: int = 0) -> None:
        scope = self._require_type_scope("method")
        method = scope.identifier.child(self._simple_name(name), METHOD_KEY)
        with self._event_writes():
            self._add_entity(method.identifier, METHOD_KEY, visibility, modifiers)
            self._add_signature(method, method.child(f"_{overload_index}", SIGNATURE_KEY),
                                parameter_names, parameter_types, return_type, exceptions)
            self._add_containment(scope.identifier, METHOD_KEY, method.identifier)

    def parse_error(self, location: str, description: str) -> None:
        message = f"{location}: {description}"
        self.errors.append(message)
        self.logger.warning(f"Parse error at {message}")
        self.notify_parse_error(location, description)

    # Documentation comments are logged only

    def parsed_entry(self, entry: JavadocEntry) -> None:
        self.logger.debug(f"Parsed documentation entry {entry}")

    def class_javadoc(self, entry: JavadocEntry, path_to_class: str) -> None:
        self.logger.debug(f"Documentation of class {path_to_class}: {entry}")

    def method_javadoc(self, entry: JavadocEntry, path_to_method: str, signature: Sequence[str]) -> None:
        self.logger.debug(f"Documentation of method {path_to_method}({', '.join(signature)}): {entry}")
