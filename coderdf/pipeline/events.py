"""
Recordable structural events.

Each handler call has a tagged event model, so a run can be captured by a
``RecordingHandler``, stored as JSON and replayed against any handler.
Type references are stored as their identifier strings.
"""
from typing import Annotated, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field

from ..core.types import JType, Modifier, Visibility, type_from_identifier
from .handler import CodeHandler, ErrorListener, JavadocEntry


def _ids(types: Sequence[JType]) -> List[str]:
    return [t.identifier for t in types]


def _types(identifiers: Sequence[str]) -> List[JType]:
    return [type_from_identifier(i) for i in identifiers]


class Event(BaseModel):
    """Base of all events."""

    kind: str

    def apply(self, handler: CodeHandler) -> None:
        raise NotImplementedError


class StartParsing(Event):
    kind: Literal["start_parsing"] = "start_parsing"
    library_name: str
    location: str

    def apply(self, handler: CodeHandler) -> None:
        handler.start_parsing(self.library_name, self.location)


class EndParsing(Event):
    kind: Literal["end_parsing"] = "end_parsing"

    def apply(self, handler: CodeHandler) -> None:
        handler.end_parsing()


class StartCompilationUnit(Event):
    kind: Literal["start_compilation_unit"] = "start_compilation_unit"
    identifier: str

    def apply(self, handler: CodeHandler) -> None:
        handler.start_compilation_unit(self.identifier)


class EndCompilationUnit(Event):
    kind: Literal["end_compilation_unit"] = "end_compilation_unit"

    def apply(self, handler: CodeHandler) -> None:
        handler.end_compilation_unit()


class StartPackage(Event):
    kind: Literal["start_package"] = "start_package"
    name: str

    def apply(self, handler: CodeHandler) -> None:
        handler.start_package(self.name)


class EndPackage(Event):
    kind: Literal["end_package"] = "end_package"

    def apply(self, handler: CodeHandler) -> None:
        handler.end_package()


class StartClass(Event):
    kind: Literal["start_class"] = "start_class"
    visibility: Visibility
    name: str
    modifiers: int = 0
    extended_class: Optional[str] = None
    implemented_interfaces: List[str] = Field(default_factory=list)

    def apply(self, handler: CodeHandler) -> None:
        handler.start_class(
            self.visibility, self.name, Modifier.from_byte(self.modifiers),
            type_from_identifier(self.extended_class) if self.extended_class else None,
            _types(self.implemented_interfaces),
        )


class EndClass(Event):
    kind: Literal["end_class"] = "end_class"

    def apply(self, handler: CodeHandler) -> None:
        handler.end_class()


class StartInterface(Event):
    kind: Literal["start_interface"] = "start_interface"
    name: str
    extended_interfaces: List[str] = Field(default_factory=list)
    visibility: Visibility = Visibility.PUBLIC
    modifiers: int = 0

    def apply(self, handler: CodeHandler) -> None:
        handler.start_interface(self.name, _types(self.extended_interfaces), self.visibility,
                                Modifier.from_byte(self.modifiers))


class EndInterface(Event):
    kind: Literal["end_interface"] = "end_interface"

    def apply(self, handler: CodeHandler) -> None:
        handler.end_interface()


class StartEnumeration(Event):
    kind: Literal["start_enumeration"] = "start_enumeration"
    visibility: Visibility
    name: str
    elements: List[str] = Field(default_factory=list)
    modifiers: int = 0
    implemented_interfaces: List[str] = Field(default_factory=list)

    def apply(self, handler: CodeHandler) -> None:
        handler.start_enumeration(self.visibility, self.name, list(self.elements),
                                  Modifier.from_byte(self.modifiers), _types(self.implemented_interfaces))


class EndEnumeration(Event):
    kind: Literal["end_enumeration"] = "end_enumeration"

    def apply(self, handler: CodeHandler) -> None:
        handler.end_enumeration()


class AttributeEvent(Event):
    kind: Literal["attribute"] = "attribute"
    visibility: Visibility
    name: str
    attribute_type: str
    modifiers: int = 0
    value: Optional[str] = None

    def apply(self, handler: CodeHandler) -> None:
        handler.attribute(self.visibility, self.name, type_from_identifier(self.attribute_type),
                          Modifier.from_byte(self.modifiers), self.value)


class ConstructorEvent(Event):
    kind: Literal["constructor"] = "constructor"
    visibility: Visibility
    overload_index: int
    parameter_names: List[str] = Field(default_factory=list)
    parameter_types: List[str] = Field(default_factory=list)
    modifiers: int = 0
    exceptions: List[str] = Field(default_factory=list)

    def apply(self, handler: CodeHandler) -> None:
        handler.constructor(self.visibility, self.overload_index, list(self.parameter_names),
                            _types(self.parameter_types), Modifier.from_byte(self.modifiers),
                            _types(self.exceptions))


class MethodEvent(Event):
    kind: Literal["method"] = "method"
    visibility: Visibility
    name: str
    parameter_names: List[str] = Field(default_factory=list)
    parameter_types: List[str] = Field(default_factory=list)
    return_type: str
    modifiers: int = 0
    exceptions: List[str] = Field(default_factory=list)
    overload_index: int = 0

    def apply(self, handler: CodeHandler) -> None:
        handler.method(self.visibility, self.name, list(self.parameter_names), _types(self.parameter_types),
                       type_from_identifier(self.return_type), Modifier.from_byte(self.modifiers),
                       _types(self.exceptions), self.overload_index)


class ParseErrorEvent(Event):
    kind: Literal["parse_error"] = "parse_error"
    location: str
    description: str

    def apply(self, handler: CodeHandler) -> None:
        handler.parse_error(self.location, self.description)


class ParsedEntryEvent(Event):
    kind: Literal["parsed_entry"] = "parsed_entry"
    entry: JavadocEntry

    def apply(self, handler: CodeHandler) -> None:
        handler.parsed_entry(self.entry)


class ClassJavadocEvent(Event):
    kind: Literal["class_javadoc"] = "class_javadoc"
    entry: JavadocEntry
    path_to_class: str

    def apply(self, handler: CodeHandler) -> None:
        handler.class_javadoc(self.entry, self.path_to_class)


class MethodJavadocEvent(Event):
    kind: Literal["method_javadoc"] = "method_javadoc"
    entry: JavadocEntry
    path_to_method: str
    signature: List[str] = Field(default_factory=list)

    def apply(self, handler: CodeHandler) -> None:
        handler.method_javadoc(self.entry, self.path_to_method, list(self.signature))


AnyEvent = Annotated[
    Union[
        StartParsing, EndParsing, StartCompilationUnit, EndCompilationUnit,
        StartPackage, EndPackage, StartClass, EndClass, StartInterface, EndInterface,
        StartEnumeration, EndEnumeration, AttributeEvent, ConstructorEvent, MethodEvent,
        ParseErrorEvent, ParsedEntryEvent, ClassJavadocEvent, MethodJavadocEvent,
    ],
    Field(discriminator="kind"),
]


class EventLog(BaseModel):
    """Ordered list of recorded events."""

    events: List[AnyEvent] = Field(default_factory=list)

    def append(self, event: Event) -> None:
        self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)

    def replay(self, handler: CodeHandler) -> None:
        replay(self.events, handler)

    def save(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load(cls, path: str) -> "EventLog":
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())


def replay(events: Sequence[Event], handler: CodeHandler) -> None:
    """Issue recorded events against a handler, in order."""
    for event in events:
        event.apply(handler)


class RecordingHandler(CodeHandler):
    """
    Handler recording every event it receives.

    When a wrapped handler is given, each call is forwarded first and recorded
    only once the wrapped handler accepted it.
    """

    def __init__(self, wrapped: Optional[CodeHandler] = None):
        super().__init__()
        self.wrapped = wrapped
        self.log = EventLog()

    @property
    def events(self) -> List[Event]:
        return list(self.log.events)

    def add_error_listener(self, listener: ErrorListener) -> None:
        if self.wrapped is not None:
            self.wrapped.add_error_listener(listener)
        else:
            super().add_error_listener(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        if self.wrapped is not None:
            self.wrapped.remove_error_listener(listener)
        else:
            super().remove_error_listener(listener)

    def _handle(self, event: Event) -> None:
        if self.wrapped is not None:
            event.apply(self.wrapped)
        self.log.append(event)

    def start_parsing(self, library_name: str, location: str) -> None:
        self._handle(StartParsing(library_name=library_name, location=location))

    def end_parsing(self) -> None:
        self._handle(EndParsing())

    def start_compilation_unit(self, identifier: str) -> None:
        self._handle(StartCompilationUnit(identifier=identifier))

    def end_compilation_unit(self) -> None:
        self._handle(EndCompilationUnit())

    def start_package(self, name: str) -> None:
        self._handle(StartPackage(name=name))

    def end_package(self) -> None:
        self._handle(EndPackage())

    def start_class(self, visibility: Visibility, name: str, modifiers: Sequence[Modifier] = (),
                    extended_class: Optional[JType] = None,
                    implemented_interfaces: Sequence[JType] = ()) -> None:
        self._handle(StartClass(
            visibility=visibility, name=name, modifiers=Modifier.to_byte(modifiers),
            extended_class=extended_class.identifier if extended_class is not None else None,
            implemented_interfaces=_ids(implemented_interfaces),
        ))

    def end_class(self) -> None:
        self._handle(EndClass())

    def start_interface(self, name: str, extended_interfaces: Sequence[JType] = (),
                        visibility: Visibility = Visibility.PUBLIC,
                        modifiers: Sequence[Modifier] = ()) -> None:
        self._handle(StartInterface(
            name=name, extended_interfaces=_ids(extended_interfaces),
            visibility=visibility, modifiers=Modifier.to_byte(modifiers),
        ))

    def end_interface(self) -> None:
        self._handle(EndInterface())

    def start_enumeration(self, visibility: Visibility, name: str, elements: Sequence[str],
                          modifiers: Sequence[Modifier] = (),
                          implemented_interfaces: Sequence[JType] = ()) -> None:
        self._handle(StartEnumeration(
            visibility=visibility, name=name, elements=list(elements),
            modifiers=Modifier.to_byte(modifiers), implemented_interfaces=_ids(implemented_interfaces),
        ))

    def end_enumeration(self) -> None:
        self._handle(EndEnumeration())

    def attribute(self, visibility: Visibility, name: str, attribute_type: JType,
                  modifiers: Sequence[Modifier] = (), value: Optional[str] = None) -> None:
        self._handle(AttributeEvent(
            visibility=visibility, name=name, attribute_type=attribute_type.identifier,
            modifiers=Modifier.to_byte(modifiers), value=value,
        ))

    def constructor(self, visibility: Visibility, overload_index: int, parameter_names: Sequence[str],
                    parameter_types: Sequence[JType], modifiers: Sequence[Modifier] = (),
                    exceptions: Sequence[JType] = ()) -> None:
        self._handle(ConstructorEvent(
            visibility=visibility, overload_index=overload_index, parameter_names=list(parameter_names),
            parameter_types=_ids(parameter_types), modifiers=Modifier.to_byte(modifiers),
            exceptions=_ids(exceptions),
        ))

    def method(self, visibility: Visibility, name: str, parameter_names: Sequence[str],
               parameter_types: Sequence[JType], return_type: JType, modifiers: Sequence[Modifier] = (),
               exceptions: Sequence[JType] = (), overload_index: int = 0) -> None:
        self._handle(MethodEvent(
            visibility=visibility, name=name, parameter_names=list(parameter_names),
            parameter_types=_ids(parameter_types), return_type=return_type.identifier,
            modifiers=Modifier.to_byte(modifiers), exceptions=_ids(exceptions),
            overload_index=overload_index,
        ))

    def parse_error(self, location: str, description: str) -> None:
        self._handle(ParseErrorEvent(location=location, description=description))

    def parsed_entry(self, entry: JavadocEntry) -> None:
        self._handle(ParsedEntryEvent(entry=entry))

    def class_javadoc(self, entry: JavadocEntry, path_to_class: str) -> None:
        self._handle(ClassJavadocEvent(entry=entry, path_to_class=path_to_class))

    def method_javadoc(self, entry: JavadocEntry, path_to_method: str, signature: Sequence[str]) -> None:
        self._handle(MethodJavadocEvent(entry=entry, path_to_method=path_to_method, signature=list(signature)))
