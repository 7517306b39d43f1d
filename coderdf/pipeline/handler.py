"""
The structural event contract shared by extractors and model builders.

Extractors walk their input (source text, class files, documentation) and
emit events in document order; handlers consume them. Every ``start_*`` event
opening a container must be paired with the matching ``end_*`` event.
"""
from typing import Dict, List, Optional, Sequence
import abc
import logging

from pydantic import BaseModel, Field

from ..core.types import JType, Modifier, Visibility

PARAMETER_TAG = "@param"


class JavadocEntry(BaseModel):
    """A parsed documentation comment and the position it was read at."""

    short_description: str = ""
    long_description: str = ""
    tags: Dict[str, List[str]] = Field(default_factory=dict)
    row: int = 0
    column: int = 0

    def tag(self, name: str) -> List[str]:
        return list(self.tags.get(name, []))

    def parameters(self) -> Dict[str, str]:
        """Map each documented parameter name to its description."""
        result = {}
        for value in self.tag(PARAMETER_TAG):
            name, _, description = value.strip().partition(" ")
            if name:
                result[name] = description.strip()
        return result

    def __str__(self) -> str:
        return f"{self.short_description!r} at {self.row}:{self.column}"


class ErrorListener:
    """Receives the non-fatal problems found while handling events."""

    def unresolved_type(self, handler: "CodeHandler", name: str) -> None:
        pass

    def parse_error(self, handler: "CodeHandler", location: str, description: str) -> None:
        pass

    def package_discrepancy(self, handler: "CodeHandler", declared: str, expected: str) -> None:
        pass


class CodeHandler(abc.ABC):
    """Abstract base class of every structural event consumer."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._error_listeners: List[ErrorListener] = []

    def add_error_listener(self, listener: ErrorListener) -> None:
        if listener not in self._error_listeners:
            self._error_listeners.append(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        if listener in self._error_listeners:
            self._error_listeners.remove(listener)

    @property
    def error_listeners(self) -> List[ErrorListener]:
        return list(self._error_listeners)

    def notify_unresolved_type(self, name: str) -> None:
        for listener in self._error_listeners:
            listener.unresolved_type(self, name)

    def notify_parse_error(self, location: str, description: str) -> None:
        for listener in self._error_listeners:
            listener.parse_error(self, location, description)

    def notify_package_discrepancy(self, declared: str, expected: str) -> None:
        for listener in self._error_listeners:
            listener.package_discrepancy(self, declared, expected)

    @abc.abstractmethod
    def start_parsing(self, library_name: str, location: str) -> None:
        """
        Open a parsing run.

        Args:
            library_name: Name of the library being parsed
            location: Where the library was read from
        """
        pass

    @abc.abstractmethod
    def end_parsing(self) -> None:
        """Close the parsing run."""
        pass

    @abc.abstractmethod
    def start_compilation_unit(self, identifier: str) -> None:
        """Open a compilation unit, usually a file path."""
        pass

    @abc.abstractmethod
    def end_compilation_unit(self) -> None:
        pass

    @abc.abstractmethod
    def start_package(self, name: str) -> None:
        """Open a package scope given its dotted name."""
        pass

    @abc.abstractmethod
    def end_package(self) -> None:
        pass

    @abc.abstractmethod
    def start_class(self, visibility: Visibility, name: str, modifiers: Sequence[Modifier] = (),
                    extended_class: Optional[JType] = None,
                    implemented_interfaces: Sequence[JType] = ()) -> None:
        """
        Open a class scope.

        Args:
            visibility: Class visibility
            name: Dotted class name; only the last segment names the class
            modifiers: Class modifiers
            extended_class: Super class, if declared
            implemented_interfaces: Implemented interfaces
        """
        pass

    @abc.abstractmethod
    def end_class(self) -> None:
        pass

    @abc.abstractmethod
    def start_interface(self, name: str, extended_interfaces: Sequence[JType] = (),
                        visibility: Visibility = Visibility.PUBLIC,
                        modifiers: Sequence[Modifier] = ()) -> None:
        """Open an interface scope."""
        pass

    @abc.abstractmethod
    def end_interface(self) -> None:
        pass

    @abc.abstractmethod
    def start_enumeration(self, visibility: Visibility, name: str, elements: Sequence[str],
                          modifiers: Sequence[Modifier] = (),
                          implemented_interfaces: Sequence[JType] = ()) -> None:
        """Open an enumeration scope with its constant names."""
        pass

    @abc.abstractmethod
    def end_enumeration(self) -> None:
        pass

    @abc.abstractmethod
    def attribute(self, visibility: Visibility, name: str, attribute_type: JType,
                  modifiers: Sequence[Modifier] = (), value: Optional[str] = None) -> None:
        """Declare an attribute of the enclosing type."""
        pass

    @abc.abstractmethod
    def constructor(self, visibility: Visibility, overload_index: int, parameter_names: Sequence[str],
                    parameter_types: Sequence[JType], modifiers: Sequence[Modifier] = (),
                    exceptions: Sequence[JType] = ()) -> None:
        """Declare a constructor of the enclosing type."""
        pass

    @abc.abstractmethod
    def method(self, visibility: Visibility, name: str, parameter_names: Sequence[str],
               parameter_types: Sequence[JType], return_type: JType, modifiers: Sequence[Modifier] = (),
               exceptions: Sequence[JType] = (), overload_index: int = 0) -> None:
        """
        Declare a method of the enclosing type.

        Args:
            visibility: Method visibility
            name: Dotted method name; only the last segment names the method
            parameter_names: Parameter names, in order
            parameter_types: Parameter types, same length as the names
            return_type: Return type
            modifiers: Method modifiers
            exceptions: Declared exceptions
            overload_index: Index distinguishing overloads of the same name
        """
        pass

    @abc.abstractmethod
    def parse_error(self, location: str, description: str) -> None:
        """Report an input error that did not stop the extractor."""
        pass

    # Documentation events

    @abc.abstractmethod
    def parsed_entry(self, entry: JavadocEntry) -> None:
        """Report a documentation comment not attached to a class or method."""
        pass

    @abc.abstractmethod
    def class_javadoc(self, entry: JavadocEntry, path_to_class: str) -> None:
        """
        Attach a documentation comment to a type.

        Args:
            entry: The parsed comment
            path_to_class: Dotted name of the documented type
        """
        pass

    @abc.abstractmethod
    def method_javadoc(self, entry: JavadocEntry, path_to_method: str, signature: Sequence[str]) -> None:
        """
        Attach a documentation comment to a method or constructor.

        Args:
            entry: The parsed comment
            path_to_method: Dotted name of the documented method
            signature: Parameter type names, telling overloads apart
        """
        pass
