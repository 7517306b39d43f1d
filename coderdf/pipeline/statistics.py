"""
Statistics collecting handler decorator.
"""
import time
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence

from pydantic import BaseModel, Field

from ..core.types import JType, Modifier, Visibility
from .handler import CodeHandler, ErrorListener, JavadocEntry

COUNTERS = (
    "compilation_units",
    "packages",
    "classes",
    "interfaces",
    "enumerations",
    "attributes",
    "constructors",
    "methods",
    "parse_errors",
    "unresolved",
    "javadoc_entries",
    "classes_javadoc",
    "methods_javadoc",
)


class ParseStatistics(BaseModel):
    """Snapshot of the counters collected during a parsing run."""

    compilation_units: int = 0
    packages: int = 0
    classes: int = 0
    interfaces: int = 0
    enumerations: int = 0
    attributes: int = 0
    constructors: int = 0
    methods: int = 0
    parse_errors: int = 0
    unresolved: int = 0
    javadoc_entries: int = 0
    classes_javadoc: int = 0
    methods_javadoc: int = 0
    unresolved_types: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    parsing_time: float = 0.0

    def counters(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in COUNTERS}

    def report(self) -> List[str]:
        """Return the statistics as printable lines."""
        lines = [f"{name.replace('_', ' ')}: {value}" for name, value in self.counters().items()]
        lines.append(f"parsing time: {self.parsing_time:.3f}s")
        if self.unresolved_types:
            lines.append(f"unresolved types: {', '.join(self.unresolved_types)}")
        return lines

    def __str__(self) -> str:
        return "\n".join(self.report())


class _UnresolvedCounter(ErrorListener):

    def __init__(self, statistics: "StatisticsHandler"):
        self.statistics = statistics

    def unresolved_type(self, handler: CodeHandler, name: str) -> None:
        self.statistics._pending_unresolved.append(name)


class StatisticsHandler(CodeHandler):
    """
    Handler decorator counting the events forwarded to a wrapped handler.

    Every call is forwarded first, unchanged, and counted only if the wrapped
    handler accepted it. Unresolved types reported during a call are counted
    with it, so a rejected call leaves no trace. ``end_parsing`` freezes the
    counters until ``reset``.
    """

    def __init__(self, wrapped: CodeHandler):
        super().__init__()
        self.wrapped = wrapped
        self._listener = _UnresolvedCounter(self)
        self.wrapped.add_error_listener(self._listener)
        self.frozen = False
        self._counts: Dict[str, int] = dict.fromkeys(COUNTERS, 0)
        self._unresolved_types: Dict[str, None] = {}
        self._pending_unresolved: List[str] = []
        self._errors: List[str] = []
        self._start_time: Optional[float] = None
        self._parsing_time = 0.0

    def reset(self) -> None:
        """Zero the counters and unfreeze them."""
        self.frozen = False
        self._counts = dict.fromkeys(COUNTERS, 0)
        self._unresolved_types = {}
        self._pending_unresolved = []
        self._errors = []
        self._start_time = None
        self._parsing_time = 0.0

    def _increment(self, counter: str) -> None:
        if self.frozen:
            self.logger.warning(f"Statistics are frozen, event '{counter}' not counted")
            return
        self._counts[counter] += 1

    def _count_unresolved(self, name: str) -> None:
        self._increment("unresolved")
        if not self.frozen:
            self._unresolved_types[name] = None

    @contextmanager
    def _forwarding(self, counter: Optional[str] = None) -> Iterator[None]:
        """Count a forwarded call, and the unresolved types it reported, once it returned."""
        self._pending_unresolved = []
        try:
            yield
        except Exception:
            self._pending_unresolved = []
            raise
        pending, self._pending_unresolved = self._pending_unresolved, []
        for name in pending:
            self._count_unresolved(name)
        if counter is not None:
            self._increment(counter)

    @property
    def statistics(self) -> ParseStatistics:
        parsing_time = self._parsing_time
        if self._start_time is not None and not self.frozen:
            parsing_time = time.perf_counter() - self._start_time
        return ParseStatistics(
            **self._counts,
            unresolved_types=sorted(self._unresolved_types),
            errors=list(self._errors),
            parsing_time=parsing_time,
        )

    def report(self) -> List[str]:
        return self.statistics.report()

    # Listeners registered here are the wrapped handler's listeners

    def add_error_listener(self, listener: ErrorListener) -> None:
        self.wrapped.add_error_listener(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        self.wrapped.remove_error_listener(listener)

    # Forwarded events

    def start_parsing(self, library_name: str, location: str) -> None:
        with self._forwarding():
            self.wrapped.start_parsing(library_name, location)
        if not self.frozen:
            self._start_time = time.perf_counter()

    def end_parsing(self) -> None:
        with self._forwarding():
            self.wrapped.end_parsing()
        if not self.frozen:
            if self._start_time is not None:
                self._parsing_time = time.perf_counter() - self._start_time
            self.frozen = True

    def start_compilation_unit(self, identifier: str) -> None:
        with self._forwarding("compilation_units"):
            self.wrapped.start_compilation_unit(identifier)

    def end_compilation_unit(self) -> None:
        with self._forwarding():
            self.wrapped.end_compilation_unit()

    def start_package(self, name: str) -> None:
        with self._forwarding("packages"):
            self.wrapped.start_package(name)

    def end_package(self) -> None:
        with self._forwarding():
            self.wrapped.end_package()

    def start_class(self, visibility: Visibility, name: str, modifiers: Sequence[Modifier] = (),
                    extended_class: Optional[JType] = None,
                    implemented_interfaces: Sequence[JType] = ()) -> None:
        with self._forwarding("classes"):
            self.wrapped.start_class(visibility, name, modifiers, extended_class, implemented_interfaces)

    def end_class(self) -> None:
        with self._forwarding():
            self.wrapped.end_class()

    def start_interface(self, name: str, extended_interfaces: Sequence[JType] = (),
                        visibility: Visibility = Visibility.PUBLIC,
                        modifiers: Sequence[Modifier] = ()) -> None:
        with self._forwarding("interfaces"):
            self.wrapped.start_interface(name, extended_interfaces, visibility, modifiers)

    def end_interface(self) -> None:
        with self._forwarding():
            self.wrapped.end_interface()

    def start_enumeration(self, visibility: Visibility, name: str, elements: Sequence[str],
                          modifiers: Sequence[Modifier] = (),
                          implemented_interfaces: Sequence[JType] = ()) -> None:
        with self._forwarding("enumerations"):
            self.wrapped.start_enumeration(visibility, name, elements, modifiers, implemented_interfaces)

    def end_enumeration(self) -> None:
        with self._forwarding():
            self.wrapped.end_enumeration()

    def attribute(self, visibility: Visibility, name: str, attribute_type: JType,
                  modifiers: Sequence[Modifier] = (), value: Optional[str] = None) -> None:
        with self._forwarding("attributes"):
            self.wrapped.attribute(visibility, name, attribute_type, modifiers, value)

    def constructor(self, visibility: Visibility, overload_index: int, parameter_names: Sequence[str],
                    parameter_types: Sequence[JType], modifiers: Sequence[Modifier] = (),
                    exceptions: Sequence[JType] = ()) -> None:
        with self._forwarding("constructors"):
            self.wrapped.constructor(visibility, overload_index, parameter_names, parameter_types,
                                     modifiers, exceptions)

    def method(self, visibility: Visibility, name: str, parameter_names: Sequence[str],
               parameter_types: Sequence[JType], return_type: JType, modifiers: Sequence[Modifier] = (),
               exceptions: Sequence[JType] = (), overload_index: int = 0) -> None:
        with self._forwarding("methods"):
            self.wrapped.method(visibility, name, parameter_names, parameter_types, return_type,
                                modifiers, exceptions, overload_index)

    def parse_error(self, location: str, description: str) -> None:
        with self._forwarding("parse_errors"):
            self.wrapped.parse_error(location, description)
        if not self.frozen:
            self._errors.append(f"{location}: {description}")

    def parsed_entry(self, entry: JavadocEntry) -> None:
        with self._forwarding("javadoc_entries"):
            self.wrapped.parsed_entry(entry)

    def class_javadoc(self, entry: JavadocEntry, path_to_class: str) -> None:
        with self._forwarding("classes_javadoc"):
            self.wrapped.class_javadoc(entry, path_to_class)

    def method_javadoc(self, entry: JavadocEntry, path_to_method: str, signature: Sequence[str]) -> None:
        with self._forwarding("methods_javadoc"):
            self.wrapped.method_javadoc(entry, path_to_method, signature)
