"""
Qualification of the type names written in a Java compilation unit.
"""
from typing import Dict, Iterable, List, Optional, Set

from ..core.symbol_table import SymbolTable
from ..core.types import ArrayType, ExceptionType, InterfaceType, JType, ObjectType, primitive_type
from ..core.vocabulary import PACKAGE_SEPARATOR

JAVA_LANG = "java.lang"
JAVA_LANG_OBJECT = "java.lang.Object"

# Types of java.lang, visible without an import
JAVA_LANG_TYPES = frozenset([
    "AutoCloseable", "Boolean", "Byte", "CharSequence", "Character", "Class", "ClassCastException",
    "ClassNotFoundException", "CloneNotSupportedException", "Cloneable", "Comparable", "Deprecated",
    "Double", "Enum", "Error", "Exception", "Float", "FunctionalInterface", "IllegalArgumentException",
    "IllegalStateException", "IndexOutOfBoundsException", "Integer", "InterruptedException", "Iterable",
    "Long", "Math", "NullPointerException", "Number", "NumberFormatException", "Object", "Override",
    "Record", "Runnable", "RuntimeException", "SafeVarargs", "Short", "String", "StringBuffer",
    "StringBuilder", "SuppressWarnings", "System", "Thread", "Throwable", "UnsupportedOperationException",
    "Void",
])


class TypeResolver:
    """
    Qualifies simple type names the way the Java compiler looks them up.

    Lookup order: type variables, single-type imports, types declared in the
    compilation unit, the current package, ``java.lang`` and finally on-demand
    imports. On-demand imports and the current package are only trusted when the
    symbol table knows the name; anything else falls back to the current package
    and is left to the model builder to report.
    """

    def __init__(self, package: str = "", symbol_table: Optional[SymbolTable] = None):
        self.package = package
        self.symbol_table = symbol_table if symbol_table is not None else SymbolTable()
        self.single_imports: Dict[str, str] = {}
        self.on_demand_imports: List[str] = []
        self.local_types: Dict[str, str] = {}
        self._type_variables: List[Set[str]] = []

    def add_import(self, name: str, on_demand: bool = False) -> None:
        """
        Register an import declaration.

        Args:
            name: Imported name, without the trailing ``.*``
            on_demand: True for ``import p.*;``
        """
        if on_demand:
            if name not in self.on_demand_imports:
                self.on_demand_imports.append(name)
        else:
            self.single_imports[name.rpartition(PACKAGE_SEPARATOR)[2]] = name

    def add_local_type(self, qualified_name: str) -> None:
        simple_name = qualified_name.rpartition(PACKAGE_SEPARATOR)[2]
        self.local_types.setdefault(simple_name, qualified_name)

    def push_type_variables(self, names: Iterable[str]) -> None:
        self._type_variables.append(set(names))

    def pop_type_variables(self) -> None:
        self._type_variables.pop()

    def _is_type_variable(self, name: str) -> bool:
        return any(name in variables for variables in self._type_variables)

    def _in_package(self, package: str, simple_name: str) -> str:
        return f"{package}{PACKAGE_SEPARATOR}{simple_name}" if package else simple_name

    def qualify(self, name: str) -> str:
        """Return the fully qualified form of a simple or partially qualified type name."""
        if self._is_type_variable(name):
            return JAVA_LANG_OBJECT

        first, separator, rest = name.partition(PACKAGE_SEPARATOR)
        if separator:
            # Outer.Inner: qualify the outer type, keep an already qualified name
            outer = self._qualify_simple(first, strict=True)
            return f"{outer}{PACKAGE_SEPARATOR}{rest}" if outer is not None else name
        return self._qualify_simple(name, strict=False)

    def _qualify_simple(self, name: str, strict: bool) -> Optional[str]:
        if name in self.single_imports:
            return self.single_imports[name]
        if name in self.local_types:
            return self.local_types[name]
        in_package = self._in_package(self.package, name)
        if self.symbol_table.exists(in_package):
            return in_package
        if name in JAVA_LANG_TYPES or self.symbol_table.exists(self._in_package(JAVA_LANG, name)):
            return self._in_package(JAVA_LANG, name)
        for package in self.on_demand_imports:
            candidate = self._in_package(package, name)
            if self.symbol_table.exists(candidate):
                return candidate
        return None if strict else in_package

    def resolve(self, name: str, kind: type = ObjectType, dimensions: int = 0) -> JType:
        """
        Build the type reference of a written type name.

        Args:
            name: Type name as written, without generic arguments
            kind: Reference class used for non primitive names
            dimensions: Array dimensions

        Returns:
            The type reference
        """
        element = primitive_type(name)
        if element is None:
            element = kind(name=self.qualify(name))
        if dimensions:
            return ArrayType(element=element, dimensions=dimensions)
        return element

    def resolve_interface(self, name: str) -> JType:
        return self.resolve(name, InterfaceType)

    def resolve_exception(self, name: str) -> JType:
        return self.resolve(name, ExceptionType)
