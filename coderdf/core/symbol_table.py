"""
Registry of known fully qualified type names.

The table is filled before a parsing run, from source trees, compiled class
trees, class archives or an existing model, and is only read while the run
resolves type references.
"""
import os
import zipfile
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set
import logging

from .identifier import IdentifierReader
from .vocabulary import JCLASS, JENUMERATION, JINTERFACE, PACKAGE_SEPARATOR, SUBCLASSOF

JAVA_SOURCE_EXTENSION = ".java"
JAVA_CLASS_EXTENSION = ".class"
INNER_CLASS_SEPARATOR = "$"


class SymbolOrigin(str, Enum):
    SOURCE = "source"
    COMPILED = "compiled"
    ARCHIVE = "archive"
    MODEL = "model"


def identifier_to_name(identifier: str) -> str:
    """Return the dotted Java name of a type identifier."""
    parsed = IdentifierReader.read_identifier(identifier)
    return PACKAGE_SEPARATOR.join(f.fragment for f in parsed.fragments if f.fragment)


class SymbolTable:
    """Set of fully qualified type names, partitioned by where they were found."""

    def __init__(self):
        self._names: Dict[str, Set[SymbolOrigin]] = {}
        self._packages: Dict[str, Set[str]] = {}
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def add(self, name: str, origin: SymbolOrigin = SymbolOrigin.SOURCE) -> None:
        """
        Register a fully qualified name.

        Args:
            name: Dotted name such as ``java.util.List``
            origin: Where the name was found
        """
        if not name or not name.strip():
            raise ValueError("Symbol name cannot be empty")
        self._names.setdefault(name, set()).add(origin)
        package, _, simple_name = name.rpartition(PACKAGE_SEPARATOR)
        self._packages.setdefault(package, set()).add(simple_name)

    def exists(self, name: str, origin: Optional[SymbolOrigin] = None) -> bool:
        """Tell whether a name is known, optionally from a given origin."""
        origins = self._names.get(name)
        if not origins:
            return False
        return origin is None or origin in origins

    def package_contains(self, package: str, simple_name: str) -> bool:
        return simple_name in self._packages.get(package, ())

    def names(self, origin: Optional[SymbolOrigin] = None) -> List[str]:
        """Return the known names, sorted."""
        return sorted(n for n, origins in self._names.items() if origin is None or origin in origins)

    def packages(self) -> List[str]:
        return sorted(self._packages)

    def clear(self) -> None:
        self._names.clear()
        self._packages.clear()

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def merge(self, other: "SymbolTable") -> None:
        """Add every name of another table, keeping its origins."""
        for name, origins in other._names.items():
            for origin in origins:
                self.add(name, origin)

    def _preload_tree(self, root_dir: str, extension: str, origin: SymbolOrigin) -> int:
        if not os.path.isdir(root_dir):
            raise FileNotFoundError(f"Directory not found: {root_dir}")

        count = 0
        for root, _, files in os.walk(root_dir):
            for file in files:
                if not file.endswith(extension):
                    continue
                relative = os.path.relpath(os.path.join(root, file), root_dir)
                self.add(self._path_to_name(relative, extension), origin)
                count += 1
        self.logger.debug(f"Preloaded {count} {origin.value} symbols from {root_dir}")
        return count

    @staticmethod
    def _path_to_name(path: str, extension: str) -> str:
        name = path[:-len(extension)]
        name = name.replace(os.sep, PACKAGE_SEPARATOR).replace("/", PACKAGE_SEPARATOR)
        return name.replace(INNER_CLASS_SEPARATOR, PACKAGE_SEPARATOR)

    def preload_source(self, root_dir: str) -> int:
        """
        Register the types of a Java source tree.

        Args:
            root_dir: Source root; ``a/b/C.java`` registers ``a.b.C``

        Returns:
            The number of files seen
        """
        return self._preload_tree(root_dir, JAVA_SOURCE_EXTENSION, SymbolOrigin.SOURCE)

    def preload_compiled(self, root_dir: str) -> int:
        """Register the types of a compiled class tree; ``a/b/C$D.class`` registers ``a.b.C.D``."""
        return self._preload_tree(root_dir, JAVA_CLASS_EXTENSION, SymbolOrigin.COMPILED)

    def preload_archive(self, archive_file: str) -> int:
        """Register the classes packed in a jar or zip archive."""
        if not os.path.isfile(archive_file):
            raise FileNotFoundError(f"Archive not found: {archive_file}")

        count = 0
        with zipfile.ZipFile(archive_file) as archive:
            for entry in archive.namelist():
                if entry.endswith("/") or not entry.endswith(JAVA_CLASS_EXTENSION):
                    continue
                self.add(self._path_to_name(entry, JAVA_CLASS_EXTENSION), SymbolOrigin.ARCHIVE)
                count += 1
        self.logger.debug(f"Preloaded {count} archive symbols from {archive_file}")
        return count

    def preload_from_model(self, store) -> int:
        """Register the classes, interfaces and enumerations already present in a model."""
        count = 0
        for kind in (JCLASS, JINTERFACE, JENUMERATION):
            for triple in store.search_triples(None, SUBCLASSOF, kind):
                self.add(identifier_to_name(triple.subject), SymbolOrigin.MODEL)
                count += 1
        self.logger.debug(f"Preloaded {count} symbols from model")
        return count

    def preload(self, path: str) -> int:
        """Preload a source/class tree or an archive, guessing from the path."""
        if os.path.isdir(path):
            return self.preload_source(path) + self.preload_compiled(path)
        if path.endswith((".jar", ".zip")):
            return self.preload_archive(path)
        raise ValueError(f"Cannot preload symbols from {path}")
