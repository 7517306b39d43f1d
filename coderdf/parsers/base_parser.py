"""
Base parser class turning source files into structural events.
"""
import os
from typing import Iterator, List, Optional
import logging
from abc import ABC, abstractmethod

from tree_sitter import Node, Tree

from ..core.errors import CodeRDFError
from ..core.symbol_table import SymbolTable
from ..pipeline.handler import CodeHandler


class BaseParser(ABC):
    """
    Base parser class for extracting code structure.

    A parser drives one ``start_parsing .. end_parsing`` run on a handler and
    reports each file as a compilation unit. Each language-specific parser
    inherits from this class.
    """

    file_extensions: List[str] = []

    def __init__(self, language_name: str, symbol_table: Optional[SymbolTable] = None):
        """
        Initialize the parser.

        Args:
            language_name: Name of the programming language
            symbol_table: Known type names, used to qualify references
        """
        self.language_name = language_name
        self.symbol_table = symbol_table if symbol_table is not None else SymbolTable()
        self.logger = logging.getLogger(f"{__name__}.{language_name}")

        # Tree-sitter parser will be initialized in the subclass
        self.parser = None
        self.language = None

    @abstractmethod
    def initialize_parser(self) -> None:
        """Initialize the tree-sitter parser with the appropriate language."""
        pass

    def parse_file(self, file_path: str, handler: CodeHandler, library_name: Optional[str] = None) -> None:
        """
        Parse a single file as a library of its own.

        Args:
            file_path: Path to the file to parse
            handler: Handler receiving the events
            library_name: Library name, the file name without extension by default
        """
        if not os.path.isfile(file_path):
            self.logger.error(f"File not found: {file_path}")
            raise FileNotFoundError(f"File not found: {file_path}")

        if library_name is None:
            library_name = os.path.splitext(os.path.basename(file_path))[0]
        handler.start_parsing(library_name, os.path.abspath(file_path))
        self.parse_compilation_unit(file_path, handler)
        handler.end_parsing()

    def parse_directory(self, directory_path: str, handler: CodeHandler,
                        library_name: Optional[str] = None) -> int:
        """
        Parse all matching files in a directory as one library.

        Args:
            directory_path: Path to the directory to parse
            handler: Handler receiving the events
            library_name: Library name, the directory name by default

        Returns:
            The number of files parsed
        """
        if not os.path.isdir(directory_path):
            self.logger.error(f"Directory not found: {directory_path}")
            raise FileNotFoundError(f"Directory not found: {directory_path}")

        location = os.path.abspath(directory_path)
        if library_name is None:
            library_name = os.path.basename(location.rstrip(os.sep))

        handler.start_parsing(library_name, location)
        count = 0
        for file_path in self.source_files(directory_path):
            self.parse_compilation_unit(file_path, handler)
            count += 1
        handler.end_parsing()
        self.logger.info(f"Parsed {count} {self.language_name} files from {directory_path}")
        return count

    def source_files(self, directory_path: str) -> Iterator[str]:
        """Yield the files to parse, in a stable order."""
        for root, dirs, files in os.walk(directory_path):
            dirs.sort()
            for file in sorted(files):
                ext = os.path.splitext(file)[1]
                if ext.lower() in self.file_extensions:
                    yield os.path.join(root, file)

    def parse_compilation_unit(self, file_path: str, handler: CodeHandler) -> None:
        """
        Parse one file inside an open run.

        Files that cannot be read are reported as parse errors and skipped.
        """
        try:
            with open(file_path, "rb") as f:
                source_code = f.read()
        except OSError as e:
            self.logger.error(f"Cannot read {file_path}: {e}")
            handler.parse_error(file_path, f"Cannot read file: {e}")
            return

        if self.parser is None:
            self.initialize_parser()

        tree = self.parser.parse(source_code)
        self.logger.debug(f"Parsed {file_path}, root node type: {tree.root_node.type}")
        handler.start_compilation_unit(file_path)
        try:
            self.process_file(file_path, source_code, tree, handler)
        except CodeRDFError as e:
            self.logger.error(f"Error processing {file_path}: {e}")
            raise
        handler.end_compilation_unit()

    @abstractmethod
    def process_file(self, file_path: str, source_code: bytes, tree: Tree, handler: CodeHandler) -> None:
        """
        Emit the events of a parsed file.

        Args:
            file_path: Path to the file
            source_code: Raw source code bytes
            tree: Parsed tree-sitter tree
            handler: Handler receiving the events
        """
        pass

    def walk_tree(self, node: Node) -> Iterator[Node]:
        """Walk the tree in depth-first order."""
        yield node
        for child in node.children:
            yield from self.walk_tree(child)

    def report_syntax_errors(self, file_path: str, tree: Tree, handler: CodeHandler) -> int:
        """Report the error and missing nodes of a tree; return how many were found."""
        if not tree.root_node.has_error:
            return 0
        count = 0
        for node in self.walk_tree(tree.root_node):
            if node.type == "ERROR" or node.is_missing:
                line, column = node.start_point
                description = f"Missing {node.type}" if node.is_missing else "Syntax error"
                handler.parse_error(f"{file_path}:{line + 1}:{column + 1}", description)
                count += 1
        return count

    def _find_first_node(self, node: Node, node_type: str) -> Optional[Node]:
        """Find the first node of the given type in the subtree."""
        if node.type == node_type:
            return node

        for child in node.children:
            result = self._find_first_node(child, node_type)
            if result is not None:
                return result

        return None

    def _find_children(self, node: Node, *node_types: str) -> List[Node]:
        """Find the immediate children of the given types."""
        return [child for child in node.children if child.type in node_types]

    def _get_node_text(self, node: Node, source_code: bytes) -> str:
        """Get text for a node from the source code."""
        return source_code[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
