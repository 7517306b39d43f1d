"""
Java-specific parser emitting structural events.
"""
from typing import Dict, List, Optional, Sequence, Tuple

import tree_sitter_java
from tree_sitter import Language, Node, Parser, Tree

from ..core.symbol_table import SymbolTable
from ..core.types import ArrayType, JType, Modifier, ObjectType, PrimitiveType, Visibility
from ..pipeline.handler import CodeHandler, JavadocEntry
from .base_parser import BaseParser
from .imports import TypeResolver
from .javadoc import read_javadoc

TYPE_DECLARATIONS = ("class_declaration", "interface_declaration", "enum_declaration")
FIELD_DECLARATIONS = ("field_declaration", "constant_declaration")
ANNOTATIONS = ("marker_annotation", "annotation")
COMMENTS = ("block_comment", "comment")


class JavaParser(BaseParser):
    """
    Parser for Java source code.

    Each file is a compilation unit; its package declaration opens a package
    scope and every class, interface and enumeration, nested ones included,
    opens a type scope holding its fields, constructors and methods. A Javadoc
    comment right before a type or a method is emitted as documentation events
    after the declaration. Method bodies are not visited.
    """

    file_extensions = [".java"]

    def __init__(self, symbol_table: Optional[SymbolTable] = None):
        """
        Initialize the Java parser.

        Args:
            symbol_table: Known type names, used to qualify on-demand imports
        """
        super().__init__("java", symbol_table)
        self.resolver = TypeResolver(symbol_table=self.symbol_table)

    def initialize_parser(self) -> None:
        """Initialize the tree-sitter parser with the Java grammar."""
        self.language = Language(tree_sitter_java.language())
        self.parser = Parser(self.language)
        self.logger.debug("Initialized tree-sitter Java parser")

    def process_file(self, file_path: str, source_code: bytes, tree: Tree, handler: CodeHandler) -> None:
        """
        Emit the events of a Java file.

        Args:
            file_path: Path to the Java file
            source_code: Raw source code bytes
            tree: Parsed tree-sitter tree
            handler: Handler receiving the events
        """
        root = tree.root_node
        errors = self.report_syntax_errors(file_path, tree, handler)
        if errors:
            self.logger.warning(f"{errors} syntax errors in {file_path}")

        package_name = ""
        package_declarations = self._find_children(root, "package_declaration")
        if package_declarations:
            package_name = self._package_name(package_declarations[0], source_code)

        self.resolver = TypeResolver(package_name, self.symbol_table)
        for import_declaration in self._find_children(root, "import_declaration"):
            self._extract_import(import_declaration, source_code)

        type_declarations = self._find_children(root, *TYPE_DECLARATIONS)
        self._register_local_types(type_declarations, source_code, package_name)

        if package_name:
            handler.start_package(package_name)
        for declaration in type_declarations:
            self._process_type_declaration(declaration, source_code, handler, package_name)
        if package_name:
            handler.end_package()

    def _package_name(self, node: Node, source_code: bytes) -> str:
        for child in node.named_children:
            if child.type in ("scoped_identifier", "identifier"):
                return self._get_node_text(child, source_code)
        return ""

    def _extract_import(self, node: Node, source_code: bytes) -> None:
        """Register an import statement; static imports name members and are skipped."""
        if self._find_children(node, "static"):
            return
        names = self._find_children(node, "scoped_identifier", "identifier")
        if not names:
            return
        on_demand = bool(self._find_children(node, "asterisk"))
        self.resolver.add_import(self._get_node_text(names[0], source_code), on_demand)

    def _register_local_types(self, declarations: Sequence[Node], source_code: bytes, outer_name: str) -> None:
        for declaration in declarations:
            name_node = declaration.child_by_field_name("name")
            if name_node is None:
                continue
            qualified_name = self._qualified(outer_name, self._get_node_text(name_node, source_code))
            self.resolver.add_local_type(qualified_name)
            nested = [m for m in self._body_members(declaration) if m.type in TYPE_DECLARATIONS]
            self._register_local_types(nested, source_code, qualified_name)

    @staticmethod
    def _qualified(outer_name: str, name: str) -> str:
        return f"{outer_name}.{name}" if outer_name else name

    def _body_members(self, declaration: Node) -> List[Node]:
        body = declaration.child_by_field_name("body")
        if body is None:
            return []
        if body.type == "enum_body":
            members = []
            for declarations in self._find_children(body, "enum_body_declarations"):
                members.extend(declarations.named_children)
            return members
        return list(body.named_children)

    # Modifiers and types

    def _keywords(self, node: Node) -> List[str]:
        """Return the modifier keywords of a declaration, annotations excluded."""
        keywords = []
        for modifiers_node in self._find_children(node, "modifiers"):
            for modifier in modifiers_node.children:
                if modifier.type not in ANNOTATIONS:
                    keywords.append(modifier.type)
        return keywords

    def _type_parameters(self, node: Node, source_code: bytes) -> List[str]:
        parameters = node.child_by_field_name("type_parameters")
        if parameters is None:
            return []
        names = []
        for parameter in self._find_children(parameters, "type_parameter"):
            name_node = self._find_first_node(parameter, "type_identifier")
            if name_node is not None:
                names.append(self._get_node_text(name_node, source_code))
        return names

    def _dimensions(self, node: Optional[Node], source_code: bytes) -> int:
        return self._get_node_text(node, source_code).count("[") if node is not None else 0

    def _read_type(self, node: Node, source_code: bytes) -> Tuple[str, int]:
        """Return the written name of a type, generic arguments dropped, and its array dimensions."""
        if node.type == "array_type":
            name, dimensions = self._read_type(node.child_by_field_name("element"), source_code)
            return name, dimensions + self._dimensions(node.child_by_field_name("dimensions"), source_code)
        if node.type == "generic_type":
            base = self._find_children(node, "type_identifier", "scoped_type_identifier")[0]
            return self._read_type(base, source_code)
        if node.type == "annotated_type":
            inner = [c for c in node.named_children if c.type not in ANNOTATIONS]
            return self._read_type(inner[-1], source_code)
        if node.type == "scoped_type_identifier":
            parts = []
            for child in node.named_children:
                if child.type == "type_identifier":
                    parts.append(self._get_node_text(child, source_code))
                elif child.type in ("scoped_type_identifier", "generic_type"):
                    parts.append(self._read_type(child, source_code)[0])
            return ".".join(parts), 0
        return self._get_node_text(node, source_code), 0

    def _resolve(self, node: Node, source_code: bytes, kind: type = ObjectType, dimensions: int = 0) -> JType:
        name, type_dimensions = self._read_type(node, source_code)
        return self.resolver.resolve(name, kind, type_dimensions + dimensions)

    def _type_list(self, node: Optional[Node], source_code: bytes) -> List[JType]:
        """Resolve the interfaces of an ``implements`` or ``extends`` clause."""
        if node is None:
            return []
        types = []
        for type_list in self._find_children(node, "type_list"):
            for type_node in type_list.named_children:
                types.append(self.resolver.resolve_interface(self._read_type(type_node, source_code)[0]))
        return types

    def _exceptions(self, node: Node, source_code: bytes) -> List[JType]:
        exceptions = []
        for throws in self._find_children(node, "throws"):
            for type_node in throws.named_children:
                exceptions.append(self.resolver.resolve_exception(self._read_type(type_node, source_code)[0]))
        return exceptions

    def _parameters(self, node: Optional[Node], source_code: bytes) -> Tuple[List[str], List[JType]]:
        names: List[str] = []
        types: List[JType] = []
        if node is None:
            return names, types
        for parameter in node.named_children:
            if parameter.type == "formal_parameter":
                name_node = parameter.child_by_field_name("name")
                type_node = parameter.child_by_field_name("type")
                dimensions = self._dimensions(parameter.child_by_field_name("dimensions"), source_code)
            elif parameter.type == "spread_parameter":
                declarators = self._find_children(parameter, "variable_declarator")
                name_node = declarators[0].child_by_field_name("name") if declarators else None
                type_nodes = [c for c in parameter.named_children if c.type not in ("modifiers", "variable_declarator")]
                type_node = type_nodes[0] if type_nodes else None
                dimensions = 1
            else:
                continue
            if name_node is None or type_node is None:
                continue
            names.append(self._get_node_text(name_node, source_code))
            types.append(self._resolve(type_node, source_code, dimensions=dimensions))
        return names, types

    # Documentation

    def _javadoc(self, node: Node, source_code: bytes) -> Optional[JavadocEntry]:
        """Read the documentation comment right before a declaration, if any."""
        comment = node.prev_named_sibling
        if comment is None or comment.type not in COMMENTS:
            return None
        line, column = comment.start_point
        return read_javadoc(self._get_node_text(comment, source_code), line + 1, column + 1)

    def _class_javadoc(self, node: Node, source_code: bytes, handler: CodeHandler, qualified_name: str) -> None:
        entry = self._javadoc(node, source_code)
        if entry is not None:
            handler.parsed_entry(entry)
            handler.class_javadoc(entry, qualified_name)

    @classmethod
    def _signature_name(cls, jtype: JType) -> str:
        if isinstance(jtype, ArrayType):
            return cls._signature_name(jtype.element) + "[]" * jtype.dimensions
        if isinstance(jtype, PrimitiveType):
            return jtype.name
        return jtype.referenced_name or jtype.identifier

    # Declarations

    def _process_type_declaration(self, node: Node, source_code: bytes, handler: CodeHandler,
                                  outer_name: str, in_interface: bool = False) -> None:
        """Process a class, interface or enum declaration and its members."""
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        qualified_name = self._qualified(outer_name, self._get_node_text(name_node, source_code))

        keywords = self._keywords(node)
        visibility = Visibility.from_keywords(keywords)
        if in_interface and visibility is Visibility.DEFAULT:
            visibility = Visibility.PUBLIC
        modifiers = list(Modifier.from_keywords(keywords))

        self.resolver.push_type_variables(self._type_parameters(node, source_code))
        try:
            if node.type == "class_declaration":
                superclass = node.child_by_field_name("superclass")
                extended_class = None
                if superclass is not None and superclass.named_children:
                    extended_class = self._resolve(superclass.named_children[0], source_code)
                interfaces = self._type_list(node.child_by_field_name("interfaces"), source_code)
                handler.start_class(visibility, qualified_name, modifiers, extended_class, interfaces)
                self._class_javadoc(node, source_code, handler, qualified_name)
                self._process_members(node, source_code, handler, qualified_name, False)
                handler.end_class()
            elif node.type == "interface_declaration":
                extends = self._find_children(node, "extends_interfaces")
                extended = self._type_list(extends[0], source_code) if extends else []
                handler.start_interface(qualified_name, extended, visibility, modifiers)
                self._class_javadoc(node, source_code, handler, qualified_name)
                self._process_members(node, source_code, handler, qualified_name, True)
                handler.end_interface()
            else:
                body = node.child_by_field_name("body")
                elements = []
                if body is not None:
                    for constant in self._find_children(body, "enum_constant"):
                        constant_name = constant.child_by_field_name("name")
                        if constant_name is not None:
                            elements.append(self._get_node_text(constant_name, source_code))
                interfaces = self._type_list(node.child_by_field_name("interfaces"), source_code)
                handler.start_enumeration(visibility, qualified_name, elements, modifiers, interfaces)
                self._class_javadoc(node, source_code, handler, qualified_name)
                self._process_members(node, source_code, handler, qualified_name, False)
                handler.end_enumeration()
        finally:
            self.resolver.pop_type_variables()

    def _process_members(self, node: Node, source_code: bytes, handler: CodeHandler,
                         owner_name: str, in_interface: bool) -> None:
        overloads: Dict[str, int] = {}
        constructors = 0
        for member in self._body_members(node):
            if member.type in FIELD_DECLARATIONS:
                self._process_field_declaration(member, source_code, handler, in_interface)
            elif member.type == "method_declaration":
                name_node = member.child_by_field_name("name")
                if name_node is None:
                    continue
                name = self._get_node_text(name_node, source_code)
                overload_index = overloads.get(name, 0)
                overloads[name] = overload_index + 1
                self._process_method_declaration(member, source_code, handler, owner_name, name, overload_index,
                                                 in_interface)
            elif member.type == "constructor_declaration":
                self._process_constructor_declaration(member, source_code, handler, constructors)
                constructors += 1
            elif member.type in TYPE_DECLARATIONS:
                self._process_type_declaration(member, source_code, handler, owner_name, in_interface)
            else:
                self.logger.debug(f"Skipping {member.type} in {owner_name}")

    def _process_field_declaration(self, node: Node, source_code: bytes, handler: CodeHandler,
                                   in_interface: bool) -> None:
        """Process a field declaration, one attribute per declarator."""
        type_node = node.child_by_field_name("type")
        if type_node is None:
            return

        keywords = self._keywords(node)
        visibility = Visibility.from_keywords(keywords)
        modifiers = list(Modifier.from_keywords(keywords))
        if in_interface:
            # Interface fields are implicitly public static final
            visibility = Visibility.PUBLIC
            for implicit in (Modifier.STATIC, Modifier.FINAL):
                if implicit not in modifiers:
                    modifiers.append(implicit)

        for declarator in node.children_by_field_name("declarator"):
            name_node = declarator.child_by_field_name("name")
            if name_node is None:
                continue
            dimensions = self._dimensions(declarator.child_by_field_name("dimensions"), source_code)
            value_node = declarator.child_by_field_name("value")
            value = self._get_node_text(value_node, source_code) if value_node is not None else None
            handler.attribute(
                visibility,
                self._get_node_text(name_node, source_code),
                self._resolve(type_node, source_code, dimensions=dimensions),
                modifiers,
                value,
            )

    def _process_method_declaration(self, node: Node, source_code: bytes, handler: CodeHandler,
                                    owner_name: str, name: str, overload_index: int,
                                    in_interface: bool) -> None:
        type_node = node.child_by_field_name("type")
        if type_node is None:
            return

        keywords = self._keywords(node)
        visibility = Visibility.from_keywords(keywords)
        modifiers = list(Modifier.from_keywords(keywords))
        if in_interface:
            if visibility is Visibility.DEFAULT:
                visibility = Visibility.PUBLIC
            has_body = node.child_by_field_name("body") is not None
            if not has_body and Modifier.ABSTRACT not in modifiers:
                modifiers.append(Modifier.ABSTRACT)

        self.resolver.push_type_variables(self._type_parameters(node, source_code))
        try:
            return_type = self._resolve(
                type_node, source_code,
                dimensions=self._dimensions(node.child_by_field_name("dimensions"), source_code),
            )
            parameter_names, parameter_types = self._parameters(node.child_by_field_name("parameters"), source_code)
            exceptions = self._exceptions(node, source_code)
        finally:
            self.resolver.pop_type_variables()

        handler.method(visibility, name, parameter_names, parameter_types, return_type,
                       modifiers, exceptions, overload_index)
        entry = self._javadoc(node, source_code)
        if entry is not None:
            handler.parsed_entry(entry)
            handler.method_javadoc(entry, self._qualified(owner_name, name),
                                   [self._signature_name(t) for t in parameter_types])

    def _process_constructor_declaration(self, node: Node, source_code: bytes, handler: CodeHandler,
                                         overload_index: int) -> None:
        keywords = self._keywords(node)
        self.resolver.push_type_variables(self._type_parameters(node, source_code))
        try:
            parameter_names, parameter_types = self._parameters(node.child_by_field_name("parameters"), source_code)
            exceptions = self._exceptions(node, source_code)
        finally:
            self.resolver.pop_type_variables()

        handler.constructor(Visibility.from_keywords(keywords), overload_index, parameter_names,
                            parameter_types, list(Modifier.from_keywords(keywords)), exceptions)
