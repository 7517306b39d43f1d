"""
Tests for the model builder handler.
"""
import unittest

from coderdf.core import (
    CodeHandlerError,
    Modifier,
    ObjectType,
    SchemaViolationError,
    SymbolTable,
    UnbalancedScopeError,
    Visibility,
    primitive_type,
)
from coderdf.core.types import ArrayType, ExceptionType, InterfaceType, INT, VOID
from coderdf.core.vocabulary import (
    ASSET,
    CODER_URI,
    CONTAINS_CLASS,
    CONTAINS_CONSTRUCTOR,
    CONTAINS_ELEMENT,
    CONTAINS_LIBRARY,
    CONTAINS_METHOD,
    CONTAINS_PACKAGE,
    CONTAINS_PARAMETER,
    CONTAINS_SIGNATURE,
    EXTENDS_CLASS,
    HAS_MODIFIERS,
    HAS_VISIBILITY,
    JCLASS,
    JMETHOD,
    JPACKAGE,
    LIBRARY_LOCATION,
    PARAMETER_INDEX,
    PARAMETER_TYPE,
    RETURN_TYPE,
    SUBCLASSOF,
    THROWS,
)
from coderdf.graph.storage import MemoryTripleStore
from coderdf.ontology import ValidatingCodeModel, java_ontology
from coderdf.pipeline import ErrorListener, HandlerState, ModelBuilderHandler

P0 = CODER_URI + "jpackage:p0"
C1 = CODER_URI + "jpackage:p0.jclass:C1"
M1 = CODER_URI + "jpackage:p0.jclass:C1.jmethod:m1"


class CollectingListener(ErrorListener):

    def __init__(self):
        self.unresolved = []
        self.parse_errors = []
        self.discrepancies = []

    def unresolved_type(self, handler, name):
        self.unresolved.append(name)

    def parse_error(self, handler, location, description):
        self.parse_errors.append((location, description))

    def package_discrepancy(self, handler, declared, expected):
        self.discrepancies.append((declared, expected))


class TestModelBuilderHandler(unittest.TestCase):
    """Test cases for turning events into triples."""

    def setUp(self):
        self.store = MemoryTripleStore()
        self.symbol_table = SymbolTable()
        self.handler = ModelBuilderHandler(ValidatingCodeModel(self.store, java_ontology()), self.symbol_table)
        self.listener = CollectingListener()
        self.handler.add_error_listener(self.listener)

    def has(self, subject, predicate, obj):
        return any(t.object == obj for t in self.store.search_triples(subject, predicate, None))

    def objects(self, subject, predicate):
        return [t.object for t in self.store.search_triples(subject, predicate, None)]

    def build_simple_library(self):
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_compilation_unit("C1.java")
        self.handler.start_package("p0")
        self.handler.start_class(Visibility.PUBLIC, "p0.C1", [Modifier.FINAL])
        self.handler.method(Visibility.DEFAULT, "p0.C1.m1", ["x"], [INT], VOID, [Modifier.STATIC])
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_compilation_unit()
        self.handler.end_parsing()

    def test_package_class_method(self):
        """Test the triples of a package holding a class with one method."""
        self.build_simple_library()

        self.assertEqual([t.subject for t in self.store.search_triples(None, SUBCLASSOF, JPACKAGE)], [P0])
        self.assertEqual([t.subject for t in self.store.search_triples(None, SUBCLASSOF, JCLASS)], [C1])
        self.assertEqual([t.subject for t in self.store.search_triples(None, SUBCLASSOF, JMETHOD)], [M1])
        self.assertTrue(self.has(CODER_URI + "jpackage:", CONTAINS_PACKAGE, P0))
        self.assertTrue(self.has(P0, CONTAINS_CLASS, C1))
        self.assertEqual(self.objects(C1, HAS_VISIBILITY), ["public"])
        self.assertEqual(self.objects(C1, HAS_MODIFIERS), [str(int(Modifier.FINAL))])
        self.assertTrue(self.has(C1, CONTAINS_METHOD, M1))
        self.assertEqual(self.objects(M1, HAS_VISIBILITY), ["default"])
        self.assertEqual(self.objects(M1, HAS_MODIFIERS), [str(int(Modifier.STATIC))])

        signature = M1 + ".jsignature:_0"
        parameter = signature + ".jparameter:x"
        self.assertTrue(self.has(M1, CONTAINS_SIGNATURE, signature))
        self.assertEqual(self.objects(signature, RETURN_TYPE), [VOID.identifier])
        self.assertTrue(self.has(signature, CONTAINS_PARAMETER, parameter))
        self.assertEqual(self.objects(parameter, PARAMETER_TYPE), [INT.identifier])
        self.assertEqual(self.objects(parameter, PARAMETER_INDEX), ["0"])

        library = CODER_URI + "asset:lib"
        self.assertTrue(self.has(ASSET, CONTAINS_LIBRARY, library))
        self.assertEqual(self.objects(library, LIBRARY_LOCATION), ["/tmp/lib"])
        self.assertEqual(self.listener.unresolved, [])
        self.assertIs(self.handler.state, HandlerState.IDLE)

    def test_unresolved_type_does_not_stop_parsing(self):
        """Test that an unknown type is reported and still referenced."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p")
        self.handler.start_class(Visibility.PUBLIC, "p.C", extended_class=ObjectType(name="q.Missing"))
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()

        class_id = CODER_URI + "jpackage:p.jclass:C"
        self.assertTrue(self.has(class_id, EXTENDS_CLASS, CODER_URI + "jpackage:q.jclass:Missing"))
        self.assertEqual(self.listener.unresolved, ["q.Missing"])
        self.assertEqual(self.handler.unresolved_types, {"q.Missing"})

    def test_types_resolved_by_symbol_table_and_model(self):
        """Test that known names and types already in the model are not reported."""
        self.symbol_table.add("java.util.List")
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p")
        self.handler.start_class(Visibility.PUBLIC, "p.A")
        self.handler.end_class()
        self.handler.start_class(Visibility.PUBLIC, "p.B", extended_class=ObjectType(name="p.A"),
                                 implemented_interfaces=[InterfaceType(name="java.util.List")])
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()
        self.assertEqual(self.listener.unresolved, [])

    def test_default_package_class(self):
        """Test that a class outside any package hangs from the default package."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_class(Visibility.DEFAULT, "C")
        self.handler.end_class()
        self.handler.end_parsing()
        self.assertTrue(self.has(CODER_URI + "jpackage:", CONTAINS_CLASS, CODER_URI + "jclass:C"))

    def test_nested_types(self):
        """Test that a nested class is contained by its outer class."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p")
        self.handler.start_class(Visibility.PUBLIC, "p.Outer")
        self.handler.start_class(Visibility.PRIVATE, "p.Outer.Inner", [Modifier.STATIC])
        self.handler.end_class()
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()

        outer = CODER_URI + "jpackage:p.jclass:Outer"
        self.assertTrue(self.has(outer, CONTAINS_CLASS, outer + ".Inner"))
        self.assertEqual(self.listener.discrepancies, [])

    def test_package_discrepancy(self):
        """Test that a declared outer name not matching the scope is reported."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p")
        self.handler.start_class(Visibility.PUBLIC, "q.C")
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()
        self.assertEqual(self.listener.discrepancies, [("q", "p")])
        self.assertTrue(self.has(CODER_URI + "jpackage:p", CONTAINS_CLASS, CODER_URI + "jpackage:p.jclass:C"))

    def test_overloads_and_constructors(self):
        """Test that overloads share the method and constructors are numbered."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p")
        self.handler.start_class(Visibility.PUBLIC, "p.C")
        self.handler.constructor(Visibility.PUBLIC, 0, [], [])
        self.handler.constructor(Visibility.PRIVATE, 1, ["x"], [INT],
                                 exceptions=[ExceptionType(name="java.io.IOException")])
        self.handler.method(Visibility.PUBLIC, "m", [], [], VOID)
        self.handler.method(Visibility.PUBLIC, "m", ["x"], [INT], primitive_type("long"), overload_index=1)
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()

        class_id = CODER_URI + "jpackage:p.jclass:C"
        constructors = sorted(self.objects(class_id, CONTAINS_CONSTRUCTOR))
        self.assertEqual(constructors, [class_id + ".jconstructor:_0", class_id + ".jconstructor:_1"])
        signature = class_id + ".jconstructor:_1.jsignature:_1"
        self.assertTrue(self.has(signature, THROWS, CODER_URI + "jpackage:java.io.jclass:IOException"))
        self.assertEqual(self.objects(signature, RETURN_TYPE), [])

        method = class_id + ".jmethod:m"
        self.assertEqual(self.objects(class_id, CONTAINS_METHOD), [method])
        self.assertEqual(sorted(self.objects(method, CONTAINS_SIGNATURE)),
                         [method + ".jsignature:_0", method + ".jsignature:_1"])

    def test_enumeration(self):
        """Test that enumeration constants are stored as a collection."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p")
        self.handler.start_enumeration(Visibility.PUBLIC, "p.Color", ["RED", "GREEN"])
        self.handler.constructor(Visibility.PRIVATE, 0, [], [])
        self.handler.end_enumeration()
        self.handler.end_package()
        self.handler.end_parsing()
        enumeration = CODER_URI + "jpackage:p.jenumeration:Color"
        self.assertEqual(self.objects(enumeration, CONTAINS_ELEMENT), ["RED", "GREEN"])

    def test_unbalanced_scopes(self):
        """Test that mismatched end events are rejected."""
        self.handler.start_parsing("lib", "/tmp/lib")
        with self.assertRaises(UnbalancedScopeError):
            self.handler.end_package()
        self.handler.start_package("p")
        self.handler.start_class(Visibility.PUBLIC, "p.C")
        with self.assertRaises(UnbalancedScopeError):
            self.handler.end_package()
        with self.assertRaises(UnbalancedScopeError):
            self.handler.end_parsing()
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()

    def test_compilation_unit_must_close_its_scopes(self):
        """Test that a compilation unit cannot end with open scopes or close outer ones."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_compilation_unit("A.java")
        self.handler.start_package("p")
        with self.assertRaises(UnbalancedScopeError):
            self.handler.end_compilation_unit()
        with self.assertRaises(UnbalancedScopeError):
            self.handler.start_compilation_unit("B.java")

    def test_members_outside_types(self):
        """Test that members need an enclosing type."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p")
        with self.assertRaises(CodeHandlerError):
            self.handler.method(Visibility.PUBLIC, "m", [], [], VOID)
        self.handler.start_interface("p.I")
        with self.assertRaises(CodeHandlerError):
            self.handler.constructor(Visibility.PUBLIC, 0, [], [])

    def test_events_before_start(self):
        """Test that events outside a run are rejected."""
        with self.assertRaises(CodeHandlerError):
            self.handler.start_package("p")
        with self.assertRaises(CodeHandlerError):
            self.handler.end_parsing()

    def test_duplicate_library(self):
        """Test that a library name can only be parsed once per model."""
        self.build_simple_library()
        with self.assertRaises(CodeHandlerError):
            self.handler.start_parsing("lib", "/tmp/other")

    def test_invalid_library_names(self):
        """Test the validation of library names and locations."""
        for name, location in (("", "/tmp"), ("a#b", "/tmp"), ("lib", "")):
            with self.assertRaises(CodeHandlerError):
                self.handler.start_parsing(name, location)

    def test_dotted_package(self):
        """Test that a dotted package is one entity under the default package."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("a.b")
        self.handler.end_package()
        self.handler.end_parsing()
        package = CODER_URI + "jpackage:a.b"
        self.assertTrue(self.has(CODER_URI + "jpackage:", CONTAINS_PACKAGE, package))
        self.assertEqual([t.subject for t in self.store.search_triples(None, SUBCLASSOF, JPACKAGE)], [package])

    def test_package_must_be_nested(self):
        """Test that a package opened in another one extends its name."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("a")
        self.handler.start_package("a.b")
        self.assertTrue(self.has(CODER_URI + "jpackage:a", CONTAINS_PACKAGE, CODER_URI + "jpackage:a.b"))
        with self.assertRaises(CodeHandlerError):
            self.handler.start_package("c")

    def test_schema_violation_keeps_state(self):
        """Test that a rejected event leaves the scope stack and the model untouched."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p")
        self.handler.start_class(Visibility.PUBLIC, "p.C")
        count = self.store.count_triples()
        with self.assertRaises(SchemaViolationError):
            # Interfaces cannot be extended by a class
            self.handler.start_class(Visibility.PUBLIC, "p.C.D", extended_class=InterfaceType(name="p.I"))
        self.assertEqual(self.handler.depth, 2)
        self.assertEqual(self.store.count_triples(), count)
        self.assertEqual([t.subject for t in self.store.search_triples(None, SUBCLASSOF, JCLASS)],
                         [CODER_URI + "jpackage:p.jclass:C"])
        self.assertEqual(self.listener.unresolved, [])
        self.assertEqual(self.handler.unresolved_types, set())
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()

    def test_rejected_member_is_rolled_back(self):
        """Test that a member event failing halfway writes nothing."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p0")
        self.handler.start_class(Visibility.PUBLIC, "p0.C1")
        self.handler.method(Visibility.DEFAULT, "m1", ["x"], [INT], VOID)
        count = self.store.count_triples()

        with self.assertRaises(ValueError):
            self.handler.method(Visibility.PUBLIC, "m2", ["x", "y"], [ObjectType(name="q.Missing")], VOID)
        # The method entity already existed, so it must survive the rollback
        with self.assertRaises(ValueError):
            self.handler.method(Visibility.DEFAULT, "m1", ["x", "y"], [INT], VOID, overload_index=1)

        self.assertEqual(self.store.count_triples(), count)
        self.assertEqual([t.subject for t in self.store.search_triples(None, SUBCLASSOF, JMETHOD)], [M1])
        self.assertEqual(self.listener.unresolved, [])
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()

    def test_nested_type_reference(self):
        """Test that a reference to a nested type points at the declared entity."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p")
        self.handler.start_class(Visibility.PUBLIC, "p.Outer")
        self.handler.start_class(Visibility.PUBLIC, "p.Outer.Inner", [Modifier.STATIC])
        self.handler.end_class()
        self.handler.method(Visibility.PUBLIC, "make", ["items"], [ArrayType(element=ObjectType(name="p.Outer.Inner"))],
                            ObjectType(name="p.Outer.Inner"))
        self.handler.end_class()
        self.handler.start_class(Visibility.PUBLIC, "p.Sub", extended_class=ObjectType(name="p.Outer.Inner"))
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()

        inner = CODER_URI + "jpackage:p.jclass:Outer.Inner"
        signature = CODER_URI + "jpackage:p.jclass:Outer.jmethod:make.jsignature:_0"
        self.assertEqual(self.objects(signature, RETURN_TYPE), [inner])
        self.assertEqual(self.objects(signature + ".jparameter:items", PARAMETER_TYPE),
                         [ArrayType(element=ObjectType(name="p.Outer.Inner", enclosing=CODER_URI + "jpackage:p.jclass:Outer")).identifier])
        self.assertTrue(self.has(CODER_URI + "jpackage:p.jclass:Sub", EXTENDS_CLASS, inner))
        self.assertEqual(self.listener.unresolved, [])

    def test_nested_type_from_symbol_table(self):
        """Test that a nested type known to the symbol table gets its outer type qualifier."""
        self.symbol_table.add("q.Map")
        self.symbol_table.add("q.Map.Entry")
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.start_package("p")
        self.handler.start_class(Visibility.PUBLIC, "p.C")
        self.handler.method(Visibility.PUBLIC, "entry", [], [], ObjectType(name="q.Map.Entry"))
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()

        signature = CODER_URI + "jpackage:p.jclass:C.jmethod:entry.jsignature:_0"
        self.assertEqual(self.objects(signature, RETURN_TYPE), [CODER_URI + "jpackage:q.jclass:Map.Entry"])
        self.assertEqual(self.handler.declared_type("q.Map.Entry").identifier,
                         CODER_URI + "jpackage:q.jclass:Map.Entry")
        self.assertIsNone(self.handler.declared_type("q.Other"))
        self.assertEqual(self.listener.unresolved, [])

    def test_parse_error(self):
        """Test that parse errors are recorded and forwarded."""
        self.handler.start_parsing("lib", "/tmp/lib")
        self.handler.parse_error("A.java:3:1", "Syntax error")
        self.handler.end_parsing()
        self.assertEqual(self.handler.errors, ["A.java:3:1: Syntax error"])
        self.assertEqual(self.listener.parse_errors, [("A.java:3:1", "Syntax error")])


if __name__ == "__main__":
    unittest.main()
