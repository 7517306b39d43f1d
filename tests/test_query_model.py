"""
Tests for the query model.
"""
import unittest

from coderdf.core import InterfaceType, Modifier, ObjectType, QueryModelError, SymbolTable, Visibility
from coderdf.core.types import INT, VOID, ArrayType, ExceptionType
from coderdf.core.vocabulary import CODER_URI
from coderdf.graph.storage import MemoryTripleStore
from coderdf.ontology import ValidatingCodeModel, java_ontology
from coderdf.pipeline import ModelBuilderHandler
from coderdf.query import JavaQueryModel


class TestJavaQueryModel(unittest.TestCase):
    """Test cases for reading entities back from a model."""

    @classmethod
    def setUpClass(cls):
        cls.store = MemoryTripleStore()
        symbol_table = SymbolTable()
        symbol_table.add("java.io.IOException")
        handler = ModelBuilderHandler(ValidatingCodeModel(cls.store, java_ontology()), symbol_table)

        handler.start_parsing("shapes", "/src/shapes")
        handler.start_package("geo")
        handler.start_interface("geo.Shape")
        handler.method(Visibility.PUBLIC, "area", [], [], INT, [Modifier.ABSTRACT])
        handler.end_interface()
        handler.start_class(Visibility.PUBLIC, "geo.Square", [Modifier.FINAL],
                            implemented_interfaces=[InterfaceType(name="geo.Shape")])
        handler.attribute(Visibility.PRIVATE, "side", INT, [Modifier.FINAL], "1")
        handler.constructor(Visibility.PUBLIC, 0, [], [])
        handler.constructor(Visibility.PUBLIC, 1, ["side"], [INT],
                            exceptions=[ExceptionType(name="java.io.IOException")])
        handler.method(Visibility.PUBLIC, "area", [], [], INT)
        handler.method(Visibility.PUBLIC, "scale", ["x", "y"], [INT, ArrayType(element=INT)], VOID)
        handler.method(Visibility.PUBLIC, "scale", ["factor"], [INT], VOID, overload_index=1)
        handler.start_class(Visibility.PRIVATE, "geo.Square.Corner", [Modifier.STATIC])
        handler.end_class()
        handler.end_class()
        handler.start_enumeration(Visibility.PUBLIC, "geo.Kind", ["SQUARE", "CIRCLE", "TRIANGLE"])
        handler.end_enumeration()
        handler.start_package("geo.util")
        handler.start_class(Visibility.DEFAULT, "geo.util.Helper", extended_class=ObjectType(name="geo.Square"))
        handler.end_class()
        handler.end_package()
        handler.end_package()
        handler.end_parsing()

    def setUp(self):
        self.query = JavaQueryModel(self.store)

    def test_existence(self):
        """Test the existence checks."""
        self.assertTrue(self.query.package_exists("geo"))
        self.assertTrue(self.query.package_exists("geo.util"))
        self.assertFalse(self.query.package_exists("other"))
        self.assertTrue(self.query.class_exists("geo.Square"))
        self.assertTrue(self.query.class_exists("geo.Square.Corner"))
        self.assertFalse(self.query.class_exists("geo.Shape"))
        self.assertTrue(self.query.interface_exists("geo.Shape"))
        self.assertTrue(self.query.enumeration_exists("geo.Kind"))
        self.assertTrue(self.query.attribute_exists("geo.Square", "side"))
        self.assertFalse(self.query.attribute_exists("geo.Square", "area"))
        self.assertTrue(self.query.method_exists("geo.Square", "scale"))
        self.assertFalse(self.query.method_exists("geo.Missing", "scale"))

    def test_names_or_identifiers(self):
        """Test that identifiers are accepted wherever names are."""
        identifier = CODER_URI + "jpackage:geo.jclass:Square"
        self.assertTrue(self.query.class_exists(identifier))
        self.assertEqual(self.query.get_class(identifier), self.query.get_class("geo.Square"))

    def test_listings(self):
        """Test listing every entity of a kind."""
        self.assertEqual([p.qualified_name for p in self.query.get_all_packages()], ["geo", "geo.util"])
        self.assertEqual(sorted(c.qualified_name for c in self.query.get_all_classes()),
                         ["geo.Square", "geo.Square.Corner", "geo.util.Helper"])
        self.assertEqual([i.name for i in self.query.get_all_interfaces()], ["Shape"])
        self.assertEqual([e.name for e in self.query.get_all_enumerations()], ["Kind"])

    def test_class_details(self):
        """Test the class view."""
        square = self.query.get_class("geo.Square")
        self.assertEqual(square.name, "Square")
        self.assertEqual(square.visibility, Visibility.PUBLIC)
        self.assertEqual(square.modifiers, (Modifier.FINAL,))
        self.assertEqual(square.implemented_interfaces, [CODER_URI + "jpackage:geo.jinterface:Shape"])
        self.assertIsNone(square.extended_class)

        helper = self.query.get_class("geo.util.Helper")
        self.assertEqual(helper.extended_class, square.id)
        self.assertEqual(helper.visibility, Visibility.DEFAULT)

    def test_contents(self):
        """Test listing the content of packages and types."""
        self.assertEqual([p.name for p in self.query.get_packages_into()], ["geo"])
        self.assertEqual([p.name for p in self.query.get_packages_into("geo")], ["util"])
        self.assertEqual([c.name for c in self.query.get_classes_into("geo")], ["Square"])
        self.assertEqual([c.name for c in self.query.get_classes_into("geo.Square")], ["Corner"])
        self.assertEqual([i.name for i in self.query.get_interfaces_into("geo")], ["Shape"])
        self.assertEqual([e.name for e in self.query.get_enumerations_into("geo")], ["Kind"])
        self.assertEqual(self.query.get_classes_into(), [])
        self.assertEqual([a.name for a in self.query.get_attributes_into("geo.Square")], ["side"])
        self.assertEqual([m.name for m in self.query.get_methods_into("geo.Square")], ["area", "scale"])
        self.assertEqual([m.name for m in self.query.get_methods_into("geo.Shape")], ["area"])
        self.assertEqual(len(self.query.get_constructors_into("geo.Square")), 2)

    def test_attribute(self):
        """Test the attribute view."""
        side = self.query.get_attribute("geo.Square", "side")
        self.assertEqual(side.type, INT.identifier)
        self.assertEqual(side.value, "1")
        self.assertEqual(side.visibility, Visibility.PRIVATE)
        self.assertEqual(side.modifiers, (Modifier.FINAL,))

    def test_method_signatures(self):
        """Test overloads, parameters and return types."""
        scale = self.query.get_method("geo.Square", "scale")
        self.assertEqual(len(scale.signatures), 2)
        first = scale.signatures[0]
        self.assertEqual([p.name for p in first.parameters], ["x", "y"])
        self.assertEqual([p.index for p in first.parameters], [0, 1])
        self.assertEqual(first.parameters[1].type, ArrayType(element=INT).identifier)
        self.assertEqual(self.query.get_return_type(first.id), VOID)

        area = self.query.get_method("geo.Shape", "area")
        self.assertEqual(area.modifiers, (Modifier.ABSTRACT,))

    def test_constructors(self):
        """Test constructor signatures and their exceptions."""
        constructors = self.query.get_constructors_into("geo.Square")
        signature = constructors[1].signatures[0]
        self.assertEqual([p.name for p in signature.parameters], ["side"])
        self.assertEqual(signature.exceptions, [CODER_URI + "jpackage:java.io.jclass:IOException"])
        self.assertIsNone(self.query.get_return_type(signature.id))

    def test_enumeration(self):
        """Test the enumeration constants keep their order."""
        self.assertEqual(self.query.get_elements("geo.Kind"), ["SQUARE", "CIRCLE", "TRIANGLE"])
        self.assertEqual(self.query.get_enumeration("geo.Kind").elements, ["SQUARE", "CIRCLE", "TRIANGLE"])

    def test_libraries(self):
        """Test the library asset."""
        libraries = self.query.get_libraries()
        self.assertEqual([library.name for library in libraries], ["shapes"])
        self.assertEqual(libraries[0].location, "/src/shapes")
        self.assertIsNotNone(libraries[0].date)

    def test_missing_entities(self):
        """Test that lookups of missing entities raise."""
        with self.assertRaises(QueryModelError):
            self.query.get_class("geo.Missing")
        with self.assertRaises(QueryModelError):
            self.query.get_package("other")
        with self.assertRaises(QueryModelError):
            self.query.get_method("geo.Square", "missing")
        with self.assertRaises(QueryModelError):
            self.query.get_attribute("geo.Missing", "side")
        with self.assertRaises(QueryModelError):
            self.query.get_signatures(CODER_URI + "jpackage:geo.jclass:Square")
        with self.assertRaises(QueryModelError):
            self.query.get_constructors_into("geo.Shape")


if __name__ == "__main__":
    unittest.main()
