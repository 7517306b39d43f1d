"""
Tests for the statistics handler decorator.
"""
import unittest

from coderdf.core import CodeHandlerError, ObjectType, SchemaViolationError, UnbalancedScopeError, Visibility
from coderdf.core.types import INT, InterfaceType, VOID
from coderdf.graph.storage import MemoryTripleStore
from coderdf.ontology import ValidatingCodeModel, java_ontology
from coderdf.pipeline import JavadocEntry, ModelBuilderHandler, ParseStatistics, StatisticsHandler


class TestStatisticsHandler(unittest.TestCase):
    """Test cases for counting forwarded events."""

    def setUp(self):
        self.store = MemoryTripleStore()
        self.builder = ModelBuilderHandler(ValidatingCodeModel(self.store, java_ontology()))
        self.handler = StatisticsHandler(self.builder)

    def drive_scenario(self, parameter_type=INT):
        self.handler.start_parsing("lib", "/loc")
        self.handler.start_package("p0")
        self.handler.start_class(Visibility.PUBLIC, "p0.C1")
        self.handler.method(Visibility.DEFAULT, "p0.C1.m1", ["x"], [parameter_type], VOID)
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()

    def test_counts_one_per_event(self):
        """Test the counters of the package/class/method scenario."""
        self.drive_scenario()
        counters = self.handler.statistics.counters()
        self.assertEqual(counters["packages"], 1)
        self.assertEqual(counters["classes"], 1)
        self.assertEqual(counters["methods"], 1)
        for never_seen in ("interfaces", "enumerations", "attributes", "constructors", "parse_errors",
                           "unresolved", "compilation_units", "javadoc_entries", "classes_javadoc",
                           "methods_javadoc"):
            self.assertEqual(counters[never_seen], 0)
        self.assertEqual(self.store.count_triples(), len(list(self.builder.model.search_triples())))

    def test_unresolved_type_counted_once(self):
        """Test that an unknown parameter type is counted and does not raise."""
        self.drive_scenario(ObjectType(name="q.Missing"))
        statistics = self.handler.statistics
        self.assertEqual(statistics.unresolved, 1)
        self.assertEqual(statistics.unresolved_types, ["q.Missing"])

    def test_frozen_after_end_parsing(self):
        """Test that counters are immutable after end_parsing until reset."""
        self.drive_scenario()
        frozen = self.handler.statistics
        self.assertTrue(self.handler.frozen)

        self.handler.start_parsing("other", "/loc")
        self.handler.start_package("p1")
        self.assertEqual(self.handler.statistics.packages, frozen.packages)
        self.assertEqual(self.handler.statistics.parsing_time, frozen.parsing_time)

        self.handler.reset()
        self.assertFalse(self.handler.frozen)
        self.assertEqual(self.handler.statistics.packages, 0)
        self.handler.start_class(Visibility.PUBLIC, "p1.C")
        self.assertEqual(self.handler.statistics.classes, 1)

    def test_rejected_event_not_counted(self):
        """Test that an event refused by the wrapped handler propagates and is not counted."""
        self.handler.start_parsing("lib", "/loc")
        self.handler.start_package("p0")
        self.handler.start_class(Visibility.PUBLIC, "p0.C1")
        with self.assertRaises(UnbalancedScopeError):
            self.handler.end_parsing()
        with self.assertRaises(CodeHandlerError):
            self.handler.start_package("q")
        self.assertEqual(self.handler.statistics.packages, 1)
        self.assertFalse(self.handler.frozen)

    def test_unresolved_type_of_rejected_event_not_counted(self):
        """Test that a type reported by an event that then fails is not counted."""
        self.handler.start_parsing("lib", "/loc")
        self.handler.start_package("p")
        with self.assertRaises(SchemaViolationError):
            self.handler.start_class(Visibility.PUBLIC, "p.C", extended_class=InterfaceType(name="q.I"))
        statistics = self.handler.statistics
        self.assertEqual(statistics.classes, 0)
        self.assertEqual(statistics.unresolved, 0)
        self.assertEqual(statistics.unresolved_types, [])

    def test_notification_before_failure_discarded(self):
        """Test that a wrapped handler reporting a type and then raising leaves no count."""

        class FailingAttributeHandler(ModelBuilderHandler):

            def attribute(self, visibility, name, attribute_type, modifiers=(), value=None):
                self.notify_unresolved_type(attribute_type.referenced_name)
                raise CodeHandlerError(f"Cannot handle attribute {name}")

        handler = StatisticsHandler(FailingAttributeHandler(ValidatingCodeModel(self.store, java_ontology())))
        handler.start_parsing("lib", "/loc")
        handler.start_package("p")
        handler.start_class(Visibility.PUBLIC, "p.C")
        with self.assertRaises(CodeHandlerError):
            handler.attribute(Visibility.PRIVATE, "a", ObjectType(name="q.Missing"))
        handler.method(Visibility.PUBLIC, "m", [], [], ObjectType(name="q.Other"))
        statistics = handler.statistics
        self.assertEqual(statistics.attributes, 0)
        self.assertEqual(statistics.methods, 1)
        self.assertEqual(statistics.unresolved, 1)
        self.assertEqual(statistics.unresolved_types, ["q.Other"])

    def test_documentation_counters(self):
        """Test that documentation events are forwarded and counted."""
        entry = JavadocEntry(short_description="Adds one.", tags={"@param": ["x the value"]}, row=3, column=5)
        self.handler.start_parsing("lib", "/loc")
        self.handler.start_package("p0")
        self.handler.start_class(Visibility.PUBLIC, "p0.C1")
        count = self.store.count_triples()
        self.handler.parsed_entry(entry)
        self.handler.class_javadoc(entry, "p0.C1")
        self.handler.parsed_entry(entry)
        self.handler.method_javadoc(entry, "p0.C1.m1", ["int"])
        # Documentation never reaches the model
        self.assertEqual(self.store.count_triples(), count)
        self.handler.end_class()
        self.handler.end_package()
        self.handler.end_parsing()

        counters = self.handler.statistics.counters()
        self.assertEqual(counters["javadoc_entries"], 2)
        self.assertEqual(counters["classes_javadoc"], 1)
        self.assertEqual(counters["methods_javadoc"], 1)
        self.assertIn("javadoc entries: 2", self.handler.report())

    def test_parse_errors(self):
        """Test that parse errors are counted and kept."""
        self.handler.start_parsing("lib", "/loc")
        self.handler.start_compilation_unit("A.java")
        self.handler.parse_error("A.java:1:1", "Syntax error")
        self.handler.end_compilation_unit()
        self.handler.end_parsing()
        statistics = self.handler.statistics
        self.assertEqual(statistics.compilation_units, 1)
        self.assertEqual(statistics.parse_errors, 1)
        self.assertEqual(statistics.errors, ["A.java:1:1: Syntax error"])

    def test_report(self):
        """Test the printable report."""
        self.drive_scenario(ObjectType(name="q.Missing"))
        lines = self.handler.report()
        self.assertIn("classes: 1", lines)
        self.assertIn("unresolved types: q.Missing", lines)
        self.assertTrue(any(line.startswith("parsing time: ") for line in lines))

    def test_statistics_model(self):
        """Test the snapshot defaults."""
        statistics = ParseStatistics()
        self.assertEqual(set(statistics.counters().values()), {0})
        self.assertEqual(str(statistics).splitlines()[0], "compilation units: 0")


if __name__ == "__main__":
    unittest.main()
