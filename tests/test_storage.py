"""
Tests for the triple stores.
"""
import os
import tempfile
import unittest

from rdflib import Literal, URIRef
from rdflib.namespace import RDF, RDFS

from coderdf.core import MalformedTripleError
from coderdf.graph.storage import (
    MemoryTripleStore,
    RDFLibTripleStore,
    Triple,
    TripleStore,
    get_storage_implementation,
)

S1 = "http://example.org/#jclass:S1"
S2 = "http://example.org/#jclass:S2"
P1 = "http://example.org/#p1"
P2 = "http://example.org/#p2"
O1 = "http://example.org/#jclass:O1"


class StoreContract:
    """Behaviour shared by every triple store."""

    def create_store(self):
        raise NotImplementedError

    def setUp(self):
        self.store = self.create_store()

    def test_implements_protocol(self):
        """Test that the store satisfies the TripleStore protocol."""
        self.assertIsInstance(self.store, TripleStore)

    def test_add_is_idempotent(self):
        """Test that adding the same triple twice stores it once."""
        self.store.add_triple(S1, P1, O1)
        self.store.add_triple(S1, P1, O1)
        self.assertEqual(self.store.count_triples(), 1)

    def test_wildcard_search(self):
        """Test matching with ALL_MATCH in any position."""
        self.store.add_triple(S1, P1, O1)
        self.store.add_triple(S2, P1, O1)
        self.store.add_triple_literal(S1, P2, "value")

        self.assertEqual(len(list(self.store.search_triples())), 3)
        self.assertEqual({t.subject for t in self.store.search_triples(None, P1, None)}, {S1, S2})
        self.assertEqual(len(list(self.store.search_triples(S1, None, None))), 2)
        self.assertEqual(list(self.store.search_triples(None, None, "value")),
                         [Triple(S1, P2, "value", True)])
        self.assertEqual(list(self.store.search_triples(S2, P2, None)), [])

    def test_literal_and_resource_are_distinct(self):
        """Test that a literal never matches as a resource and the other way round."""
        self.store.add_triple_literal(S1, P1, "text")
        self.store.add_triple(S1, P1, O1)
        triples = {t.object: t for t in self.store.search_triples(S1, P1, None)}
        self.assertTrue(triples["text"].literal)
        self.assertFalse(triples[O1].literal)

        self.store.remove_triple(S1, P1, "text")
        self.assertEqual(self.store.count_triples(), 2)
        self.store.remove_triple_literal(S1, P1, "text")
        self.assertEqual(self.store.count_triples(), 1)

    def test_collection(self):
        """Test that a collection adds one literal per value."""
        self.store.add_triple_collection(S1, P1, ["A", "B", "C"])
        values = sorted(t.object for t in self.store.search_triples(S1, P1, None))
        self.assertEqual(values, ["A", "B", "C"])

    def test_remove_missing_triple(self):
        """Test that removing an absent triple does nothing."""
        self.store.add_triple(S1, P1, O1)
        self.store.remove_triple(S2, P1, O1)
        self.assertEqual(self.store.count_triples(), 1)

    def test_malformed_triples(self):
        """Test that empty or missing terms are rejected."""
        with self.assertRaises(MalformedTripleError):
            self.store.add_triple("", P1, O1)
        with self.assertRaises(MalformedTripleError):
            self.store.add_triple(S1, None, O1)
        with self.assertRaises(MalformedTripleError):
            self.store.add_triple(S1, P1, "")
        with self.assertRaises(MalformedTripleError):
            self.store.add_triple_literal(S1, P1, None)
        with self.assertRaises(MalformedTripleError):
            self.store.add_triple_collection(S1, P1, "ABC")
        self.assertEqual(self.store.count_triples(), 0)

    def test_empty_literal_accepted(self):
        """Test that an empty literal value is a valid object."""
        self.store.add_triple_literal(S1, P1, "")
        self.assertEqual(self.store.count_triples(), 1)

    def test_search_iterator_is_a_snapshot(self):
        """Test that the store can be modified while iterating a search."""
        self.store.add_triple(S1, P1, O1)
        self.store.add_triple(S2, P1, O1)
        for triple in self.store.search_triples(None, P1, None):
            self.store.remove_triple(triple.subject, triple.predicate, triple.object)
        self.assertEqual(self.store.count_triples(), 0)

    def test_clear_all(self):
        """Test removing every triple."""
        self.store.add_triple(S1, P1, O1)
        self.store.add_triple_literal(S1, P2, "value")
        self.store.clear_all()
        self.assertEqual(self.store.count_triples(), 0)

    def test_statistics(self):
        """Test the triple counts by predicate."""
        self.store.add_triple(S1, P1, O1)
        self.store.add_triple(S2, P1, O1)
        self.store.add_triple_literal(S1, P2, "value")
        stats = self.store.get_statistics()
        self.assertEqual(stats["total_triples"], 3)
        self.assertEqual(stats["predicate_counts"], {P1: 2, P2: 1})


class TestMemoryTripleStore(StoreContract, unittest.TestCase):
    """Test cases for the in-memory store."""

    def create_store(self):
        return MemoryTripleStore()

    def test_search_keeps_insertion_order(self):
        """Test that matches come back in insertion order."""
        self.store.add_triple_collection(S1, P1, ["C", "A", "B"])
        self.assertEqual([t.object for t in self.store.search_triples(S1, P1, None)], ["C", "A", "B"])


class TestRDFLibTripleStore(StoreContract, unittest.TestCase):
    """Test cases for the rdflib store."""

    def create_store(self):
        return RDFLibTripleStore()

    def test_save_and_load(self):
        """Test that a saved model loads back with the same triples."""
        self.store.add_triple(S1, P1, O1)
        self.store.add_triple_literal(S1, P2, "value")

        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "model.ttl")
            self.store.save(path)
            self.assertTrue(os.path.exists(path))

            loaded = RDFLibTripleStore(source=path)
            self.assertEqual(loaded.count_triples(), 2)
            literal = next(iter(loaded.search_triples(S1, P2, None)))
            self.assertTrue(literal.literal)
            self.assertEqual(literal.object, "value")

    def test_collection_values_are_plain_literals(self):
        """Test that a collection is stored as plain literal triples, without any member list."""
        self.store.add_triple_collection(S1, P1, ["C", "A", "C"])
        self.assertEqual(self.store.count_triples(), 2)
        self.assertEqual(set(self.store.graph.objects(URIRef(S1), URIRef(P1))), {Literal("A"), Literal("C")})
        self.assertEqual(list(self.store.graph.triples((None, RDFS.member, None))), [])
        self.assertEqual(list(self.store.graph.triples((None, RDF.first, None))), [])
        self.assertTrue(all(t.literal for t in self.store.search_triples(S1, P1, None)))

    def test_load_missing_file(self):
        """Test that loading a missing file fails."""
        with self.assertRaises(FileNotFoundError):
            self.store.load("/nonexistent/model.ttl")


class TestStorageFactory(unittest.TestCase):
    """Test cases for the storage factory."""

    def test_known_types(self):
        """Test that the factory builds the requested stores."""
        self.assertIsInstance(get_storage_implementation("memory"), MemoryTripleStore)
        self.assertIsInstance(get_storage_implementation("rdflib"), RDFLibTripleStore)

    def test_unknown_type(self):
        """Test that an unknown storage type is rejected."""
        with self.assertRaises(ValueError):
            get_storage_implementation("unknown")


if __name__ == "__main__":
    unittest.main()
