"""
rdflib implementation of the triple store interface.
"""
import os
from typing import Any, Iterator, Optional

from rdflib import Graph, Literal, Namespace, URIRef
from rdflib.namespace import RDFS

from ...core.vocabulary import CODER_URI
from .base import ALL_MATCH, BaseTripleStore, Triple

CODER = Namespace(CODER_URI)


class RDFLibTripleStore(BaseTripleStore):
    """
    Triple store backed by an ``rdflib.Graph``.

    Resources are stored as ``URIRef`` and literals as plain ``Literal`` nodes,
    so the model can be exported to and loaded from any RDF serialization.
    """

    def __init__(self, graph: Optional[Graph] = None, source: Optional[str] = None,
                 source_format: str = "turtle", **kwargs: Any):
        """
        Initialize the rdflib store.

        Args:
            graph: Existing graph to wrap. A new one is created when omitted.
            source: Optional RDF file loaded at construction.
            source_format: rdflib format name of ``source``.
            **kwargs: Additional implementation-specific arguments
        """
        super().__init__(**kwargs)
        self.graph = graph if graph is not None else Graph()
        self.graph.bind("coder", CODER)
        self.graph.bind("rdfs", RDFS)
        self.is_connected = True
        if source:
            self.load(source, source_format)

    @staticmethod
    def _to_node(triple: Triple):
        return Literal(triple.object) if triple.literal else URIRef(triple.object)

    def _add(self, triple: Triple) -> None:
        self.graph.add((URIRef(triple.subject), URIRef(triple.predicate), self._to_node(triple)))

    def _remove(self, triple: Triple) -> None:
        self.graph.remove((URIRef(triple.subject), URIRef(triple.predicate), self._to_node(triple)))

    def search_triples(self, subject: Optional[str] = ALL_MATCH, predicate: Optional[str] = ALL_MATCH,
                       obj: Optional[str] = ALL_MATCH) -> Iterator[Triple]:
        subject_node = URIRef(subject) if subject is not ALL_MATCH else None
        predicate_node = URIRef(predicate) if predicate is not ALL_MATCH else None
        if obj is ALL_MATCH:
            object_nodes = [None]
        else:
            # An object value can match both a resource and a literal
            object_nodes = [URIRef(obj), Literal(obj)]

        matches = []
        for object_node in object_nodes:
            for s, p, o in self.graph.triples((subject_node, predicate_node, object_node)):
                matches.append(Triple(str(s), str(p), str(o), isinstance(o, Literal)))
        return iter(matches)

    def clear_all(self) -> None:
        self.graph.remove((None, None, None))
        self.logger.debug("rdflib graph cleared")

    def count_triples(self) -> int:
        return len(self.graph)

    def save(self, path: str, format: str = "turtle") -> None:
        """
        Serialize the model to a file.

        Args:
            path: Destination file
            format: rdflib serialization format (turtle, xml, nt, ...)
        """
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        self.graph.serialize(destination=path, format=format)
        self.logger.info(f"Exported {len(self.graph)} triples to {path}")

    def load(self, path: str, format: str = "turtle") -> None:
        """Load triples from an RDF file, adding them to the current model."""
        if not os.path.exists(path):
            raise FileNotFoundError(f"RDF file not found: {path}")
        self.graph.parse(path, format=format)
        self.logger.info(f"Loaded {len(self.graph)} triples from {path}")
