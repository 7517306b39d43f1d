"""
Main CodeModel class tying a store, the ontology and the symbol table together.
"""
from typing import Any, Dict, Iterator, Optional
import logging

from ..graph.storage import ALL_MATCH, RDFLibTripleStore, Triple, get_storage_implementation
from ..ontology import Ontology, ValidatingCodeModel, java_ontology
from ..pipeline import CodeHandler, ModelBuilderHandler, ParseStatistics, StatisticsHandler
from ..query import JavaQueryModel
from .symbol_table import SymbolTable


class CodeModel:
    """
    A code model session.

    Owns the storage backend, wraps it in a ``ValidatingCodeModel`` enforcing
    the Java ontology and keeps the symbol table used to resolve references.
    """

    def __init__(self, storage_type: str = "memory", storage_config: Optional[Dict[str, Any]] = None,
                 ontology: Optional[Ontology] = None, symbol_table: Optional[SymbolTable] = None):
        """
        Initialize a new code model.

        Args:
            storage_type: Type of storage backend ('memory', 'rdflib', 'kuzudb')
            storage_config: Configuration for the storage backend
            ontology: Ontology enforced on writes, the Java profile by default
            symbol_table: Known type names, an empty table by default
        """
        self.logger = logging.getLogger(__name__)

        if storage_config is None:
            storage_config = {}

        self.storage_type = storage_type
        self.storage = get_storage_implementation(storage_type, **storage_config)
        if not self.storage.is_connected:
            self.storage.connect()

        self.ontology = ontology if ontology is not None else java_ontology()
        self.model = ValidatingCodeModel(self.storage, self.ontology)
        self.symbol_table = symbol_table if symbol_table is not None else SymbolTable()
        self._statistics_handler: Optional[StatisticsHandler] = None
        self.logger.info(f"Initialized code model with {storage_type} storage backend")

    def create_handler(self, with_statistics: bool = True) -> CodeHandler:
        """
        Create a handler writing into this model.

        Args:
            with_statistics: Wrap the model builder in a ``StatisticsHandler``

        Returns:
            The handler to give to an extractor
        """
        builder = ModelBuilderHandler(self.model, self.symbol_table)
        if not with_statistics:
            return builder
        self._statistics_handler = StatisticsHandler(builder)
        return self._statistics_handler

    @property
    def statistics(self) -> Optional[ParseStatistics]:
        """Statistics of the last handler created with statistics, if any."""
        if self._statistics_handler is None:
            return None
        return self._statistics_handler.statistics

    def query_model(self) -> JavaQueryModel:
        return JavaQueryModel(self.model)

    def preload_symbols(self, path: str) -> int:
        """Preload the symbol table from a source tree, class tree or archive."""
        return self.symbol_table.preload(path)

    def search(self, subject: Optional[str] = ALL_MATCH, predicate: Optional[str] = ALL_MATCH,
               obj: Optional[str] = ALL_MATCH) -> Iterator[Triple]:
        return self.model.search_triples(subject, predicate, obj)

    def get_statistics(self) -> Dict[str, Any]:
        """Get the triple counts of the model, in total and by predicate."""
        return self.storage.get_statistics()

    def export(self, path: str, format: str = "turtle") -> int:
        """
        Export the model to an RDF file.

        Args:
            path: Destination file
            format: rdflib serialization format

        Returns:
            The number of exported triples
        """
        if isinstance(self.storage, RDFLibTripleStore):
            target = self.storage
        else:
            target = RDFLibTripleStore()
            for triple in self.storage.search_triples():
                if triple.literal:
                    target.add_triple_literal(triple.subject, triple.predicate, triple.object)
                else:
                    target.add_triple(triple.subject, triple.predicate, triple.object)
        target.save(path, format)
        return target.count_triples()

    def clear(self) -> None:
        self.model.clear_all()

    def close(self) -> None:
        self.storage.close()
        self.logger.info(f"Closed {self.storage_type} storage backend")

    def __enter__(self) -> "CodeModel":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
