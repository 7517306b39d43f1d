"""
In-memory implementation of the triple store interface.
"""
from collections import defaultdict
from typing import Any, Dict, Iterator, Optional, Set

from .base import ALL_MATCH, BaseTripleStore, Triple


class MemoryTripleStore(BaseTripleStore):
    """
    Process-local triple store.

    Triples are kept in insertion order and indexed by subject, predicate and
    object so that any bound position narrows the scan.
    """

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.triples: Dict[Triple, int] = {}
        self._sequence = 0
        self._by_subject: Dict[str, Set[Triple]] = defaultdict(set)
        self._by_predicate: Dict[str, Set[Triple]] = defaultdict(set)
        self._by_object: Dict[str, Set[Triple]] = defaultdict(set)
        self.is_connected = True

    def _add(self, triple: Triple) -> None:
        if triple in self.triples:
            return
        self._sequence += 1
        self.triples[triple] = self._sequence
        self._by_subject[triple.subject].add(triple)
        self._by_predicate[triple.predicate].add(triple)
        self._by_object[triple.object].add(triple)

    def _remove(self, triple: Triple) -> None:
        if triple not in self.triples:
            return
        del self.triples[triple]
        for index, key in ((self._by_subject, triple.subject),
                           (self._by_predicate, triple.predicate),
                           (self._by_object, triple.object)):
            bucket = index[key]
            bucket.discard(triple)
            if not bucket:
                del index[key]

    def search_triples(self, subject: Optional[str] = ALL_MATCH, predicate: Optional[str] = ALL_MATCH,
                       obj: Optional[str] = ALL_MATCH) -> Iterator[Triple]:
        candidates = None
        for index, key in ((self._by_subject, subject),
                           (self._by_predicate, predicate),
                           (self._by_object, obj)):
            if key is ALL_MATCH:
                continue
            bucket = index.get(key, set())
            candidates = bucket if candidates is None else candidates & bucket
        if candidates is None:
            snapshot = list(self.triples)
        else:
            snapshot = sorted(candidates, key=self.triples.__getitem__)
        return iter(snapshot)

    def clear_all(self) -> None:
        self.triples.clear()
        self._by_subject.clear()
        self._by_predicate.clear()
        self._by_object.clear()
        self.logger.debug("Memory store cleared")

    def count_triples(self) -> int:
        return len(self.triples)

    def __len__(self) -> int:
        return len(self.triples)
