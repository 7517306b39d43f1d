"""
KuzuDB implementation of the triple store interface.
"""
import hashlib
from typing import Any, Dict, Iterator, List, Optional

from ...core.errors import CodeRDFError
from .base import ALL_MATCH, BaseTripleStore, Triple

IN_MEMORY = ":memory:"


class KuzuDBTripleStore(BaseTripleStore):
    """
    KuzuDB implementation of the triple store interface.

    Triples live in a single ``Triple`` node table whose primary key is a
    digest of the four fields, so re-adding a triple is a no-op.
    """

    def __init__(self, db_path: Optional[str] = None, in_memory: bool = False,
                 buffer_pool_size: int = 256 * 1024 * 1024, max_threads: int = 2, **kwargs: Any):
        """
        Initialize the triple store.

        Args:
            db_path: Database directory. Without one the store lives in memory.
            in_memory: Keep the store in memory even when db_path is given.
            buffer_pool_size: Buffer pool size in bytes.
            max_threads: Thread limit handed to KuzuDB.
            **kwargs: Passed to the base store
        """
        super().__init__(**kwargs)
        self.in_memory = in_memory or not db_path
        self.db_path = IN_MEMORY if self.in_memory else db_path
        self.buffer_pool_size = buffer_pool_size
        self.max_threads = max_threads
        self.db = None
        self.conn = None

    def connect(self) -> bool:
        """Open the database and make sure the triple table exists."""
        try:
            import kuzu
        except ImportError:
            self.logger.error("KuzuDB triple store needs the kuzu package")
            return False

        location = "in memory" if self.in_memory else f"at {self.db_path}"
        try:
            options = {"buffer_pool_size": self.buffer_pool_size, "max_num_threads": self.max_threads}
            if self.in_memory:
                self.db = kuzu.Database(**options)
            else:
                self.db = kuzu.Database(self.db_path, **options)
            self.conn = kuzu.Connection(self.db)
            self.is_connected = True
            self.create_indexes()
        except Exception as e:
            self.logger.error(f"Cannot open triple store {location}: {e}")
            self.is_connected = False
            return False

        self.logger.info(f"Triple store opened {location}")
        return True

    def close(self) -> None:
        """Release the connection and the database."""
        # KuzuDB frees its resources when the objects go out of scope
        self.conn = None
        self.db = None
        self.is_connected = False
        self.logger.info("Triple store closed")

    def _ensure_connected(self) -> None:
        if not self.is_connected and not self.connect():
            raise CodeRDFError("Cannot connect to KuzuDB")

    def create_indexes(self) -> None:
        """Create the triple node table; KuzuDB indexes the primary key."""
        try:
            self.conn.execute("""
            CREATE NODE TABLE Triple(
                key STRING,
                subject STRING,
                predicate STRING,
                object STRING,
                literal BOOLEAN,
                PRIMARY KEY (key)
            )
            """)
            self.logger.debug("Created Triple node table")
        except Exception as e:
            if "already exists" not in str(e):
                raise
            self.logger.debug("Triple node table already exists")

    @staticmethod
    def triple_key(triple: Triple) -> str:
        kind = "L" if triple.literal else "R"
        payload = "\x1f".join((kind, triple.subject, triple.predicate, triple.object))
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def execute_query(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run a Cypher statement and return its rows keyed by column name."""
        self._ensure_connected()
        try:
            result = self.conn.execute(query, params or {})
            columns = result.get_column_names()
            rows = []
            while result.has_next():
                row = result.get_next()
                rows.append(row if isinstance(row, dict) else dict(zip(columns, row)))
            return rows
        except Exception as e:
            self.logger.error(f"Triple query failed: {e} (query: {query.strip()}, params: {params})")
            raise

    def _add(self, triple: Triple) -> None:
        self.execute_query(
            """
            MERGE (t:Triple {key: $key})
            ON CREATE SET t.subject = $subject, t.predicate = $predicate,
                          t.object = $object, t.literal = $literal
            """,
            {
                "key": self.triple_key(triple),
                "subject": triple.subject,
                "predicate": triple.predicate,
                "object": triple.object,
                "literal": triple.literal,
            }
        )

    def _remove(self, triple: Triple) -> None:
        self.execute_query("MATCH (t:Triple {key: $key}) DELETE t", {"key": self.triple_key(triple)})

    def search_triples(self, subject: Optional[str] = ALL_MATCH, predicate: Optional[str] = ALL_MATCH,
                       obj: Optional[str] = ALL_MATCH) -> Iterator[Triple]:
        conditions = []
        params: Dict[str, Any] = {}
        for column, value in (("subject", subject), ("predicate", predicate), ("object", obj)):
            if value is not ALL_MATCH:
                conditions.append(f"t.{column} = ${column}")
                params[column] = value
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = self.execute_query(
            f"""
            MATCH (t:Triple) {where}
            RETURN t.subject AS subject, t.predicate AS predicate, t.object AS object, t.literal AS literal
            """,
            params
        )
        return iter([Triple(r["subject"], r["predicate"], r["object"], bool(r["literal"])) for r in rows])

    def clear_all(self) -> None:
        """Clear all triples from the database."""
        self.execute_query("MATCH (t:Triple) DELETE t")
        self.logger.info("Database cleared")

    def count_triples(self) -> int:
        result = self.execute_query("MATCH (t:Triple) RETURN count(t) AS count")
        return result[0]["count"] if result else 0
