"""
Graph store integration.

This module owns the process-wide neo4j driver and exposes
``GraphStore``, the only object services use to talk to the database.
Every call opens a short-lived session, runs one managed read or write
transaction and closes the session whether the transaction succeeded
or not.  Rows are returned as plain dictionaries (``Record.data()``),
so nodes arrive as dictionaries of their properties.

Driver errors are re-raised as ``StoreUnavailable`` so callers never
depend on neo4j exception types.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from neo4j import Driver, GraphDatabase, ManagedTransaction
from neo4j.exceptions import DriverError, Neo4jError

from .config import settings
from .exceptions import StoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")
Row = Dict[str, Any]


def create_driver() -> Driver:
    """Create the neo4j driver from ``settings``.

    The driver holds the connection pool; create it once per process
    and close it on shutdown.
    """
    auth = (settings.neo4j_user, settings.neo4j_password) if settings.neo4j_user else None
    logger.info("Connecting to graph store at %s", settings.neo4j_uri)
    return GraphDatabase.driver(
        settings.neo4j_uri,
        auth=auth,
        max_connection_lifetime=3600,
        connection_acquisition_timeout=30,
        keep_alive=True,
    )


class GraphTransaction:
    """Thin wrapper over a managed transaction returning dict rows."""

    def __init__(self, tx: ManagedTransaction) -> None:
        self._tx = tx

    def query(self, cypher: str, **params: Any) -> List[Row]:
        result = self._tx.run(cypher, params)
        return [record.data() for record in result]


class GraphStore:
    """Run parameterized Cypher against the graph store.

    ``read``/``write`` cover the common one-statement case.  Use
    ``read_transaction``/``write_transaction`` when several statements
    (or a read followed by a dependent write) must commit atomically;
    ``work`` receives a ``GraphTransaction`` and may be retried by the
    driver on transient errors, so it must not have side effects
    outside the transaction.
    """

    def __init__(self, driver: Driver, database: Optional[str] = None) -> None:
        self.driver = driver
        self.database = database or None

    def read(self, cypher: str, **params: Any) -> List[Row]:
        return self.read_transaction(lambda tx: tx.query(cypher, **params))

    def write(self, cypher: str, **params: Any) -> List[Row]:
        return self.write_transaction(lambda tx: tx.query(cypher, **params))

    def read_transaction(self, work: Callable[[GraphTransaction], T]) -> T:
        return self._execute(work, write=False)

    def write_transaction(self, work: Callable[[GraphTransaction], T]) -> T:
        return self._execute(work, write=True)

    def _execute(self, work: Callable[[GraphTransaction], T], write: bool) -> T:
        try:
            with self.driver.session(database=self.database) as session:
                runner = session.execute_write if write else session.execute_read
                return runner(lambda tx: work(GraphTransaction(tx)))
        except (Neo4jError, DriverError) as e:
            raise StoreUnavailable(f"Graph store error: {e}") from e

    def verify_connectivity(self) -> bool:
        """Return ``True`` when the server answers, ``False`` otherwise."""
        try:
            self.driver.verify_connectivity()
            return True
        except (Neo4jError, DriverError) as e:
            logger.warning("Graph store unreachable: %s", e)
            return False

    def close(self) -> None:
        self.driver.close()
