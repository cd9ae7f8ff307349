import logging
import time
from typing import Any, Optional

from .config import Settings
from .errors import DatabaseError
from .logging_config import LOGGER_NAME
from .schemas import Command, Operation

logger = logging.getLogger(LOGGER_NAME)


class Dispatcher:
    """
    Turns a validated Command into exactly one store call.

    ``store`` is any object exposing ``insert_one``, ``find``, ``update_many``
    and ``delete_many`` with the signatures of ``MongoStore``; errors it raises
    (``DatabaseError``) propagate to the app's exception handlers.
    """

    def __init__(self, store: Any, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    def budget(self, op: Operation, started: Optional[float] = None) -> float:
        """Seconds left for ``op``, counted from ``started`` (a ``time.monotonic()`` stamp)."""
        timeout = op.timeout(self.settings)
        if started is not None:
            timeout -= time.monotonic() - started
        if timeout <= 0:
            raise DatabaseError("operation exceeded time limit")
        return timeout

    def execute(self, command: Command, started: Optional[float] = None) -> Any:
        op = command.operation
        db, coll = command.target.db, command.target.coll
        timeout = self.budget(op, started)
        logger.debug("%s on %s (deadline %.1fs)", op.value, command.target, timeout)
        if op is Operation.INSERT:
            return self.store.insert_one(db, coll, command.data, timeout=timeout)
        if op is Operation.FIND:
            return self.store.find(db, coll, command.query, timeout=timeout)
        if op is Operation.UPDATE_MANY:
            return self.store.update_many(db, coll, command.query, command.data, timeout=timeout)
        if op is Operation.DELETE_MANY:
            return self.store.delete_many(db, coll, command.query, timeout=timeout)
        raise AssertionError(f"unhandled operation {op!r}")
