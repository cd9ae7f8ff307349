from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .config import Settings
from .errors import MissingField, MissingParameter, UnknownAction


class Operation(str, Enum):
    INSERT = "insert"
    FIND = "find"
    UPDATE_MANY = "update_many"
    DELETE_MANY = "delete_many"

    @classmethod
    def from_action(cls, action: Any) -> "Operation":
        if isinstance(action, str) and action in _ACTIONS:
            return _ACTIONS[action]
        raise UnknownAction("Unknown Action!")

    @classmethod
    def from_method(cls, method: str) -> "Operation":
        try:
            return _METHODS[method.upper()]
        except KeyError:
            raise UnknownAction("Unknown Action!") from None

    @property
    def needs_query(self) -> bool:
        return self is not Operation.INSERT

    @property
    def needs_data(self) -> bool:
        return self in (Operation.INSERT, Operation.UPDATE_MANY)

    def timeout(self, settings: Settings) -> float:
        return {
            Operation.INSERT: settings.insert_timeout,
            Operation.FIND: settings.find_timeout,
            Operation.UPDATE_MANY: settings.update_timeout,
            Operation.DELETE_MANY: settings.delete_timeout,
        }[self]


# "upate" is the spelling older clients send for update
_ACTIONS: Dict[str, Operation] = {
    "insert": Operation.INSERT,
    "get": Operation.FIND,
    "update": Operation.UPDATE_MANY,
    "upate": Operation.UPDATE_MANY,
    "delete": Operation.DELETE_MANY,
}

_METHODS: Dict[str, Operation] = {
    "POST": Operation.INSERT,
    "GET": Operation.FIND,
    "PUT": Operation.UPDATE_MANY,
    "DELETE": Operation.DELETE_MANY,
}


class Target(BaseModel):
    db: str
    coll: str

    @classmethod
    def from_path(cls, db: Optional[str], coll: Optional[str]) -> "Target":
        if not db:
            raise MissingParameter("Missing DB!")
        if not coll:
            raise MissingParameter("Missing Collection!")
        return cls(db=db, coll=coll)

    def __str__(self) -> str:
        return f"{self.db}.{self.coll}"


class Command(BaseModel):
    """One validated gateway request: a single operation against a single target."""

    operation: Operation
    target: Target
    query: Any = None
    data: Any = None

    @classmethod
    def from_envelope(cls, target: Target, envelope: Any) -> "Command":
        """Build a command from an action-dispatch body.

        The body is a JSON object with ``action`` and, depending on the action,
        ``query`` and/or ``data``. Presence of a key is what counts; a ``null``
        value is forwarded to the driver as is.
        """
        if not isinstance(envelope, dict) or "action" not in envelope:
            raise MissingField("Missing Action!")
        operation = Operation.from_action(envelope["action"])
        if operation.needs_query and "query" not in envelope:
            raise MissingField("Missing Query!")
        if operation.needs_data and "data" not in envelope:
            raise MissingField("Missing Data!")
        return cls(
            operation=operation,
            target=target,
            query=envelope.get("query"),
            data=envelope.get("data"),
        )

    @classmethod
    def from_rest(cls, operation: Operation, target: Target, query: Dict[str, str], data: Any = None) -> "Command":
        # An empty query string matches every document in the collection
        return cls(
            operation=operation,
            target=target,
            query=dict(query) if operation.needs_query else None,
            data=data,
        )
