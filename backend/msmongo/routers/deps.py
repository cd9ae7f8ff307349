import time
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.convertors import Convertor, register_url_convertor

from ..dispatcher import Dispatcher
from ..errors import EncodingError
from ..schemas import Command, Target


class SegmentConvertor(Convertor):
    """A path segment that may be empty, so `/prefix//coll` still reaches the handler."""

    regex = "[^/]*"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: Any) -> str:
        return str(value)


register_url_convertor("segment", SegmentConvertor())

# Must be registered before any route using it is declared
TARGET_PATH = "/{db:segment}/{coll:segment}"


async def stamp_request_start(request: Request) -> None:
    # Router-level dependency: runs before the body is read
    request.state.started = time.monotonic()


def get_target(request: Request) -> Target:
    return Target.from_path(request.path_params.get("db"), request.path_params.get("coll"))


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


async def dispatch(request: Request, dispatcher: Dispatcher, command: Command) -> JSONResponse:
    started = getattr(request.state, "started", None)
    # pymongo blocks; keep the event loop free for other requests
    result = await run_in_threadpool(dispatcher.execute, command, started)
    try:
        return JSONResponse(content=result)
    except (TypeError, ValueError, OverflowError) as e:
        raise EncodingError(str(e)) from e
