from typing import Any

from fastapi import APIRouter, Depends, Request

from ..dispatcher import Dispatcher
from ..schemas import Command, Operation, Target
from ..utils import decode_body, first_values
from .deps import TARGET_PATH, dispatch, get_dispatcher, get_target, stamp_request_start

router = APIRouter(tags=["documents"], dependencies=[Depends(stamp_request_start)])


def _command(request: Request, target: Target, data: Any = None) -> Command:
    # Filter comes from the query string; no parameters matches every document
    query = first_values(request.query_params.multi_items())
    return Command.from_rest(Operation.from_method(request.method), target, query, data)


@router.post(TARGET_PATH)
async def insert_document(
    request: Request,
    target: Target = Depends(get_target),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    data = decode_body(await request.body())
    return await dispatch(request, dispatcher, _command(request, target, data))


@router.get(TARGET_PATH)
async def find_documents(
    request: Request,
    target: Target = Depends(get_target),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    return await dispatch(request, dispatcher, _command(request, target))


@router.put(TARGET_PATH)
async def update_documents(
    request: Request,
    target: Target = Depends(get_target),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    """Apply the body as a $set to every document matching the query string."""
    data = decode_body(await request.body())
    return await dispatch(request, dispatcher, _command(request, target, data))


@router.delete(TARGET_PATH)
async def delete_documents(
    request: Request,
    target: Target = Depends(get_target),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    return await dispatch(request, dispatcher, _command(request, target))
