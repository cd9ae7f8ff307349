from fastapi import APIRouter, Depends, Request

from ..dispatcher import Dispatcher
from ..schemas import Command, Target
from ..utils import decode_body
from .deps import TARGET_PATH, dispatch, get_dispatcher, get_target, stamp_request_start

router = APIRouter(tags=["action"], dependencies=[Depends(stamp_request_start)])


@router.post(TARGET_PATH)
async def run_action(
    request: Request,
    target: Target = Depends(get_target),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    """
    Single endpoint for all operations, selected by the body's ``action`` field.
    payload: { action: "insert"|"get"|"update"|"delete", query?: Any, data?: Any }
    """
    envelope = decode_body(await request.body())
    return await dispatch(request, dispatcher, Command.from_envelope(target, envelope))
