from fastapi import APIRouter, Depends

from ..dispatcher import Dispatcher
from .deps import get_dispatcher

router = APIRouter(tags=["health"])


@router.get("/health")
def health(dispatcher: Dispatcher = Depends(get_dispatcher)):
    dispatcher.store.ping()
    return {"status": "ok"}
