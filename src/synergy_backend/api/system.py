from fastapi import APIRouter, Request

from synergy_types.base import format_timestamp, utc_now

system_router = APIRouter()


@system_router.get("/health")
async def health(request: Request):
    return {
        "status": "ok",
        "timestamp": format_timestamp(utc_now()),
        "websocket": request.app.state.chat.manager.get_metrics(),
    }
