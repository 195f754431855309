from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from orla_vision.processing_config import ConfigError, get_config, update_config

control_router = APIRouter()


def _session(request: Request):
    return request.app.state.session


@control_router.get("/health")
async def get_health():
    return HTMLResponse("<h1>Orla Vision Backend Running</h1>")


# Camera and detector calls block, so these are plain `def` handlers and
# run in FastAPI's threadpool instead of on the event loop.
@control_router.post("/vision/enable")
def enable_vision(request: Request):
    # failures come back as status.error with a 200, never as an exception
    return _session(request).enable().to_dict()


@control_router.post("/vision/disable")
def disable_vision(request: Request):
    return _session(request).disable().to_dict()


@control_router.get("/vision/status")
def vision_status(request: Request):
    return _session(request).status().to_dict()


@control_router.get("/config")
async def read_config():
    return get_config()


@control_router.post("/config")
async def write_config(updates: Dict[str, Any]):
    # applied on the next enable
    try:
        return update_config(updates)
    except ConfigError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
