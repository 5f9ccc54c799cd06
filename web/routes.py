"""
REST API routes for the PLM bridge.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from contracts.v1.schemas import (
    CreateItemRequest,
    CredentialsContract,
    ResultEnvelope,
    SearchRequest,
    UpdateItemRequest,
)
from plm_platform.facade import PlmFacade

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# Single shared facade (one backend session per process). Built on first use
# so that configuration errors surface on the first request, not at import.
facade: Optional[PlmFacade] = None

ERROR_STATUS = {
    "NO_SESSION": 401,
    "INVALID_CREDENTIALS": 401,
    "INVALID_PARAMETER": 400,
    "TIMEOUT": 504,
    "NETWORK_ERROR": 502,
}
DEFAULT_ERROR_STATUS = 502


def get_facade() -> PlmFacade:
    global facade
    if facade is None:
        facade = PlmFacade()
    return facade


def _respond(result: ResultEnvelope) -> JSONResponse:
    """Serialise a result envelope, choosing the HTTP status from its error code."""
    status = 200
    if result.error is not None:
        status = ERROR_STATUS.get(result.error.code, DEFAULT_ERROR_STATUS)
        logger.info("Request failed with %s (%s)", result.error.code, status)
    return JSONResponse(status_code=status, content=result.model_dump(mode="json"))


# --- Session ---

@router.post("/login")
async def login(req: CredentialsContract):
    return _respond(await get_facade().login(req))


@router.post("/logout")
async def logout():
    return _respond(await get_facade().logout())


@router.get("/session")
async def get_session():
    """Local session state; never calls the backend."""
    bridge = get_facade()
    session = bridge.current_session
    return {
        "logged_in": bridge.is_logged_in(),
        "session_id": bridge.get_session_id(),
        "user_id": session.user_id if session else None,
    }


@router.get("/session-info")
async def get_session_info():
    return _respond(await get_facade().get_session_info())


@router.get("/favorites")
async def get_favorites():
    return _respond(await get_facade().get_favorites())


# --- Items ---

@router.post("/search")
async def search_items(req: SearchRequest):
    return _respond(await get_facade().search_items(req.query, req.type, req.limit))


@router.get("/items/owned")
async def get_user_owned_items():
    return _respond(await get_facade().get_user_owned_items())


@router.get("/items/recent")
async def get_last_created_items(limit: int = Query(10)):
    return _respond(await get_facade().get_last_created_items(limit))


@router.get("/items/{item_id}")
async def get_item(item_id: str):
    return _respond(await get_facade().get_item_by_id(item_id))


@router.post("/items")
async def create_item(req: CreateItemRequest):
    return _respond(
        await get_facade().create_item(req.type, req.name, req.description, req.properties)
    )


@router.patch("/items/{item_id}")
async def update_item(item_id: str, req: UpdateItemRequest):
    return _respond(await get_facade().update_item(item_id, req.properties))


@router.get("/item-types")
async def get_item_types():
    return _respond(await get_facade().get_item_types())


# --- Users ---

@router.get("/users/me/properties")
async def get_logged_user_properties(attributes: Optional[list[str]] = Query(None)):
    return _respond(await get_facade().get_logged_user_properties(attributes))


@router.get("/users/{uid}/properties")
async def get_user_properties(uid: str, attributes: Optional[list[str]] = Query(None)):
    return _respond(await get_facade().get_user_properties(uid, attributes))
