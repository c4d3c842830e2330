"""
Chirpboard Backend: Entry and Reply Route Handlers
==================================================

What:  POST /entry, GET /entry and POST /reply.
How:   Bodies pass the Field-Shape Validator, then ContentService does the
       work. Each write is committed before the response is built. No cookie
       is required on these routes.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from chirpboard.database import get_db_session
from chirpboard.middleware.strong_params import FieldKind, strong_params
from chirpboard.schemas.board import EntryCreatedResponse, EntrySummary, ErrorResponse
from chirpboard.services.content_service import content_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Entries"])

ENTRY_FIELDS = {"message": FieldKind.STRING, "username": FieldKind.STRING}

REPLY_FIELDS = {
    "message": FieldKind.STRING,
    "entryID": FieldKind.STRING,
    "username": FieldKind.STRING,
}


@router.post(
    "/entry",
    status_code=201,
    response_model=EntryCreatedResponse,
    responses={
        400: {"description": "Bad type, empty field or entry rule violation", "model": ErrorResponse},
        404: {"description": "Author does not exist", "model": ErrorResponse},
    },
    summary="Post an entry",
)
async def post_entry(
    params: Dict[str, Any] = Depends(strong_params(ENTRY_FIELDS)),
    db: AsyncSession = Depends(get_db_session),
) -> EntryCreatedResponse:
    entry = await content_service.post_entry(db, params["message"], params["username"])
    await db.commit()
    return EntryCreatedResponse(id=entry.id)


@router.get(
    "/entry",
    response_model=List[EntrySummary],
    summary="List every entry (message and author only)",
)
async def list_entries(db: AsyncSession = Depends(get_db_session)) -> List[EntrySummary]:
    return await content_service.list_entries(db)


@router.post(
    "/reply",
    status_code=201,
    responses={
        400: {"description": "Bad type, empty message or reply rule violation", "model": ErrorResponse},
        404: {"description": "Author does not exist", "model": ErrorResponse},
    },
    summary="Reply to an entry",
)
async def post_reply(
    params: Dict[str, Any] = Depends(strong_params(REPLY_FIELDS)),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await content_service.post_reply(
        db,
        message=params["message"],
        entry_id=params["entryID"],
        username=params["username"],
    )
    await db.commit()
    return Response(status_code=201)
