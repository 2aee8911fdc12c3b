"""
Card Service — Card Route Handlers
====================================

What:  The five JSON endpoints of the card resource.
Why:   Entry point for every create/read/update/delete call.
How:   Read the path id and raw body, delegate to CardService, return the
       card(s) or the store acknowledgment. Errors raised by the service are
       turned into `{"error": "..."}` bodies by the handlers in main.py.

Route Inventory:
    GET    /cards        list all cards          200 | 404 empty
    POST   /cards        create                  200 | 400
    GET    /cards/{id}   fetch one               200 | 400 | 404
    PUT    /cards/{id}   overwrite width/height  200 | 400
    DELETE /cards/{id}   delete                  200 | 400

Why the body is read raw (not a Pydantic body parameter):
    FastAPI would answer a bad body with 422 and its own error envelope.
    Decode failures here must be 400 with a plain {"error": ...} body.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from cardservice.models.card import Card
from cardservice.schemas.card import DeleteAck, ErrorResponse, InsertAck, UpdateAck
from cardservice.services.card_service import CardService, get_card_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cards"])


@router.get(
    "/cards",
    response_model=List[Card],
    response_model_exclude_defaults=True,
    responses={404: {"description": "Collection is empty", "model": ErrorResponse}},
    summary="List all cards",
)
async def list_cards(
    service: CardService = Depends(get_card_service),
) -> List[Card]:
    """Every stored card, empty fields omitted. No pagination."""
    return await service.list_cards()


@router.post(
    "/cards",
    response_model=InsertAck,
    responses={400: {"description": "Decode, validation or store error", "model": ErrorResponse}},
    summary="Create a card",
)
async def create_card(
    request: Request,
    service: CardService = Depends(get_card_service),
) -> InsertAck:
    """
    Create a card from `{"name": ..., "width": ..., "height": ...}`.

    Field names are case-insensitive; each value must be at least two
    characters. The new id is returned as `inserted_id`.
    """
    body = await request.body()
    return await service.create_card(body)


@router.get(
    "/cards/{card_id}",
    response_model=Card,
    response_model_exclude_defaults=True,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Card not found", "model": ErrorResponse},
    },
    summary="Get a card by id",
)
async def get_card(
    card_id: str,
    service: CardService = Depends(get_card_service),
) -> Card:
    return await service.get_card(card_id)


@router.put(
    "/cards/{card_id}",
    response_model=UpdateAck,
    responses={400: {"description": "Malformed id or body, or store error", "model": ErrorResponse}},
    summary="Overwrite a card's width and height",
)
async def update_card(
    card_id: str,
    request: Request,
    service: CardService = Depends(get_card_service),
) -> UpdateAck:
    """
    Set width and height to the submitted values.

    Not validated: empty or missing values are stored as empty strings.
    An id that matches nothing returns 200 with matched_count 0.
    """
    body = await request.body()
    return await service.update_card(card_id, body)


@router.delete(
    "/cards/{card_id}",
    response_model=DeleteAck,
    responses={400: {"description": "Malformed id or store error", "model": ErrorResponse}},
    summary="Delete a card",
)
async def delete_card(
    card_id: str,
    service: CardService = Depends(get_card_service),
) -> DeleteAck:
    return await service.delete_card(card_id)
