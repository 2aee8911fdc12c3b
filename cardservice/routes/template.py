"""
Card Service — HTML Detail View
=================================

What:  GET /template/{id} renders one card as an HTML page.
How:   Same lookup as GET /cards/{id}; the card is bound as `card` in the
       Jinja2 template `card.html`. The status is left at its default (200).
       Lookup errors come back as JSON like every other endpoint.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from cardservice.schemas.card import ErrorResponse
from cardservice.services.card_service import CardService, get_card_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Views"])

CARD_TEMPLATE = "card.html"


@router.get(
    "/template/{card_id}",
    response_class=HTMLResponse,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Card not found", "model": ErrorResponse},
    },
    summary="Render a card as HTML",
)
async def render_card(
    card_id: str,
    request: Request,
    service: CardService = Depends(get_card_service),
) -> HTMLResponse:
    card = await service.get_card(card_id)
    templates = request.app.state.templates
    logger.info("API: render_card | Rendering: %s", card.id)
    return templates.TemplateResponse(request, CARD_TEMPLATE, {"card": card})
