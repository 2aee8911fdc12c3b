"""
Card Service — Diagnostic Fixture
===================================

What:  GET /test returns a hardcoded one-card array.
Why:   Lets an operator (or a smoke test) confirm the HTTP layer and JSON
       encoding work without touching the document store.
"""

import logging
from typing import List

from fastapi import APIRouter

from cardservice.models.card import Card

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Diagnostics"])

# Fixed id; has no counterpart in the store
DIAGNOSTIC_CARD_ID = "090000000000000000000000"


@router.get(
    "/test",
    response_model=List[Card],
    response_model_exclude_defaults=True,
    summary="Diagnostic fixture",
)
async def local_test() -> List[Card]:
    logger.info("API: local_test")
    return [
        Card.model_validate(
            {"_id": DIAGNOSTIC_CARD_ID, "width": "111px", "height": "222px"}
        )
    ]
