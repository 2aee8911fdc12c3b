"""
Card Service — Card Operations (Business Logic)
=================================================

What:  The list / get / create / update / delete workflows for cards.
Why:   Routes handle HTTP; this layer decides which store call to make and
       which error to raise. It can be tested with a fake store and no HTTP.
How:   Each method parses or validates its input, calls CardStore, and
       returns a Card or a store acknowledgment. Failures are raised as
       CardServiceError subclasses and mapped to HTTP by main.py.

Operation contract:
    list_cards()           → [Card]       NotFoundError if no card decodes
    get_card(raw_id)       → Card         InputParseError / NotFoundError
    create_card(body)      → InsertAck    InputParseError / ValidationError / StoreOperationError
    update_card(raw_id, b) → UpdateAck    InputParseError / StoreOperationError
    delete_card(raw_id)    → DeleteAck    InputParseError / StoreOperationError

Update does NOT run validate_card(): width and height are overwritten with
whatever was sent, including empty strings.
"""

import logging
from typing import List, Union

from bson import ObjectId
from fastapi import Depends
from pydantic import ValidationError as PydanticValidationError

from cardservice.database import CardStore, get_card_store
from cardservice.exceptions import InputParseError, NotFoundError, StoreOperationError
from cardservice.models.card import Card, parse_card_id, validate_card
from cardservice.schemas.card import DeleteAck, InsertAck, UpdateAck

logger = logging.getLogger(__name__)


def decode_card(body: Union[bytes, str]) -> Card:
    """
    Decode a JSON request body into a Card.

    Raises:
        InputParseError: empty body, malformed JSON, non-object payload or a
            field value that is neither a string nor null. The message is
            pydantic's first error.
    """
    try:
        return Card.model_validate_json(body)
    except PydanticValidationError as e:
        raise InputParseError(
            message=first_error(e), context={"errors": e.error_count()}
        )


def first_error(error: PydanticValidationError) -> str:
    """One-line `loc: msg` summary of pydantic's first error."""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]


class CardService:
    """
    Card operations bound to one store handle.

    Stateless apart from the handle; a new instance per request is cheap.
    """

    def __init__(self, store: CardStore):
        self.store = store

    async def list_cards(self) -> List[Card]:
        """
        Return every stored card. Documents that do not decode as a Card
        are skipped with a warning.

        Raises:
            NotFoundError: "No records found" when no card could be returned
            StoreOperationError: the query failed
        """
        documents = await self.store.find_many({})

        cards = []
        for document in documents:
            try:
                cards.append(Card.from_document(document))
            except PydanticValidationError as e:
                logger.warning(
                    "API: list_cards | Skipped undecodable %s: %s",
                    document.get("_id"),
                    first_error(e),
                )

        if not cards:
            logger.info("API: list_cards | None found")
            raise NotFoundError(message="No records found")

        logger.info("API: list_cards | Found: %d", len(cards))
        return cards

    async def get_card(self, raw_id: str) -> Card:
        """
        Fetch a single card by its hex id.

        Any lookup failure (missing document, store error, undecodable
        document) is reported as NotFoundError.
        """
        card_id = parse_card_id(raw_id)
        try:
            document = await self.store.find_one({"_id": card_id})
        except StoreOperationError as e:
            raise NotFoundError(resource_id=raw_id, message=e.message)

        if document is None:
            logger.info("API: get_card | Not found: %s", card_id)
            raise NotFoundError(resource="card", resource_id=raw_id)

        try:
            card = Card.from_document(document)
        except PydanticValidationError as e:
            raise NotFoundError(resource_id=raw_id, message=first_error(e))

        logger.info("API: get_card | Found: %s", card.id)
        return card

    async def create_card(self, body: Union[bytes, str]) -> InsertAck:
        """
        Decode, validate and insert a new card under a fresh ObjectId.

        Any `_id` supplied by the client is ignored.
        """
        card = decode_card(body)
        validate_card(card)

        document = card.to_document(ObjectId())
        result = await self.store.insert_one(document)
        logger.info("API: add_card | Added: %s", result.inserted_id)
        return InsertAck.from_result(result)

    async def update_card(self, raw_id: str, body: Union[bytes, str]) -> UpdateAck:
        """
        Overwrite width and height of one card; name is never touched.

        No validation gate: empty or absent values are written as "".
        """
        card_id = parse_card_id(raw_id)
        card = decode_card(body)

        result = await self.store.update_one(
            {"_id": card_id},
            {"$set": {"width": card.width, "height": card.height}},
        )
        logger.info(
            "API: update_card | Updated: %s (matched=%d)", card_id, result.matched_count
        )
        return UpdateAck.from_result(result)

    async def delete_card(self, raw_id: str) -> DeleteAck:
        """Delete one card; deleting a well-formed unknown id is not an error."""
        card_id = parse_card_id(raw_id)
        result = await self.store.delete_one({"_id": card_id})
        logger.info("API: delete_card | Deleted: %d", result.deleted_count)
        return DeleteAck.from_result(result)


def get_card_service(store: CardStore = Depends(get_card_store)) -> CardService:
    """FastAPI dependency: a CardService bound to the app's store handle."""
    return CardService(store)
