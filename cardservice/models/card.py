"""
Card Service — Card Document Model
====================================

What:  The Card resource: its document shape, decoding rules and the
       create-time validation gate.
Why:   One place decides what a card looks like on the wire and in the
       `cards` collection, so handlers never touch raw dicts.
How:   A strict Pydantic model. Field names are matched case-insensitively
       (clients send both `Width` and `width`), values must be JSON strings
       (`null` reads as ""), unknown fields are ignored.

Document layout (collection `cards`):
    {
        "_id":    ObjectId,   # assigned by the service on create
        "name":   str,        # omitted when empty
        "width":  str,        # e.g. "111px", omitted when empty
        "height": str,        # e.g. "222px", omitted when empty
    }

Validation asymmetry:
    validate_card() is called on create only. Update overwrites width and
    height with whatever the client sent, including empty strings.
"""

from typing import Any, Dict, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cardservice.exceptions import InputParseError, ValidationError

# Shortest accepted value for name, width and height on create
MIN_FIELD_LENGTH = 2

# Fields written to the store; `_id` is handled separately
CARD_FIELDS = ("name", "width", "height")


class Card(BaseModel):
    """
    A rectangle descriptor.

    `id` is the 24-character hex form of the document's ObjectId. It is
    None on decoded request bodies until the service assigns one.
    """

    id: Optional[str] = Field(default=None, alias="_id", description="Hex ObjectId")
    name: str = Field(default="", description="Human-readable label")
    width: str = Field(default="", description="Width, e.g. '111px'")
    height: str = Field(default="", description="Height, e.g. '222px'")

    model_config = ConfigDict(
        strict=True,            # 5 is not a width
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def fold_field_names(cls, data: Any) -> Any:
        """
        Lower-case incoming keys so `Name`, `name` and `NAME` all bind.

        A JSON `null` body decodes as a card with every field empty.
        """
        if data is None:
            return {}
        if isinstance(data, dict):
            return {
                key.lower() if isinstance(key, str) else key: value
                for key, value in data.items()
            }
        return data

    @field_validator("name", "width", "height", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        # null reads as "", so create rejects it and update stores ""
        return "" if value is None else value

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Card":
        """Build a Card from a stored document (ObjectId becomes hex text)."""
        data = dict(document)
        if isinstance(data.get("_id"), ObjectId):
            data["_id"] = str(data["_id"])
        return cls.model_validate(data)

    def to_document(self, object_id: ObjectId) -> Dict[str, Any]:
        """Document for insert_one; empty fields are left out."""
        document: Dict[str, Any] = {"_id": object_id}
        for field in CARD_FIELDS:
            value = getattr(self, field)
            if value:
                document[field] = value
        return document

    def to_public(self) -> Dict[str, Any]:
        """JSON-ready dict with empty fields omitted."""
        return self.model_dump(by_alias=True, exclude_defaults=True)


def validate_card(card: Card) -> None:
    """
    Create-time gate: name, width and height must each be at least
    MIN_FIELD_LENGTH characters.

    Raises:
        ValidationError: with a fixed message; offending fields go to context.
    """
    short_fields = [
        field for field in CARD_FIELDS
        if len(getattr(card, field)) < MIN_FIELD_LENGTH
    ]
    if short_fields:
        raise ValidationError(context={"fields": short_fields})


def parse_card_id(raw: str) -> ObjectId:
    """
    Parse a path identifier into an ObjectId.

    Only the 24-character hex form is accepted. The error message is the
    bson parser's own text, e.g.
    "'123' is not a valid ObjectId, it must be a 12-byte input or a
    24-character hex string".

    Raises:
        InputParseError: before any store access.
    """
    if not isinstance(raw, str):
        raise InputParseError(message=f"{raw!r} is not a valid ObjectId", field="id")
    try:
        return ObjectId(raw)
    except InvalidId as exc:
        raise InputParseError(message=str(exc), field="id") from exc
