"""
Card Service — Pydantic Response Schemas
==========================================

What:  The JSON shapes returned by write operations and by every error.
Why:   Writes answer with the store's own acknowledgment (no bespoke
       envelope), so these models mirror PyMongo's result objects field for
       field, with ObjectIds rendered as hex strings.
Who:   Built by CardService; serialized by FastAPI at the HTTP boundary.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult


class InsertAck(BaseModel):
    """
    Acknowledgment for POST /cards.

    Example:
        {"acknowledged": true, "inserted_id": "65a1f0c2e4b0a1b2c3d4e5f6"}
    """
    acknowledged: bool = Field(description="Whether the write was acknowledged")
    inserted_id: str = Field(description="Hex ObjectId of the new card")

    @classmethod
    def from_result(cls, result: InsertOneResult) -> "InsertAck":
        return cls(acknowledged=result.acknowledged, inserted_id=str(result.inserted_id))


class UpdateAck(BaseModel):
    """
    Acknowledgment for PUT /cards/{id}.

    A well-formed id that matches nothing is still a success:
    matched_count is simply 0.
    """
    acknowledged: bool = Field(description="Whether the write was acknowledged")
    matched_count: int = Field(description="Documents matched by the filter")
    modified_count: int = Field(description="Documents actually changed")
    upserted_id: Optional[str] = Field(default=None, description="Always null; no upserts")

    @classmethod
    def from_result(cls, result: UpdateResult) -> "UpdateAck":
        upserted = result.upserted_id
        return cls(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count or 0,
            upserted_id=str(upserted) if upserted is not None else None,
        )


class DeleteAck(BaseModel):
    """Acknowledgment for DELETE /cards/{id}; deleted_count may be 0."""
    acknowledged: bool = Field(description="Whether the write was acknowledged")
    deleted_count: int = Field(description="Documents removed (0 or 1)")

    @classmethod
    def from_result(cls, result: DeleteResult) -> "DeleteAck":
        return cls(acknowledged=result.acknowledged, deleted_count=result.deleted_count)


class ErrorResponse(BaseModel):
    """
    Error body shared by every failure.

    Example:
        {"error": "No records found"}
    """
    error: str = Field(description="Human-readable error message")
