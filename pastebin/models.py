"""
Pydantic models for the persisted paste record and request/response validation.
"""
from typing import Dict, Optional
from pydantic import BaseModel, Field, StrictInt, StrictStr


def _optional_int(raw: Optional[str]) -> Optional[int]:
    """Stored optional integers use an empty string as the absent marker."""
    if raw is None or raw == "":
        return None
    return int(raw)


class PasteRecord(BaseModel):
    """A paste as held by the store. Status is never stored, only derived."""
    id: str
    content: str
    created_at: int = Field(..., description="Creation time, epoch milliseconds")
    ttl_seconds: Optional[int] = None
    max_views: Optional[int] = None
    views: int = 0

    def to_hash(self) -> Dict[str, str]:
        """Field mapping written to the `paste:{id}` hash."""
        return {
            "content": self.content,
            "created_at": str(self.created_at),
            "ttl_seconds": "" if self.ttl_seconds is None else str(self.ttl_seconds),
            "max_views": "" if self.max_views is None else str(self.max_views),
            "views": str(self.views),
        }

    @classmethod
    def from_hash(cls, paste_id: str, data: Dict[str, str]) -> "PasteRecord":
        return cls(
            id=paste_id,
            content=data["content"],
            created_at=int(data["created_at"]),
            ttl_seconds=_optional_int(data.get("ttl_seconds")),
            max_views=_optional_int(data.get("max_views")),
            views=int(data.get("views") or 0),
        )


class PasteCreate(BaseModel):
    """Schema for creating a new paste."""
    content: StrictStr = Field(..., min_length=1, description="Text content (required, non-empty)")
    ttl_seconds: Optional[StrictInt] = Field(None, ge=1, description="Optional TTL in seconds")
    max_views: Optional[StrictInt] = Field(None, ge=1, description="Optional view limit")


class PasteResponse(BaseModel):
    """Schema for paste creation response."""
    id: str = Field(..., description="Unique paste ID")
    url: str = Field(..., description="Shareable URL to view the paste")


class PasteView(BaseModel):
    """Schema for viewing/fetching a paste."""
    content: str = Field(..., description="Paste text content")
    remaining_views: Optional[int] = Field(None, description="Views left (null if unlimited)")
    expires_at: Optional[str] = Field(None, description="Expiry timestamp (ISO 8601, null if no TTL)")


class HealthCheck(BaseModel):
    """Schema for health check response."""
    ok: bool = Field(..., description="Is the application healthy?")
