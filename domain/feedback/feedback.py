from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime, timezone


class Feedback(BaseModel):
    from_phone: str
    name: str
    membership_number: str
    category: str
    suggestion: str
    media_url: Optional[str] = None
    caption: Optional[str] = None
    processed: bool = False
    processed_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def missing_fields(self) -> list[str]:
        required = {
            "from_phone": self.from_phone,
            "name": self.name,
            "membership_number": self.membership_number,
            "category": self.category,
            "suggestion": self.suggestion,
        }
        return [key for key, value in required.items() if not value]

    def to_dict(self) -> dict:
        return self.model_dump()


class FeedbackFilters(BaseModel):
    """Filtros aceitos pela listagem do painel administrativo."""
    from_phone: Optional[str] = None
    category: Optional[str] = None
    processed: Optional[bool] = None
    has_media: Optional[bool] = None
    date_from: Optional[str] = None  # YYYY-MM-DD
    date_to: Optional[str] = None    # YYYY-MM-DD
    search: Optional[str] = None
    name: Optional[str] = None
    membership_number: Optional[str] = None
    suggestion: Optional[str] = None
    processed_by: Optional[str] = None
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)
    sort_by: str = "created_at"
    sort_order: str = "desc"


class FeedbackStats(BaseModel):
    total: int = 0
    processed: int = 0
    unprocessed: int = 0
    with_media: int = 0
    without_media: int = 0
    categories: Dict[str, int] = Field(default_factory=dict)
