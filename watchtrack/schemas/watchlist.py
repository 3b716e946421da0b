from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional

from watchtrack.models.watch_item import WatchItemType, WatchStatus, WatchRating
from watchtrack.schemas.validation import SafeStringMixin


class CamelModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== TMDB SNAPSHOT ====================

class TmdbSnapshot(CamelModel):
    """Metadata copied from TMDB at selection time"""
    tmdb_id: Optional[int] = Field(None, ge=1)
    tmdb_poster_path: Optional[str] = None
    tmdb_overview: Optional[str] = None
    tmdb_tagline: Optional[str] = None
    tmdb_imdb_id: Optional[str] = None
    tmdb_movie_runtime: Optional[int] = None
    tmdb_movie_release_year: Optional[int] = None
    tmdb_movie_certification: Optional[str] = None
    tmdb_tv_first_air_year: Optional[int] = None
    tmdb_tv_last_air_year: Optional[int] = None
    tmdb_tv_networks: Optional[str] = None
    tmdb_tv_number_of_episodes: Optional[int] = None
    tmdb_tv_number_of_seasons: Optional[int] = None
    tmdb_tv_status: Optional[str] = None
    tmdb_tv_certification: Optional[str] = None


# ==================== WATCH ITEM SCHEMAS ====================

class WatchItemFields(TmdbSnapshot, SafeStringMixin):
    """Editable fields shared by create and update payloads"""
    current_season: Optional[int] = Field(None, ge=0, description="Season in progress (shows only)")
    total_seasons: Optional[int] = Field(None, ge=0, description="Number of seasons (shows only)")
    notes: Optional[str] = Field(None, max_length=5000, description="Personal notes")
    rating: Optional[WatchRating] = Field(None, description="loved / liked / not-for-me")

    @field_validator('notes')
    @classmethod
    def clean_notes(cls, v):
        v = cls.validate_no_script(v)
        return cls.sanitize_html(v)


class WatchItemCreate(WatchItemFields):
    """
    Schema for adding a title to the watchlist.
    Any userId sent by the client is ignored.
    """
    title: str = Field(..., min_length=1, max_length=500)
    type: WatchItemType
    status: WatchStatus

    @field_validator('title')
    @classmethod
    def clean_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be blank")
        return cls.validate_no_script(v)


class WatchItemUpdate(WatchItemFields):
    """Partial update: only fields present in the payload are written"""
    id: int = Field(..., ge=1)
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    type: Optional[WatchItemType] = None
    status: Optional[WatchStatus] = None

    @field_validator('title', 'type', 'status', mode='before')
    @classmethod
    def reject_null(cls, v, info):
        # Validators only run for fields the client actually sent
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator('title')
    @classmethod
    def clean_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be blank")
        return cls.validate_no_script(v)

    def changes(self) -> dict:
        """Fields explicitly sent by the client, minus the target id"""
        return self.model_dump(mode="json", exclude_unset=True, exclude={"id"})


class WatchItemResponse(TmdbSnapshot):
    """Schema for watch item response"""
    id: int
    user_id: str
    title: str
    type: WatchItemType
    status: WatchStatus
    current_season: Optional[int] = None
    total_seasons: Optional[int] = None
    notes: Optional[str] = None
    rating: Optional[WatchRating] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
