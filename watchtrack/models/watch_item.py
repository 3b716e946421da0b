from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from enum import Enum
from watchtrack.database import Base, utcnow


class WatchItemType(str, Enum):
    MOVIE = "movie"
    SHOW = "show"


class WatchStatus(str, Enum):
    """Fixed status vocabulary; no transition graph is enforced"""
    WANT_TO_WATCH = "want-to-watch"
    WATCHING = "watching"
    FINISHED = "finished"
    DROPPED = "dropped"


class WatchRating(str, Enum):
    LOVED = "loved"
    LIKED = "liked"
    NOT_FOR_ME = "not-for-me"


class WatchItem(Base):
    """
    A title tracked by one user.

    The tmdb_* columns are a snapshot copied from TMDB when the title was
    selected. They are never refreshed after the write.
    """
    __tablename__ = "watch_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    type = Column(String(10), nullable=False)
    status = Column(String(20), nullable=False)
    current_season = Column(Integer, nullable=True)
    total_seasons = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    rating = Column(String(20), nullable=True)

    # TMDB snapshot
    tmdb_id = Column(Integer, nullable=True, index=True)
    tmdb_poster_path = Column(String(255), nullable=True)
    tmdb_overview = Column(Text, nullable=True)
    tmdb_tagline = Column(Text, nullable=True)
    tmdb_imdb_id = Column(String(20), nullable=True)
    tmdb_movie_runtime = Column(Integer, nullable=True)
    tmdb_movie_release_year = Column(Integer, nullable=True)
    tmdb_movie_certification = Column(String(20), nullable=True)
    tmdb_tv_first_air_year = Column(Integer, nullable=True)
    tmdb_tv_last_air_year = Column(Integer, nullable=True)
    tmdb_tv_networks = Column(Text, nullable=True)
    tmdb_tv_number_of_episodes = Column(Integer, nullable=True)
    tmdb_tv_number_of_seasons = Column(Integer, nullable=True)
    tmdb_tv_status = Column(String(50), nullable=True)
    tmdb_tv_certification = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    # Relationships
    user = relationship("User", back_populates="watch_items")

    # One entry per user per TMDB title (NULL tmdb_id is never a duplicate)
    __table_args__ = (
        UniqueConstraint('user_id', 'tmdb_id', name='unique_user_tmdb_watch_item'),
    )

    def __repr__(self):
        return f"<WatchItem(id={self.id}, user_id={self.user_id}, title={self.title}, status={self.status})>"
