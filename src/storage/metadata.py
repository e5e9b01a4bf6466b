"""Video metadata storage using SQLAlchemy (SQLite/PostgreSQL)."""
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Text, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.core.config import settings
from src.core.exceptions import MetadataSyncError
from src.core.logging import get_logger
from src.core.models import VideoRecord

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


class VideoModel(Base):
    """Video record database model."""

    __tablename__ = "videos"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")

    # "bucket,key" for videos, a URL path for thumbnails
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class MetadataStore:
    """Async video metadata storage.

    Updates are last-writer-wins; there is no version check.

    Example:
        store = MetadataStore()
        await store.initialize()

        record = await store.create_video(user_id, "Holiday")
        record = await store.get_video(record.id)
    """

    def __init__(self, database_url: str | None = None) -> None:
        self.database_url = database_url or settings.database_url
        self.engine = create_async_engine(self.database_url, echo=False)
        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def initialize(self) -> None:
        """Create database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def create_video(
        self,
        user_id: UUID,
        title: str,
        description: str = "",
    ) -> VideoRecord:
        """Create a draft video record."""
        now = datetime.utcnow()
        async with self.async_session() as session:
            video = VideoModel(
                id=str(uuid4()),
                user_id=str(user_id),
                title=title,
                description=description,
                created_at=now,
                updated_at=now,
            )
            session.add(video)
            await session.commit()
            return VideoRecord.model_validate(video)

    async def get_video(self, video_id: UUID) -> VideoRecord | None:
        """Get video by ID."""
        async with self.async_session() as session:
            video = await session.get(VideoModel, str(video_id))
            if video:
                return VideoRecord.model_validate(video)
            return None

    async def list_videos(self, user_id: UUID) -> list[VideoRecord]:
        """List a user's videos, newest first."""
        async with self.async_session() as session:
            result = await session.execute(
                select(VideoModel)
                .where(VideoModel.user_id == str(user_id))
                .order_by(VideoModel.created_at.desc())
            )
            return [VideoRecord.model_validate(row) for row in result.scalars().all()]

    async def update_video(self, record: VideoRecord) -> VideoRecord:
        """Overwrite the mutable fields of a record.

        Raises:
            MetadataSyncError: If the record is gone or the write fails
        """
        try:
            async with self.async_session() as session:
                video = await session.get(VideoModel, str(record.id))
                if video is None:
                    raise MetadataSyncError(
                        "Video record no longer exists",
                        details={"video_id": str(record.id)},
                    )
                video.title = record.title
                video.description = record.description
                video.thumbnail_url = record.thumbnail_url
                video.video_url = record.video_url
                video.updated_at = datetime.utcnow()
                await session.commit()
                return VideoRecord.model_validate(video)
        except SQLAlchemyError as e:
            logger.error("Failed to update video", video_id=str(record.id), error=str(e))
            raise MetadataSyncError(
                f"Unable to update metadata: {e}",
                details={"video_id": str(record.id)},
            ) from e

    async def delete_video(self, video_id: UUID) -> bool:
        """Delete a video record."""
        async with self.async_session() as session:
            video = await session.get(VideoModel, str(video_id))
            if video is None:
                return False
            await session.delete(video)
            await session.commit()
            return True

    async def close(self) -> None:
        """Close database connection."""
        await self.engine.dispose()
