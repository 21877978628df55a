from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from config.database.session import Base
from shared.domain.reference import new_reference


class VideoORM(Base):
    __tablename__ = "videos"

    id = Column(String(32), primary_key=True, default=new_reference)
    video_file = Column(String(500), nullable=False)
    thumbnail = Column(String(500), nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)
    duration = Column(Float, nullable=False, default=0.0)
    views = Column(BigInteger, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)
    # 소유자는 생성 이후 변경하지 않습니다.
    owner_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PlaylistORM(Base):
    __tablename__ = "playlists"

    id = Column(String(32), primary_key=True, default=new_reference)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    owner_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PlaylistVideoORM(Base):
    """playlists.video_ids 배열. (playlist_id, video_id) 유일 제약으로 집합 의미를 보장합니다."""

    __tablename__ = "playlist_videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    playlist_id = Column(
        String(32), ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    video_id = Column(String(32), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow)
    __table_args__ = (
        UniqueConstraint("playlist_id", "video_id", name="uq_playlist_video"),
    )
