from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from config.database.session import Base
from shared.domain.reference import new_reference


class AccountORM(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_reference)
    username = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True)
    full_name = Column(String(255), nullable=False)
    avatar = Column(String(500))
    cover_image = Column(String(500))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class WatchHistoryORM(Base):
    """
    users.watch_history 배열을 표현하는 연결 테이블.
    자동 증가 id 순서가 곧 시청 순서(가장 최근이 마지막)입니다.
    """

    __tablename__ = "watch_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(String(32), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    watched_at = Column(DateTime, default=datetime.utcnow)
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_watch_history_user_video"),
    )
