from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String, UniqueConstraint

from config.database.session import Base
from shared.domain.reference import new_reference


class SubscriptionORM(Base):
    __tablename__ = "subscriptions"

    id = Column(String(32), primary_key=True, default=new_reference)
    subscriber_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscription_pair"),
    )


class LikeORM(Base):
    __tablename__ = "likes"

    id = Column(String(32), primary_key=True, default=new_reference)
    liked_by_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(String(32), ForeignKey("videos.id", ondelete="CASCADE"), index=True)
    # 댓글/트윗 저장소는 이 서비스 밖에 있어 외래 키를 두지 않습니다.
    comment_id = Column(String(32), index=True)
    tweet_id = Column(String(32), index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    __table_args__ = (
        UniqueConstraint("liked_by_id", "video_id", name="uq_like_video"),
        UniqueConstraint("liked_by_id", "comment_id", name="uq_like_comment"),
        UniqueConstraint("liked_by_id", "tweet_id", name="uq_like_tweet"),
        CheckConstraint(
            "(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_like_single_target",
        ),
    )
