import logging

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError

from config.database.session import SessionLocal, open_session
from relationship.application.port.relationship_repository_port import Edge, RelationshipRepositoryPort
from relationship.domain.like import Like, LikeTarget
from relationship.domain.subscription import Subscription
from relationship.infrastructure.orm.relationship_orm import LikeORM, SubscriptionORM
from shared.domain.errors import NotFound, UnsupportedTargetKind

logger = logging.getLogger(__name__)

_LIKE_TARGET_COLUMNS = {
    LikeTarget.VIDEO: "video_id",
    LikeTarget.COMMENT: "comment_id",
    LikeTarget.TWEET: "tweet_id",
}


class RelationshipRepositoryImpl(RelationshipRepositoryPort):
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    async def exists(self, edge: Edge) -> bool:
        async with open_session(self.session_factory) as db:
            return bool(await db.scalar(select(exists().where(*self._key(edge)))))

    async def create(self, edge: Edge) -> bool:
        async with open_session(self.session_factory) as db:
            db.add(self._to_orm(edge))
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                # 동시에 같은 간선을 만든 요청이 있으면 유일 제약이 막아 줍니다.
                if await db.scalar(select(exists().where(*self._key(edge)))):
                    return False
                raise NotFound("Relationship target does not exist")
        return True

    async def delete(self, edge: Edge) -> bool:
        async with open_session(self.session_factory) as db:
            model = SubscriptionORM if isinstance(edge, Subscription) else LikeORM
            result = await db.execute(delete(model).where(*self._key(edge)))
            await db.commit()
            return result.rowcount > 0

    @staticmethod
    def _key(edge: Edge) -> list:
        if isinstance(edge, Subscription):
            return [
                SubscriptionORM.subscriber_id == edge.subscriber_id,
                SubscriptionORM.channel_id == edge.channel_id,
            ]
        column = getattr(LikeORM, RelationshipRepositoryImpl._target_column(edge.target_kind))
        return [LikeORM.liked_by_id == edge.liked_by_id, column == edge.target_id]

    @staticmethod
    def _to_orm(edge: Edge):
        if isinstance(edge, Subscription):
            return SubscriptionORM(subscriber_id=edge.subscriber_id, channel_id=edge.channel_id)
        orm = LikeORM(liked_by_id=edge.liked_by_id)
        setattr(orm, RelationshipRepositoryImpl._target_column(edge.target_kind), edge.target_id)
        return orm

    @staticmethod
    def _target_column(kind: LikeTarget) -> str:
        column = _LIKE_TARGET_COLUMNS.get(kind)
        if column is None:
            raise UnsupportedTargetKind(f"Likes on {kind} are not supported")
        return column
