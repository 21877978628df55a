import logging

from relationship.application.port.relationship_repository_port import Edge, RelationshipRepositoryPort
from relationship.domain.like import Like, LikeTarget
from relationship.domain.subscription import Subscription
from relationship.domain.toggle_result import ToggleResult
from shared.domain.errors import UnsupportedTargetKind
from shared.domain.reference import require_reference, require_viewer

logger = logging.getLogger(__name__)

# 트윗 좋아요는 저장소가 아직 없습니다.
SUPPORTED_LIKE_TARGETS = (LikeTarget.VIDEO, LikeTarget.COMMENT)


class ToggleUseCase:
    def __init__(self, repository: RelationshipRepositoryPort):
        self.repository = repository

    async def toggle_subscription(self, viewer_id: str | None, channel_id: str) -> ToggleResult:
        subscriber_id = require_viewer(viewer_id)
        channel_id = require_reference(channel_id, "channel id")
        return await self._toggle(Subscription(subscriber_id=subscriber_id, channel_id=channel_id))

    async def toggle_like(self, viewer_id: str | None, target_kind: LikeTarget, target_id: str) -> ToggleResult:
        liked_by_id = require_viewer(viewer_id)
        target_id = require_reference(target_id, f"{target_kind.value} id")
        if target_kind not in SUPPORTED_LIKE_TARGETS:
            raise UnsupportedTargetKind(f"Liking a {target_kind.value} is not supported yet")
        return await self._toggle(Like(liked_by_id=liked_by_id, target_kind=target_kind, target_id=target_id))

    async def _toggle(self, edge: Edge) -> ToggleResult:
        """
        조건부 삭제가 행을 지웠으면 비활성, 아니면 생성해서 활성.
        생성이 유일 제약에 막힌 경우(동시 요청)도 간선은 존재하므로 활성으로 봅니다.
        """
        if await self.repository.delete(edge):
            logger.info("edge removed: %s", edge)
            return ToggleResult(active=False)

        created = await self.repository.create(edge)
        if not created:
            logger.info("edge already created by a concurrent request: %s", edge)
        else:
            logger.info("edge created: %s", edge)
        return ToggleResult(active=True)
