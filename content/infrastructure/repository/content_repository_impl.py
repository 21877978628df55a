import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, exists, not_, select, update
from sqlalchemy.exc import IntegrityError

from account.infrastructure.orm.account_orm import WatchHistoryORM
from config.database.session import SessionLocal, open_session
from content.application.port.content_repository_port import ContentRepositoryPort
from content.domain.playlist import Playlist
from content.domain.video import Video
from content.infrastructure.orm.models import PlaylistORM, PlaylistVideoORM, VideoORM
from relationship.infrastructure.orm.relationship_orm import LikeORM
from shared.domain.errors import NotFound

logger = logging.getLogger(__name__)


class ContentRepositoryImpl(ContentRepositoryPort):
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    async def save_video(self, video: Video) -> Video:
        async with open_session(self.session_factory) as db:
            orm = VideoORM(
                title=video.title,
                description=video.description,
                video_file=video.video_file,
                thumbnail=video.thumbnail,
                owner_id=video.owner_id,
                duration=video.duration,
                views=video.views,
                is_published=video.is_published,
            )
            if video.created_at is not None:
                orm.created_at = video.created_at
            db.add(orm)
            await self._commit_owned_insert(db, video.owner_id)
            await db.refresh(orm)
            return self._video_to_domain(orm)

    async def find_video(self, video_id: str) -> Optional[Video]:
        async with open_session(self.session_factory) as db:
            orm = await db.get(VideoORM, video_id)
            return None if orm is None else self._video_to_domain(orm)

    async def increment_views(self, video_id: str) -> bool:
        async with open_session(self.session_factory) as db:
            # 조회수 증가는 수정 시각을 바꾸지 않습니다.
            result = await db.execute(
                update(VideoORM)
                .where(VideoORM.id == video_id)
                .values(views=VideoORM.views + 1, updated_at=VideoORM.updated_at)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
            return result.rowcount > 0

    async def update_owned_video(self, video_id: str, owner_id: str, changes: dict) -> Optional[Video]:
        async with open_session(self.session_factory) as db:
            result = await db.execute(
                update(VideoORM)
                .where(VideoORM.id == video_id, VideoORM.owner_id == owner_id)
                .values(**changes, updated_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await db.rollback()
                return None
            await db.commit()
            orm = await db.get(VideoORM, video_id, populate_existing=True)
            return self._video_to_domain(orm)

    async def toggle_owned_video_publish(self, video_id: str, owner_id: str) -> Optional[Video]:
        async with open_session(self.session_factory) as db:
            result = await db.execute(
                update(VideoORM)
                .where(VideoORM.id == video_id, VideoORM.owner_id == owner_id)
                .values(is_published=not_(VideoORM.is_published), updated_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await db.rollback()
                return None
            await db.commit()
            orm = await db.get(VideoORM, video_id, populate_existing=True)
            return self._video_to_domain(orm)

    async def delete_owned_video(self, video_id: str, owner_id: str) -> bool:
        async with open_session(self.session_factory) as db:
            result = await db.execute(
                delete(VideoORM).where(VideoORM.id == video_id, VideoORM.owner_id == owner_id)
            )
            if result.rowcount == 0:
                await db.rollback()
                return False
            # 영상을 가리키던 좋아요/재생목록 항목/시청 기록도 같은 트랜잭션에서 정리합니다.
            await db.execute(delete(LikeORM).where(LikeORM.video_id == video_id))
            await db.execute(delete(PlaylistVideoORM).where(PlaylistVideoORM.video_id == video_id))
            await db.execute(delete(WatchHistoryORM).where(WatchHistoryORM.video_id == video_id))
            await db.commit()
            return True

    async def save_playlist(self, playlist: Playlist) -> Playlist:
        async with open_session(self.session_factory) as db:
            orm = PlaylistORM(
                name=playlist.name,
                description=playlist.description,
                owner_id=playlist.owner_id,
            )
            db.add(orm)
            await self._commit_owned_insert(db, playlist.owner_id)
            await db.refresh(orm)
            return self._playlist_to_domain(orm, [])

    async def find_playlist(self, playlist_id: str) -> Optional[Playlist]:
        async with open_session(self.session_factory) as db:
            return await self._load_playlist(db, playlist_id)

    async def update_owned_playlist(self, playlist_id: str, owner_id: str, changes: dict) -> Optional[Playlist]:
        async with open_session(self.session_factory) as db:
            if not await self._touch_owned_playlist(db, playlist_id, owner_id, changes):
                return None
            await db.commit()
            return await self._load_playlist(db, playlist_id)

    async def delete_owned_playlist(self, playlist_id: str, owner_id: str) -> bool:
        async with open_session(self.session_factory) as db:
            result = await db.execute(
                delete(PlaylistORM).where(PlaylistORM.id == playlist_id, PlaylistORM.owner_id == owner_id)
            )
            if result.rowcount == 0:
                await db.rollback()
                return False
            await db.execute(delete(PlaylistVideoORM).where(PlaylistVideoORM.playlist_id == playlist_id))
            await db.commit()
            return True

    async def add_video_to_owned_playlist(self, playlist_id: str, owner_id: str, video_id: str) -> Optional[Playlist]:
        async with open_session(self.session_factory) as db:
            if not await self._touch_owned_playlist(db, playlist_id, owner_id):
                return None
            present = await db.scalar(
                select(
                    exists().where(
                        PlaylistVideoORM.playlist_id == playlist_id,
                        PlaylistVideoORM.video_id == video_id,
                    )
                )
            )
            if not present:
                db.add(PlaylistVideoORM(playlist_id=playlist_id, video_id=video_id))
            try:
                await db.commit()
            except IntegrityError:
                # 같은 영상을 동시에 추가한 요청이 먼저 반영된 경우
                await db.rollback()
                logger.info("video %s already added to playlist %s", video_id, playlist_id)
            return await self._load_playlist(db, playlist_id)

    async def remove_video_from_owned_playlist(
        self, playlist_id: str, owner_id: str, video_id: str
    ) -> Optional[Playlist]:
        async with open_session(self.session_factory) as db:
            if not await self._touch_owned_playlist(db, playlist_id, owner_id):
                return None
            await db.execute(
                delete(PlaylistVideoORM).where(
                    PlaylistVideoORM.playlist_id == playlist_id,
                    PlaylistVideoORM.video_id == video_id,
                )
            )
            await db.commit()
            return await self._load_playlist(db, playlist_id)

    @staticmethod
    async def _commit_owned_insert(db, owner_id: str) -> None:
        try:
            await db.commit()
        except IntegrityError as exc:
            # 소유자 외래 키 위반: 존재하지 않는 계정
            await db.rollback()
            logger.info("insert refused, owner %s does not exist", owner_id)
            raise NotFound("Account not found") from exc

    @staticmethod
    async def _touch_owned_playlist(db, playlist_id: str, owner_id: str, changes: Optional[dict] = None) -> bool:
        """소유자 조건을 건 UPDATE로 쓰기 시점에 소유권을 다시 확인합니다."""
        result = await db.execute(
            update(PlaylistORM)
            .where(PlaylistORM.id == playlist_id, PlaylistORM.owner_id == owner_id)
            .values(**(changes or {}), updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            return False
        return True

    async def _load_playlist(self, db, playlist_id: str) -> Optional[Playlist]:
        orm = await db.get(PlaylistORM, playlist_id, populate_existing=True)
        if orm is None:
            return None
        video_ids = (
            await db.scalars(
                select(PlaylistVideoORM.video_id)
                .where(PlaylistVideoORM.playlist_id == playlist_id)
                .order_by(PlaylistVideoORM.id.asc())
            )
        ).all()
        return self._playlist_to_domain(orm, list(video_ids))

    @staticmethod
    def _video_to_domain(orm: VideoORM) -> Video:
        return Video(
            id=orm.id,
            title=orm.title,
            description=orm.description,
            video_file=orm.video_file,
            thumbnail=orm.thumbnail,
            owner_id=orm.owner_id,
            duration=orm.duration,
            views=orm.views,
            is_published=orm.is_published,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    @staticmethod
    def _playlist_to_domain(orm: PlaylistORM, video_ids: list[str]) -> Playlist:
        return Playlist(
            id=orm.id,
            name=orm.name,
            description=orm.description,
            owner_id=orm.owner_id,
            video_ids=video_ids,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )
