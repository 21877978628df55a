import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import case, func, inspect, or_, select

from account.infrastructure.orm.account_orm import AccountORM, WatchHistoryORM
from config.database.session import SessionLocal, open_session
from content.infrastructure.orm.models import PlaylistORM, PlaylistVideoORM, VideoORM
from pipeline.application.port.document_store_port import DocumentStorePort
from pipeline.domain import collection as collections
from pipeline.domain.evaluation import matches, sort_documents
from pipeline.domain.stage import CollectionQuery, Predicate, Search, SortDirection
from relationship.infrastructure.orm.relationship_orm import LikeORM, SubscriptionORM
from shared.domain.errors import InvalidPipelineInput

logger = logging.getLogger(__name__)

SEARCH_SCORE_FIELD = "search_score"


@dataclass(frozen=True)
class ArrayField:
    """연결 테이블에 저장된 배열 필드. 자동 증가 id 순서가 배열 순서입니다."""

    model: type
    parent_column: str
    value_column: str


@dataclass(frozen=True)
class CollectionMapping:
    model: type
    arrays: dict[str, ArrayField] = field(default_factory=dict)

    @property
    def columns(self) -> dict:
        return {attr.key: getattr(self.model, attr.key) for attr in inspect(self.model).column_attrs}


COLLECTIONS: dict[str, CollectionMapping] = {
    collections.USERS: CollectionMapping(
        AccountORM,
        arrays={"watch_history": ArrayField(WatchHistoryORM, "user_id", "video_id")},
    ),
    collections.VIDEOS: CollectionMapping(VideoORM),
    collections.SUBSCRIPTIONS: CollectionMapping(SubscriptionORM),
    collections.LIKES: CollectionMapping(LikeORM),
    collections.PLAYLISTS: CollectionMapping(
        PlaylistORM,
        arrays={"video_ids": ArrayField(PlaylistVideoORM, "playlist_id", "video_id")},
    ),
}


class SqlDocumentStore(DocumentStorePort):
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    async def fetch(self, collection: str, query: Optional[CollectionQuery] = None) -> list[dict]:
        query = query or CollectionQuery()
        mapping = COLLECTIONS.get(collection)
        if mapping is None:
            raise InvalidPipelineInput(f"Unknown collection: {collection}")

        columns = mapping.columns
        sql_predicates = [p for p in query.predicates if p.field in columns]
        residual = [p for p in query.predicates if p.field not in columns]
        # 모든 조건/정렬 키가 컬럼이면 정렬과 페이지까지 SQL로 처리합니다.
        pushdown = not residual and all(key in columns for key, _ in query.sort)

        async with open_session(self.session_factory) as db:
            stmt = select(mapping.model)
            score = None
            if query.search is not None:
                condition, score = self._search_clause(db.get_bind().dialect.name, columns, query.search)
                stmt = stmt.where(condition).add_columns(score.label(SEARCH_SCORE_FIELD))
            if sql_predicates:
                stmt = stmt.where(*[self._predicate_clause(columns, p) for p in sql_predicates])

            order_by = []
            if pushdown:
                for key, direction in query.sort:
                    column = columns[key]
                    order_by.append(column.desc() if direction == SortDirection.DESC else column.asc())
            if score is not None and not query.sort:
                order_by.append(score.desc())
            order_by.extend(columns[key].asc() for key in ("created_at", "id") if key in columns)
            stmt = stmt.order_by(*order_by)

            if pushdown:
                if query.skip:
                    stmt = stmt.offset(query.skip)
                if query.limit is not None:
                    stmt = stmt.limit(query.limit)

            rows = (await db.execute(stmt)).all()
            documents = []
            for row in rows:
                document = {key: getattr(row[0], key) for key in columns}
                if score is not None:
                    document[SEARCH_SCORE_FIELD] = row[1]
                documents.append(document)

            if mapping.arrays and documents:
                await self._attach_arrays(db, mapping, documents)

        if not pushdown:
            documents = [d for d in documents if matches(d, residual)]
            if query.sort:
                documents = sort_documents(documents, query.sort)
            documents = documents[query.skip:]
            if query.limit is not None:
                documents = documents[: query.limit]
        return documents

    @staticmethod
    def _predicate_clause(columns: dict, predicate: Predicate):
        column = columns[predicate.field]
        if predicate.op == "eq":
            return column.is_(None) if predicate.value is None else column == predicate.value
        if predicate.op == "ieq":
            return func.lower(column) == str(predicate.value).lower()
        if predicate.op == "in":
            return column.in_(list(predicate.value))
        if predicate.op == "exists":
            return column.isnot(None) if predicate.value else column.is_(None)
        raise InvalidPipelineInput(f"Unknown predicate op: {predicate.op}")

    @staticmethod
    def _search_clause(dialect: str, columns: dict, search: Search):
        fields = [columns[name] for name in search.fields if name in columns]
        if not fields:
            raise InvalidPipelineInput("Search fields are not indexed text columns")
        if dialect == "postgresql":
            document = func.to_tsvector("english", func.concat_ws(" ", *fields))
            ts_query = func.plainto_tsquery("english", search.query)
            return document.op("@@")(ts_query), func.ts_rank(document, ts_query)
        # PostgreSQL 외 방언은 부분 문자열 일치로 대신하고, 일치한 필드 수를 점수로 씁니다.
        needle = search.query.lower()
        hits = [func.lower(column).contains(needle, autoescape=True) for column in fields]
        score = sum(case((hit, 1), else_=0) for hit in hits)
        return or_(*hits), score

    @staticmethod
    async def _attach_arrays(db, mapping: CollectionMapping, documents: list[dict]) -> None:
        ids = [d["id"] for d in documents]
        for name, array in mapping.arrays.items():
            parent = getattr(array.model, array.parent_column)
            value = getattr(array.model, array.value_column)
            rows = await db.execute(
                select(parent, value).where(parent.in_(ids)).order_by(array.model.id.asc())
            )
            grouped = defaultdict(list)
            for parent_id, value_id in rows:
                grouped[parent_id].append(value_id)
            for document in documents:
                document[name] = grouped.get(document["id"], [])
