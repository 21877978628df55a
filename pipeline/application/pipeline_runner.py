import logging
from collections import defaultdict
from typing import Iterable, Optional

from pipeline.application.port.document_store_port import DocumentStorePort
from pipeline.domain.evaluation import (
    ORIGIN_KEY,
    matches,
    project_document,
    sort_documents,
    unwind_documents,
)
from pipeline.domain.expressions import resolve_path
from pipeline.domain.stage import (
    CollectionQuery,
    Derive,
    Join,
    Limit,
    Match,
    Predicate,
    Project,
    Search,
    Skip,
    Sort,
    Stage,
    Unwind,
)
from shared.domain.errors import InvalidPipelineInput

logger = logging.getLogger(__name__)


def split_pushdown(stages: list[Stage]) -> tuple[CollectionQuery, list[Stage]]:
    """
    저장소가 직접 처리할 수 있는 선두 구간(Search → Match* → Sort → Skip → Limit)을
    CollectionQuery로 묶고 나머지 스테이지를 돌려줍니다.
    """
    query = CollectionQuery()
    predicates: list[Predicate] = []
    index = 0

    if index < len(stages) and isinstance(stages[index], Search):
        query.search = stages[index]
        index += 1
    while index < len(stages) and isinstance(stages[index], Match):
        predicates.extend(stages[index].predicates)
        index += 1
    if index < len(stages) and isinstance(stages[index], Sort):
        query.sort = stages[index].keys
        index += 1
        if index < len(stages) and isinstance(stages[index], Skip):
            query.skip = stages[index].count
            index += 1
        if index < len(stages) and isinstance(stages[index], Limit):
            query.limit = stages[index].count
            index += 1

    query.predicates = tuple(predicates)
    return query, list(stages[index:])


def _collect_keys(documents: Iterable[dict], field: str) -> list:
    keys: list = []
    seen = set()
    for document in documents:
        value = resolve_path(document, field)
        for key in value if isinstance(value, list) else [value]:
            if key is None or key in seen:
                continue
            seen.add(key)
            keys.append(key)
    return keys


class PipelineRunner:
    def __init__(self, store: DocumentStorePort):
        self.store = store

    async def aggregate(self, collection: str, stages: list[Stage]) -> list[dict]:
        for position, stage in enumerate(stages):
            if isinstance(stage, Search) and position != 0:
                raise InvalidPipelineInput("Search stage must be the first stage")
        query, remaining = split_pushdown(stages)
        documents = await self.store.fetch(collection, query)
        return await self._run(documents, remaining)

    async def _run(self, documents: list[dict], stages: Iterable[Stage]) -> list[dict]:
        for stage in stages:
            documents = await self._apply(stage, documents)
        return documents

    async def _apply(self, stage: Stage, documents: list[dict]) -> list[dict]:
        if isinstance(stage, Match):
            return [d for d in documents if matches(d, stage.predicates)]
        if isinstance(stage, Join):
            return await self._join(stage, documents)
        if isinstance(stage, Unwind):
            return unwind_documents(documents, stage.field, stage.keep_empty)
        if isinstance(stage, Derive):
            return [
                {**d, **{name: expr.evaluate(d) for name, expr in stage.fields.items()}}
                for d in documents
            ]
        if isinstance(stage, Project):
            return [project_document(d, stage.spec) for d in documents]
        if isinstance(stage, Sort):
            return sort_documents(documents, stage.keys)
        if isinstance(stage, Skip):
            return documents[stage.count:]
        if isinstance(stage, Limit):
            return documents[: stage.count]
        raise InvalidPipelineInput(f"Unsupported stage: {type(stage).__name__}")

    async def _join(self, stage: Join, documents: list[dict]) -> list[dict]:
        keys = _collect_keys(documents, stage.local_field)
        foreign: list[dict] = []
        if keys:
            foreign = await self.store.fetch(
                stage.collection,
                CollectionQuery(predicates=(Predicate(stage.foreign_field, keys, "in"),)),
            )

        positions: dict = defaultdict(list)
        for position, doc in enumerate(foreign):
            positions[doc.get(stage.foreign_field)].append(position)

        shaped = await self._shape(foreign, stage.pipeline)

        joined: list[dict] = []
        for document in documents:
            local = resolve_path(document, stage.local_field)
            attached: list[dict] = []
            # 배열 필드는 저장된 순서를 그대로 따릅니다.
            for key in local if isinstance(local, list) else [local]:
                if key is None:
                    continue
                for position in positions.get(key, ()):
                    attached.extend(shaped.get(position, ()))
            joined.append({**document, stage.as_field: attached})
        return joined

    async def _shape(self, foreign: list[dict], pipeline: tuple) -> dict[int, list[dict]]:
        """하위 파이프라인을 조인 대상 전체에 한 번만 적용하고 원본 위치별로 묶습니다."""
        if not pipeline:
            return {position: [doc] for position, doc in enumerate(foreign)}
        tagged = [{**doc, ORIGIN_KEY: position} for position, doc in enumerate(foreign)]
        results = await self._run(tagged, pipeline)
        shaped: dict[int, list[dict]] = defaultdict(list)
        for doc in results:
            origin = doc.get(ORIGIN_KEY)
            if origin is None:
                logger.warning("join sub-pipeline dropped its origin marker")
                continue
            shaped[origin].append({k: v for k, v in doc.items() if k != ORIGIN_KEY})
        return shaped
