from typing import Any, Optional

from pipeline.domain.expressions import Expression
from pipeline.domain.stage import (
    DOCUMENT_WISE_STAGES,
    Derive,
    Join,
    Limit,
    Match,
    Predicate,
    Project,
    Search,
    Skip,
    Sort,
    SortDirection,
    Stage,
    Unwind,
)
from shared.domain.errors import InvalidPipelineInput
from shared.domain.reference import is_valid_reference

TIE_BREAK_FIELDS = ("created_at", "id")


class PipelineBuilder:
    """
    변환 스테이지를 호출 순서대로 쌓습니다.
    예외 규칙은 두 가지뿐입니다: 검색 스테이지는 항상 맨 앞, scope 필터는 그 바로 뒤.
    """

    def __init__(self):
        self._search: Optional[Search] = None
        self._scope: list[Stage] = []
        self._stages: list[Stage] = []

    def search(self, query: str, fields: tuple[str, ...] | list[str]) -> "PipelineBuilder":
        if not query or not query.strip():
            raise InvalidPipelineInput("Search query must not be empty")
        if not fields:
            raise InvalidPipelineInput("Search needs at least one field")
        self._search = Search(query=query.strip(), fields=tuple(fields))
        return self

    def scope(self, *predicates: Predicate) -> "PipelineBuilder":
        self._scope.append(Match(predicates=tuple(predicates)))
        return self

    def match(self, *predicates: Predicate) -> "PipelineBuilder":
        self._stages.append(Match(predicates=tuple(predicates)))
        return self

    def match_reference(self, field: str, value: Any, scope: bool = False) -> "PipelineBuilder":
        if not is_valid_reference(value):
            raise InvalidPipelineInput(f"Invalid reference for {field}")
        predicate = Predicate(field, value.lower())
        return self.scope(predicate) if scope else self.match(predicate)

    def join(
        self,
        collection: str,
        local_field: str,
        foreign_field: str,
        as_field: str,
        pipeline: Optional[list[Stage]] = None,
    ) -> "PipelineBuilder":
        nested = tuple(pipeline or ())
        for stage in nested:
            if not isinstance(stage, DOCUMENT_WISE_STAGES):
                raise InvalidPipelineInput(
                    f"{type(stage).__name__} is not allowed inside a join pipeline"
                )
        self._stages.append(Join(collection, local_field, foreign_field, as_field, nested))
        return self

    def unwind(self, field: str, keep_empty: bool = False) -> "PipelineBuilder":
        self._stages.append(Unwind(field=field, keep_empty=keep_empty))
        return self

    def derive(self, **fields: Expression) -> "PipelineBuilder":
        self._stages.append(Derive(fields=dict(fields)))
        return self

    def project(self, spec: dict[str, Any]) -> "PipelineBuilder":
        self._stages.append(Project(spec=dict(spec)))
        return self

    def sort(self, field: str, direction: SortDirection = SortDirection.DESC) -> "PipelineBuilder":
        keys = [(field, direction)]
        # 같은 값끼리는 생성 순서로 정렬해 페이지 경계가 흔들리지 않게 합니다.
        for tie_break in TIE_BREAK_FIELDS:
            if tie_break != field:
                keys.append((tie_break, SortDirection.ASC))
        self._stages.append(Sort(keys=tuple(keys)))
        return self

    def skip(self, count: int) -> "PipelineBuilder":
        if count < 0:
            raise InvalidPipelineInput("skip must be zero or positive")
        self._stages.append(Skip(count=count))
        return self

    def limit(self, count: int) -> "PipelineBuilder":
        if count < 1:
            raise InvalidPipelineInput("limit must be at least 1")
        self._stages.append(Limit(count=count))
        return self

    def paginate(self, page: int, limit: int) -> "PipelineBuilder":
        if page < 1:
            raise InvalidPipelineInput("page must be at least 1")
        if limit < 1:
            raise InvalidPipelineInput("limit must be at least 1")
        return self.skip((page - 1) * limit).limit(limit)

    def build(self) -> list[Stage]:
        stages: list[Stage] = []
        if self._search is not None:
            stages.append(self._search)
        stages.extend(self._scope)
        stages.extend(self._stages)
        return stages