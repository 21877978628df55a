from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pipeline.domain.expressions import Expression


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: str | None) -> "SortDirection":
        if value is None:
            return cls.DESC
        return cls.ASC if value.lower() in ("asc", "1", "ascending") else cls.DESC


@dataclass(frozen=True)
class Predicate:
    """
    op:
      - eq: 같은 값이거나, 필드가 배열이면 값을 포함
      - ieq: 대소문자 무시 문자열 비교
      - in: 필드 값이 value 목록에 포함
      - exists: value가 True면 값이 있어야 하고 False면 없어야 함
    """

    field: str
    value: Any
    op: str = "eq"


@dataclass(frozen=True)
class Search:
    query: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class Match:
    predicates: tuple[Predicate, ...]


@dataclass(frozen=True)
class Join:
    collection: str
    local_field: str
    foreign_field: str
    as_field: str
    pipeline: tuple = ()


@dataclass(frozen=True)
class Unwind:
    field: str
    keep_empty: bool = False


@dataclass(frozen=True)
class Derive:
    fields: dict[str, Expression] = field(default_factory=dict)


@dataclass(frozen=True)
class Project:
    # 값: True(그대로), str(원본 경로에서 이름 변경), dict(중첩 프로젝션)
    spec: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Sort:
    keys: tuple[tuple[str, SortDirection], ...]


@dataclass(frozen=True)
class Skip:
    count: int


@dataclass(frozen=True)
class Limit:
    count: int


Stage = Search | Match | Join | Unwind | Derive | Project | Sort | Skip | Limit

# 조인 하위 파이프라인에 허용되는 문서 단위 스테이지
DOCUMENT_WISE_STAGES = (Match, Join, Unwind, Derive, Project)


@dataclass
class CollectionQuery:
    """저장소에 그대로 내려보낼 수 있는 선두 스테이지 묶음."""

    predicates: tuple[Predicate, ...] = ()
    search: Optional[Search] = None
    sort: tuple[tuple[str, SortDirection], ...] = ()
    skip: int = 0
    limit: Optional[int] = None
