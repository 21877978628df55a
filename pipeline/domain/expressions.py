from dataclasses import dataclass
from typing import Any


def resolve_path(document: Any, path: str) -> Any:
    """
    점(.)으로 구분된 경로를 따라 값을 찾습니다.
    중간에 배열을 만나면 각 원소에서 나머지 경로를 꺼내 하나의 배열로 펼칩니다.
    """
    current = document
    for part in path.split("."):
        if isinstance(current, list):
            collected = []
            for item in current:
                if not isinstance(item, dict) or part not in item:
                    continue
                value = item[part]
                if isinstance(value, list):
                    collected.extend(value)
                else:
                    collected.append(value)
            current = collected
        elif isinstance(current, dict):
            current = current.get(part)
        else:
            return None
    return current


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class Expression:
    def evaluate(self, document: dict) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Size(Expression):
    path: str

    def evaluate(self, document: dict) -> int:
        return len(_as_list(resolve_path(document, self.path)))


@dataclass(frozen=True)
class Contains(Expression):
    """value가 경로의 값 목록에 있는지. value가 없으면(익명 조회자) 항상 False."""

    path: str
    value: Any

    def evaluate(self, document: dict) -> bool:
        if self.value is None:
            return False
        return self.value in _as_list(resolve_path(document, self.path))


@dataclass(frozen=True)
class SumOf(Expression):
    path: str

    def evaluate(self, document: dict) -> int | float:
        return sum(v for v in _as_list(resolve_path(document, self.path)) if isinstance(v, (int, float)))


@dataclass(frozen=True)
class First(Expression):
    path: str

    def evaluate(self, document: dict) -> Any:
        values = _as_list(resolve_path(document, self.path))
        return values[0] if values else None
