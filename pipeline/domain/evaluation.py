from typing import Any, Iterable

from pipeline.domain.expressions import resolve_path
from pipeline.domain.stage import Predicate, SortDirection

# 조인 하위 파이프라인 결과를 원본 문서와 다시 연결하기 위한 내부 표식
ORIGIN_KEY = "__origin__"


def _predicate_holds(document: dict, predicate: Predicate) -> bool:
    value = resolve_path(document, predicate.field)
    candidates = value if isinstance(value, list) else [value]

    if predicate.op == "eq":
        if predicate.value is None:
            return value is None or value == []
        return predicate.value in candidates
    if predicate.op == "ieq":
        expected = str(predicate.value).lower()
        return any(isinstance(c, str) and c.lower() == expected for c in candidates)
    if predicate.op == "in":
        allowed = list(predicate.value)
        return any(c in allowed for c in candidates if c is not None)
    if predicate.op == "exists":
        present = value is not None and value != []
        return present == bool(predicate.value)
    raise ValueError(f"Unknown predicate op: {predicate.op}")


def matches(document: dict, predicates: Iterable[Predicate]) -> bool:
    return all(_predicate_holds(document, p) for p in predicates)


def _sort_key(field: str):
    def key(document: dict):
        value = resolve_path(document, field)
        # None은 항상 가장 작은 값으로 취급합니다.
        return (0,) if value is None else (1, value)

    return key


def sort_documents(documents: list[dict], keys: Iterable[tuple[str, SortDirection]]) -> list[dict]:
    """안정 정렬을 우선순위 역순으로 적용해 다중 키 정렬을 만듭니다."""
    ordered = list(documents)
    for field, direction in reversed(list(keys)):
        ordered.sort(key=_sort_key(field), reverse=direction == SortDirection.DESC)
    return ordered


def unwind_documents(documents: Iterable[dict], field: str, keep_empty: bool = False) -> list[dict]:
    unwound: list[dict] = []
    for document in documents:
        value = document.get(field)
        if isinstance(value, list):
            if value:
                unwound.extend({**document, field: item} for item in value)
            elif keep_empty:
                unwound.append({**document, field: None})
        elif value is None:
            if keep_empty:
                unwound.append({**document, field: None})
        else:
            unwound.append(document)
    return unwound


def project_document(document: dict, spec: dict[str, Any]) -> dict:
    projected: dict = {}
    for key, rule in spec.items():
        if rule is True:
            if key in document:
                projected[key] = document[key]
        elif isinstance(rule, str):
            projected[key] = resolve_path(document, rule)
        elif isinstance(rule, dict):
            if key not in document:
                continue
            value = document[key]
            if isinstance(value, list):
                projected[key] = [project_document(v, rule) for v in value if isinstance(v, dict)]
            elif isinstance(value, dict):
                projected[key] = project_document(value, rule)
            else:
                projected[key] = value
    if ORIGIN_KEY in document:
        projected[ORIGIN_KEY] = document[ORIGIN_KEY]
    return projected
