import uuid

from shared.domain.errors import Forbidden, InvalidReference


def new_reference() -> str:
    return uuid.uuid4().hex


def is_valid_reference(value) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        return uuid.UUID(value).hex == value.lower()
    except ValueError:
        return False


def require_reference(value, label: str = "id") -> str:
    if not is_valid_reference(value):
        raise InvalidReference(f"Invalid {label}")
    return value.lower()


def require_viewer(viewer_id: str | None) -> str:
    # 인증 협력자가 식별자를 주지 않은 요청은 변경 작업을 할 수 없습니다.
    if viewer_id is None:
        raise Forbidden("Authentication required")
    return require_reference(viewer_id, "viewer id")
