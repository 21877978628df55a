from fastapi import Header


def get_viewer_id(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> str | None:
    """
    인증 게이트웨이가 검증 후 전달한 사용자 식별자를 읽습니다.
    헤더가 없으면 익명 조회로 취급합니다.
    """
    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()
