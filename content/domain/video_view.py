from dataclasses import dataclass


@dataclass
class VideoView:
    """상세 조회 결과와 조회 이후 부수효과(조회수, 시청 기록)의 반영 여부."""

    detail: dict
    view_counted: bool = False
    history_recorded: bool = False
