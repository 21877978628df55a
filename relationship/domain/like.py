from dataclasses import dataclass
from enum import Enum


class LikeTarget(str, Enum):
    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"


@dataclass(frozen=True)
class Like:
    liked_by_id: str
    target_kind: LikeTarget
    target_id: str
