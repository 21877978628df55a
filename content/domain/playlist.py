from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Playlist:
    name: str
    description: str
    owner_id: str
    # 집합 의미: 같은 영상은 한 번만, 추가된 순서 유지
    video_ids: list[str] = field(default_factory=list)
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
