from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Video:
    title: str
    description: str
    video_file: str
    thumbnail: str
    owner_id: str
    duration: float = 0.0
    views: int = 0
    is_published: bool = True
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
