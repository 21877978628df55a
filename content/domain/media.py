from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass
class MediaUpload:
    file: BinaryIO
    filename: str
    content_type: Optional[str] = None


@dataclass
class StoredMedia:
    url: str
    # 재생 시간을 아는 저장소만 채웁니다. S3 저장소는 None을 돌려줍니다.
    duration: Optional[float] = None
