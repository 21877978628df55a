import asyncio
import logging
import uuid
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

from config.s3_client import build_s3_url, get_s3_client
from config.settings import S3Settings
from content.application.port.media_storage_port import MediaStoragePort
from content.domain.media import MediaUpload, StoredMedia
from shared.domain.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class S3MediaStorage(MediaStoragePort):
    def __init__(self, settings: S3Settings | None = None, client=None):
        self.settings = settings or S3Settings()
        self._client = client

    @property
    def client(self):
        # 업로드가 실제로 필요할 때 boto3 클라이언트를 만듭니다.
        if self._client is None:
            self._client = get_s3_client(self.settings)
        return self._client

    async def upload(self, upload: MediaUpload, folder: str) -> StoredMedia:
        if not self.settings.bucket:
            raise StoreUnavailable("S3 bucket is not configured")
        ext = Path(upload.filename or "").suffix
        key = f"{folder}/{uuid.uuid4().hex}{ext}"
        try:
            # boto3는 동기 API라 이벤트 루프를 막지 않도록 스레드에서 실행합니다.
            await asyncio.to_thread(
                self.client.upload_fileobj,
                upload.file,
                self.settings.bucket,
                key,
                ExtraArgs={"ContentType": upload.content_type or "application/octet-stream"},
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("media upload to %s failed: %s", key, exc)
            raise StoreUnavailable(f"Failed to upload media: {exc}") from exc
        return StoredMedia(url=build_s3_url(self.settings, key))
