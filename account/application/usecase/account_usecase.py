from typing import Optional

from account.application.port.account_repository_port import AccountRepositoryPort
from account.domain.account import Account
from content.application.port.media_storage_port import MediaStoragePort
from content.domain.media import MediaUpload
from shared.domain.errors import Conflict, NotFound
from shared.domain.reference import require_viewer


class AccountUseCase:
    def __init__(self, account_repository: AccountRepositoryPort, media_storage: Optional[MediaStoragePort] = None):
        self.repo = account_repository
        self.media_storage = media_storage

    async def register_channel(
        self,
        username: str,
        email: str,
        full_name: str,
        avatar: Optional[str] = None,
        cover_image: Optional[str] = None,
    ) -> Account:
        # 자격 증명은 인증 협력자가 관리하고, 여기서는 채널 프로필만 만듭니다.
        if await self.repo.find_by_username(username) is not None:
            raise Conflict("Username is already taken")
        account = Account(
            username=username,
            email=email,
            full_name=full_name,
            avatar=avatar,
            cover_image=cover_image,
        )
        return await self.repo.save(account)

    async def get_account(self, viewer_id: str | None) -> Account:
        return await self._require_account(require_viewer(viewer_id))

    async def update_account_details(
        self,
        viewer_id: str | None,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Account:
        account = await self._require_account(require_viewer(viewer_id))
        account.update_details(full_name=full_name, email=email)
        return await self.repo.update(account)

    async def update_avatar(self, viewer_id: str | None, upload: MediaUpload) -> Account:
        account = await self._require_account(require_viewer(viewer_id))
        stored = await self.media_storage.upload(upload, f"avatars/{account.id}")
        account.change_images(avatar=stored.url)
        return await self.repo.update(account)

    async def update_cover_image(self, viewer_id: str | None, upload: MediaUpload) -> Account:
        account = await self._require_account(require_viewer(viewer_id))
        stored = await self.media_storage.upload(upload, f"cover-images/{account.id}")
        account.change_images(cover_image=stored.url)
        return await self.repo.update(account)

    async def _require_account(self, account_id: str) -> Account:
        account = await self.repo.find_by_id(account_id)
        if account is None:
            raise NotFound("Account not found")
        return account
