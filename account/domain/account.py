from typing import Optional
from datetime import datetime


class Account:
    def __init__(
        self,
        username: str,
        email: str,
        full_name: str,
        avatar: Optional[str] = None,
        cover_image: Optional[str] = None,
    ):
        self.id: Optional[str] = None
        self.username = username.strip().lower()
        self.email = email.strip().lower()
        self.full_name = full_name
        self.avatar = avatar
        self.cover_image = cover_image
        self.created_at: datetime = datetime.utcnow()
        self.updated_at: datetime = datetime.utcnow()

    def update_details(
        self,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
    ):
        if full_name is not None:
            self.full_name = full_name
        if email is not None:
            self.email = email.strip().lower()
        self.updated_at = datetime.utcnow()

    def change_images(
        self,
        avatar: Optional[str] = None,
        cover_image: Optional[str] = None,
    ):
        if avatar is not None:
            self.avatar = avatar
        if cover_image is not None:
            self.cover_image = cover_image
        self.updated_at = datetime.utcnow()
