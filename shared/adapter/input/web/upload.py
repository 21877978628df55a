from fastapi import UploadFile

from content.domain.media import MediaUpload


def to_media_upload(upload: UploadFile) -> MediaUpload:
    return MediaUpload(file=upload.file, filename=upload.filename or "", content_type=upload.content_type)
