import boto3

from config.settings import S3Settings


def get_s3_client(settings: S3Settings):
    return boto3.client(
        "s3",
        region_name=settings.region,
        aws_access_key_id=settings.access_key_id,
        aws_secret_access_key=settings.secret_access_key,
    )


def build_s3_url(settings: S3Settings, key: str) -> str:
    if settings.region:
        return f"https://{settings.bucket}.s3.{settings.region}.amazonaws.com/{key}"
    return f"https://{settings.bucket}.s3.amazonaws.com/{key}"
