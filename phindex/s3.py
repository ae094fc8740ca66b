import io
import re
import uuid
from urllib.parse import quote, urlparse

import boto3
from phindex.config import AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_REGION, AWS_BUCKET_NAME, PROFILE_MEDIA_PREFIX

s3 = boto3.client(
    "s3",
    region_name=AWS_REGION,
    aws_access_key_id=AWS_ACCESS_KEY_ID,
    aws_secret_access_key=AWS_SECRET_ACCESS_KEY
)

_SAFE_FILENAME_RE = re.compile(r'[^a-zA-Z0-9._-]+')


def sanitize_folder_name(name: str) -> str:
    # Remove or replace any non-safe S3 characters
    return re.sub(r'[^a-zA-Z0-9_\-]', '_', name)


def sanitize_filename(name: str) -> str:
    """
    Make sure filenames are URL-safe and S3-friendly:
    - Trim whitespace
    - Replace spaces with '-'
    - Replace unsafe chars with '-'
    - Collapse repeats
    """
    name = name.strip()
    name = re.sub(r'\s+', '-', name)          # spaces -> dash
    name = _SAFE_FILENAME_RE.sub('-', name)   # unsafe -> dash
    name = re.sub(r'-{2,}', '-', name)        # collapse ---
    if not name:
        name = "file"
    return name


def public_url(key: str) -> str:
    key_encoded = quote(key, safe="/-._")
    return f"https://{AWS_BUCKET_NAME}.s3.{AWS_REGION}.amazonaws.com/{key_encoded}"


def extract_s3_key(url: str) -> str:
    parsed = urlparse(url)
    return parsed.path.lstrip("/")


def upload_profile_image(file_bytes, filename: str, content_type: str, slug: str, *, kind: str = "front") -> str:
    """
    Upload a profile photo.
    Path: profiles/<slug>/<kind>/<uuid>_<filename>
    """
    key = (
        f"{sanitize_folder_name(PROFILE_MEDIA_PREFIX)}/{sanitize_folder_name(slug)}/"
        f"{sanitize_folder_name(kind)}/{uuid.uuid4()}_{sanitize_filename(filename or 'upload')}"
    )

    if isinstance(file_bytes, (bytes, bytearray)):
        file_bytes = io.BytesIO(file_bytes)

    s3.upload_fileobj(
        file_bytes,
        AWS_BUCKET_NAME,
        key,
        ExtraArgs={
            "ContentType": content_type,
            "CacheControl": "public, max-age=31536000, immutable",
        },
    )
    return public_url(key)


def delete_from_s3(key: str):
    s3.delete_object(Bucket=AWS_BUCKET_NAME, Key=key)
