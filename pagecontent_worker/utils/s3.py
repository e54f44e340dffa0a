# pagecontent_worker/utils/s3.py
# -*- coding: utf-8 -*-

import logging
import posixpath
from dataclasses import dataclass
from urllib.parse import unquote, urlparse

from pagecontent_worker.contract import TRANSCRIPT_CONTENT_TYPE

logger = logging.getLogger(__name__)

S3_SCHEME = "s3://"
AWS_HOST_SUFFIX = "amazonaws.com"
DEFAULT_TRANSCRIPT_PREFIX = "pageContents"


class LocatorError(ValueError):
    pass


@dataclass(frozen=True)
class S3Location:
    bucket: str
    key: str


# ---------------------------------------------------------
# LOCATOR RESOLUTION
# ---------------------------------------------------------
def resolve_locator(url: str) -> S3Location:
    """
    Split a stored file URL into bucket and object key.

    Accepts ``s3://bucket/key`` as well as virtual-hosted S3 URLs
    (``https://bucket.s3.region.amazonaws.com/key``). Any other HTTP URL is
    treated as ``https://bucket/key``. Keys come back percent-decoded.
    """
    raw = (url or "").strip()
    if not raw:
        raise LocatorError("File URL is empty")

    if raw.startswith(S3_SCHEME):
        bucket, _, key = raw[len(S3_SCHEME):].partition("/")
    else:
        parsed = urlparse(raw)
        host = parsed.hostname or ""
        if not host:
            raise LocatorError(f"File URL has no host: {url}")
        if host.endswith(AWS_HOST_SUFFIX):
            bucket = host.split(".")[0]
        else:
            bucket = host
        key = parsed.path[1:] if parsed.path.startswith("/") else parsed.path

    key = unquote(key)
    if not bucket:
        raise LocatorError(f"File URL has no bucket: {url}")
    if not key:
        raise LocatorError(f"File URL has no object key: {url}")
    return S3Location(bucket=bucket, key=key)


def transcript_key(source_key: str, prefix: str = DEFAULT_TRANSCRIPT_PREFIX) -> str:
    stem, _ = posixpath.splitext(posixpath.basename(source_key))
    return f"{prefix.rstrip('/')}/{stem}.txt"


def public_url(bucket: str, region: str, key: str) -> str:
    return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"


# ---------------------------------------------------------
# CLIENT WRAPPER
# ---------------------------------------------------------
class S3Store:
    """
    Narrow object-store interface over a boto3 S3 client.

    ``bucket`` is the configured default bucket; every call uses it unless a
    bucket is passed explicitly.
    """

    def __init__(self, client, *, bucket: str, region: str):
        self._client = client
        self.bucket = bucket
        self.region = region

    def get_object(self, key: str, bucket: str | None = None) -> bytes:
        bucket = bucket or self.bucket
        logger.info("s3_download_started bucket=%s key=%s", bucket, key)
        response = self._client.get_object(Bucket=bucket, Key=key)
        body = response["Body"]
        try:
            data = body.read()
        finally:
            body.close()
        logger.info(
            "s3_download_completed bucket=%s key=%s size_bytes=%s",
            bucket,
            key,
            response.get("ContentLength", len(data)),
        )
        return data

    def put_object(
        self,
        key: str,
        content: str | bytes,
        *,
        content_type: str = TRANSCRIPT_CONTENT_TYPE,
        bucket: str | None = None,
    ) -> None:
        bucket = bucket or self.bucket
        payload = content.encode("utf-8") if isinstance(content, str) else content
        self._client.put_object(
            Bucket=bucket,
            Key=key,
            Body=payload,
            ContentType=content_type,
        )

    def public_url(self, key: str, bucket: str | None = None) -> str:
        return public_url(bucket or self.bucket, self.region, key)

    def upload_text(self, *, content: str, destination_key: str) -> dict:
        self.put_object(destination_key, content, content_type=TRANSCRIPT_CONTENT_TYPE)
        url = self.public_url(destination_key)
        logger.info("s3_upload_completed url=%s", url)
        return {
            "s3_uri": f"s3://{self.bucket}/{destination_key}",
            "public_url": url,
            "bucket": self.bucket,
            "key": destination_key,
        }
