# User value: This file keeps worker configuration in one place so runs behave the same everywhere.
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from pagecontent_worker.contract import OCR_MODE_ASYNC
from pagecontent_worker.ocr import (
    DEFAULT_MAX_POLL_ATTEMPTS,
    DEFAULT_POLL_INTERVAL_SEC,
    DEFAULT_SYNC_MAX_BYTES,
)
from pagecontent_worker.utils.s3 import DEFAULT_TRANSCRIPT_PREFIX

logger = logging.getLogger("pagecontent_worker.settings")


# User value: supports _env_int so the extraction run stays clear and reliable.
def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return max(0, int(str(raw).strip()))
    except ValueError:
        logger.warning("Invalid %s=%s, using default=%s", name, raw, default)
        return default


def _env_str(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return default
    return str(raw).strip()


@dataclass(frozen=True)
class WorkerSettings:
    database_url: str
    region: str
    bucket_name: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    log_sink_token: Optional[str] = None
    log_sink_host: Optional[str] = None
    log_level: str = "INFO"
    ocr_mode: str = OCR_MODE_ASYNC
    poll_interval_sec: int = DEFAULT_POLL_INTERVAL_SEC
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS
    sync_max_bytes: int = DEFAULT_SYNC_MAX_BYTES
    transcript_prefix: str = DEFAULT_TRANSCRIPT_PREFIX

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "WorkerSettings":
        env = os.environ if env is None else env
        return cls(
            database_url=_env_str(env, "DATABASE_URL", ""),
            region=_env_str(env, "AWS_REGION", ""),
            bucket_name=_env_str(env, "S3_BUCKET_NAME", ""),
            access_key_id=_env_str(env, "AWS_ACCESS_KEY_ID"),
            secret_access_key=_env_str(env, "AWS_SECRET_ACCESS_KEY"),
            log_sink_token=_env_str(env, "BROKENFILE_BETTER_STACK"),
            log_sink_host=_env_str(env, "BETTER_STACK_HOST"),
            log_level=(_env_str(env, "LOG_LEVEL", "INFO") or "INFO").upper(),
            ocr_mode=(_env_str(env, "OCR_MODE", OCR_MODE_ASYNC) or OCR_MODE_ASYNC).lower(),
            poll_interval_sec=_env_int(env, "OCR_POLL_INTERVAL_SEC", DEFAULT_POLL_INTERVAL_SEC),
            max_poll_attempts=_env_int(env, "OCR_MAX_POLL_ATTEMPTS", DEFAULT_MAX_POLL_ATTEMPTS),
            sync_max_bytes=_env_int(env, "OCR_SYNC_MAX_BYTES", DEFAULT_SYNC_MAX_BYTES),
            transcript_prefix=_env_str(env, "PAGE_CONTENT_PREFIX", DEFAULT_TRANSCRIPT_PREFIX),
        )
