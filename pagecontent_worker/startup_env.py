# User value: This file stops a misconfigured run before it touches any stored file.
import logging
import os
from typing import List, Mapping, Optional

from pagecontent_worker.contract import OCR_MODES

logger = logging.getLogger("pagecontent_worker.startup")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
REQUIRED_KEYS = ["DATABASE_URL", "AWS_REGION", "S3_BUCKET_NAME"]


# User value: This step keeps the extraction run accurate and dependable.
def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


# User value: This step keeps the extraction run accurate and dependable.
def _require_keys(env: Mapping[str, str], keys: List[str], errors: List[str]) -> None:
    for key in keys:
        if _is_blank(env.get(key)):
            errors.append(f"{key} is required")


# User value: This step keeps the extraction run accurate and dependable.
def _validate_int_range(
    env: Mapping[str, str],
    key: str,
    errors: List[str],
    *,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> None:
    raw = env.get(key)
    if _is_blank(raw):
        return

    try:
        value = int(str(raw).strip())
    except ValueError:
        errors.append(f"{key} must be an integer")
        return

    if min_value is not None and value < min_value:
        errors.append(f"{key} must be >= {min_value}")
    if max_value is not None and value > max_value:
        errors.append(f"{key} must be <= {max_value}")


def _validate_database_url(value: Optional[str], errors: List[str]) -> None:
    if _is_blank(value):
        return
    if "://" not in value:
        errors.append("DATABASE_URL must be a URL such as postgresql://user@host/db")


# User value: This step keeps the extraction run accurate and dependable.
def validate_startup_env(env: Optional[Mapping[str, str]] = None) -> None:
    env = os.environ if env is None else env
    errors: List[str] = []
    warnings: List[str] = []

    _require_keys(env, REQUIRED_KEYS, errors)
    _validate_database_url(env.get("DATABASE_URL"), errors)

    ocr_mode = (env.get("OCR_MODE") or "async").strip().lower()
    if ocr_mode not in OCR_MODES:
        errors.append("OCR_MODE must be one of 'async', 'sync'")

    log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        errors.append("LOG_LEVEL must be one of " + ", ".join(LOG_LEVELS))

    _validate_int_range(env, "OCR_POLL_INTERVAL_SEC", errors, min_value=1, max_value=300)
    _validate_int_range(env, "OCR_MAX_POLL_ATTEMPTS", errors, min_value=0, max_value=100000)
    _validate_int_range(env, "OCR_SYNC_MAX_BYTES", errors, min_value=1, max_value=10 * 1024 * 1024)

    if _is_blank(env.get("AWS_ACCESS_KEY_ID")) or _is_blank(env.get("AWS_SECRET_ACCESS_KEY")):
        warnings.append(
            "AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY not set; relying on the default AWS credential chain"
        )
    if _is_blank(env.get("BROKENFILE_BETTER_STACK")):
        warnings.append("BROKENFILE_BETTER_STACK is not set; logging to stdout only")

    if errors:
        for err in errors:
            logger.error("startup_env_invalid %s", err)
        raise RuntimeError("Startup env validation failed: " + "; ".join(errors))

    for warning in warnings:
        logger.warning("startup_env_warning %s", warning)

    logger.info("startup_env_validated ocr_mode=%s keys=%s", ocr_mode, REQUIRED_KEYS)
