from __future__ import annotations

import logging
from typing import Optional

from pagecontent_worker.contract import (
    OCR_STATUS_IN_PROGRESS,
    OCR_STATUS_SUCCEEDED,
    OCR_STATUS_FAILED,
)

logger = logging.getLogger("pagecontent_worker.status_machine")

# A job reports IN_PROGRESS until it settles. Once SUCCEEDED, every result
# page fetched with a continuation token must still report SUCCEEDED.
_ALLOWED = {
    None: {
        OCR_STATUS_IN_PROGRESS,
        OCR_STATUS_SUCCEEDED,
        OCR_STATUS_FAILED,
    },
    OCR_STATUS_IN_PROGRESS: {
        OCR_STATUS_IN_PROGRESS,
        OCR_STATUS_SUCCEEDED,
        OCR_STATUS_FAILED,
    },
    OCR_STATUS_SUCCEEDED: {OCR_STATUS_SUCCEEDED},
}

_KNOWN_STATUSES = {OCR_STATUS_IN_PROGRESS, OCR_STATUS_SUCCEEDED, OCR_STATUS_FAILED}


def normalize_status(status: Optional[str]) -> Optional[str]:
    if status is None:
        return None
    s = str(status).strip().upper()
    return s or None


def is_known_status(status: Optional[str]) -> bool:
    return normalize_status(status) in _KNOWN_STATUSES


def is_allowed_transition(current: Optional[str], target: Optional[str]) -> bool:
    target_n = normalize_status(target)
    if target_n is None:
        return False
    return target_n in _ALLOWED.get(normalize_status(current), set())


def record_transition(*, job_id: str, current: Optional[str], target: Optional[str]) -> bool:
    """Log and report whether ``current -> target`` is a legal OCR job transition.

    Callers decide what an illegal transition means; this only makes odd
    status sequences visible.
    """
    if is_allowed_transition(current, target):
        return True
    logger.warning(
        "ocr_status_transition_unexpected job_id=%s current=%s target=%s",
        job_id,
        normalize_status(current),
        normalize_status(target),
    )
    return False
