# User value: This file turns stored documents into plain-text transcripts with predictable job handling.
# -*- coding: utf-8 -*-
"""
Textract OCR for stored files.

Two strategies:
- async: start a text-detection job on the S3 object and poll it to completion
- sync: download the bytes and run single-shot detection (small files only)
"""

import logging
import time
from typing import Callable, List, Optional

from pagecontent_worker.contract import (
    OCR_MODE_SYNC,
    OCR_STATUS_FAILED,
    OCR_STATUS_IN_PROGRESS,
    OCR_STATUS_SUCCEEDED,
)
from pagecontent_worker.status_machine import is_known_status, normalize_status, record_transition

logger = logging.getLogger("pagecontent_worker.ocr")

DEFAULT_POLL_INTERVAL_SEC = 5
DEFAULT_MAX_POLL_ATTEMPTS = 720
DEFAULT_SYNC_MAX_BYTES = 5 * 1024 * 1024


# =========================================================
# EXCEPTIONS
# =========================================================
class OCRJobFailedError(RuntimeError):
    def __init__(self, job_id: str, status: str, status_message: str = ""):
        self.job_id = job_id
        self.status = status
        self.status_message = status_message
        detail = f" ({status_message})" if status_message else ""
        super().__init__(f"Textract job {job_id} ended with status {status}{detail}")

    @property
    def unexpected_status(self) -> bool:
        return self.status != OCR_STATUS_FAILED


class OCRJobTimeoutError(RuntimeError):
    def __init__(self, job_id: str, attempts: int, waited_sec: float):
        self.job_id = job_id
        self.attempts = attempts
        self.waited_sec = waited_sec
        super().__init__(
            f"Textract job {job_id} still IN_PROGRESS after {attempts} polls (~{int(waited_sec)}s)"
        )


class InputTooLargeError(ValueError):
    def __init__(self, size_bytes: int, limit_bytes: int):
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"Document is {size_bytes} bytes, over the {limit_bytes} byte limit for synchronous OCR"
        )


# =========================================================
# TRANSCRIPT ASSEMBLY
# =========================================================
def join_lines(lines: List[str]) -> str:
    return "\n".join(lines)


def _collect_pages(ocr, job_id: str, first_page) -> List[str]:
    lines = list(first_page.lines)
    next_token = first_page.next_token
    pages = 1
    while next_token:
        page = ocr.get_job_status(job_id, next_token)
        status = normalize_status(page.status) or ""
        if not record_transition(job_id=job_id, current=OCR_STATUS_SUCCEEDED, target=status):
            logger.error(
                "textract_result_page_invalid job_id=%s page=%s status=%s message=%s",
                job_id,
                pages + 1,
                status,
                page.status_message,
            )
            raise OCRJobFailedError(job_id, status, page.status_message)
        lines.extend(page.lines)
        next_token = page.next_token
        pages += 1
    logger.info("textract_results_collected job_id=%s pages=%s lines=%s", job_id, pages, len(lines))
    return lines


# =========================================================
# ASYNC JOB POLLING
# =========================================================
def wait_for_transcript(
    ocr,
    job_id: str,
    *,
    poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC,
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Poll a text-detection job until it reaches a terminal status.

    Each attempt waits ``poll_interval_sec`` before asking for the status.
    IN_PROGRESS keeps polling, SUCCEEDED pages through every result page and
    returns the joined transcript, FAILED and any unrecognized status raise
    :class:`OCRJobFailedError`. ``max_poll_attempts=0`` polls forever;
    otherwise running out of attempts raises :class:`OCRJobTimeoutError`.
    """
    previous: Optional[str] = None
    attempt = 0
    while True:
        if max_poll_attempts > 0 and attempt >= max_poll_attempts:
            raise OCRJobTimeoutError(job_id, attempt, attempt * poll_interval_sec)

        sleep(poll_interval_sec)
        attempt += 1
        page = ocr.get_job_status(job_id)
        status = normalize_status(page.status) or ""
        record_transition(job_id=job_id, current=previous, target=status)
        previous = status

        if status == OCR_STATUS_IN_PROGRESS:
            logger.debug("textract_job_pending job_id=%s attempt=%s", job_id, attempt)
            continue

        if status == OCR_STATUS_SUCCEEDED:
            logger.info("textract_job_succeeded job_id=%s attempts=%s", job_id, attempt)
            return join_lines(_collect_pages(ocr, job_id, page))

        if is_known_status(status):
            logger.error(
                "textract_job_failed job_id=%s attempts=%s message=%s",
                job_id,
                attempt,
                page.status_message,
            )
        else:
            logger.error(
                "textract_job_unexpected_status job_id=%s status=%s message=%s",
                job_id,
                status,
                page.status_message,
            )
        raise OCRJobFailedError(job_id, status, page.status_message)


def run_async_ocr(ocr, *, bucket: str, key: str, poll_interval_sec: float, max_poll_attempts: int, sleep=time.sleep) -> str:
    job_id = ocr.start_job(bucket, key)
    return wait_for_transcript(
        ocr,
        job_id,
        poll_interval_sec=poll_interval_sec,
        max_poll_attempts=max_poll_attempts,
        sleep=sleep,
    )


# =========================================================
# SYNC DETECTION
# =========================================================
def run_sync_ocr(ocr, store, *, key: str, max_bytes: int = DEFAULT_SYNC_MAX_BYTES) -> str:
    document = store.get_object(key)
    if len(document) > max_bytes:
        raise InputTooLargeError(len(document), max_bytes)

    t0 = time.perf_counter()
    lines = ocr.detect_text(document)
    dt = round(time.perf_counter() - t0, 2)
    logger.info("textract_detect_completed key=%s lines=%s duration_sec=%s", key, len(lines), dt)
    return join_lines(lines)


# =========================================================
# ENTRYPOINT
# =========================================================
def extract_transcript(ocr, store, *, key: str, settings, sleep=time.sleep) -> str:
    if settings.ocr_mode == OCR_MODE_SYNC:
        return run_sync_ocr(ocr, store, key=key, max_bytes=settings.sync_max_bytes)
    return run_async_ocr(
        ocr,
        bucket=settings.bucket_name,
        key=key,
        poll_interval_sec=settings.poll_interval_sec,
        max_poll_attempts=settings.max_poll_attempts,
        sleep=sleep,
    )
