# pagecontent_worker/jobs/processor.py

import logging
import time

from pagecontent_worker.contract import FILE_STATUS_FAILED, FILE_STATUS_UPDATED
from pagecontent_worker.error_catalog import classify_error
from pagecontent_worker.ocr import extract_transcript
from pagecontent_worker.quality.text_stats import transcript_stats
from pagecontent_worker.utils.s3 import resolve_locator, transcript_key

logger = logging.getLogger("pagecontent_worker.jobs.processor")


def _failed(file_id: str, exc: Exception) -> dict:
    error_code, error_message = classify_error(exc)
    error_detail = f"{exc.__class__.__name__}: {exc}"
    logger.error(
        "file_processing_failed file_id=%s error_code=%s detail=%s",
        file_id,
        error_code,
        error_detail,
        extra={"file_id": file_id, "error_code": error_code, "error_detail": error_detail},
    )
    return {
        "file_id": file_id,
        "status": FILE_STATUS_FAILED,
        "page_content_url": None,
        "word_count": None,
        "token_count_estimate": None,
        "error_code": error_code,
        "error_message": error_message,
    }


def process_file(file, *, repository, store, ocr, settings, sleep=time.sleep) -> dict:
    """
    Extract, store and record the transcript for one file.

    Never raises: any failure is classified, logged against the file id and
    returned as a FAILED outcome, leaving the record untouched so the next run
    picks it up again.
    """
    logger.info("file_processing_started file_id=%s title=%s", file.id, file.title or "")
    try:
        location = resolve_locator(file.url)
        if location.bucket != settings.bucket_name:
            logger.warning(
                "locator_bucket_mismatch file_id=%s locator_bucket=%s configured_bucket=%s",
                file.id,
                location.bucket,
                settings.bucket_name,
            )

        content = extract_transcript(ocr, store, key=location.key, settings=settings, sleep=sleep)
        logger.info("file_text_extracted file_id=%s chars=%s", file.id, len(content))

        uploaded = store.upload_text(
            content=content,
            destination_key=transcript_key(location.key, settings.transcript_prefix),
        )

        stats = transcript_stats(content)
        repository.update_record(
            file.id,
            page_content_url=uploaded["public_url"],
            word_count=stats["word_count"],
            token_count_estimate=stats["token_count_estimate"],
        )
    except Exception as exc:
        return _failed(file.id, exc)

    logger.info("file_processing_completed file_id=%s url=%s", file.id, uploaded["public_url"])
    return {
        "file_id": file.id,
        "status": FILE_STATUS_UPDATED,
        "page_content_url": uploaded["public_url"],
        "word_count": stats["word_count"],
        "token_count_estimate": stats["token_count_estimate"],
        "error_code": "",
        "error_message": "",
    }
