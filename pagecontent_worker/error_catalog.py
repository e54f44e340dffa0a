# User value: This file turns raw failures into stable codes so skipped files are easy to triage.
from __future__ import annotations

from botocore.exceptions import BotoCoreError, ClientError
from sqlalchemy.exc import SQLAlchemyError

from pagecontent_worker.adapters.file_store import RecordNotFoundError
from pagecontent_worker.ocr import InputTooLargeError, OCRJobFailedError, OCRJobTimeoutError
from pagecontent_worker.utils.s3 import LocatorError

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "404", "NotFound"}
_THROTTLE_CODES = {
    "ThrottlingException",
    "ProvisionedThroughputExceededException",
    "LimitExceededException",
    "SlowDown",
}
_OCR_INPUT_CODES = {
    "InvalidS3ObjectException",
    "UnsupportedDocumentException",
    "BadDocumentException",
    "DocumentTooLargeException",
    "InvalidParameterException",
}


# User value: This step keeps the extraction run accurate and dependable.
def _client_error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code") or "")


# User value: This step keeps the extraction run accurate and dependable.
def _is_s3_operation(exc: ClientError) -> bool:
    return exc.operation_name in {"GetObject", "PutObject", "HeadObject"}


# User value: This step keeps the extraction run accurate and dependable.
def classify_error(exc: Exception) -> tuple[str, str]:
    if isinstance(exc, LocatorError):
        return ("INPUT_INVALID_LOCATOR", "File URL could not be resolved to a bucket and key.")
    if isinstance(exc, InputTooLargeError):
        return ("INPUT_TOO_LARGE", "File exceeds the size limit for synchronous OCR.")
    if isinstance(exc, OCRJobTimeoutError):
        return ("OCR_JOB_TIMEOUT", "OCR job did not finish within the polling budget.")
    if isinstance(exc, OCRJobFailedError):
        return ("OCR_JOB_FAILED", "OCR job did not succeed.")
    if isinstance(exc, RecordNotFoundError):
        return ("RECORD_NOT_FOUND", "File record disappeared before it could be updated.")

    if isinstance(exc, ClientError):
        code = _client_error_code(exc)
        if code in _NOT_FOUND_CODES:
            return ("INPUT_NOT_FOUND", "Source file was not found in storage.")
        if code in _THROTTLE_CODES:
            return ("RATE_LIMIT_EXCEEDED", "Service is busy right now. Please retry shortly.")
        if code in _OCR_INPUT_CODES:
            return ("OCR_INPUT_REJECTED", "OCR service rejected the document.")
        if _is_s3_operation(exc):
            return ("INFRA_S3", "Storage service error while reading or writing a file.")
        return ("INFRA_AWS", "AWS service error while processing.")
    if isinstance(exc, BotoCoreError):
        return ("INFRA_AWS", "AWS service connection issue while processing.")
    if isinstance(exc, SQLAlchemyError):
        return ("INFRA_DB", "Database error while processing.")
    if isinstance(exc, FileNotFoundError):
        return ("INPUT_NOT_FOUND", "Source file was not found in storage.")
    return ("PROCESSING_FAILED", "Processing failed due to an internal error.")
