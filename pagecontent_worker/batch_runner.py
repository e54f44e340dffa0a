import logging
import os
import sys
import time

import boto3
from dotenv import load_dotenv

from pagecontent_worker.adapters.file_store import FileRepository
from pagecontent_worker.contract import FILE_STATUS_UPDATED
from pagecontent_worker.jobs.processor import process_file
from pagecontent_worker.json_logging import configure_json_logging
from pagecontent_worker.settings import WorkerSettings
from pagecontent_worker.startup_env import validate_startup_env
from pagecontent_worker.utils.s3 import S3Store
from pagecontent_worker.utils.textract import TextractOCR

SERVICE_NAME = "pagecontent-worker"

logger = logging.getLogger("pagecontent_worker")


# =========================================================
# CLIENTS
# =========================================================
def build_clients(settings: WorkerSettings):
    session = boto3.session.Session(
        region_name=settings.region,
        aws_access_key_id=settings.access_key_id,
        aws_secret_access_key=settings.secret_access_key,
    )
    store = S3Store(session.client("s3"), bucket=settings.bucket_name, region=settings.region)
    ocr = TextractOCR(session.client("textract"))
    return store, ocr


# =========================================================
# BATCH
# =========================================================
def run_batch(repository, store, ocr, settings: WorkerSettings, *, sleep=time.sleep) -> dict:
    files = repository.list_unprocessed()
    logger.info("files_found count=%s", len(files))

    updated = 0
    failed = 0
    for file in files:
        outcome = process_file(
            file,
            repository=repository,
            store=store,
            ocr=ocr,
            settings=settings,
            sleep=sleep,
        )
        if outcome["status"] == FILE_STATUS_UPDATED:
            updated += 1
        else:
            failed += 1

    summary = {"candidates": len(files), "updated": updated, "failed": failed}
    logger.info("processing_complete", extra=summary)
    return summary


def resolve_log_level(name: str) -> int:
    level = logging.getLevelName(str(name or "").upper())
    return level if isinstance(level, int) else logging.INFO


# =========================================================
# ENTRYPOINT
# =========================================================
def main() -> int:
    # Load .env for local runs
    load_dotenv(os.path.join(os.getcwd(), ".env"))

    settings = WorkerSettings.from_env()
    level = resolve_log_level(settings.log_level)
    configure_json_logging(
        service=SERVICE_NAME,
        level=level,
        sink_token=settings.log_sink_token,
        sink_host=settings.log_sink_host,
    )

    try:
        validate_startup_env()
    except RuntimeError:
        logger.exception("Startup validation failed")
        return 1

    logger.info(
        "Starting run region=%s bucket=%s ocr_mode=%s",
        settings.region,
        settings.bucket_name,
        settings.ocr_mode,
    )

    repository = None
    try:
        repository = FileRepository.from_url(settings.database_url)
        store, ocr = build_clients(settings)
        started = time.time()
        summary = run_batch(repository, store, ocr, settings)
        logger.info(
            "Run finished candidates=%s updated=%s failed=%s duration=%ss",
            summary["candidates"],
            summary["updated"],
            summary["failed"],
            round(time.time() - started, 2),
        )
        return 0
    except Exception:
        logger.exception("Error in run")
        return 1
    finally:
        if repository is not None:
            repository.close()


if __name__ == "__main__":
    sys.exit(main())
