# pagecontent_worker/utils/textract.py
# -*- coding: utf-8 -*-

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from pagecontent_worker.contract import LINE_BLOCK_TYPE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextDetectionPage:
    status: str
    lines: List[str] = field(default_factory=list)
    next_token: Optional[str] = None
    status_message: str = ""


def line_texts(blocks) -> List[str]:
    return [
        block.get("Text", "")
        for block in blocks or []
        if block.get("BlockType") == LINE_BLOCK_TYPE
    ]


class TextractOCR:
    """
    Narrow OCR interface over a boto3 Textract client.

    ``start_job``/``get_job_status`` drive the asynchronous text-detection API;
    ``detect_text`` is the single-shot synchronous call for small documents.
    """

    def __init__(self, client):
        self._client = client

    def start_job(self, bucket: str, key: str) -> str:
        response = self._client.start_document_text_detection(
            DocumentLocation={"S3Object": {"Bucket": bucket, "Name": key}},
        )
        job_id = response["JobId"]
        logger.info("textract_job_started job_id=%s bucket=%s key=%s", job_id, bucket, key)
        return job_id

    def get_job_status(self, job_id: str, next_token: Optional[str] = None) -> TextDetectionPage:
        params = {"JobId": job_id}
        if next_token:
            params["NextToken"] = next_token
        response = self._client.get_document_text_detection(**params)
        return TextDetectionPage(
            status=response.get("JobStatus", ""),
            lines=line_texts(response.get("Blocks")),
            next_token=response.get("NextToken") or None,
            status_message=response.get("StatusMessage", "") or "",
        )

    def detect_text(self, document: bytes) -> List[str]:
        response = self._client.detect_document_text(Document={"Bytes": document})
        return line_texts(response.get("Blocks"))
