import io
import unittest
from unittest import mock

import boto3
from botocore.stub import Stubber

from pagecontent_worker.utils.s3 import S3Store
from pagecontent_worker.utils.textract import TextractOCR, line_texts


def _textract_client():
    return boto3.client(
        "textract",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


class TextractOCRUnitTests(unittest.TestCase):
    def setUp(self):
        self.client = _textract_client()
        self.stubber = Stubber(self.client)
        self.ocr = TextractOCR(self.client)

    def tearDown(self):
        self.stubber.deactivate()

    def test_start_job_sends_s3_location(self):
        self.stubber.add_response(
            "start_document_text_detection",
            {"JobId": "job-123"},
            {"DocumentLocation": {"S3Object": {"Bucket": "docs", "Name": "folder/a b.pdf"}}},
        )
        self.stubber.activate()

        self.assertEqual(self.ocr.start_job("docs", "folder/a b.pdf"), "job-123")
        self.stubber.assert_no_pending_responses()

    def test_get_job_status_keeps_only_lines(self):
        self.stubber.add_response(
            "get_document_text_detection",
            {
                "JobStatus": "SUCCEEDED",
                "NextToken": "page-2",
                "Blocks": [
                    {"BlockType": "PAGE"},
                    {"BlockType": "LINE", "Text": "A"},
                    {"BlockType": "WORD", "Text": "A"},
                    {"BlockType": "LINE", "Text": "B"},
                ],
            },
            {"JobId": "job-123"},
        )
        self.stubber.add_response(
            "get_document_text_detection",
            {"JobStatus": "SUCCEEDED", "Blocks": [{"BlockType": "LINE", "Text": "C"}]},
            {"JobId": "job-123", "NextToken": "page-2"},
        )
        self.stubber.activate()

        first = self.ocr.get_job_status("job-123")
        second = self.ocr.get_job_status("job-123", first.next_token)

        self.assertEqual(first.status, "SUCCEEDED")
        self.assertEqual(first.lines, ["A", "B"])
        self.assertEqual(first.next_token, "page-2")
        self.assertEqual(second.lines, ["C"])
        self.assertIsNone(second.next_token)

    def test_get_job_status_in_progress_has_no_blocks(self):
        self.stubber.add_response(
            "get_document_text_detection",
            {"JobStatus": "IN_PROGRESS"},
            {"JobId": "job-123"},
        )
        self.stubber.activate()

        status = self.ocr.get_job_status("job-123")
        self.assertEqual(status.status, "IN_PROGRESS")
        self.assertEqual(status.lines, [])

    def test_detect_text_sync(self):
        self.stubber.add_response(
            "detect_document_text",
            {"Blocks": [{"BlockType": "LINE", "Text": "hello"}, {"BlockType": "WORD", "Text": "hello"}]},
            {"Document": {"Bytes": b"img"}},
        )
        self.stubber.activate()

        self.assertEqual(self.ocr.detect_text(b"img"), ["hello"])

    def test_service_error_propagates(self):
        self.stubber.add_client_error(
            "start_document_text_detection",
            service_error_code="UnsupportedDocumentException",
            service_message="unsupported",
        )
        self.stubber.activate()

        with self.assertRaises(self.client.exceptions.UnsupportedDocumentException):
            self.ocr.start_job("docs", "a.pdf")

    def test_line_texts_handles_missing_blocks(self):
        self.assertEqual(line_texts(None), [])


class S3StoreUnitTests(unittest.TestCase):
    def setUp(self):
        self.client = mock.Mock()
        self.store = S3Store(self.client, bucket="docs", region="us-east-1")

    def test_get_object_reads_body_from_default_bucket(self):
        self.client.get_object.return_value = {"Body": io.BytesIO(b"%PDF"), "ContentLength": 4}

        self.assertEqual(self.store.get_object("a.pdf"), b"%PDF")
        self.client.get_object.assert_called_once_with(Bucket="docs", Key="a.pdf")

    def test_upload_text_puts_plain_text_and_returns_public_url(self):
        uploaded = self.store.upload_text(content="héllo", destination_key="pageContents/a.txt")

        self.client.put_object.assert_called_once_with(
            Bucket="docs",
            Key="pageContents/a.txt",
            Body="héllo".encode("utf-8"),
            ContentType="text/plain",
        )
        self.assertEqual(uploaded["public_url"], "https://docs.s3.us-east-1.amazonaws.com/pageContents/a.txt")
        self.assertEqual(uploaded["s3_uri"], "s3://docs/pageContents/a.txt")

    def test_explicit_bucket_overrides_default(self):
        self.store.put_object("k.txt", b"x", bucket="other")
        self.client.put_object.assert_called_once_with(
            Bucket="other", Key="k.txt", Body=b"x", ContentType="text/plain"
        )


if __name__ == "__main__":
    unittest.main()
