# User value: This test keeps OCR job polling finite and transcripts complete across result pages.
import unittest

from fakes import FakeOCR, RecordingSleep, make_settings, make_store, page

from pagecontent_worker.ocr import (
    InputTooLargeError,
    OCRJobFailedError,
    OCRJobTimeoutError,
    extract_transcript,
    run_sync_ocr,
    wait_for_transcript,
)


class WaitForTranscriptUnitTests(unittest.TestCase):
    def test_pages_joined_in_order(self):
        ocr = FakeOCR(
            statuses=[page("SUCCEEDED", ["A", "B"], next_token="t1")],
            pages={"t1": page("SUCCEEDED", ["C"])},
        )
        sleep = RecordingSleep()

        transcript = wait_for_transcript(ocr, "job-1", poll_interval_sec=5, max_poll_attempts=3, sleep=sleep)

        self.assertEqual(transcript, "A\nB\nC")
        self.assertEqual(ocr.status_calls, [("job-1", None), ("job-1", "t1")])
        self.assertEqual(sleep.calls, [5])

    def test_in_progress_waits_before_every_poll(self):
        ocr = FakeOCR(
            statuses=[
                page("IN_PROGRESS"),
                page("IN_PROGRESS"),
                page("SUCCEEDED", ["only line"]),
            ]
        )
        sleep = RecordingSleep()

        transcript = wait_for_transcript(ocr, "job-1", poll_interval_sec=5, max_poll_attempts=10, sleep=sleep)

        self.assertEqual(transcript, "only line")
        self.assertEqual(sleep.calls, [5, 5, 5])

    def test_failed_job_raises(self):
        ocr = FakeOCR(statuses=[page("IN_PROGRESS"), page("FAILED", status_message="bad pdf")])

        with self.assertRaises(OCRJobFailedError) as ctx:
            wait_for_transcript(ocr, "job-1", max_poll_attempts=5, sleep=RecordingSleep())

        self.assertEqual(ctx.exception.status, "FAILED")
        self.assertEqual(ctx.exception.status_message, "bad pdf")
        self.assertFalse(ctx.exception.unexpected_status)

    def test_unrecognized_status_never_takes_success_path(self):
        ocr = FakeOCR(statuses=[page("PARTIAL_SUCCESS", ["partial"])])

        with self.assertRaises(OCRJobFailedError) as ctx:
            wait_for_transcript(ocr, "job-1", max_poll_attempts=5, sleep=RecordingSleep())

        self.assertTrue(ctx.exception.unexpected_status)
        self.assertEqual(ocr.status_calls, [("job-1", None)])

    def test_poll_budget_exhausted_raises_timeout(self):
        ocr = FakeOCR(statuses=[page("IN_PROGRESS")])
        sleep = RecordingSleep()

        with self.assertRaises(OCRJobTimeoutError) as ctx:
            wait_for_transcript(ocr, "job-1", poll_interval_sec=5, max_poll_attempts=3, sleep=sleep)

        self.assertEqual(ctx.exception.attempts, 3)
        self.assertEqual(len(ocr.status_calls), 3)
        self.assertEqual(sleep.calls, [5, 5, 5])

    def test_zero_budget_polls_until_terminal(self):
        statuses = [page("IN_PROGRESS")] * 50 + [page("SUCCEEDED", ["done"])]
        ocr = FakeOCR(statuses=statuses)

        transcript = wait_for_transcript(ocr, "job-1", max_poll_attempts=0, sleep=RecordingSleep())

        self.assertEqual(transcript, "done")
        self.assertEqual(len(ocr.status_calls), 51)

    def test_success_without_lines_is_empty_transcript(self):
        ocr = FakeOCR(statuses=[page("SUCCEEDED", [])])
        self.assertEqual(wait_for_transcript(ocr, "job-1", sleep=RecordingSleep()), "")

    def test_result_page_leaving_succeeded_fails_the_job(self):
        ocr = FakeOCR(
            statuses=[page("SUCCEEDED", ["A"], next_token="t1")],
            pages={
                "t1": page("FAILED", ["B"], next_token="t2", status_message="expired"),
                "t2": page("SUCCEEDED", ["C"]),
            },
        )

        with self.assertLogs("pagecontent_worker.status_machine", level="WARNING") as transitions:
            with self.assertRaises(OCRJobFailedError) as ctx:
                wait_for_transcript(ocr, "job-1", max_poll_attempts=3, sleep=RecordingSleep())

        self.assertEqual(ctx.exception.status, "FAILED")
        self.assertEqual(ctx.exception.status_message, "expired")
        self.assertEqual(ocr.status_calls, [("job-1", None), ("job-1", "t1")])
        self.assertIn("current=SUCCEEDED target=FAILED", transitions.output[0])

    def test_blank_status_is_logged_as_unexpected(self):
        ocr = FakeOCR(statuses=[page("")])

        with self.assertLogs("pagecontent_worker.ocr", level="ERROR") as logs:
            with self.assertRaises(OCRJobFailedError) as ctx:
                wait_for_transcript(ocr, "j", max_poll_attempts=3, sleep=RecordingSleep())

        self.assertTrue(ctx.exception.unexpected_status)
        self.assertIn("textract_job_unexpected_status job_id=j", logs.output[0])
        self.assertFalse(any("textract_job_failed" in line for line in logs.output))


class ExtractTranscriptUnitTests(unittest.TestCase):
    def test_async_mode_submits_against_configured_bucket(self):
        ocr = FakeOCR(statuses=[page("SUCCEEDED", ["x"])])
        store, client = make_store()
        settings = make_settings(bucket_name="configured")

        transcript = extract_transcript(ocr, store, key="folder/a.pdf", settings=settings, sleep=RecordingSleep())

        self.assertEqual(transcript, "x")
        self.assertEqual(ocr.started, [("configured", "folder/a.pdf")])
        self.assertEqual(client.gets, [])

    def test_sync_mode_downloads_and_detects(self):
        ocr = FakeOCR(detect_lines=["one", "two"])
        store, client = make_store(objects={("docs", "a.png"): b"img"})

        transcript = extract_transcript(ocr, store, key="a.png", settings=make_settings(ocr_mode="sync"))

        self.assertEqual(transcript, "one\ntwo")
        self.assertEqual(ocr.detected, [b"img"])
        self.assertEqual(ocr.started, [])

    def test_sync_mode_rejects_oversized_document_without_calling_ocr(self):
        ocr = FakeOCR(detect_lines=["never"])
        store, _ = make_store(objects={("docs", "big.pdf"): b"x" * 11})

        with self.assertRaises(InputTooLargeError) as ctx:
            run_sync_ocr(ocr, store, key="big.pdf", max_bytes=10)

        self.assertEqual(ctx.exception.size_bytes, 11)
        self.assertEqual(ocr.detected, [])


if __name__ == "__main__":
    unittest.main()
