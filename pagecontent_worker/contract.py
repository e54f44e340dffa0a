# User value: This file keeps OCR job statuses and record outcomes named the same everywhere.

# Textract asynchronous job statuses
OCR_STATUS_IN_PROGRESS = "IN_PROGRESS"
OCR_STATUS_SUCCEEDED = "SUCCEEDED"
OCR_STATUS_FAILED = "FAILED"

# Per-file outcomes reported by the batch run
FILE_STATUS_UPDATED = "UPDATED"
FILE_STATUS_FAILED = "FAILED"

OCR_MODE_ASYNC = "async"
OCR_MODE_SYNC = "sync"
OCR_MODES = (OCR_MODE_ASYNC, OCR_MODE_SYNC)

LINE_BLOCK_TYPE = "LINE"
TRANSCRIPT_CONTENT_TYPE = "text/plain"
