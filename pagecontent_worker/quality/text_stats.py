# User value: This module gives users the same word and token counts the file records have always shown.
from __future__ import annotations

import re
from typing import Dict, List

# ASCII word characters, the same runs the records were historically counted with.
WORD_RUN_RE = re.compile(r"\b\w+\b", flags=re.ASCII)


# User value: counts words exactly as stored records expect, including empty pieces from double spaces.
def word_count(text: str) -> int:
    return len((text or "").split(" "))


# User value: tokenizes transcript text into word-character runs for a rough LLM token estimate.
def tokenize(text: str) -> List[str]:
    return WORD_RUN_RE.findall(text or "")


# User value: gives users a cheap token-budget estimate without loading a real tokenizer.
def token_count_estimate(text: str) -> int:
    return len(tokenize(text))


def transcript_stats(text: str) -> Dict[str, int]:
    return {
        "word_count": word_count(text),
        "token_count_estimate": token_count_estimate(text),
    }
