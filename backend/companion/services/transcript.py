"""Accumulates speech-recognition fragments into a single transcript."""
from __future__ import annotations


class TranscriptAccumulator:
    """
    Final fragments are appended to the text. An interim fragment stands in for the
    word currently being spoken, so it replaces the trailing word instead.
    """

    def __init__(self, text: str = "") -> None:
        self.text = text

    def apply(self, fragment: str, is_final: bool) -> str:
        fragment = fragment.strip()
        if not fragment:
            return self.text
        if is_final:
            self.text = f"{self.text} {fragment}".strip()
        else:
            head = " ".join(self.text.split(" ")[:-1])
            self.text = f"{head} {fragment}".strip()
        return self.text

    def reset(self) -> None:
        self.text = ""
