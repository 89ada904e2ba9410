"""
CaptureResult: the text produced by one capture.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class CaptureResult:
    """
    Immutable record of everything written during a capture.

    Attributes:
        stdout: All writes to sys.stdout, concatenated in write order.
        stderr: All writes to sys.stderr, concatenated in write order.
        combined: All writes to both channels, in the order they happened.
            Each channel's own order is preserved as a subsequence.

    Example:
        result = capture_sync(lambda: print("hello"))
        result.stdout  # "hello\\n"
    """

    stdout: str = ""
    stderr: str = ""
    combined: str = ""

    def has_content(self) -> bool:
        """Check if anything was written to either channel."""
        return bool(self.combined)

    def to_dict(self) -> dict[str, str]:
        """Convert to a plain dict (JSON-serializable)."""
        return asdict(self)
