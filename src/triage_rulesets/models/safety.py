"""PHI scan result models."""

from typing import Literal

from pydantic import BaseModel

PhiIssueType = Literal["date", "long_number", "name"]


class PhiIssue(BaseModel):
    """One suspected identifier with its character span in the scanned text."""

    type: PhiIssueType
    match: str
    start: int
    end: int


class PhiCounts(BaseModel):
    date: int = 0
    long_number: int = 0
    name: int = 0
    total: int = 0


class PhiScanResult(BaseModel):
    """Detect-only scan output; the scanned text is never modified."""

    flagged: bool = False
    issues: list[PhiIssue] = []
    counts: PhiCounts = PhiCounts()
