from __future__ import annotations

from typing import Any


class HarnessError(Exception):
    """Base for failures raised inside a scenario step."""

    kind = "HarnessError"

    def __init__(self, message: str, expected: Any = None, actual: Any = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class NavigationTimeout(HarnessError):
    kind = "NavigationTimeout"


class WaitTimeout(HarnessError):
    kind = "WaitTimeout"


class ElementNotFound(WaitTimeout):
    kind = "ElementNotFound"


class AssertionMismatch(HarnessError):
    kind = "AssertionMismatch"

    def __init__(self, message: str, expected: Any = None, actual: Any = None):
        super().__init__(f"{message}: expected {expected!r}, actual {actual!r}", expected, actual)


class HTTPStatusMismatch(AssertionMismatch):
    kind = "HTTPStatusMismatch"


class FileIOError(HarnessError):
    kind = "FileIOError"


class ScenarioDefinitionError(ValueError):
    """Bad scenario file or flow parameters. Raised at load time."""
