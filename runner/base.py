"""Base classes for test runner adapters."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from testcases.types import Entry, ListFilesReport, TestConfig


class RunnerError(Exception):
    """Runner invocation failed, with the captured output for diagnosis."""

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        raw_output: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.raw_output = raw_output

    def __str__(self) -> str:
        result = self.message
        if self.exit_code is not None:
            result += f" (exit code: {self.exit_code})"
        return result


class TestRunner(ABC):
    """Narrow contract the catalog uses to talk to an external test runner."""

    __test__ = False

    @abstractmethod
    def list_files(self, config: "TestConfig") -> Optional["ListFilesReport"]:
        """Enumerate projects and their files.

        Returns None on a transient failure; the catalog then leaves its state
        untouched.
        """

    @abstractmethod
    async def list_tests(self, config: "TestConfig", files: List[str]) -> List["Entry"]:
        """Discover tests in ``files``.

        Returns one entry per project whose title is the project name and whose
        children are file entries carrying ``location.file``.

        Raises:
            RunnerError: discovery could not be performed
        """
