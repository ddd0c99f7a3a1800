"""Test catalog kept in sync with an external test runner and workspace changes."""

from .types import (
    Entry,
    ListFilesReport,
    Location,
    ProjectListFilesReport,
    TestConfig,
    TestFile,
    TestProject,
    WorkspaceChange,
)
from .events import ChangeSignal
from .model import TestModel
from .workspace import WorkspaceObserver

__all__ = [
    "Entry",
    "ListFilesReport",
    "Location",
    "ProjectListFilesReport",
    "TestConfig",
    "TestFile",
    "TestProject",
    "WorkspaceChange",
    "ChangeSignal",
    "TestModel",
    "WorkspaceObserver",
]
