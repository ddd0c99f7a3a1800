"""Adapters between the test catalog and external test runner processes."""

from .base import RunnerError, TestRunner
from .command import CommandTestRunner

__all__ = [
    "RunnerError",
    "TestRunner",
    "CommandTestRunner",
]
