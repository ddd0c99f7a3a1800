import asyncio
from typing import Dict, List, Optional, Tuple

import pytest
from loguru import logger

from runner.base import TestRunner
from testcases import Entry, ListFilesReport, Location, ProjectListFilesReport, TestModel


def make_test(file: str, line: int, title: str) -> Entry:
    return Entry(type="test", title=title, location=Location(file=file, line=line))


def make_suite(file: str, line: int, title: str, children: List[Entry]) -> Entry:
    return Entry(type="suite", title=title, location=Location(file=file, line=line), children=children)


def make_file_entry(file: str, children: Optional[List[Entry]]) -> Entry:
    return Entry(type="file", title=file, location=Location(file=file), children=children)


def make_project_entry(name: str, files: List[Entry]) -> Entry:
    return Entry(type="project", title=name, location=Location(file=""), children=files)


def make_report(*projects: Tuple[str, str, List[str]]) -> ListFilesReport:
    return ListFilesReport(projects=[
        ProjectListFilesReport(name=name, test_dir=test_dir, files=list(files))
        for name, test_dir, files in projects
    ])


class FakeRunner(TestRunner):
    """In-memory runner driven by the test."""

    def __init__(self):
        self.report: Optional[ListFilesReport] = None
        # project name -> file -> test entries the runner "finds"
        self.tests: Dict[str, Dict[str, List[Entry]]] = {}
        self.list_files_calls = 0
        self.list_tests_calls: List[List[str]] = []
        self.gate: Optional[asyncio.Event] = None
        self.error: Optional[Exception] = None

    def list_files(self, config):
        self.list_files_calls += 1
        return self.report

    async def list_tests(self, config, files):
        self.list_tests_calls.append(list(files))
        tests, error = self.tests, self.error
        if self.gate is not None:
            await self.gate.wait()
        if error is not None:
            raise error
        result = []
        for name, by_file in tests.items():
            file_entries = [
                make_file_entry(file, entries)
                for file, entries in by_file.items()
                if file in files
            ]
            result.append(make_project_entry(name, file_entries))
        return result


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def model(runner):
    return TestModel(runner, "/proj", "/proj/playwright.config.ts", "npx playwright")


@pytest.fixture
def notifications(model):
    """Count on_updated firings."""
    fired = []
    model.on_updated.connect(lambda: fired.append(1))
    return fired


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="DEBUG")
    yield messages
    logger.remove(handler_id)

