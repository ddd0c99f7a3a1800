"""
Test Catalog Model

Keeps the project -> file -> entry tree in sync with the external runner and
with filesystem change batches. Updates are applied incrementally: a listing
refresh never wipes entries already discovered for files that still exist,
and stale projects or files are pruned precisely.

All mutation happens on the event loop thread. ``list_tests`` is the only
suspension point; its merge step looks targets up again by name so results
for projects or files removed in the meantime are dropped.
"""

import asyncio
from typing import Dict, Iterable, List, Optional, Set, Union

from loguru import logger

from runner.base import RunnerError, TestRunner

from .events import ChangeSignal
from .types import (
    Entry,
    ProjectListFilesReport,
    TestConfig,
    TestFile,
    TestProject,
    WorkspaceChange,
)


class TestModel:
    """In-memory catalog for one runner configuration."""

    __test__ = False

    def __init__(self, runner: TestRunner, workspace_folder: str, config_file: str, cli: str):
        self._runner = runner
        self.config = TestConfig(workspace_folder=workspace_folder, config_file=config_file, cli=cli)
        self.projects: Dict[str, TestProject] = {}
        self.all_files: Set[str] = set()
        self.on_updated = ChangeSignal("TestModelUpdated")
        self._pending: Set[asyncio.Task] = set()

    def dispose(self) -> None:
        self.on_updated.clear()

    # ------------------------------------------------------------------
    # Full listing
    # ------------------------------------------------------------------

    def list_files(self) -> None:
        """Refresh projects and files from the runner and notify once.

        The notification fires whether or not anything changed, but not when
        the runner failed to produce a listing.
        """
        if self._inner_list_files():
            self.on_updated.emit()

    def _inner_list_files(self) -> bool:
        report = self._runner.list_files(self.config)
        if not report:
            logger.debug("Runner returned no file listing, keeping catalog as-is")
            return False

        projects_to_keep: Set[str] = set()
        for index, project_report in enumerate(report.projects):
            projects_to_keep.add(project_report.name)
            project = self.projects.get(project_report.name)
            if not project:
                project = self._create_project(project_report)
            project.is_first = index == 0
            self._update_project(project, project_report)

        for name in list(self.projects):
            if name not in projects_to_keep:
                logger.debug(f"Dropping project '{name}'")
                del self.projects[name]

        self._recalculate_all_files()
        logger.info(f"Listed {len(self.all_files)} file(s) across {len(self.projects)} project(s)")
        return True

    def _create_project(self, project_report: ProjectListFilesReport) -> TestProject:
        project = TestProject(name=project_report.name, test_dir=project_report.test_dir)
        self.projects[project.name] = project
        return project

    def _update_project(self, project: TestProject, project_report: ProjectListFilesReport) -> None:
        files_to_keep = set(project_report.files)
        for file in project_report.files:
            if file not in project.files:
                self._create_file(project, file)

        for file in list(project.files):
            if file not in files_to_keep:
                del project.files[file]

    def _create_file(self, project: TestProject, file: str) -> TestFile:
        test_file = TestFile(project_name=project.name, file=file)
        project.files[file] = test_file
        return test_file

    # ------------------------------------------------------------------
    # Workspace changes
    # ------------------------------------------------------------------

    def workspace_changed(self, change: WorkspaceChange) -> None:
        """Apply one batch of created/changed/deleted paths.

        Fires at most one notification for the structural part. Changed files
        that were already discovered are re-discovered asynchronously, and that
        discovery notifies on its own when it completes.
        """
        model_changed = False

        if change.deleted:
            for project in self.projects.values():
                for file in change.deleted:
                    if file in project.files:
                        del project.files[file]
                        model_changed = True

        if change.created:
            # Raw string prefix, not path-segment aware
            has_matching_files = any(
                file.startswith(project.test_dir)
                for project in self.projects.values()
                for file in change.created
            )
            if has_matching_files:
                self._inner_list_files()
                model_changed = True

        if change.created or change.deleted:
            self._recalculate_all_files()

        if change.changed:
            files_to_load: Set[str] = set()
            for project in self.projects.values():
                for file in change.changed:
                    test_file = project.files.get(file)
                    if not test_file or not test_file.is_discovered:
                        continue
                    files_to_load.add(file)
            if files_to_load:
                self._schedule_list_tests(sorted(files_to_load))

        if model_changed:
            self.on_updated.emit()

    def _schedule_list_tests(self, files: List[str]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, discovering synchronously")
            asyncio.run(self.list_tests(files))
            return

        task = loop.create_task(self.list_tests(files))
        self._pending.add(task)
        task.add_done_callback(self._on_discovery_done)

    def _on_discovery_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background test discovery failed: {error}")

    async def wait_for_discovery(self) -> None:
        """Wait until every discovery scheduled by workspace changes finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def list_tests(self, files: Iterable[str]) -> None:
        """Discover tests for the known subset of ``files`` and merge the result."""
        files_to_load = [f for f in files if f in self.all_files]
        if not files_to_load:
            return

        logger.debug(f"Discovering tests in {len(files_to_load)} file(s)")
        try:
            project_entries = await self._runner.list_tests(self.config, files_to_load)
        except RunnerError as e:
            logger.warning(f"Test discovery failed, keeping previous entries: {e}")
            return
        self.update_projects(project_entries, files_to_load)

    def update_projects(self, project_entries: List[Entry], requested_files: List[str]) -> None:
        """Merge discovery results; discovery is authoritative for the requested files."""
        for project_entry in project_entries:
            project = self.projects.get(project_entry.title)
            if not project:
                continue
            files_to_delete = set(requested_files)
            for file_entry in project_entry.children or []:
                files_to_delete.discard(file_entry.location.file)
                test_file = project.files.get(file_entry.location.file)
                if not test_file:
                    continue
                test_file.entries = file_entry.children or []
            # Requested but not reported back: discovered, empty
            for file in files_to_delete:
                test_file = project.files.get(file)
                if test_file:
                    test_file.entries = []
        self.on_updated.emit()

    # ------------------------------------------------------------------
    # Run results
    # ------------------------------------------------------------------

    def update_from_running_project(self, project: Union[TestProject, str], project_entries: List[Entry]) -> None:
        """Merge the structure a test run reported for ``project``.

        A focused run may report fewer tests than discovery did, so existing
        entries are only filled in, never replaced.
        """
        name = project if isinstance(project, str) else project.name
        project_entry = next((p for p in project_entries if p.title == name), None)
        if not project_entry:
            return

        target = self.projects.get(name)
        if not target:
            logger.debug(f"Project '{name}' is gone, dropping run results")
            return

        reported_files: Set[str] = set()
        for file_entry in project_entry.children or []:
            reported_files.add(file_entry.location.file)
            if file_entry.children is None:
                continue
            test_file = target.files.get(file_entry.location.file)
            if not test_file:
                test_file = self._create_file(target, file_entry.location.file)
            if not test_file.is_discovered:
                test_file.entries = file_entry.children

        for file in list(target.files):
            if file not in reported_files:
                del target.files[file]

        self._recalculate_all_files()
        self.on_updated.emit()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def test_entries(self, project: Union[TestProject, str]) -> List[Entry]:
        """Return the de-duplicated test nodes of a project, in no particular order."""
        target = self.projects.get(project) if isinstance(project, str) else project
        if target is None:
            return []

        entries: Dict[str, Entry] = {}

        def visit_entry(entry: Entry) -> None:
            if entry.type == "test":
                key = f"{entry.location.file}:{entry.location.line}:{entry.title}"
                entries[key] = entry
            for child in entry.children or []:
                visit_entry(child)

        for test_file in target.files.values():
            for entry in test_file.entries or []:
                visit_entry(entry)
        return list(entries.values())

    def find_file(self, file: str) -> List[TestFile]:
        """Return the catalog files for ``file`` across all projects."""
        return [p.files[file] for p in self.projects.values() if file in p.files]

    def first_project(self) -> Optional[TestProject]:
        return next((p for p in self.projects.values() if p.is_first), None)

    def _recalculate_all_files(self) -> None:
        self.all_files.clear()
        for project in self.projects.values():
            for file in project.files.values():
                self.all_files.add(file.file)
