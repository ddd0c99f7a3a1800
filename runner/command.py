"""
Command Test Runner

Invokes an external runner command that speaks the catalog JSON contract:

    <cli> list-files --config <config_file>
        -> {"projects": [{"name": ..., "testDir": ..., "files": [...]}]}

    <cli> list-tests --config <config_file> <file> [<file> ...]
        -> [{"type": "project", "title": <project>, "location": {...},
             "children": [<file entries>]}]

File listing is synchronous; test discovery runs as an asyncio subprocess.
"""

import asyncio
import json
import shlex
import subprocess
from typing import List, Optional

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from testcases.types import Entry, ListFilesReport, TestConfig

from .base import RunnerError, TestRunner

_ENTRY_LIST = TypeAdapter(List[Entry])


class CommandTestRunner(TestRunner):
    """Runs the configured runner CLI as a child process."""

    def __init__(self, timeout: float = 120.0):
        self.timeout = timeout

    def _build_command(self, config: TestConfig, action: str, files: Optional[List[str]] = None) -> List[str]:
        command = shlex.split(config.cli) + [action, "--config", config.config_file]
        if files:
            command.extend(files)
        return command

    def list_files(self, config: TestConfig) -> Optional[ListFilesReport]:
        command = self._build_command(config, "list-files")
        logger.debug(f"Listing files: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                cwd=config.workspace_folder,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"File listing timed out after {self.timeout}s")
            return None
        except OSError as e:
            logger.warning(f"Failed to start runner '{config.cli}': {e}")
            return None

        if result.returncode != 0:
            logger.warning(
                f"File listing failed with exit code {result.returncode}: {result.stderr.strip()[:500]}"
            )
            return None

        output = result.stdout.strip()
        if not output:
            logger.warning("File listing produced no output")
            return None

        try:
            report = ListFilesReport.model_validate_json(output)
        except ValidationError as e:
            logger.warning(f"Failed to parse file listing: {e}")
            return None

        logger.debug(f"Runner reported {len(report.projects)} project(s)")
        return report

    async def list_tests(self, config: TestConfig, files: List[str]) -> List[Entry]:
        command = self._build_command(config, "list-tests", files)
        logger.debug(f"Discovering tests in {len(files)} file(s)")
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                cwd=config.workspace_folder,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise RunnerError(f"Failed to start runner '{config.cli}': {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise RunnerError(f"Test discovery timed out after {self.timeout}s")

        output = stdout.decode("utf-8", errors="replace").strip()
        if proc.returncode != 0:
            raise RunnerError(
                "Test discovery failed",
                exit_code=proc.returncode,
                raw_output=stderr.decode("utf-8", errors="replace"),
            )
        if not output:
            return []

        try:
            return _ENTRY_LIST.validate_json(output)
        except ValidationError as e:
            raise RunnerError(f"Failed to parse discovery output: {e}", raw_output=output) from e


def dump_entries(entries: List[Entry]) -> str:
    """Serialize entries back into the wire JSON the runner emits."""
    return json.dumps(_ENTRY_LIST.dump_python(entries, mode="json", exclude_none=True))
