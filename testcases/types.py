"""
Catalog Data Types

Dataclasses and pydantic models shared by the catalog, the runner adapters and
the workspace observer. Entry trees come from the external runner and are kept
opaque: the catalog only reads ``type``, ``title``, ``location`` and
``children`` and never mutates a node in place.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


class TestConfig(BaseModel):
    """Identifies one test configuration. Created once per catalog."""

    __test__ = False
    model_config = ConfigDict(frozen=True)

    workspace_folder: str
    config_file: str
    cli: str


class Location(BaseModel):
    """Source location of an entry."""

    model_config = ConfigDict(extra="allow")

    file: str
    line: int = 0
    column: int = 0


class Entry(BaseModel):
    """A node reported by the runner: project, file, suite or test.

    Attributes:
        type: Node kind ('project', 'file', 'suite', 'test', ...)
        title: Display title; for project nodes this is the project name
        location: Where the node is declared
        children: Nested nodes, None when the runner sent none
    """

    model_config = ConfigDict(extra="allow")

    type: str = "suite"
    title: str = ""
    location: Location
    children: Optional[List["Entry"]] = None


Entry.model_rebuild()


class ProjectListFilesReport(BaseModel):
    """Files the runner enumerated for one project."""

    name: str
    test_dir: str = Field(alias="testDir")
    files: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ListFilesReport(BaseModel):
    """Full listing returned by the runner, projects in runner order."""

    projects: List[ProjectListFilesReport] = Field(default_factory=list)


@dataclass
class TestFile:
    """A source file tracked under one project.

    ``entries`` is None until discovery has been attempted for the file; an
    empty list means discovery ran and found nothing.
    """

    __test__ = False

    project_name: str
    file: str
    entries: Optional[List[Entry]] = None

    @property
    def is_discovered(self) -> bool:
        return self.entries is not None


@dataclass
class TestProject:
    """A named runner project scoped to ``test_dir``."""

    __test__ = False

    name: str
    test_dir: str
    is_first: bool = False
    files: Dict[str, TestFile] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "test_dir": self.test_dir,
            "is_first": self.is_first,
            "files": {
                path: None if f.entries is None else len(f.entries)
                for path, f in self.files.items()
            },
        }


@dataclass
class WorkspaceChange:
    """One batch of filesystem notifications."""

    created: Set[str] = field(default_factory=set)
    changed: Set[str] = field(default_factory=set)
    deleted: Set[str] = field(default_factory=set)

    def is_empty(self) -> bool:
        return not (self.created or self.changed or self.deleted)
