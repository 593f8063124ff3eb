# dsptree/core/models.py
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Generic, List, Optional, TypeVar, Union

T = TypeVar("T")

@dataclass
class FileEntry:
    """A file leaf in a project or scanned tree."""
    name: str # Display name (canonical text)
    path: Path # Absolute path on disk
    extension: str = "" # Lowercase, including the leading dot

    @property
    def kind(self) -> str:
        return "file"

@dataclass
class FolderNode:
    """A folder in the tree. Synthetic folders (groups, sections) have no path."""
    name: str
    path: Optional[Path] = None
    children: List["TreeNode"] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return "folder"

    def find_folder(self, name: str) -> Optional["FolderNode"]:
        """Returns the direct child folder with the given display name, if any."""
        for child in self.children:
            if isinstance(child, FolderNode) and child.name == name:
                return child
        return None

TreeNode = Union[FolderNode, FileEntry]

@dataclass
class Group:
    """A named group declared in the project description ('# Begin Group')."""
    name: str # Display name
    original_name: str # Name exactly as it appeared in the description
    filter: str # Default_Filter value, stored verbatim
    root: FolderNode

class FileKind(Enum):
    SOURCE = "Source Files"
    HEADER = "Header Files"
    RESOURCE = "Resource Files"
    OTHER = "Other Files"

SOURCE_EXTENSIONS = frozenset({".c", ".cpp", ".cxx"})
HEADER_EXTENSIONS = frozenset({".h", ".hpp", ".hxx"})
RESOURCE_EXTENSIONS = frozenset({".rc", ".ico", ".bmp", ".cur"})

def classify_extension(extension: str) -> FileKind:
    """Buckets a file extension the way the legacy IDE groups loose files."""
    ext = extension.lower()
    if ext in SOURCE_EXTENSIONS: return FileKind.SOURCE
    if ext in HEADER_EXTENSIONS: return FileKind.HEADER
    if ext in RESOURCE_EXTENSIONS: return FileKind.RESOURCE
    return FileKind.OTHER

@dataclass(frozen=True)
class ProjectModel:
    """Result of parsing a project description. Built fresh on every parse."""
    name: str
    path: Path
    groups: List[Group] = field(default_factory=list)
    source_files: List[TreeNode] = field(default_factory=list)
    header_files: List[TreeNode] = field(default_factory=list)
    resource_files: List[TreeNode] = field(default_factory=list)
    other_files: List[TreeNode] = field(default_factory=list)

    def files_of_kind(self, kind: FileKind) -> List[TreeNode]:
        return {
            FileKind.SOURCE: self.source_files,
            FileKind.HEADER: self.header_files,
            FileKind.RESOURCE: self.resource_files,
            FileKind.OTHER: self.other_files,
        }[kind]

    def sections(self) -> List[FolderNode]:
        """
        Top-level entries for display: each group's root folder in declaration
        order, then one synthetic folder per non-empty file bucket.
        """
        result: List[FolderNode] = [group.root for group in self.groups]
        for kind in FileKind:
            nodes = self.files_of_kind(kind)
            if nodes:
                result.append(FolderNode(name=kind.value, path=None, children=list(nodes)))
        return result

    @property
    def is_empty(self) -> bool:
        return not self.groups and not any(self.files_of_kind(kind) for kind in FileKind)

def printable_path(path: Path) -> str:
    """`path` as text that can always be written out; undecodable name bytes become U+FFFD."""
    return os.fsencode(path).decode("utf-8", "replace")

class ErrorKind(Enum):
    READ_FAILURE = "read_failure"
    ENCODING_CONVERSION_FAILURE = "encoding_conversion_failure"
    MALFORMED_DIRECTIVE = "malformed_directive"

@dataclass(frozen=True)
class Diagnostic:
    """Something that went wrong but was downgraded to a fallback value."""
    kind: ErrorKind
    message: str
    path: Optional[Path] = None
    line: Optional[int] = None # 1-based line number in a project description

    def __str__(self) -> str:
        location = ""
        if self.path is not None:
            location = printable_path(self.path)
            if self.line is not None: location += f":{self.line}"
            location += ": "
        return f"{location}{self.message} [{self.kind.value}]"

@dataclass
class Outcome(Generic[T]):
    """A value that is always usable, plus any diagnostics collected producing it."""
    value: T
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def has(self, kind: ErrorKind) -> bool:
        return any(d.kind is kind for d in self.diagnostics)
