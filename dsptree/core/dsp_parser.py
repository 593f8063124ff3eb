# dsptree/core/dsp_parser.py
"""
Parser for Visual C++ 6 project descriptions (.dsp).

Only grouping and file membership are read:

    # Begin Group "Source Files"
    # PROP Default_Filter "cpp;c"
    # Begin Source File
    SOURCE=.\\main.cpp
    # End Source File
    # End Group

Files inside a group keep the folder structure of their location on disk,
relative to the directory holding the .dsp. Files outside any group are bucketed
by extension (source/header/resource/other).
"""
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union
from loguru import logger

from .encoding import EncodingName, CANONICAL_ENCODING, decode_bytes, to_display_name
from .models import (Diagnostic, ErrorKind, FileKind, FolderNode, Group,
                     Outcome, ProjectModel, classify_extension)
from .tree_builder import build_tree, insert_file
from .tree_sort import sort_tree

PROJECT_SUFFIX = ".dsp"

BEGIN_GROUP = "# Begin Group"
END_GROUP = "# End Group"
DEFAULT_FILTER = "# PROP Default_Filter"
BEGIN_SOURCE_FILE = "# Begin Source File"
END_SOURCE_FILE = "# End Source File"
SOURCE_PREFIX = "SOURCE="

_GROUP_NAME_RE = re.compile(r'# Begin Group "([^"]+)"')
_FILTER_RE = re.compile(r'# PROP Default_Filter "([^"]+)"')
_LINE_SPLIT_RE = re.compile(r"\r?\n")

@dataclass
class _PendingGroup:
    name: str
    original_name: str
    filter: str = ""
    files: List[Path] = field(default_factory=list)

class _DspParserCore:
    """Line-oriented state machine over decoded project description text."""

    def __init__(self, project_root: Path, encoding: EncodingName, source: Optional[Path] = None):
        self.project_root = project_root
        self.encoding = encoding
        self.source = source # Only used to locate diagnostics
        self.diagnostics: List[Diagnostic] = []
        self.groups: List[_PendingGroup] = []
        self.buckets: Dict[FileKind, List[Path]] = {kind: [] for kind in FileKind}
        self._current_group: Optional[_PendingGroup] = None
        self._in_file_entry = False

    def _malformed(self, line_no: int, message: str):
        logger.warning(f"Malformed directive at line {line_no}: {message}")
        self.diagnostics.append(Diagnostic(ErrorKind.MALFORMED_DIRECTIVE, message, path=self.source, line=line_no))

    def feed(self, text: str):
        for index, raw_line in enumerate(_LINE_SPLIT_RE.split(text)):
            self._handle_line(raw_line.strip(), index + 1)
        if self._current_group is not None:
            logger.debug(f"Discarding group '{self._current_group.name}' left open at end of input")
            self._current_group = None

    def _handle_line(self, line: str, line_no: int):
        if line.startswith(BEGIN_GROUP):
            match = _GROUP_NAME_RE.match(line)
            if not match:
                self._malformed(line_no, f"Group name missing or unquoted: {line}")
                return
            original_name = match.group(1)
            if self._current_group is not None:
                logger.debug(f"Group '{self._current_group.name}' replaced by '{original_name}' before '# End Group'")
            self._current_group = _PendingGroup(
                name=to_display_name(original_name, self.encoding, self.diagnostics),
                original_name=original_name,
            )
            logger.trace(f"Line {line_no}: begin group '{original_name}'")
        elif line.startswith(DEFAULT_FILTER) and self._current_group is not None:
            match = _FILTER_RE.match(line)
            if match:
                self._current_group.filter = match.group(1)
        elif line == END_GROUP and self._current_group is not None:
            self.groups.append(self._current_group)
            logger.trace(f"Line {line_no}: end group '{self._current_group.name}'")
            self._current_group = None
        elif line == BEGIN_SOURCE_FILE:
            self._in_file_entry = True
        elif self._in_file_entry and line.startswith(SOURCE_PREFIX):
            self._handle_source(line[len(SOURCE_PREFIX):].strip(), line_no)
        elif line == END_SOURCE_FILE:
            self._in_file_entry = False

    def _handle_source(self, value: str, line_no: int):
        if value.startswith('"'):
            if len(value) < 2 or not value.endswith('"'):
                self._malformed(line_no, f"Unterminated quoted path: {value}")
                return
            value = value[1:-1]
        if not value:
            self._malformed(line_no, "Empty SOURCE path")
            return

        native = value.replace("\\", os.sep)
        full_path = Path(os.path.abspath(os.path.join(self.project_root, native)))
        if self._current_group is not None:
            self._current_group.files.append(full_path)
        else:
            kind = classify_extension(full_path.suffix)
            self.buckets[kind].append(full_path)
        logger.trace(f"Line {line_no}: source file {full_path}")

    def build_group(self, pending: _PendingGroup) -> Group:
        root = FolderNode(name=pending.name, path=None)
        for file_path in pending.files:
            insert_file(root, file_path, self.project_root, self.encoding, self.diagnostics)
        sort_tree(root)
        return Group(name=pending.name, original_name=pending.original_name, filter=pending.filter, root=root)

    def build_bucket(self, kind: FileKind):
        return build_tree(self.buckets[kind], self.project_root, self.encoding, self.diagnostics)

def _project_name(path: Path) -> str:
    return path.stem if path.suffix.lower() == PROJECT_SUFFIX else path.name

def parse_dsp_text(text: str, project_root: Union[str, Path],
                   encoding: EncodingName = CANONICAL_ENCODING,
                   name: Optional[str] = None, path: Optional[Path] = None) -> Outcome[ProjectModel]:
    """
    Parses description text. Paths resolve against `project_root`.

    `encoding` is the encoding group and file names are still in: pass the canonical
    encoding when `text` has already been fully decoded.
    """
    root = Path(os.path.abspath(project_root))
    core = _DspParserCore(root, encoding, source=path)
    core.feed(text)

    project = ProjectModel(
        name=name if name is not None else root.name,
        path=path if path is not None else root,
        groups=[core.build_group(pending) for pending in core.groups],
        source_files=core.build_bucket(FileKind.SOURCE),
        header_files=core.build_bucket(FileKind.HEADER),
        resource_files=core.build_bucket(FileKind.RESOURCE),
        other_files=core.build_bucket(FileKind.OTHER),
    )
    logger.debug(f"Parsed project '{project.name}': {len(project.groups)} groups, "
                 f"{sum(len(g.files) for g in core.groups)} grouped files, "
                 f"{sum(len(paths) for paths in core.buckets.values())} ungrouped files")
    return Outcome(project, core.diagnostics)

def load_project(dsp_file_path: Union[str, Path],
                 encoding: EncodingName = CANONICAL_ENCODING) -> Outcome[ProjectModel]:
    """Reads and parses a .dsp file. Read failures yield an empty project plus a diagnostic."""
    dsp_path = Path(os.path.abspath(dsp_file_path))
    name = _project_name(dsp_path)
    logger.info(f"Parsing project description: {dsp_path} (encoding: {encoding})")
    try:
        data = dsp_path.read_bytes()
    except OSError as e:
        logger.error(f"Error parsing DSP file {dsp_path}: {e}")
        return Outcome(ProjectModel(name=name, path=dsp_path),
                       [Diagnostic(ErrorKind.READ_FAILURE, f"Could not read project file: {e}", path=dsp_path)])
    decoded = decode_bytes(data, encoding)
    # Names in successfully decoded text are canonical already; only raw leftovers need converting
    name_encoding = CANONICAL_ENCODING if decoded.ok else encoding
    outcome = parse_dsp_text(decoded.value, dsp_path.parent, name_encoding, name=name, path=dsp_path)
    outcome.diagnostics[:0] = decoded.diagnostics
    return outcome

def parse_dsp_file(dsp_file_path: Union[str, Path],
                   encoding: EncodingName = CANONICAL_ENCODING) -> ProjectModel:
    """Total form of load_project: always returns a ProjectModel."""
    return load_project(dsp_file_path, encoding).value
