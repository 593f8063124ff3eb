# dsptree/core/fs_scanner.py
import os
from pathlib import Path
from typing import List, Optional, Union
from loguru import logger

from ..config.schema import ScanOptions
from .encoding import EncodingName, CANONICAL_ENCODING, bytes_to_byte_string, is_canonical, to_display_name
from .models import Diagnostic, ErrorKind, FileEntry, FolderNode, Outcome, TreeNode, printable_path
from .tree_sort import sort_nodes

class _DirectoryScannerCore:
    """Walks a real directory and produces the same tree shape as the project parser."""

    def __init__(self, options: ScanOptions, encoding: EncodingName = CANONICAL_ENCODING):
        self.options = options
        self.encoding = encoding
        # Legacy names must be read as raw bytes to be re-decoded
        self._list_as_bytes = not is_canonical(encoding)
        self.diagnostics: List[Diagnostic] = []
        logger.debug(f"Scanner core initialized (encoding: {encoding}, show_all_files: {options.show_all_files}, "
                     f"extensions: {sorted(options.extensions)})")

    def _read_failure(self, path: Path, message: str):
        self.diagnostics.append(Diagnostic(ErrorKind.READ_FAILURE, message, path=path))

    def _display_name(self, raw_name: Union[str, bytes], entry_path: Path) -> str:
        if isinstance(raw_name, bytes):
            return to_display_name(bytes_to_byte_string(raw_name), self.encoding, self.diagnostics)
        # Undecodable bytes come back as lone surrogates; show them as U+FFFD instead
        display = os.fsencode(raw_name).decode("utf-8", "replace")
        if display != raw_name:
            logger.warning(f"Name is not valid UTF-8, showing replacement characters: {printable_path(entry_path)}")
            self.diagnostics.append(Diagnostic(ErrorKind.ENCODING_CONVERSION_FAILURE,
                                               f"Name is not valid UTF-8: {display}", path=entry_path))
        return display

    def scan_directory_sync(self, dir_path: Path) -> List[TreeNode]:
        logger.info(f"[Sync Scan] Starting for: {dir_path}")
        items = self._scan_recursive(dir_path)
        logger.info(f"[Sync Scan] Finished for: {dir_path} ({len(items)} top-level items)")
        return items

    def _scan_recursive(self, dir_path: Path) -> List[TreeNode]:
        target = os.fsencode(dir_path) if self._list_as_bytes else os.fspath(dir_path)
        try:
            with os.scandir(target) as it:
                entries = list(it)
        except OSError as e:
            logger.error(f"Error scanning directory {dir_path}: {e}")
            self._read_failure(dir_path, f"Could not list directory: {e}")
            return []

        items: List[TreeNode] = []
        for entry in entries:
            entry_path = Path(os.fsdecode(entry.path))
            display_name = self._display_name(entry.name, entry_path)
            try:
                is_dir = entry.is_dir() and not entry.is_symlink() # Symlinked dirs are not descended
                is_file = not is_dir and entry.is_file()
            except OSError as e:
                logger.warning(f"Could not stat {entry_path}: {e}. Skipping.")
                self._read_failure(entry_path, f"Could not stat entry: {e}")
                continue

            if is_dir:
                children = self._scan_recursive(entry_path)
                # Empty folders are pruned unless everything is shown
                if children or self.options.show_all_files:
                    items.append(FolderNode(name=display_name, path=entry_path, children=children))
            elif is_file:
                extension = os.path.splitext(os.fsdecode(entry.name))[1].lower()
                if self.options.show_all_files or extension in self.options.extensions:
                    items.append(FileEntry(name=display_name, path=entry_path, extension=extension))
            else:
                logger.trace(f"Ignoring special entry: {entry_path}")

        return sort_nodes(items)

def scan_directory_checked(dir_path: Union[str, Path], options: Optional[ScanOptions] = None,
                           encoding: EncodingName = CANONICAL_ENCODING) -> Outcome[List[TreeNode]]:
    """Scans `dir_path` recursively. Unreadable directories contribute nothing and are reported."""
    scanner = _DirectoryScannerCore(options if options is not None else ScanOptions(), encoding)
    items = scanner.scan_directory_sync(Path(os.path.abspath(dir_path)))
    return Outcome(items, scanner.diagnostics)

def scan_directory(dir_path: Union[str, Path], options: Optional[ScanOptions] = None,
                   encoding: EncodingName = CANONICAL_ENCODING) -> List[TreeNode]:
    return scan_directory_checked(dir_path, options, encoding).value
