# dsptree/core/tree_builder.py
import os
from pathlib import Path
from typing import Iterable, List, Optional, Union
from loguru import logger

from .encoding import EncodingName, CANONICAL_ENCODING, to_display_name
from .models import Diagnostic, FileEntry, FolderNode, TreeNode
from .tree_sort import sort_tree

PathLike = Union[str, Path]

def relative_parts(file_path: PathLike, root: PathLike) -> List[str]:
    """Path segments of `file_path` relative to `root`, using the host separator."""
    try:
        relative = os.path.relpath(os.fspath(file_path), os.fspath(root))
    except ValueError:
        # Different drive on Windows: keep everything below the anchor
        logger.debug(f"{file_path} is not relative to {root}, using its absolute segments")
        return [part for part in Path(file_path).parts[1:] if part]
    return [part for part in relative.split(os.sep) if part and part != "."]

def insert_file(folder: FolderNode, file_path: PathLike, root: PathLike,
                encoding: EncodingName = CANONICAL_ENCODING,
                diagnostics: Optional[List[Diagnostic]] = None) -> Optional[FileEntry]:
    """
    Inserts one file under `folder` at the folder chain implied by its location
    relative to `root`, creating folders as needed. Folders are matched by display name.
    """
    parts = relative_parts(file_path, root)
    if not parts:
        logger.debug(f"Skipping {file_path}: it resolves to the root itself")
        return None

    current = folder
    current_path = Path(root)
    for part in parts[:-1]:
        display_name = to_display_name(part, encoding, diagnostics)
        current_path = Path(os.path.normpath(current_path / part))
        sub_folder = current.find_folder(display_name)
        if sub_folder is None:
            sub_folder = FolderNode(name=display_name, path=current_path)
            current.children.append(sub_folder)
        current = sub_folder

    file_name = parts[-1]
    entry = FileEntry(
        name=to_display_name(file_name, encoding, diagnostics),
        path=Path(file_path),
        extension=os.path.splitext(file_name)[1].lower(),
    )
    current.children.append(entry)
    return entry

def build_tree(file_paths: Iterable[PathLike], root: PathLike,
               encoding: EncodingName = CANONICAL_ENCODING,
               diagnostics: Optional[List[Diagnostic]] = None) -> List[TreeNode]:
    """Rebuilds the folder hierarchy implied by a flat list of absolute file paths."""
    root_path = Path(root)
    tree = FolderNode(name=root_path.name, path=root_path)
    count = 0
    for file_path in file_paths:
        if insert_file(tree, file_path, root_path, encoding, diagnostics) is not None:
            count += 1
    sort_tree(tree)
    logger.trace(f"Built tree of {count} files under {root_path}")
    return tree.children
