# dsptree/cli.py

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from loguru import logger

from .services.logging import setup_logging
from .config.loader import load_config
from .config.schema import AppConfig, ScanOptions
from .core.dsp_parser import load_project
from .core.encoding import FileEncoding
from .core.fs_scanner import scan_directory_checked
from .core.models import (Diagnostic, ErrorKind, FileEntry, FolderNode, Group, Outcome,
                          ProjectModel, TreeNode, printable_path)
from . import __version__

app = typer.Typer(help="dsptree - Browse Visual C++ 6 (.dsp) projects and source folders as trees.")

def version_callback(value: bool):
    if value:
        print(f"dsptree version: {__version__}")
        raise typer.Exit()

@app.callback()
def main_options(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Read settings from this JSON file instead of the user config."),
    log_file: bool = typer.Option(True, "--log-file/--no-log-file", help="Also write logs to the user log directory."),
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True, help="Show version and exit."),
):
    """ Main callback to set up logging and load settings """
    config = load_config(config_file)
    setup_logging(level=config.log_level, verbose=verbose, log_to_file=log_file)
    ctx.ensure_object(dict)
    ctx.obj["CONFIG"] = config


def _node_to_dict(node: TreeNode) -> Dict[str, Any]:
    if isinstance(node, FolderNode):
        return {
            "type": node.kind,
            "name": node.name,
            "path": printable_path(node.path) if node.path is not None else None,
            "children": [_node_to_dict(child) for child in node.children],
        }
    if isinstance(node, FileEntry):
        return {"type": node.kind, "name": node.name, "path": printable_path(node.path), "extension": node.extension}
    raise TypeError(f"Not a tree node: {node!r}")

def _group_to_dict(group: Group) -> Dict[str, Any]:
    return {
        "name": group.name,
        "original_name": group.original_name,
        "filter": group.filter,
        "children": [_node_to_dict(child) for child in group.root.children],
    }

def project_to_dict(project: ProjectModel) -> Dict[str, Any]:
    return {
        "name": project.name,
        "path": printable_path(project.path),
        "groups": [_group_to_dict(group) for group in project.groups],
        "source_files": [_node_to_dict(n) for n in project.source_files],
        "header_files": [_node_to_dict(n) for n in project.header_files],
        "resource_files": [_node_to_dict(n) for n in project.resource_files],
        "other_files": [_node_to_dict(n) for n in project.other_files],
    }

def render_tree(nodes: List[TreeNode], indent: str = "") -> List[str]:
    """Plain indented text, one node per line; folders end with a slash."""
    lines: List[str] = []
    for node in nodes:
        if isinstance(node, FolderNode):
            lines.append(f"{indent}{node.name}/")
            lines.extend(render_tree(node.children, indent + "  "))
        else:
            lines.append(f"{indent}{node.name}")
    return lines

def _report(outcome: Outcome) -> None:
    for diagnostic in outcome.diagnostics:
        typer.echo(f"warning: {diagnostic}", err=True)

def _is_fatal(diagnostics: List[Diagnostic], path: Path) -> bool:
    """Only an unreadable input path is fatal; anything else is a degraded result."""
    return any(d.kind is ErrorKind.READ_FAILURE and d.path == path for d in diagnostics)

def _resolve_encoding(ctx: typer.Context, encoding: Optional[FileEncoding]) -> FileEncoding:
    config: AppConfig = ctx.obj["CONFIG"]
    return encoding if encoding is not None else config.file_encoding


@app.command()
def show(
    ctx: typer.Context,
    project: Path = typer.Argument(..., help="Path to the .dsp project description.", resolve_path=True),
    encoding: Optional[FileEncoding] = typer.Option(None, "--encoding", "-e", case_sensitive=False, help="Encoding of the project file and its names (default from config)."),
    as_json: bool = typer.Option(False, "--json", help="Print the parsed project as JSON."),
):
    """
    Parses a project description and prints its groups and ungrouped files.
    """
    file_encoding = _resolve_encoding(ctx, encoding)
    outcome = load_project(project, file_encoding)
    _report(outcome)
    if outcome.has(ErrorKind.READ_FAILURE):
        logger.error(f"Could not read project: {project}")
        raise typer.Exit(code=1)

    model = outcome.value
    if as_json:
        typer.echo(json.dumps(project_to_dict(model), indent=2, ensure_ascii=False))
        return
    typer.echo(f"{model.name} ({printable_path(model.path)})")
    if model.is_empty:
        typer.echo("  (no files)")
        return
    for line in render_tree(model.sections(), indent="  "):
        typer.echo(line)


@app.command()
def scan(
    ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Directory to scan.", resolve_path=True),
    encoding: Optional[FileEncoding] = typer.Option(None, "--encoding", "-e", case_sensitive=False, help="Encoding of file and folder names (default from config)."),
    ext: Optional[List[str]] = typer.Option(None, "--ext", help="Extension to include, e.g. '.cpp'. Repeatable; replaces the configured list."),
    show_all: Optional[bool] = typer.Option(None, "--all/--matching", help="Show every file and empty folder, or only matching files."),
    as_json: bool = typer.Option(False, "--json", help="Print the tree as JSON."),
):
    """
    Scans a directory and prints the tree of matching files.
    """
    config: AppConfig = ctx.obj["CONFIG"]
    options = config.scan
    overrides: Dict[str, Any] = {}
    if ext:
        overrides["extensions"] = ext
    if show_all is not None:
        overrides["show_all_files"] = show_all
    if overrides:
        options = ScanOptions(**{**options.model_dump(), **overrides})

    outcome = scan_directory_checked(directory, options, _resolve_encoding(ctx, encoding))
    _report(outcome)
    if _is_fatal(outcome.diagnostics, directory):
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps([_node_to_dict(n) for n in outcome.value], indent=2, ensure_ascii=False))
        return
    for line in render_tree(outcome.value):
        typer.echo(line)


if __name__ == "__main__":
    app()
