#!/usr/bin/env python3
"""
Résumé editing CLI

Drives an EditorSession over the persisted résumé snapshot: field edits, entry and
module management, photo upload, HTML preview, Word export and LLM rewrites.

Field paths:
    profile.<field>         profile.name, profile.jobTitle, profile.email, ...
    <module>[<i>].<field>   experience[0].desc, education[1].school, ...
    <module>                skills, summary, awards (text modules)

Commands:
    show           - Print the current snapshot as JSON
    set            - Set one field
    add-entry      - Append a blank entry to education/experience/projects
    remove-entry   - Remove an entry
    delete-module  - Hide a module
    restore-module - Bring a hidden module back (appended at the end)
    reorder        - Reorder the visible modules
    photo          - Set or remove the profile photo
    preview        - Render the HTML preview
    export         - Export a Word document
    rewrite        - Ask the LLM to polish one field
    reset          - Clear everything back to the empty résumé

Examples:\n

    edit_resume.py set profile.name 张三

    edit_resume.py add-entry experience

    edit_resume.py set "experience[0].desc" "负责核心服务开发"

    edit_resume.py rewrite "experience[0].desc" --apply

    edit_resume.py export --output-dir outs/exports
"""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from typing_extensions import Annotated

from vitae.contexts.document.modules import FieldRef, Module
from vitae.contexts.editing import EditorSession
from vitae.contexts.editing.logger import setup_editor_logger
from vitae.exceptions import VitaeError
from vitae.utils.config import load_config, resolve_path
from vitae.utils.logger import session_log_dir

app = typer.Typer(
    help="Edit, preview and export a résumé",
    add_completion=False,
    invoke_without_command=True,
)

DataOption = Annotated[
    Optional[Path],
    typer.Option("--data", "-d", help="Snapshot file (default: persistence.path from config)"),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="User config YAML merged over the defaults"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Echo debug logs to the console"),
]


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _open_session(
    command: str, data_path: Optional[Path], config_path: Optional[Path], verbose: bool
) -> EditorSession:
    """Load config, configure logging and open a session on the persisted snapshot."""
    config = load_config(config_path)
    path = resolve_path(data_path or config.persistence.path)
    setup_editor_logger(
        session_log_dir(resolve_path(config.logging.dir), command),
        data_path=path,
        console_level="DEBUG" if verbose else "WARNING",
    )

    session = EditorSession.from_config(config, data_path=path)
    session.load()
    return session


def _parse_ref(path: str) -> FieldRef:
    ref = FieldRef.parse(path)
    if ref is None:
        typer.secho(f"Error: malformed field path '{path}'", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return ref


def _fail(error: Exception) -> None:
    typer.secho(f"Error: {error}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _module_list(values: List[str]) -> str:
    return ", ".join(f"{Module(value).display_label} ({value})" for value in values)


@app.command("show")
def show_command(data: DataOption = None, config: ConfigOption = None, verbose: VerboseOption = False):
    """Print the current snapshot as JSON."""
    session = _open_session("show", data, config, verbose)
    typer.echo(json.dumps(session.model.snapshot(), ensure_ascii=False, indent=2))
    typer.echo(f"\nVisible: {_module_list(session.active_modules())}")
    if session.deleted_modules():
        typer.echo(f"Hidden:  {_module_list(session.deleted_modules())}")


@app.command("set")
def set_command(
    path: Annotated[str, typer.Argument(help="Field path, e.g. profile.name or experience[0].desc")],
    value: Annotated[str, typer.Argument(help="New value (use '' to clear)")],
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Set one field.

    Examples:\n

        $ edit_resume.py set profile.email zhangsan@example.com

        $ edit_resume.py set summary "五年后端开发经验"
    """
    ref = _parse_ref(path)
    session = _open_session("set", data, config, verbose)
    changed = session.write(ref, value)
    session.close()

    if not changed:
        typer.secho(f"No such field: {path}", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"✓ {ref.describe()} updated", fg=typer.colors.GREEN)


@app.command("add-entry")
def add_entry_command(
    module: Annotated[str, typer.Argument(help="education, experience or projects")],
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """Append a blank entry and print its index."""
    session = _open_session("add-entry", data, config, verbose)
    index = session.add_entry(module)
    session.close()

    if index is None:
        typer.secho(f"'{module}' has no entries", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"✓ Added {module}[{index}]", fg=typer.colors.GREEN)


@app.command("remove-entry")
def remove_entry_command(
    module: Annotated[str, typer.Argument(help="education, experience or projects")],
    index: Annotated[int, typer.Argument(help="Entry index", min=0)],
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """Remove one entry."""
    session = _open_session("remove-entry", data, config, verbose)
    removed = session.remove_entry(module, index)
    session.close()

    if not removed:
        typer.secho(f"No entry {module}[{index}]", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"✓ Removed {module}[{index}]", fg=typer.colors.GREEN)


@app.command("delete-module")
def delete_module_command(
    module: Annotated[str, typer.Argument(help="Module to hide")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")] = False,
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """Hide a module (its content is kept and comes back on restore)."""
    if not yes:
        typer.confirm(f"Hide module '{module}'?", abort=True)

    session = _open_session("delete-module", data, config, verbose)
    deleted = session.delete_module(module)
    session.close()

    if not deleted:
        typer.secho(f"'{module}' is not a visible module", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"✓ Hid {module}", fg=typer.colors.GREEN)


@app.command("restore-module")
def restore_module_command(
    module: Annotated[str, typer.Argument(help="Module to bring back")],
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """Restore a hidden module at the end of the order."""
    session = _open_session("restore-module", data, config, verbose)
    restored = session.restore_module(module)
    session.close()

    if not restored:
        typer.secho(f"'{module}' is not a hidden module", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"✓ Restored {module}", fg=typer.colors.GREEN)


@app.command("reorder")
def reorder_command(
    modules: Annotated[List[str], typer.Argument(help="Every visible module, in the new order")],
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Reorder the visible modules.

    The list must name each visible module exactly once.

    Examples:\n

        $ edit_resume.py reorder experience projects education skills summary awards
    """
    session = _open_session("reorder", data, config, verbose)
    before = session.active_modules()
    changed = session.reorder_modules(modules)
    session.close()

    if not changed and list(modules) != before:
        typer.secho(
            f"Rejected: order must list each visible module once ({', '.join(before)})",
            fg=typer.colors.YELLOW,
            err=True,
        )
        raise typer.Exit(code=1)
    typer.secho(f"✓ Order: {', '.join(session.active_modules())}", fg=typer.colors.GREEN)


@app.command("photo")
def photo_command(
    image: Annotated[Optional[Path], typer.Argument(help="Image file (max 2MB by default)")] = None,
    remove: Annotated[bool, typer.Option("--remove", help="Remove the current photo")] = False,
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """Set or remove the profile photo."""
    if image is None and not remove:
        typer.secho("Error: give an image file or --remove", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    session = _open_session("photo", data, config, verbose)
    try:
        if remove:
            session.remove_photo()
        else:
            session.set_photo_file(image)
    except (VitaeError, OSError) as e:
        _fail(e)
    finally:
        session.close()

    typer.secho("✓ Photo removed" if remove else f"✓ Photo set from {image.name}", fg=typer.colors.GREEN)


@app.command("preview")
def preview_command(
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write a standalone HTML page here")
    ] = None,
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """Render the HTML preview (fragment to stdout, or a full page to --output)."""
    session = _open_session("preview", data, config, verbose)

    if output is None:
        typer.echo(session.preview_html())
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(session.renderer.render_page(session.model.snapshot()), encoding="utf-8")
    typer.secho(f"✓ Preview written to {output}", fg=typer.colors.GREEN)


@app.command("export")
def export_command(
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Directory for the .docx (default: export.output_dir)"),
    ] = None,
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """Export the résumé as <name>_简历.docx."""
    session = _open_session("export", data, config, verbose)
    try:
        path = session.export(output_dir)
    except VitaeError as e:
        _fail(e)

    typer.secho(f"✓ Exported {path}", fg=typer.colors.GREEN)


@app.command("rewrite")
def rewrite_command(
    path: Annotated[str, typer.Argument(help="Field path, e.g. experience[0].desc or summary")],
    apply: Annotated[bool, typer.Option("--apply", help="Write the rewrite into the field")] = False,
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Ask the LLM to polish one field.

    Prints the original and rewritten text; --apply writes the result back.
    Requires VITAE_LLM_API_KEY.
    """
    ref = _parse_ref(path)
    session = _open_session("rewrite", data, config, verbose)
    try:
        proposal = asyncio.run(session.request_rewrite(ref))
    except VitaeError as e:
        _fail(e)

    if proposal is None:
        typer.secho("Rewrite was superseded", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)

    typer.secho("\nOriginal:", fg=typer.colors.BLUE, bold=True)
    typer.echo(proposal.original)
    typer.secho("\nRewritten:", fg=typer.colors.BLUE, bold=True)
    typer.echo(proposal.rewritten)

    if apply:
        session.apply_rewrite(proposal)
        session.close()
        typer.secho(f"\n✓ {ref.describe()} updated", fg=typer.colors.GREEN)
    else:
        session.discard_rewrite()


@app.command("reset")
def reset_command(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")] = False,
    data: DataOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """Clear the résumé back to the empty default and delete the saved snapshot."""
    if not yes:
        typer.confirm("This clears all résumé content. Continue?", abort=True)

    session = _open_session("reset", data, config, verbose)
    session.reset()
    typer.secho("✓ Résumé reset", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
