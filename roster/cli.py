"""
CLI interface for the contact roster.

Usage:
    roster add "John Doe" -p 98765432 -e johnd@example.com -a "311 Clementi Ave 2"
    roster search and n/John a/NUS
    roster tag create friend
    roster tag add 1 friend
"""

import json
import os
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .api import Roster
from .logging_config import configure_quiet_mode, enable_debug_mode
from .types import Contact, Tag


# Configure quiet mode by default
# Set ROSTER_VERBOSE=1 to enable debug mode via environment
if os.environ.get("ROSTER_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"roster {version('roster')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_json_output = False
_store_override: Optional[Path] = None


def _json_callback(value: bool):
    global _json_output
    _json_output = value


def _get_json_output() -> bool:
    return _json_output


def _store_callback(value: Optional[Path]):
    global _store_override
    _store_override = value


def _get_store_override() -> Optional[Path]:
    return _store_override


app = typer.Typer(
    name="roster",
    help="Contact book with keyword search and tags.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

tag_app = typer.Typer(
    help="Create, delete, list, and apply tags.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
app.add_typer(tag_app, name="tag")


# -----------------------------------------------------------------------------
# Output Formatting
# -----------------------------------------------------------------------------

def _format_contacts(contacts: list[Contact], as_json: bool = False) -> str:
    """Numbered contact lines, or a JSON list with the same indexes."""
    if as_json:
        return json.dumps(
            [{"index": i, **c.to_dict()} for i, c in enumerate(contacts, start=1)],
            indent=2,
        )
    if not contacts:
        return "No contacts."
    width = len(str(len(contacts)))
    return "\n".join(f"{i:>{width}}. {c}" for i, c in enumerate(contacts, start=1))


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def _report(message: str, data: dict) -> None:
    """Print the confirmation line, or data as JSON under --json."""
    if _get_json_output():
        typer.echo(json.dumps(data))
    else:
        typer.echo(message)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    output_json: Annotated[bool, typer.Option(
        "--json", "-j",
        help="Output as JSON",
        callback=_json_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    store: Annotated[Optional[Path], typer.Option(
        "--store", "-s",
        envvar="ROSTER_STORE_PATH",
        help="Path to the store directory (default: ~/.roster/)",
        callback=_store_callback,
        is_eager=True,
    )] = None,
):
    """Contact book with keyword search and tags."""


def _get_roster() -> Roster:
    """Open the roster, reporting setup errors as a clean message."""
    import atexit

    try:
        roster = Roster(_get_store_override())
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    atexit.register(roster.close)
    return roster


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command()
def search(
    args: Annotated[Optional[list[str]], typer.Argument(
        help="[and|or] followed by n/NAME p/PHONE e/EMAIL a/ADDRESS t/TAG keywords"
    )] = None,
):
    """
    Search contacts by whole-word keywords (case-insensitive).

    Without a condition, or with "and", contacts must match every keyword;
    if none do, contacts matching any keyword are listed instead.

    \b
    Examples:
        roster search t/friend
        roster search and n/John a/NUS
        roster search or p/12345678 e/betsy@nus.edu
    """
    roster = _get_roster()
    try:
        result = roster.search(" ".join(args or []))
    except ValueError as e:
        _fail(str(e))

    contacts = roster.list_contacts()
    if _get_json_output():
        typer.echo(json.dumps({
            "count": result.count,
            "fallback": result.fallback_used,
            "contacts": [c.to_dict() for c in contacts],
        }, indent=2))
        return
    typer.echo(result.message)
    if contacts:
        typer.echo(_format_contacts(contacts))


@app.command("list")
def list_contacts():
    """List all contacts with their index numbers."""
    roster = _get_roster()
    typer.echo(_format_contacts(roster.show_all(), as_json=_get_json_output()))


@app.command()
def add(
    name: Annotated[str, typer.Argument(help="Full name")],
    phone: Annotated[str, typer.Option("--phone", "-p", help="Phone number (digits)")],
    email: Annotated[str, typer.Option("--email", "-e", help="Email address")],
    address: Annotated[str, typer.Option("--address", "-a", help="Address")],
    tags: Annotated[Optional[list[str]], typer.Option(
        "--tag", "-t",
        help="Registered tag to apply (repeatable)"
    )] = None,
):
    """
    Add a contact. Tags must be created first with `roster tag create`.

    \b
    Examples:
        roster add "John Doe" -p 98765432 -e johnd@example.com -a "311 Clementi Ave 2"
        roster add Betsy -p 12345678 -e betsy@nus.edu -a NUS -t friend
    """
    roster = _get_roster()
    try:
        contact = roster.add_contact(name, phone, email, address, tags or [])
    except ValueError as e:
        _fail(str(e))
    _report(f"New contact added: {contact}", contact.to_dict())


@app.command()
def delete(
    index: Annotated[int, typer.Argument(help="Index in the contact list")],
):
    """Delete the contact at INDEX."""
    roster = _get_roster()
    try:
        contact = roster.delete_contact(index)
    except ValueError as e:
        _fail(str(e))
    _report(f"Deleted contact: {contact}", {"index": index, "deleted": contact.to_dict()})


@app.command()
def clear(
    reset: Annotated[bool, typer.Option(
        "--reset",
        help="Also delete all created tags"
    )] = False,
):
    """Delete all contacts. Created tags are kept unless --reset is given."""
    roster = _get_roster()
    roster.clear(reset_tags=reset)
    _report("Roster has been cleared!", {"cleared": True, "reset": reset})


# -----------------------------------------------------------------------------
# Tag commands
# -----------------------------------------------------------------------------

@tag_app.command("create")
def tag_create(
    tag: Annotated[str, typer.Argument(help="Tag name (alphanumeric)")],
):
    """Create a tag so it can be applied to contacts."""
    roster = _get_roster()
    try:
        created = roster.create_tag(tag)
    except ValueError as e:
        _fail(str(e))
    _report(f"Tag created: {created}", {"tag": str(created)})


@tag_app.command("delete")
def tag_delete(
    tag: Annotated[str, typer.Argument(help="Tag name")],
):
    """Delete a tag and remove it from every contact."""
    roster = _get_roster()
    try:
        edited = roster.delete_tag(tag)
    except ValueError as e:
        _fail(str(e))
    _report(
        f"Tag deleted: {tag} (removed from {len(edited)} contacts)",
        {"tag": str(Tag.of(tag)), "untagged": [c.name for c in edited]},
    )


@tag_app.command("list")
def tag_list():
    """List created tags."""
    roster = _get_roster()
    tags = roster.list_tags()
    if _get_json_output():
        typer.echo(json.dumps([str(t) for t in tags]))
    elif tags:
        typer.echo("\n".join(str(t) for t in tags))
    else:
        typer.echo("No tags.")


@tag_app.command("add")
def tag_add(
    index: Annotated[int, typer.Argument(help="Index in the contact list")],
    tag: Annotated[str, typer.Argument(help="Created tag to apply")],
):
    """
    Add a created tag to the contact at INDEX.

    \b
    Example:
        roster tag add 1 friend
    """
    roster = _get_roster()
    try:
        applied = roster.tag_add(index, tag)
    except ValueError as e:
        _fail(str(e))
    _report(f"Tag added: {applied}", {"index": index, "tag": str(applied)})


@tag_app.command("remove")
def tag_remove(
    index: Annotated[int, typer.Argument(help="Index in the contact list")],
    tag: Annotated[str, typer.Argument(help="Tag to remove")],
):
    """Remove a tag from the contact at INDEX."""
    roster = _get_roster()
    try:
        removed = roster.tag_remove(index, tag)
    except ValueError as e:
        _fail(str(e))
    _report(f"Tag removed: {removed}", {"index": index, "tag": str(removed)})


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(e, context="roster CLI")
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
