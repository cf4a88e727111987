import logging
from pathlib import Path

import click
import questionary
import yaml
from pydantic import ValidationError

from participant_tracker import utils
from participant_tracker.app import Tracker, load_tracker
from participant_tracker.config import LOG_LEVELS, Config, load_config_file
from participant_tracker.csv_codec import to_csv, to_data_uri
from participant_tracker.participant import BOOLEAN_FIELDS, resolve_field_name
from participant_tracker.state import SetFilter, SetSearch
from participant_tracker.view import FILTER_LABELS, FILTER_MODES

EDITABLE_FIELDS = [
    "name",
    "identifier",
    "phone",
    "attended",
    "receivedStipend",
    "stipendDate",
    "markedBy",
    "notes",
]


def load_config(ctx, param, value: Path) -> Config:
    if value is None:
        return None
    try:
        return load_config_file(value)
    except (ValidationError, FileNotFoundError, ValueError) as e:
        raise click.BadParameter(f"Invalid config: {e}")
    except (yaml.YAMLError, OSError) as e:
        raise click.BadParameter(f"Failed to load config: {e}")


def coerce_field_value(field: str, value: str):
    """Convert command-line text into the value stored for `field`.

    Args:
        field: Column name as shown in EDITABLE_FIELDS.
        value: Raw text typed by the user.

    Returns:
        object: bool for flag fields, stripped text for the name, and
        stripped text or None for optional text fields.
    """
    attribute = resolve_field_name(field)
    if attribute in BOOLEAN_FIELDS:
        return utils.parse_flag(value)
    if attribute == "name":
        name = value.strip()
        if not name:
            raise ValueError("Name cannot be blank.")
        return name
    return utils.clean_optional(value)


def print_records(records) -> None:
    """Print records as an aligned table."""
    if not records:
        print("\n  No participants.\n")
        return

    name_width = utils.max_name_length(records)
    print()
    print(
        f"  {'Name'.ljust(name_width)}  {'ID/Ref'.ljust(12)}  {'Phone'.ljust(14)}"
        f"  Attended  Stipend  {'Date'.ljust(19)}  {'Marked by'.ljust(12)}  Id"
    )
    print(f"  {'-' * (name_width + 100)}")
    for r in records:
        print(
            f"  {r.name.ljust(name_width)}  {(r.identifier or '').ljust(12)}"
            f"  {(r.phone or '').ljust(14)}"
            f"  {utils.format_flag(r.attended).center(8)}"
            f"  {utils.format_flag(r.received_stipend).center(7)}"
            f"  {utils.format_stipend_date(r.stipend_date).ljust(19)}"
            f"  {(r.marked_by or '').ljust(12)}"
            f"  {r.id[:8]}"
        )
        if r.notes:
            print(f"  {' ' * name_width}  notes: {r.notes}")
    print()


def print_summary(tracker: Tracker) -> None:
    summary = tracker.summary()
    print(f"\n  Summary")
    print(f"  -------")
    print(f"  {'Total'.rjust(16)}: {summary.total_count}")
    print(f"  {'Attended'.rjust(16)}: {summary.attended_count}")
    print(f"  {'Received'.rjust(16)}: {summary.paid_count}")
    print(f"  {'Not yet received'.rjust(16)}: {summary.unpaid_count}\n")


def find_participant(tracker: Tracker, token: str):
    try:
        return tracker.find(token)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="PARTICIPANT")


@click.group(context_settings={"max_content_width": 120})
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
    callback=load_config,
    help="Path to tracker configuration file.",
)
@click.option(
    "--storage",
    "storage_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Storage file to use instead of the configured one.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Console logging level.",
)
@click.pass_context
def cli(ctx, config: Config | None, storage_path: Path | None, log_level: str | None):
    """Record participants, attendance, and stipend status."""
    config = config or Config()
    if storage_path is not None:
        config = config.model_copy(update={"storage_path": storage_path})
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="  %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


def _tracker(ctx) -> Tracker:
    return load_tracker(ctx.obj)


@cli.command()
@click.argument("name")
@click.option("--identifier", default=None, help="ID or reference number.")
@click.option("--phone", default=None, help="Phone number.")
@click.pass_context
def add(ctx, name: str, identifier: str | None, phone: str | None):
    """Add a participant to the top of the list."""
    tracker = _tracker(ctx)
    participant = tracker.add(name, identifier=identifier, phone=phone)
    if participant is None:
        raise click.BadParameter("Name cannot be blank.", param_hint="NAME")
    print(f"\n  Added {participant} ({participant.id})\n")


@cli.command(name="list")
@click.option("--search", default="", help="Match name, ID, phone, or notes.")
@click.option(
    "--filter",
    "filter_mode",
    type=click.Choice(FILTER_MODES),
    default="all",
    help="Show only one group of participants.",
)
@click.option(
    "--sort",
    "sort_field",
    type=click.Choice(EDITABLE_FIELDS),
    default=None,
    help="Sort the listing by a column (display only).",
)
@click.pass_context
def list_participants(ctx, search: str, filter_mode: str, sort_field: str | None):
    """List participants matching a search and filter."""
    tracker = _tracker(ctx)
    tracker.dispatch(SetSearch(text=search))
    tracker.dispatch(SetFilter(mode=filter_mode))
    records = tracker.visible_records()
    if sort_field:
        records = utils.sort_records(records, resolve_field_name(sort_field))
    print_records(records)


@cli.command(name="set")
@click.argument("participant")
@click.argument("field", type=click.Choice(EDITABLE_FIELDS))
@click.argument("value")
@click.pass_context
def set_field(ctx, participant: str, field: str, value: str):
    """Change one field of a participant (by id, id prefix, or name)."""
    tracker = _tracker(ctx)
    record = find_participant(tracker, participant)
    try:
        coerced = coerce_field_value(field, value)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="VALUE")
    tracker.set_field(record.id, field, coerced)
    print(f"\n  {record}: {field} set to {coerced!r}\n")


@cli.command()
@click.argument("participant")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def remove(ctx, participant: str, yes: bool):
    """Remove a participant (by id, id prefix, or name)."""
    tracker = _tracker(ctx)
    record = find_participant(tracker, participant)
    if not yes:
        click.confirm(f"Remove {record}?", abort=True)
    tracker.remove(record.id)
    print(f"\n  Removed {record}\n")


@cli.command()
@click.pass_context
def summary(ctx):
    """Show participant counts."""
    print_summary(_tracker(ctx))


@cli.command(name="import")
@click.argument(
    "csv_file",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
)
@click.option(
    "--replace",
    is_flag=True,
    help="Replace the stored participants instead of merging by id.",
)
@click.pass_context
def import_command(ctx, csv_file: Path, replace: bool):
    """Import participants from a CSV file."""
    tracker = _tracker(ctx)
    count = tracker.import_csv(csv_file, replace=replace)
    print(f"\n  Imported {count} participant(s) from {csv_file}")
    print(f"  {len(tracker.records)} participant(s) stored\n")


@cli.command(name="export")
@click.argument(
    "csv_file", type=click.Path(dir_okay=False, path_type=Path), required=False
)
@click.option(
    "--data-uri",
    is_flag=True,
    help="Print a data URI instead of writing a file.",
)
@click.pass_context
def export_command(ctx, csv_file: Path | None, data_uri: bool):
    """Export participants to a CSV file."""
    tracker = _tracker(ctx)
    if data_uri:
        print(to_data_uri(to_csv(tracker.records)))
        return
    path = tracker.export_csv(csv_file or Path(ctx.obj.export_filename))
    print(f"\n  {len(tracker.records)} participant(s) saved to {path}\n")


@cli.command()
@click.pass_context
def gui(ctx):
    """Open the participant tracker window."""
    from participant_tracker.gui import TrackerGUI

    TrackerGUI(_tracker(ctx), ctx.obj).run()


@cli.command()
@click.pass_context
def interactive(ctx):
    """Edit participants through interactive prompts."""
    tracker = _tracker(ctx)
    config = ctx.obj

    print(f"\nStorage: {tracker.storage.path}")
    print_summary(tracker)

    choices = [
        "Add a Participant",
        "Search / filter Participants",
        "Update a Participant",
        "Toggle attendance",
        "Toggle stipend",
        "Remove a Participant",
        "Import CSV",
        "Export CSV",
        "Show summary",
        "Quit",
    ]

    def pick_participant():
        names = {f"{r.name} ({r.id[:8]})": r.id for r in tracker.visible_records()}
        if not names:
            print("\n  No participants match the current search/filter.")
            return None
        label = questionary.autocomplete(
            "\nParticipant:",
            choices=list(names.keys()),
            qmark="",
            ignore_case=True,
            validate=lambda val: val in names,
        ).ask()
        return tracker.get(names[label]) if label else None

    while True:

        print(f"\n---")

        choice = questionary.select(
            "\nAction:",
            choices=choices,
            qmark="",
            instruction=" ",
        ).ask()

        if choice is None or choice == "Quit":
            print(f"\nProgram terminated.\n")
            return

        if choice == "Add a Participant":
            name = questionary.text("\nFull name:", qmark="").ask() or ""
            identifier = questionary.text("ID/Reference no.:", qmark="").ask()
            phone = questionary.text("Phone no.:", qmark="").ask()
            participant = tracker.add(name, identifier=identifier, phone=phone)
            if participant is None:
                print("\n  Name cannot be blank; nothing added.")
            else:
                print(f"\n  Added {participant}")

        if choice == "Search / filter Participants":
            search = questionary.text(
                "\nSearch:", qmark="", default=tracker.state.search
            ).ask()
            mode = questionary.select(
                "\nShow:",
                choices=[
                    questionary.Choice(FILTER_LABELS[m], value=m) for m in FILTER_MODES
                ],
                qmark="",
                instruction=" ",
            ).ask()
            tracker.dispatch(SetSearch(text=search or ""))
            tracker.dispatch(SetFilter(mode=mode or "all"))
            print_records(tracker.visible_records())

        if choice == "Update a Participant":
            record = pick_participant()
            if record is None:
                continue
            field = questionary.select(
                "\nField:",
                choices=EDITABLE_FIELDS,
                qmark="",
                instruction=" ",
            ).ask()
            if field is None:
                continue
            current = getattr(record, resolve_field_name(field))
            value = questionary.text(
                f"\nNew {field}:",
                qmark="",
                default="" if current is None else str(current),
            ).ask()
            try:
                coerced = coerce_field_value(field, value or "")
            except ValueError as e:
                print(f"\n  {e}")
                continue
            tracker.set_field(record.id, field, coerced)
            print(f"\n  {record}: {field} set to {coerced!r}")

        if choice in ("Toggle attendance", "Toggle stipend"):
            record = pick_participant()
            if record is None:
                continue
            field = "attended" if choice == "Toggle attendance" else "receivedStipend"
            value = not getattr(record, resolve_field_name(field))
            tracker.set_field(record.id, field, value)
            print(f"\n  {record}: {field} set to {value}")

        if choice == "Remove a Participant":
            record = pick_participant()
            if record is None:
                continue
            if questionary.confirm(f"\nRemove {record}?", qmark="").ask():
                tracker.remove(record.id)
                print(f"\n  Removed {record}")

        if choice == "Import CSV":
            path = questionary.path("\nCSV file:", qmark="").ask()
            if not path:
                continue
            replace = questionary.confirm(
                "\nReplace stored participants?", qmark="", default=False
            ).ask()
            try:
                count = tracker.import_csv(Path(path), replace=bool(replace))
            except OSError as e:
                print(f"\n  Import failed: {e}")
                continue
            print(f"\n  Imported {count} participant(s)")

        if choice == "Export CSV":
            print(f"\nFiles with the same name will be overwritten!")
            path = questionary.text(
                "\nSave as:", qmark="", default=config.export_filename
            ).ask()
            if not path:
                continue
            saved = tracker.export_csv(Path(path))
            print(f"\n  Participant list saved to {saved}")

        if choice == "Show summary":
            print_summary(tracker)


if __name__ == "__main__":
    cli()
