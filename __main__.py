"""CLI entry point for formcanvas.

Edits the persisted form schema from the command line. Every command loads
the schema stored under the configured key, applies one engine operation,
and saves the result.

Usage:
    python . init --name "Intake"
    python . add-section "Contact"
    python . add-field text --select section:section_ab12cd341
    python . show
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from formcanvas.builder import FormBuilder
from formcanvas.config import get_log_level
from formcanvas.core import get_logger, setup_logging
from formcanvas.schema import (
    FIELD_TYPE_LABELS,
    NodeKind,
    coerce_node_kind,
    export_json_schema,
    locate,
)
from formcanvas.storage import JsonFileStorage, SchemaLoadError, dumps_schema

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


# =============================================================================
# Helpers
# =============================================================================


def _parse_selection(value: str) -> tuple[NodeKind, str]:
    """Parse a ``kind:id`` selection argument."""
    kind, sep, node_id = value.partition(":")
    if not sep or not node_id:
        raise argparse.ArgumentTypeError(f"Expected KIND:ID, got '{value}'")
    try:
        return coerce_node_kind(kind), node_id
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _parse_layout(value: str) -> tuple[int, ...]:
    """Parse a comma separated list of column spans, e.g. ``2,2``."""
    try:
        return tuple(int(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid layout '{value}'") from None


def _open_builder(args: argparse.Namespace) -> FormBuilder | None:
    """Load the stored schema; None (after logging) if it is unreadable."""
    builder = FormBuilder(storage=JsonFileStorage(args.storage_dir))
    try:
        if not builder.load():
            logger.info("No stored schema, starting from the default form")
    except SchemaLoadError as e:
        logger.error(f"Cannot load stored schema: {e}")
        return None
    if getattr(args, "select", None):
        kind, node_id = args.select
        builder.select_element(kind, node_id)
        if builder.selection is None:
            logger.warning(f"Selection {kind.value}:{node_id} not found, ignoring")
    return builder


def _commit(builder: FormBuilder, before: object, what: str) -> int:
    if builder.state is before:
        logger.warning(f"{what}: nothing changed")
    builder.save()
    print(builder.outline())
    return 0


# =============================================================================
# Commands
# =============================================================================


def cmd_init(args: argparse.Namespace) -> int:
    """Handle the init command."""
    storage = JsonFileStorage(args.storage_dir)
    builder = FormBuilder(storage=storage)
    if storage.exists(builder.storage_key) and not args.force:
        logger.error(
            f"A schema is already stored at {storage.path_for(builder.storage_key)} "
            "(use --force to overwrite)"
        )
        return 1
    if args.name is not None:
        builder.update_form(name=args.name)
    builder.save()
    print(builder.outline())
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Handle the show command."""
    builder = _open_builder(args)
    if builder is None:
        return 1
    print(dumps_schema(builder.schema) if args.json else builder.outline())
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the validate command."""
    builder = _open_builder(args)
    if builder is None:
        return 1
    issues = builder.validate()
    for issue in issues:
        print(f"{issue.issue_type}: {issue.message}")
    if not issues:
        print("Schema is valid")
    return 1 if issues else 0


def cmd_json_schema(_args: argparse.Namespace) -> int:
    """Handle the json-schema command."""
    print(json.dumps(export_json_schema(), indent=2))
    return 0


def cmd_targets(args: argparse.Namespace) -> int:
    """Handle the targets command."""
    builder = _open_builder(args)
    if builder is None:
        return 1
    target = builder.targets
    print(f"section: {target.section_id or '-'}")
    print(f"column: {target.column_id or '-'}")
    return 0


def cmd_add_section(args: argparse.Namespace) -> int:
    builder = _open_builder(args)
    if builder is None:
        return 1
    before = builder.state
    builder.add_section(args.title)
    return _commit(builder, before, "add-section")


def cmd_add_row(args: argparse.Namespace) -> int:
    builder = _open_builder(args)
    if builder is None:
        return 1
    before = builder.state
    section_id = args.section or builder.targets.section_id
    if section_id is None:
        logger.error("No target section; pass --section or --select")
        return 1
    builder.add_row(section_id, layout=args.layout)
    return _commit(builder, before, "add-row")


def cmd_add_field(args: argparse.Namespace) -> int:
    builder = _open_builder(args)
    if builder is None:
        return 1
    before = builder.state
    column_id = args.column or builder.targets.column_id
    if column_id is None:
        logger.error("No target column; pass --column or --select")
        return 1
    builder.add_field(column_id, args.type, label=args.label)
    return _commit(builder, before, "add-field")


def cmd_remove(args: argparse.Namespace) -> int:
    builder = _open_builder(args)
    if builder is None:
        return 1
    location = locate(builder.schema, args.id)
    if location is None or location.kind in (NodeKind.FORM, NodeKind.COLUMN):
        logger.error(f"Nothing removable with id '{args.id}'")
        return 1
    before = builder.state
    removers = {
        NodeKind.SECTION: builder.remove_section,
        NodeKind.ROW: builder.remove_row,
        NodeKind.FIELD: builder.remove_field,
    }
    removers[location.kind](args.id)
    return _commit(builder, before, "remove")


def cmd_reorder_rows(args: argparse.Namespace) -> int:
    builder = _open_builder(args)
    if builder is None:
        return 1
    before = builder.state
    builder.reorder_rows(args.section, args.from_index, args.to_index)
    return _commit(builder, before, "reorder-rows")


def cmd_reorder_fields(args: argparse.Namespace) -> int:
    builder = _open_builder(args)
    if builder is None:
        return 1
    before = builder.state
    builder.reorder_fields(args.column, args.from_index, args.to_index)
    return _commit(builder, before, "reorder-fields")


def cmd_rename(args: argparse.Namespace) -> int:
    builder = _open_builder(args)
    if builder is None:
        return 1
    before = builder.state
    changes = {}
    if args.name is not None:
        changes["name"] = args.name
    if args.description is not None:
        changes["description"] = args.description or None
    builder.update_form(**changes)
    return _commit(builder, before, "rename")


def cmd_edit_section(args: argparse.Namespace) -> int:
    builder = _open_builder(args)
    if builder is None:
        return 1
    before = builder.state
    builder.update_section(args.section, args.title)
    return _commit(builder, before, "edit-section")


def cmd_edit_field(args: argparse.Namespace) -> int:
    builder = _open_builder(args)
    if builder is None:
        return 1
    before = builder.state
    if args.label is not None:
        builder.update_field(args.field, name=args.name, label=args.label or None)
    else:
        builder.update_field(args.field, name=args.name)
    return _commit(builder, before, "edit-field")


# =============================================================================
# Parser
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--storage-dir",
        type=Path,
        default=None,
        help="Schema directory (default: FORMCANVAS_STORAGE_DIR or .formcanvas)",
    )

    selecting = argparse.ArgumentParser(add_help=False)
    selecting.add_argument(
        "--select",
        "-s",
        type=_parse_selection,
        default=None,
        metavar="KIND:ID",
        help="Select a node before running the command (e.g. row:row_ab12cd341)",
    )

    parser = argparse.ArgumentParser(
        prog="python .",
        description="Edit a form schema: sections, rows, columns and fields",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    init_parser = subparsers.add_parser(
        "init", parents=[common], help="Create and store a default form"
    )
    init_parser.add_argument("--name", type=str, default=None, help="Form name")
    init_parser.add_argument(
        "--force", action="store_true", help="Overwrite an existing stored schema"
    )
    init_parser.set_defaults(func=cmd_init)

    show_parser = subparsers.add_parser(
        "show", parents=[common, selecting], help="Print the stored form"
    )
    show_parser.add_argument(
        "--json", action="store_true", help="Print the persisted JSON record"
    )
    show_parser.set_defaults(func=cmd_show)

    validate_parser = subparsers.add_parser(
        "validate", parents=[common], help="Check the stored form for issues"
    )
    validate_parser.set_defaults(func=cmd_validate)

    json_schema_parser = subparsers.add_parser(
        "json-schema", help="Print the JSON schema of the persisted format"
    )
    json_schema_parser.set_defaults(func=cmd_json_schema)

    targets_parser = subparsers.add_parser(
        "targets",
        parents=[common, selecting],
        help="Show where palette actions would insert",
    )
    targets_parser.set_defaults(func=cmd_targets)

    add_section_parser = subparsers.add_parser(
        "add-section", parents=[common], help="Append a section"
    )
    add_section_parser.add_argument("title", nargs="?", default="", help="Title")
    add_section_parser.set_defaults(func=cmd_add_section)

    add_row_parser = subparsers.add_parser(
        "add-row", parents=[common, selecting], help="Append a row to a section"
    )
    add_row_parser.add_argument(
        "--section", type=str, default=None, help="Section id (default: from selection)"
    )
    add_row_parser.add_argument(
        "--layout",
        type=_parse_layout,
        default=None,
        help="Column spans, e.g. 2,2 (default: one full-width column)",
    )
    add_row_parser.set_defaults(func=cmd_add_row)

    add_field_parser = subparsers.add_parser(
        "add-field", parents=[common, selecting], help="Append a field to a column"
    )
    add_field_parser.add_argument(
        "type",
        choices=[ft.value for ft in FIELD_TYPE_LABELS],
        help="Field type",
    )
    add_field_parser.add_argument(
        "--column", type=str, default=None, help="Column id (default: from selection)"
    )
    add_field_parser.add_argument("--label", type=str, default=None, help="Label")
    add_field_parser.set_defaults(func=cmd_add_field)

    remove_parser = subparsers.add_parser(
        "remove", parents=[common], help="Remove a section, row or field"
    )
    remove_parser.add_argument("id", help="Id of the node to remove")
    remove_parser.set_defaults(func=cmd_remove)

    for name, scope, func in (
        ("reorder-rows", "section", cmd_reorder_rows),
        ("reorder-fields", "column", cmd_reorder_fields),
    ):
        reorder_parser = subparsers.add_parser(
            name, parents=[common], help=f"Move an item within one {scope}"
        )
        reorder_parser.add_argument(scope, help=f"{scope.capitalize()} id")
        reorder_parser.add_argument("from_index", type=int, help="Current position")
        reorder_parser.add_argument("to_index", type=int, help="New position")
        reorder_parser.set_defaults(func=func)

    rename_parser = subparsers.add_parser(
        "rename", parents=[common], help="Edit the form name and description"
    )
    rename_parser.add_argument("--name", type=str, default=None)
    rename_parser.add_argument(
        "--description", type=str, default=None, help="Empty string clears it"
    )
    rename_parser.set_defaults(func=cmd_rename)

    edit_section_parser = subparsers.add_parser(
        "edit-section", parents=[common], help="Retitle a section"
    )
    edit_section_parser.add_argument("section", help="Section id")
    edit_section_parser.add_argument("title", help="New title")
    edit_section_parser.set_defaults(func=cmd_edit_section)

    edit_field_parser = subparsers.add_parser(
        "edit-field", parents=[common], help="Edit a field's name or label"
    )
    edit_field_parser.add_argument("field", help="Field id")
    edit_field_parser.add_argument("--name", type=str, default=None)
    edit_field_parser.add_argument(
        "--label", type=str, default=None, help="Empty string clears it"
    )
    edit_field_parser.set_defaults(func=cmd_edit_field)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    setup_logging(get_log_level())
    try:
        return args.func(args)
    except ValueError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
