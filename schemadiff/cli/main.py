"""Command-line interface for schemadiff - database schema diff tool."""
import argparse
import json
import logging
import sys
from typing import Any, Dict

from schemadiff import __version__
from schemadiff.config.settings import OUTPUT_FORMATS, load_settings, validate_settings
from schemadiff.core.breaking import filter_breaking_only, has_breaking_changes
from schemadiff.core.diff import SchemaDiff, diff_schemas
from schemadiff.input.resolver import load_schema
from schemadiff.output.json import render_json
from schemadiff.output.markdown import render_markdown
from schemadiff.output.terminal import render_terminal

logger = logging.getLogger(__name__)


def run_diff(args):
    """Execute the diff command and exit with the resulting status code."""
    json_errors = bool(args.json) or args.format == "json"
    try:
        settings = _resolve_settings(args)
        json_errors = settings['format'] == "json"

        old_schema = load_schema(args.old, settings['dialect'])
        new_schema = load_schema(args.new, settings['dialect'])
        logger.debug(
            "Loaded %d old and %d new tables",
            len(old_schema.tables), len(new_schema.tables)
        )

        diff = diff_schemas(old_schema, new_schema)
        if settings['breaking_only']:
            diff = filter_breaking_only(diff)

        print(_render(diff, args.old, args.new, settings))

    except Exception as e:  # pylint: disable=broad-except
        if json_errors:
            print(json.dumps({"error": str(e)}, indent=2))
        else:
            print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if settings['fail_on_breaking'] and has_breaking_changes(diff):
        sys.exit(1)
    sys.exit(0)


def _resolve_settings(args) -> Dict[str, Any]:
    """Merge settings sources with command-line flags, which take precedence."""
    settings = load_settings(getattr(args, 'config', None))

    if args.json:
        settings['format'] = "json"
    elif args.format:
        settings['format'] = args.format
    for key in ('breaking_only', 'color', 'fail_on_breaking'):
        value = getattr(args, key, None)
        if value is not None:
            settings[key] = value
    if getattr(args, 'dialect', None):
        settings['dialect'] = args.dialect

    validate_settings(settings)
    return settings


def _render(diff: SchemaDiff, old_file: str, new_file: str, settings: Dict[str, Any]) -> str:
    if settings['format'] == "json":
        return render_json(diff, old_file, new_file)
    if settings['format'] == "markdown":
        return render_markdown(diff, old_file, new_file)
    return render_terminal(diff, old_file, new_file, color=settings['color'])


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="schemadiff",
        description="Compare two database schemas and find differences",
        epilog="Examples:\n"
               "  schemadiff db-v1.sql db-v2.sql\n"
               "  schemadiff old.sql new.sql --breaking-only --format markdown\n"
               "  schemadiff old.json new.json --json\n\n"
               "Supported formats: .sql (CREATE TABLE statements), .json (schema definitions)",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("old", help="Path to the old/original schema file (.sql or .json)")
    parser.add_argument("new", help="Path to the new/updated schema file (.sql or .json)")
    parser.add_argument(
        "--format", choices=OUTPUT_FORMATS, default=None,
        help="Output format (default: terminal, or the value from settings)"
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Output results as JSON (same as --format json)"
    )
    parser.add_argument(
        "--breaking-only", action="store_true", default=None,
        help="Show only breaking/dangerous changes"
    )
    parser.add_argument(
        "--fail-on-breaking", action="store_true", default=None,
        help="Exit with code 1 when breaking changes are found"
    )
    parser.add_argument(
        "--no-color", action="store_false", dest="color", default=None,
        help="Disable ANSI colours in terminal output"
    )
    parser.add_argument(
        "--dialect", default=None,
        help="SQL dialect whose quoting rules apply to .sql files, e.g. mysql or postgres"
    )
    parser.add_argument(
        "--config",
        help="Path to settings file (default: ~/.schemadiff/config.yaml)"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log parsing details to stderr"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def main():
    """Parse command line arguments and run the diff."""
    parser = build_parser()
    args = parser.parse_args()
    _configure_logging(args.verbose)
    run_diff(args)


if __name__ == "__main__":
    main()
