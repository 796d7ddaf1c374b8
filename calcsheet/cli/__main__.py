from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from calcsheet.config.loader import DEFAULT_TEMPLATE_ID, ConfigError, load_template
from calcsheet.excel.reader import SheetReadError, read_raw_data
from calcsheet.logging.init import log_summary, setup_logging
from calcsheet.services.orchestrator import DEFAULT_OUTPUT_DIR, ProcessingError, process_paths, scan_input_files
from calcsheet.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (overrides the process environment)
- Resolve the template (--template > CALCSHEET_TEMPLATE > capstone)
- Generate one ``<stem>.calculation.json`` per input file
- Print the SUMMARY line and exit 0 (all files ok), 2 (some failed) or 1 (fatal)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

ENV_TEMPLATE = "CALCSHEET_TEMPLATE"
ENV_OUTPUT_DIR = "CALCSHEET_OUTPUT_DIR"


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; values in the file win over the environment."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except Exception as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="calcsheet", description="Takeoff export -> calculation sheet generator")
    p.add_argument("paths", nargs="*", type=Path, help="Input .xlsx/.csv files or directories")
    p.add_argument("--template", default=None, help=f"Template id (default: ${ENV_TEMPLATE} or {DEFAULT_TEMPLATE_ID})")
    p.add_argument("--output-dir", type=Path, default=None, help=f"Output directory (default: ${ENV_OUTPUT_DIR} or ./output)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print headers & first rows of each input then exit")
    return p.parse_args(argv)


def _inspect_data(paths: list[Path]) -> int:
    try:
        files = scan_input_files(paths)
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not files:
        print("inspect: no .xlsx/.csv files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            raw = read_raw_data(f)
        except SheetReadError as e:
            print(f"  read_error: {e}")
            continue
        print(f"  SHEET: {raw.sheet_name} cols={raw.headers}")
        if raw.missing_columns:
            print(f"  missing_columns={raw.missing_columns}")
        # Timestamps are not printable as-is
        sample = [[v.isoformat() if hasattr(v, "isoformat") else v for v in row] for row in raw.rows[:3]]
        print("    sample_rows=", sample)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # NOTE: only None falls back to sys.argv; an explicit [] must not pick up pytest args
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)

    if not args.paths:
        logger.error("processing: no input paths given")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(args.paths)

    template_id = args.template or os.getenv(ENV_TEMPLATE) or DEFAULT_TEMPLATE_ID
    try:
        template = load_template(template_id)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    output_dir = args.output_dir or Path(os.getenv(ENV_OUTPUT_DIR) or DEFAULT_OUTPUT_DIR)
    logger.info(f"template={template.id} output={output_dir}")

    try:
        result = process_paths(args.paths, template_id=template_id, output_dir=output_dir)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    total_files = result.success_files + result.failed_files

    summary_line = render_summary_line(total_files, result)
    # log_summary adds the "SUMMARY " prefix itself
    log_summary(summary_line[8:])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
