from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Set

from vulnrisk_cli.aggregator import create_workbook
from vulnrisk_cli.config import load_config, write_config
from vulnrisk_cli.exceptions import ConfigError, VulnRiskError
from vulnrisk_cli.exporters.workbook import WorkbookExporter
from vulnrisk_cli.log import configure_logging
from vulnrisk_cli.models.config import DEFAULT_OUTPUT_DIR, DEFAULT_TTL_MINUTES, AppConfig
from vulnrisk_cli.parsers import parse_file
from vulnrisk_cli.store import WorkbookStore
from vulnrisk_cli.templates import TEMPLATE_BASENAME, write_csv_template, write_excel_template

_TEMPLATE_WRITERS = {
    "csv": write_csv_template,
    "xlsx": write_excel_template,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vulnrisk-cli",
        description="Import vulnerability assessment workbooks and export risk reports.",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--init", action="store_true",
        help="Initialize configuration in the current directory.",
    )
    group.add_argument(
        "--import", dest="import_files", nargs="+", metavar="FILE",
        help="Import .csv/.xlsx files and export a report per workbook.",
    )
    group.add_argument(
        "--template", choices=sorted(_TEMPLATE_WRITERS),
        help="Write an example input file.",
    )
    parser.add_argument(
        "--output-dir", metavar="DIR",
        help="Report directory (overrides the configured one).",
    )
    parser.add_argument(
        "--force", action="store_true",
        help="Overwrite existing files without confirmation.",
    )
    parser.add_argument(
        "--keep-raw-json", action="store_true",
        help="Also write the workbook as JSON alongside YAML.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log debug details to stderr.",
    )
    return parser


def _prompt_ttl_minutes() -> int:
    answer = input(
        f"Keep imported workbooks for how many minutes? [{DEFAULT_TTL_MINUTES}]: "
    ).strip()
    if not answer:
        return DEFAULT_TTL_MINUTES
    try:
        return int(answer)
    except ValueError as exc:
        raise ConfigError("Retention must be a whole number of minutes.") from exc


def _run_init() -> None:
    output_dir = input(f"Enter the report directory [{DEFAULT_OUTPUT_DIR}]: ").strip()
    config = AppConfig(
        output_dir=output_dir or DEFAULT_OUTPUT_DIR,
        ttl_minutes=_prompt_ttl_minutes(),
    )

    cwd = Path.cwd()
    write_config(cwd, config)
    (cwd / config.output_dir).mkdir(parents=True, exist_ok=True)

    print("Configuration saved to .vulnrisk-cli.ini")
    print(f"Created directory: {config.output_dir}/")


def report_dir_name(name: str, used: Set[str]) -> str:
    """Return *name*, or *name* with a "-2", "-3" ... suffix if this run already used it."""
    candidate = name
    counter = 2
    while candidate in used:
        candidate = f"{name}-{counter}"
        counter += 1
    used.add(candidate)
    return candidate


def _run_import(args: argparse.Namespace, config: AppConfig) -> None:
    cwd = Path.cwd()
    output_root = Path(args.output_dir) if args.output_dir else cwd / config.output_dir
    store = WorkbookStore()
    failed_files: List[str] = []

    for name in args.import_files:
        path = Path(name)
        try:
            result = parse_file(path)
        except VulnRiskError as exc:
            failed_files.append(path.name)
            print(f"Error: {exc}", file=sys.stderr)
            continue

        if result.errors:
            failed_files.append(path.name)
            for error in result.errors:
                print(f"Error: {error}", file=sys.stderr)
            continue
        if not result.vulnerabilities:
            print(f"No matching rows found in {path.name}")
            continue

        workbook = create_workbook(result.vulnerabilities, path.name, ttl=config.ttl)
        store.add(workbook)
        stats = workbook.stats
        print(
            f"Imported {path.name}: {stats.total_vulnerabilities} findings, "
            f"{stats.progress_percentage}% closed, "
            f"{stats.average_risk_reduction}% average risk reduction"
        )

    store.sweep(datetime.now(timezone.utc))
    used_dirs: Set[str] = set()
    for workbook in store.all():
        exporter = WorkbookExporter(
            workbook,
            output_root / report_dir_name(workbook.name, used_dirs),
            force=args.force,
            keep_raw_json=args.keep_raw_json,
        )
        exporter.export()

    if failed_files:
        noun = "file" if len(failed_files) == 1 else "files"
        raise VulnRiskError(
            f"{len(failed_files)} {noun} could not be imported: " + ", ".join(failed_files)
        )


def _run_template(args: argparse.Namespace) -> None:
    path = Path.cwd() / f"{TEMPLATE_BASENAME}.{args.template}"
    if path.exists() and not args.force:
        raise VulnRiskError(f"{path.name} already exists. Use --force to overwrite.")
    _TEMPLATE_WRITERS[args.template](path)
    print(f"Template written to {path.name}")


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    if args.init:
        configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
        _run_init()
        return

    if not (args.import_files or args.template):
        parser.print_help()
        return

    config = load_config(Path.cwd())
    configure_logging(logging.DEBUG if args.verbose else config.logging_level)

    if args.import_files:
        _run_import(args, config)
    else:
        _run_template(args)
