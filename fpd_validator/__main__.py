"""CLI entry point: ``python -m fpd_validator INPUT.json [--optout] [--report]``."""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

import structlog


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fpd_validator",
        description="Filter ORTB2 first-party data against a schema table",
    )
    parser.add_argument(
        "input",
        help="JSON file holding {\"global\": ..., \"bidder\": ...}, or '-' for stdin",
    )
    parser.add_argument(
        "--schema",
        default=None,
        help="JSON schema table (defaults to FPD_SCHEMA_PATH or the bundled map)",
    )
    parser.add_argument(
        "--skip-validations",
        action="store_true",
        default=None,
        help="Echo the input without filtering",
    )
    parser.add_argument(
        "--optout",
        action="store_true",
        default=False,
        help="Treat the user as opted out (redact privacy-sensitive fields)",
    )
    parser.add_argument(
        "--cookie",
        default=None,
        help="Raw Cookie header to inspect for the opt-out marker",
    )
    parser.add_argument(
        "--report",
        action="store_true",
        default=False,
        help="Wrap output as {\"result\": ..., \"diagnostics\": [...]}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    # Load settings from env / .env file first, then override with CLI flags.
    from fpd_validator.config import ValidatorSettings
    from fpd_validator.logging_setup import configure_logging

    settings = ValidatorSettings()
    if args.skip_validations is True:
        settings.skip_validations = True
    if args.schema:
        settings.schema_path = args.schema

    configure_logging(
        settings.log_level, settings.log_format, settings.diagnostics_log_level
    )
    logger = structlog.get_logger("fpd_validator")

    from fpd_validator.diagnostics import DiagnosticCollector, log_sink
    from fpd_validator.engine import run
    from fpd_validator.errors import FpdValidatorError
    from fpd_validator.redaction import OptOutDetector
    from fpd_validator.schema_table import SchemaTable, load_default_table

    try:
        if args.input == "-":
            data = json.load(sys.stdin)
        else:
            with open(args.input, encoding="utf-8") as fh:
                data = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("input_unreadable", path=args.input, error=str(exc))
        return 2

    if args.optout:
        redaction_source = True
    elif args.cookie is not None:
        redaction_source = OptOutDetector.from_cookie_header(
            args.cookie, key=settings.optout_key
        )
    else:
        redaction_source = False

    collector = DiagnosticCollector(forward=log_sink)
    try:
        schema = (
            SchemaTable.from_file(settings.schema_path)
            if settings.schema_path
            else load_default_table()
        )
        result = run(
            {"skipValidations": settings.skip_validations},
            data,
            redaction_source,
            schema=schema,
            sink=collector,
            max_depth=settings.max_depth,
        )
    except FpdValidatorError as exc:
        logger.error("validation_failed", error=str(exc))
        return 2

    if args.report:
        output = {"result": result, "diagnostics": collector.messages}
    else:
        output = result
    sys.stdout.write(json.dumps(output, indent=2) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
