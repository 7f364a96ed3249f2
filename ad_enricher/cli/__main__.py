from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from ad_enricher.config.loader import ConfigError, load_config
from ad_enricher.logging.init import attach_log_file, detach_log_file, set_debug, setup_logging
from ad_enricher.services.orchestrator import ProcessingError, RunPaths, notify_failure, run

"""CLI entrypoint.

Flow:
- Load .env (credentials for LDAP / SMTP)
- Load config/enrich.yml, command line parameters override its `job` section
- Open the timestamped run log in the log folder
- Run the pipeline; on a fatal error mail the script admins and exit 1
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

DEFAULT_CONFIG = Path("config/enrich.yml")


def _match_pair(text: str) -> tuple[str, str]:
    column, sep, attribute = text.partition("=")
    if not sep or not column.strip() or not attribute.strip():
        raise argparse.ArgumentTypeError(f"expected COLUMN=ATTRIBUTE, got '{text}'")
    return column.strip(), attribute.strip()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Enrich spreadsheet rows with directory attributes")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="YAML config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--script-name", help="Job name used in log file names and mail subjects")
    p.add_argument("--excel-file", help="Input workbook (.xlsx)")
    p.add_argument(
        "--match", action="append", type=_match_pair, metavar="COLUMN=ATTRIBUTE",
        help="Spreadsheet column and the directory attribute it must equal (repeatable)",
    )
    p.add_argument("--ad-properties", nargs="+", metavar="ATTRIBUTE", help="Directory attributes to add")
    p.add_argument("--mail-to", nargs="+", metavar="ADDRESS", help="Result mail recipients")
    p.add_argument("--log-folder", help="Folder for the log, the output workbook and the mail copy")
    p.add_argument("--script-admin", nargs="+", metavar="ADDRESS", help="Script admins (copied, alerted on failure)")
    return p.parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict[str, object]:
    return {
        "script_name": args.script_name,
        "excel_file": args.excel_file,
        "match": dict(args.match) if args.match else None,
        "ad_properties": args.ad_properties,
        "mail_to": args.mail_to,
        "log_folder": args.log_folder,
        "script_admin": args.script_admin,
    }


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (空リスト [] はテスト用)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    load_dotenv(dotenv_path=Path(".env"), override=True)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config, _overrides(args))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        paths = RunPaths.create(cfg.job.log_folder, cfg.job.script_name, cfg.job.excel_file)
        log_handler = attach_log_file(paths.log_file)
    except (OSError, ValueError) as e:
        logger.error(f"log folder: {e}")
        notify_failure(cfg, ProcessingError("setup", str(e)), None)
        return EXIT_FATAL

    try:
        run(cfg, paths)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        notify_failure(cfg, e, paths)
        return EXIT_FATAL
    finally:
        detach_log_file(log_handler)
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
