from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..directory.client import DirectoryClient, directory_session
from ..excel.reader import load_rows
from ..excel.writer import write_workbook
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary
from ..models.config_models import DirectoryConfig, EnrichConfig
from ..models.row_record import ad_column
from ..models.run_summary import RunSummary
from .derived import add_derived_columns
from .enrichment import enrich_rows
from .notification import Mailer, MailError, MailMessage, save_mail_copy
from .summary import render_failure_html, render_subject, render_summary_html, render_summary_line

"""Service orchestration for the Excel -> directory enricher.

Single pass, strictly in order:
1. load    - read the input workbook into RowRecords
2. enrich  - one directory lookup per row
3. derive  - adOu / adManager columns
4. output  - write the Data / Errors workbook
5. notify  - mail the summary with the workbook attached

Any exception is wrapped in ProcessingError carrying the stage name. The end of
the run is logged whatever the outcome.
"""

logger = logging.getLogger(__name__)

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"
FAILURE_SUBJECT = "FAILURE"

DirectoryFactory = Callable[[DirectoryConfig], AbstractContextManager[DirectoryClient]]


class ProcessingError(Exception):
    """Fatal run error, tagged with the pipeline stage that raised it."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.message = message


@dataclass(frozen=True)
class RunPaths:
    """Output files of one run, all sharing the same base name."""
    base: Path

    @property
    def log_file(self) -> Path:
        return self.base.with_name(self.base.name + ".log")

    @property
    def excel_file(self) -> Path:
        return self.base.with_name(self.base.name + ".xlsx")

    @property
    def mail_file(self) -> Path:
        return self.base.with_name(self.base.name + " - Mail.html")

    @classmethod
    def create(cls, log_folder: str, script_name: str, excel_file: str, now: datetime | None = None) -> RunPaths:
        stamp = (now or datetime.now()).strftime(TIMESTAMP_FMT)
        parts = [stamp, _safe_name(script_name), _safe_name(Path(excel_file).stem)]
        return cls(base=Path(log_folder) / " - ".join(p for p in parts if p))


def _safe_name(text: str) -> str:
    return re.sub(r'[<>:"/\\|?*]+', "_", text).strip()


@contextmanager
def _stage(name: str) -> Iterator[None]:
    logger.debug(f"stage start: {name}")
    try:
        yield
    except ProcessingError:
        raise
    except Exception as e:
        raise ProcessingError(name, str(e) or type(e).__name__) from e


def run(
    config: EnrichConfig,
    paths: RunPaths,
    directory_factory: DirectoryFactory | None = None,
    mailer: Mailer | None = None,
) -> RunSummary:
    """Run the whole pipeline once.

    Raises:
        ProcessingError: on any fatal error (input, lookup, output, mail)
    """
    job = config.job
    directory_factory = directory_factory or directory_session
    mailer = mailer or Mailer(config.smtp)
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer()
    status = "failed"
    logger.info(f"run start script={job.script_name} excel_file={job.excel_file}")
    try:
        with _stage("load"):
            columns, rows = load_rows(Path(job.excel_file), expected_columns=job.match.keys())
            logger.info(f"loaded rows={len(rows)} columns={len(columns)}")

        requested = list(job.ad_properties)
        matched_count = 0
        appended: list[str] = []
        if rows:
            with _stage("enrich"), directory_factory(config.directory) as directory:
                matched_count = enrich_rows(
                    rows, job.match, requested, directory, object_class=config.directory.object_class
                )
                with _stage("derive"):
                    appended = add_derived_columns(rows, requested, directory, error_log)
        else:
            logger.warning("input workbook has no data rows")

        if error_log:
            logger.warning(f"non-fatal errors={len(error_log)}")
        for record in error_log.records:
            logger.error(record.to_log_line())
        errors = error_log.messages()
        added = [ad_column(a) for a in requested] + appended

        with _stage("output"):
            output_columns = list(dict.fromkeys(columns + added))
            workbook = write_workbook(paths.excel_file, output_columns, [r.to_output() for r in rows], errors)

        summary = RunSummary(
            row_count=len(rows),
            matched_count=matched_count,
            attributes=tuple(added),
            error_count=len(errors),
            start_time=start_time,
            end_time=datetime.now(UTC),
        )

        with _stage("notify"):
            message = MailMessage(
                subject=render_subject(summary),
                html_body=render_summary_html(summary, job.excel_file, errors),
                to=job.mail_to,
                cc=job.script_admin,
                attachments=(workbook,) if workbook is not None else (),
                high_priority=bool(errors),
            )
            mailer.send(message)
            save_mail_copy(paths.mail_file, message)

        log_summary(render_summary_line(summary)[len("SUMMARY "):])
        status = "success"
        return summary
    finally:
        elapsed = (datetime.now(UTC) - start_time).total_seconds()
        logger.info(f"run end script={job.script_name} status={status} elapsed_sec={elapsed:.2f}")


def notify_failure(config: EnrichConfig, error: ProcessingError, paths: RunPaths | None, mailer: Mailer | None = None) -> bool:
    """Mail the script admins about a fatal error. Returns True when sent.

    A delivery failure is logged, never raised: the run is already failing.
    """
    admins = config.job.script_admin
    if not admins:
        logger.warning("no script admins configured: failure mail not sent")
        return False
    mailer = mailer or Mailer(config.smtp)
    attachments: tuple[Path, ...] = ()
    if paths is not None and paths.log_file.exists():
        attachments = (paths.log_file,)
    message = MailMessage(
        subject=f"{FAILURE_SUBJECT} - {config.job.script_name}",
        html_body=render_failure_html(config.job.script_name, error.stage, error.message),
        to=admins,
        attachments=attachments,
        high_priority=True,
    )
    try:
        mailer.send(message)
    except MailError as e:
        logger.error(f"failure mail: {e}")
        return False
    return True
