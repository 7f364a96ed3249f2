"""Domain models for the Excel -> directory enricher.

This package contains the configuration dataclasses, the enriched row record,
the run summary and the structured error record.
"""

from .config_models import DirectoryConfig, EnrichConfig, JobConfig, SmtpConfig
from .error_record import ErrorRecord
from .row_record import RowRecord
from .run_summary import RunSummary

__all__ = [
    # Configuration models
    "DirectoryConfig",
    "EnrichConfig",
    "JobConfig",
    "SmtpConfig",
    # Processing models
    "ErrorRecord",
    "RowRecord",
    "RunSummary",
]
