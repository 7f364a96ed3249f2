from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the Excel -> directory enricher.

The loader in ad_enricher.config.loader builds these from the validated YAML
document merged with command line overrides. All of them are immutable for the
lifetime of one run.
"""


@dataclass(frozen=True)
class JobConfig:
    """Invocation parameters of one enrichment job.

    `match` maps a spreadsheet column to the directory attribute it must equal.
    `ad_properties` is the ordered set of attributes attached to every row.
    """
    script_name: str  # Job name used in log file names and mail headers
    excel_file: str  # Input workbook (first worksheet is read)
    match: dict[str, str]  # Spreadsheet column -> directory attribute
    ad_properties: tuple[str, ...]  # Requested attributes, ordered & unique
    mail_to: tuple[str, ...]  # Summary recipients
    log_folder: str = "./logs"  # Log, workbook and mail copy destination
    script_admin: tuple[str, ...] = ()  # Copied on every mail, alerted on failure


@dataclass(frozen=True)
class DirectoryConfig:
    """Directory (LDAP) connection settings.

    LDAP_USER / LDAP_PASSWORD environment variables take precedence over
    `user` / `password`.
    """
    server: str
    base_dn: str
    object_class: str = "user"
    port: int | None = None
    use_ssl: bool = False
    authentication: str = "SIMPLE"  # SIMPLE | NTLM
    user: str | None = None
    password: str | None = None


@dataclass(frozen=True)
class SmtpConfig:
    """Mail delivery settings (SMTP_USER / SMTP_PASSWORD override config)."""
    host: str
    from_address: str
    port: int = 25
    use_tls: bool = False
    user: str | None = None
    password: str | None = None


@dataclass(frozen=True)
class EnrichConfig:
    """Root configuration object for one run."""
    job: JobConfig
    directory: DirectoryConfig
    smtp: SmtpConfig
