from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .common.concurrency import KeyedLock
from .common.datetime_utils import business_timezone as load_timezone
from .core.constants import DEFAULT_BUSINESS_TIMEZONE, DEFAULT_SCAN_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .scans.admin_service import ScanLogAdminService
from .scans.mysql_scan_repository import MySQLScanLogRepository
from .scans.repository import ScanLogRepository
from .scans.verifier import ScanVerifier
from .sessions.factory import SessionStrategyFactory
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionAggregatorService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import BufferConfigProvider
from .sites.mysql_site_repository import MySQLSiteRepository
from .sites.repository import SiteRepository
from .users.mysql_user_repository import MySQLEmployeeRepository
from .users.repository import EmployeeRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    sites_repo: SiteRepository
    scan_logs_repo: ScanLogRepository
    sessions_repo: SessionRepository
    settings_repo: SettingsRepository

    buffer_provider: BufferConfigProvider
    session_service: SessionAggregatorService
    scan_verifier: ScanVerifier
    scan_admin_service: ScanLogAdminService


def wire(
    *,
    employees_repo: EmployeeRepository,
    sites_repo: SiteRepository,
    scan_logs_repo: ScanLogRepository,
    sessions_repo: SessionRepository,
    settings_repo: SettingsRepository,
    conn: Optional[DatabaseConnection] = None,
    timezone_name: str = DEFAULT_BUSINESS_TIMEZONE,
    scan_timeout_seconds: float = DEFAULT_SCAN_TIMEOUT_SECONDS,
) -> Container:
    """Build the services over any set of repositories (MySQL in the app, in-memory in tests)."""
    tz = load_timezone(timezone_name)

    buffer_provider = BufferConfigProvider(settings_repo)
    session_service = SessionAggregatorService(
        scan_logs_repo,
        sessions_repo,
        employees_repo,
        buffer_provider,
        tz=tz,
        strategy_factory=SessionStrategyFactory(),
    )
    scan_verifier = ScanVerifier(
        scan_logs_repo,
        sites_repo,
        session_service,
        tz=tz,
        timeout_seconds=scan_timeout_seconds,
        locks=KeyedLock(),
    )
    scan_admin_service = ScanLogAdminService(scan_logs_repo, employees_repo, sites_repo, tz=tz)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        sites_repo=sites_repo,
        scan_logs_repo=scan_logs_repo,
        sessions_repo=sessions_repo,
        settings_repo=settings_repo,
        buffer_provider=buffer_provider,
        session_service=session_service,
        scan_verifier=scan_verifier,
        scan_admin_service=scan_admin_service,
    )


def build_container(
    *,
    db_config: dict,
    timezone_name: str = DEFAULT_BUSINESS_TIMEZONE,
    scan_timeout_seconds: float = DEFAULT_SCAN_TIMEOUT_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        conn=conn,
        employees_repo=MySQLEmployeeRepository(conn),
        sites_repo=MySQLSiteRepository(conn),
        scan_logs_repo=MySQLScanLogRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        timezone_name=timezone_name,
        scan_timeout_seconds=scan_timeout_seconds,
    )
