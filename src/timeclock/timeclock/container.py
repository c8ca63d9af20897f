from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .notify.notifier import Notifier
from .relay.mysql_log_repository import MySQLLogRepository
from .relay.mysql_shift_repository import MySQLShiftRowRepository
from .relay.repository import LogRepository, ShiftRowRepository
from .relay.service import ReportQueryService, StatusQueryService, SubmitRelayService
from .reports.service import TimesheetReportService
from .store.json_file_store import JsonFileStore
from .store.repository import KeyValueStore
from .store.tracker_repository import StoreTrackerRepository
from .sync.dispatcher import CloudSyncDispatcher
from .sync.scheduler import Scheduler, ThreadingScheduler
from .sync.transport import HttpSubmitTransport, SubmitTransport, probe_online
from .tracker.service import TrackerService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    scheduler: Scheduler
    notifier: Notifier
    dispatcher: CloudSyncDispatcher

    tracker_service: TrackerService

    submit_relay_service: SubmitRelayService
    report_query_service: ReportQueryService
    status_query_service: StatusQueryService


def build_container(
    settings,
    *,
    store: Optional[KeyValueStore] = None,
    scheduler: Optional[Scheduler] = None,
    transport: Optional[SubmitTransport] = None,
    is_online: Optional[Callable[[], bool]] = None,
    logs_repo: Optional[LogRepository] = None,
    shifts_repo: Optional[ShiftRowRepository] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services from a settings module; keyword overrides replace the real adapters."""

    scheduler = scheduler or ThreadingScheduler()
    store = store or JsonFileStore(getattr(settings, "STORE_PATH"))

    submit_url = getattr(settings, "SUBMIT_ENDPOINT_URL", "")
    if transport is None and getattr(settings, "SYNC_ENABLED", False) and submit_url:
        transport = HttpSubmitTransport(submit_url)
    if is_online is None:
        is_online = (lambda: probe_online(submit_url)) if submit_url else (lambda: True)

    if getattr(settings, "DB_ENABLED", False) and (logs_repo is None or shifts_repo is None):
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        logs_repo = logs_repo or MySQLLogRepository(conn)
        shifts_repo = shifts_repo or MySQLShiftRowRepository(conn)

    notifier = Notifier()
    dispatcher = CloudSyncDispatcher(
        transport,
        scheduler,
        delay_seconds=float(getattr(settings, "SYNC_DELAY_SECONDS", 60)),
        is_online=is_online,
    )
    if not dispatcher.enabled:
        logger.info("Cloud sync disabled (no submission endpoint)")

    tracker_service = TrackerService(
        StoreTrackerRepository(store),
        dispatcher,
        notifier,
        scheduler,
        reports=TimesheetReportService(),
        clock=clock,
        grace_seconds=int(getattr(settings, "GRACE_SECONDS", 10)),
    )

    return Container(
        scheduler=scheduler,
        notifier=notifier,
        dispatcher=dispatcher,
        tracker_service=tracker_service,
        submit_relay_service=SubmitRelayService(
            script_url=getattr(settings, "GOOGLE_SCRIPT_URL", ""),
            logs=logs_repo,
            shifts=shifts_repo,
        ),
        report_query_service=ReportQueryService(shifts_repo),
        status_query_service=StatusQueryService(logs_repo),
    )
