# --------------------------------
# DI container
# --------------------------------
from functools import lru_cache
from zoneinfo import ZoneInfo

from ringi.config import Settings, settings
from ringi.db.connection import init_db, make_engine, make_session_factory
from ringi.domain.approval import (
    ColumnLayout,
    CsvRequestTable,
    IdGenerator,
    InMemoryRequestTable,
    RequestTable,
    SqlRequestTable,
)
from ringi.domain.approval.workflow import ApprovalWorkflow
from ringi.domain.locking import AdvisoryLock, ExclusiveSection, FileLock, ProcessLock
from ringi.domain.notifications import (
    HttpEmailChannel,
    LoggingNotificationChannel,
    NotificationChannel,
    NotificationComposer,
)


def build_table(cfg: Settings) -> RequestTable:
    layout = ColumnLayout.from_order(cfg.column_order) if cfg.column_order else None
    if cfg.store_backend == "memory":
        return InMemoryRequestTable(layout=layout)
    if cfg.store_backend == "csv":
        if cfg.auto_init_store:
            CsvRequestTable.initialize(path=cfg.sheet_path, layout=layout)
        return CsvRequestTable(path=cfg.sheet_path, layout=layout)

    engine = make_engine(cfg.database_url)
    if cfg.auto_init_store:
        init_db(engine)
    return SqlRequestTable(make_session_factory(engine), layout=layout)


def build_lock(cfg: Settings) -> AdvisoryLock:
    if cfg.lock_backend == "file":
        return FileLock(cfg.lock_name, lock_dir=cfg.lock_dir, stale_after=cfg.lock_stale_after)
    return ProcessLock(cfg.lock_name)


def build_channel(cfg: Settings) -> NotificationChannel:
    if cfg.mail_backend == "http":
        return HttpEmailChannel(cfg.mail_relay_url, timeout=cfg.mail_timeout)
    return LoggingNotificationChannel()


class Container:
    def __init__(
        self,
        cfg: Settings | None = None,
        *,
        table: RequestTable | None = None,
        channel: NotificationChannel | None = None,
    ):
        self._settings = cfg or settings
        tz = ZoneInfo(self._settings.timezone)
        self._workflow = ApprovalWorkflow(
            table=table or build_table(self._settings),
            section=ExclusiveSection(
                build_lock(self._settings),
                poll_interval=self._settings.lock_poll_interval,
                timeout=self._settings.lock_timeout,
            ),
            channel=channel or build_channel(self._settings),
            composer=NotificationComposer(base_url=self._settings.app_base_url),
            id_generator=IdGenerator(prefix=self._settings.id_prefix),
            tz=tz,
            timestamp_format=self._settings.timestamp_format,
            allow_self_approval=self._settings.allow_self_approval,
            max_page_size=self._settings.max_page_size,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def workflow(self) -> ApprovalWorkflow:
        return self._workflow


@lru_cache
def get_container():
    return Container()
