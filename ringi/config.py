import tempfile
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Backing store
    store_backend: Literal["memory", "csv", "sql"] = "sql"
    database_url: str = "sqlite:///./ringi.sqlite3"
    sheet_path: Path = Path("./requests.csv")
    column_order: Optional[list[str]] = None
    auto_init_store: bool = True

    # Exclusive section
    lock_backend: Literal["process", "file"] = "process"
    lock_name: str = "ringi-requests"
    lock_dir: Path = Path(tempfile.gettempdir())
    lock_poll_interval: float = 0.01
    lock_timeout: float = 10.0
    lock_stale_after: float = 300.0

    # Notifications
    mail_backend: Literal["log", "http"] = "log"
    mail_relay_url: str = "http://127.0.0.1:8001/v1"
    mail_timeout: float = 10.0
    app_base_url: Optional[str] = None

    # Identity and workflow policy
    identity_header: str = "X-Authenticated-Email"
    allow_self_approval: bool = False
    timezone: str = "Asia/Tokyo"
    timestamp_format: str = "%Y/%m/%d %H:%M:%S"
    id_prefix: str = "APR_"

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100
    approvers_limit: int = 100

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "RINGI_"


settings = Settings()
