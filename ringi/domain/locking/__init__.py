"""Mutual exclusion around read-modify-write cycles on the request table."""
from .advisory_lock import AdvisoryLock
from .process_lock import ProcessLock
from .file_lock import FileLock
from .exclusive_section import ExclusiveSection
