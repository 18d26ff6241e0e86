"""This module handles approval requests and their backing table."""
from .entities import ApprovalRequestEntity, ApprovalStatus, PageMeta, PageResult
from .forms import ApprovalForm, validate_form
from .ids import IdGenerator
from .layout import ColumnLayout
from .request_table import RequestTable
from .in_memory_request_table import InMemoryRequestTable
from .csv_request_table import CsvRequestTable
from .sql_request_table import SqlRequestTable
