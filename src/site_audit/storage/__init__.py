"""Best-effort persistence: report files and the history database."""

from .history import HistoryDB
from .reports import ReportStore

__all__ = ["HistoryDB", "ReportStore"]
