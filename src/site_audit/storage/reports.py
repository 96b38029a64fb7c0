"""File-backed report and screenshot store under ``<storage_dir>/audits``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from ..logging_config import get_logger
from ..report.models import FinalReport

logger = get_logger(__name__)


class ReportStore:
    """Writes one directory per job: ``audits/<job_id>/``."""

    def __init__(self, storage_dir: Union[str, Path]):
        self.root = Path(storage_dir) / "audits"

    def _job_dir(self, job_id: str) -> Path:
        if not job_id or "/" in job_id or "\\" in job_id or job_id.startswith("."):
            raise ValueError(f"Invalid job id: {job_id!r}")
        path = self.root / job_id
        path.mkdir(parents=True, exist_ok=True)
        return path

    def store_report(self, job_id: str, report: FinalReport) -> str:
        """Write ``report.json`` and return its ``file://`` URL."""
        path = self._job_dir(job_id) / "report.json"
        path.write_text(json.dumps(report.to_json_dict(), indent=2), encoding="utf-8")
        logger.debug(f"Report for {job_id} written to {path}")
        return path.resolve().as_uri()

    def screenshot_url(self, job_id: str, viewport: str) -> str:
        """Where :meth:`store_screenshot` puts the image, known before it is written."""
        return (self._job_dir(job_id) / f"screenshot-{viewport}.png").resolve().as_uri()

    def store_screenshot(self, job_id: str, viewport: str, data: bytes) -> str:
        path = self._job_dir(job_id) / f"screenshot-{viewport}.png"
        path.write_bytes(data)
        return path.resolve().as_uri()

    def load_report(self, job_id: str) -> FinalReport:
        path = self.root / job_id / "report.json"
        return FinalReport.model_validate_json(path.read_text(encoding="utf-8"))
