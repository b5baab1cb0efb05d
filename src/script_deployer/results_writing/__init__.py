"""Results writing domain exports."""

from .deployment_report_writer import (
    DEPLOYMENT_SHEET_NAME,
    NOT_EVALUATED,
    RUN_INFO_SHEET_NAME,
    write_deployment_report,
)
from .report_models import RunMetadata

__all__ = [
    "DEPLOYMENT_SHEET_NAME",
    "NOT_EVALUATED",
    "RUN_INFO_SHEET_NAME",
    "RunMetadata",
    "write_deployment_report",
]
