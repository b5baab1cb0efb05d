"""Deployment report workbook writer."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from script_deployer.script_model.deployment_outcomes import DeploymentResult, DeployScriptStatus

from .report_models import RunMetadata

DEPLOYMENT_SHEET_NAME = "Deployment"
RUN_INFO_SHEET_NAME = "RunInfo"
REPORT_COLUMNS: tuple[str, ...] = ("Order", "Script", "Status")

NOT_EVALUATED = "NOT_EVALUATED"


def write_deployment_report(
    result: DeploymentResult,
    ordered_keys: Sequence[str],
    run_metadata: RunMetadata,
    output_path: Path | str,
) -> Path:
    """Write one row per resolved script and a RunInfo sheet; return the report path.

    Scripts that were resolved but never evaluated because the run stopped
    early are listed as ``NOT_EVALUATED``.
    """
    workbook = Workbook()
    sheet = workbook.active
    if sheet is None:
        raise RuntimeError("Workbook active sheet is not available.")
    assert isinstance(sheet, Worksheet)
    sheet.title = DEPLOYMENT_SHEET_NAME

    for column_index, name in enumerate(REPORT_COLUMNS, start=1):
        sheet.cell(row=1, column=column_index, value=name).style = "Headline 3"
    sheet.column_dimensions[get_column_letter(2)].width = 40
    sheet.column_dimensions[get_column_letter(3)].width = 22

    statuses = result.deploy_script_statuses
    for row_index, script_key in enumerate(ordered_keys, start=2):
        status = statuses.get(script_key)
        sheet.cell(row=row_index, column=1, value=row_index - 1)
        sheet.cell(row=row_index, column=2, value=script_key)
        sheet.cell(row=row_index, column=3, value=_render_status(status))

    _write_run_info_sheet(workbook, result, ordered_keys, run_metadata)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output)
    return output.resolve()


def _render_status(status: DeployScriptStatus | None) -> str:
    if status is None:
        return NOT_EVALUATED
    return status.name


def _write_run_info_sheet(
    workbook: Workbook,
    result: DeploymentResult,
    ordered_keys: Sequence[str],
    run_metadata: RunMetadata,
) -> None:
    sheet = workbook.create_sheet(RUN_INFO_SHEET_NAME)
    counts = Counter(result.deploy_script_statuses.values())

    entries: list[tuple[str, object]] = [
        ("run_start", run_metadata.run_start.isoformat()),
        ("run_end", run_metadata.run_end.isoformat()),
        ("config_path", str(run_metadata.config_path)),
        ("target_url", run_metadata.target_url),
        ("version_table", run_metadata.version_table),
        ("success", result.is_success),
        ("error_message", result.error_message or ""),
        ("resolved", len(ordered_keys)),
        ("evaluated", len(result.deploy_script_statuses)),
    ]
    entries.extend((status.value, counts.get(status, 0)) for status in DeployScriptStatus)
    for row, (key, value) in enumerate(entries, start=1):
        sheet.cell(row=row, column=1, value=key)
        sheet.cell(row=row, column=2, value=value)
