"""
Excel Reporter

Generates a single Excel workbook with the binning, model, comparison,
scorecard and random forest tables of a PD analysis run.
"""

from typing import Any, Dict, Optional
from pathlib import Path
import logging

import numpy as np
import pandas as pd
from openpyxl import Workbook
from openpyxl.drawing.image import Image as OpenpyxlImage
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side


logger = logging.getLogger(__name__)


# Styles
HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
SELECTED_FILL = PatternFill(start_color="E2EFDA", end_color="E2EFDA", fill_type="solid")
WARN_FILL = PatternFill(start_color="FCE4EC", end_color="FCE4EC", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style='thin'), right=Side(style='thin'),
    top=Side(style='thin'), bottom=Side(style='thin'),
)

WARN_IV_CATEGORIES = ('useless', 'suspicious')


def generate_report(
    output_path: str,
    summary: Dict[str, Any],
    iv_summary: pd.DataFrame,
    bin_tables: pd.DataFrame,
    coefficients: pd.DataFrame,
    stepwise_trace: pd.DataFrame,
    evaluation: pd.DataFrame,
    scorecard: pd.DataFrame,
    comparison: Optional[pd.DataFrame] = None,
    variable_summary: Optional[pd.DataFrame] = None,
    rf_importance: Optional[pd.DataFrame] = None,
    rf_oob_confusion: Optional[pd.DataFrame] = None,
    woe_chart_path: Optional[str] = None,
) -> str:
    """
    Generate the full Excel report.

    Args:
        output_path: Path for the output Excel file.
        summary: Dict of summary key-value pairs.
        iv_summary: IV per variable.
        bin_tables: Stacked bin tables of all variables.
        coefficients: Coefficient table of the selected model (index = term).
        stepwise_trace: Stepwise AIC trace.
        evaluation: Train/test statistics of the evaluated models.
        scorecard: Points per bin.
        comparison: Multi-factor comparison table (optional).
        variable_summary: Exploratory variable overview (optional).
        rf_importance: Random forest importance (optional).
        rf_oob_confusion: Random forest OOB confusion matrix (optional).
        woe_chart_path: WoE chart PNG embedded next to the bin tables (optional).

    Returns:
        Path to the generated Excel file.
    """
    wb = Workbook()

    _write_summary_sheet(wb, summary)

    if variable_summary is not None:
        _write_df_sheet(wb, "01_Variables", variable_summary)

    _write_df_sheet(wb, "02_IV_Summary", iv_summary)
    _write_df_sheet(wb, "03_Bin_Tables", bin_tables, chart_path=woe_chart_path)
    _write_df_sheet(wb, "04_Coefficients", coefficients.reset_index())
    _write_df_sheet(wb, "05_Stepwise", stepwise_trace)
    _write_df_sheet(wb, "06_Evaluation", evaluation.reset_index())

    if comparison is not None:
        _write_df_sheet(wb, "07_Comparison", comparison.reset_index())

    _write_df_sheet(wb, "08_Scorecard", scorecard)

    if rf_importance is not None:
        _write_df_sheet(wb, "09_RF_Importance", rf_importance)
    if rf_oob_confusion is not None:
        _write_df_sheet(wb, "10_RF_OOB", rf_oob_confusion.reset_index())

    # Remove default empty sheet if exists
    if "Sheet" in wb.sheetnames:
        del wb["Sheet"]

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    wb.save(output_path)
    logger.info(f"COMPLETE | Excel saved: {output_path}")
    return output_path


def _write_summary_sheet(wb: Workbook, summary: Dict[str, Any]) -> None:
    """Write the 00_Summary sheet."""
    ws = wb.create_sheet("00_Summary")

    ws.column_dimensions['A'].width = 35
    ws.column_dimensions['B'].width = 60

    ws['A1'] = "PD Scorecard Analysis Report"
    ws['A1'].font = Font(bold=True, size=14, color="2F5496")
    ws.merge_cells('A1:B1')

    row = 3
    for key, value in summary.items():
        cell_a = ws.cell(row=row, column=1, value=key)
        cell_b = ws.cell(row=row, column=2, value=_cell_value(value) if _is_scalar(value) else str(value))
        cell_a.font = Font(bold=True)
        cell_a.border = THIN_BORDER
        cell_b.border = THIN_BORDER
        row += 1


def _write_df_sheet(
    wb: Workbook,
    sheet_name: str,
    df: pd.DataFrame,
    chart_path: Optional[str] = None,
) -> None:
    """Write a DataFrame to a styled sheet."""
    ws = wb.create_sheet(sheet_name)
    if df is None or len(df) == 0:
        ws['A1'] = "No data"
        return

    # Write headers
    for col_idx, col_name in enumerate(df.columns, 1):
        cell = ws.cell(row=1, column=col_idx, value=str(col_name))
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal='center')
        cell.border = THIN_BORDER

    # Write data rows
    for row_idx, (_, row_data) in enumerate(df.iterrows(), 2):
        for col_idx, value in enumerate(row_data, 1):
            cell = ws.cell(row=row_idx, column=col_idx)
            cell.border = THIN_BORDER
            cell.value = _cell_value(value)

        # Flag weak or suspicious predictors
        if 'IV_Category' in df.columns:
            iv_col = list(df.columns).index('IV_Category') + 1
            if ws.cell(row=row_idx, column=iv_col).value in WARN_IV_CATEGORIES:
                for col_idx in range(1, len(df.columns) + 1):
                    ws.cell(row=row_idx, column=col_idx).fill = WARN_FILL

        # Highlight the selected model
        if 'Selected' in df.columns:
            sel_col = list(df.columns).index('Selected') + 1
            if ws.cell(row=row_idx, column=sel_col).value is True:
                for col_idx in range(1, len(df.columns) + 1):
                    ws.cell(row=row_idx, column=col_idx).fill = SELECTED_FILL

    # Auto-fit column widths (approximate)
    for col_idx, col_name in enumerate(df.columns, 1):
        max_len = len(str(col_name))
        for row_idx in range(2, min(len(df) + 2, 102)):  # sample first 100 rows
            val = ws.cell(row=row_idx, column=col_idx).value
            if val is not None:
                max_len = max(max_len, len(str(val)))
        ws.column_dimensions[
            ws.cell(row=1, column=col_idx).column_letter
        ].width = min(max_len + 3, 40)

    ws.freeze_panes = 'A2'
    ws.auto_filter.ref = ws.dimensions

    if chart_path and Path(chart_path).exists():
        img = OpenpyxlImage(chart_path)
        img.width = 800
        img.height = 480
        anchor = ws.cell(row=1, column=len(df.columns) + 2).coordinate
        ws.add_image(img, anchor)
        logger.info(f"EXCEL | Embedded chart in {sheet_name}")


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool, np.integer, np.floating, np.bool_)) or value is None


def _cell_value(value: Any) -> Any:
    """Convert numpy/pandas values to types openpyxl can write."""
    if value is None:
        return None
    if isinstance(value, (np.bool_, bool)):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (np.floating, float)):
        if np.isnan(value):
            return None
        if np.isinf(value):
            return str(value)
        return float(value)
    if not isinstance(value, str) and pd.isna(value):
        return None
    return value
