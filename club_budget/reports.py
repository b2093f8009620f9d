"""PDF report generation for the budget plan.

Pages are landscape A4 matplotlib figures holding tables: an overall summary,
the income breakdown, the expense breakdown and, only when at least one task
exists, a task listing. Long tables continue on further pages.

A TrueType font is fetched from ``config.REPORT_FONT_URL`` (and cached) so the
report renders the club's typeface; when that fails the default matplotlib
font is used and a warning is returned alongside the PDF.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import matplotlib
from matplotlib import font_manager
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure
import pandas as pd
import requests

from . import config
from .calculations import expense_ledger_dataframe, income_dataframe, summarize
from .logging_config import get_logger
from .models import MONTH_ORDER
from .pages.lib.common.file_operations import ensure_directory, export_filename, safe_filename
from .pages.lib.common.formatting import format_currency, format_variance
from .state import AppState
from .task_board import checklist_markers

logger = get_logger(__name__)

PAGE_SIZE = (11.69, 8.27)  # A4 landscape, inches
ROWS_PER_PAGE = 24
HEADER_COLOR = '#047857'


@dataclass(frozen=True)
class ReportResult:
    content: bytes
    page_count: int
    warnings: Tuple[str, ...] = ()


def fetch_report_font(url: Optional[str] = None, cache_dir: Optional[Path] = None) -> Tuple[Optional[str], Optional[str]]:
    """Download (or reuse) the report font and register it with matplotlib.

    Returns:
        ``(family_name, warning)``. ``family_name`` is None when the default
        font must be used; ``warning`` is set only when a configured font could
        not be loaded.
    """
    source = config.REPORT_FONT_URL if url is None else url
    if not source:
        return None, None

    target_dir = Path(cache_dir or config.FONT_CACHE_DIR)
    target = target_dir / f"{safe_filename(Path(source).stem, default='report_font')}.ttf"
    try:
        if not target.exists():
            response = requests.get(source, timeout=config.REPORT_FONT_TIMEOUT)
            response.raise_for_status()
            ensure_directory(target_dir)
            target.write_bytes(response.content)
        font_manager.fontManager.addfont(str(target))
        family = font_manager.FontProperties(fname=str(target)).get_name()
    except (requests.RequestException, OSError, RuntimeError, ValueError) as exc:
        logger.warning("Report font unavailable, using default font: %s", exc, extra={'font_url': source})
        return None, "Custom font could not be loaded; the report uses the default font."
    return family, None


def _chunks(rows: Sequence[Sequence[str]], size: int) -> List[Sequence[Sequence[str]]]:
    if not rows:
        return [[]]
    return [rows[i:i + size] for i in range(0, len(rows), size)]


def _table_page(
    pdf: PdfPages,
    title: str,
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    col_widths: Optional[Sequence[float]] = None,
    font_size: int = 8,
) -> None:
    chunks = _chunks(rows, ROWS_PER_PAGE)
    for index, chunk in enumerate(chunks):
        fig = Figure(figsize=PAGE_SIZE)
        page_title = title if len(chunks) == 1 else f"{title} ({index + 1}/{len(chunks)})"
        fig.suptitle(page_title, fontsize=16, fontweight='bold', x=0.05, ha='left')
        ax = fig.add_axes([0.04, 0.05, 0.92, 0.85])
        ax.axis('off')
        if chunk:
            table = ax.table(
                cellText=[list(row) for row in chunk],
                colLabels=list(headers),
                colWidths=list(col_widths) if col_widths else None,
                loc='upper center',
                cellLoc='left',
            )
            table.auto_set_font_size(False)
            table.set_fontsize(font_size)
            table.scale(1, 1.35)
            for (row_idx, _), cell in table.get_celld().items():
                if row_idx == 0:
                    cell.set_facecolor(HEADER_COLOR)
                    cell.set_text_props(color='white', fontweight='bold')
        else:
            ax.text(0.5, 0.9, "No entries", ha='center', va='top', fontsize=12, color='#666')
        pdf.savefig(fig)


def _summary_rows(state: AppState) -> List[List[str]]:
    summary = summarize(state.events, state.income_sources, state.carry_over, state.badminton_config)
    variance = summary.variance
    return [
        ['Carry Over', format_currency(summary.carry_over)],
        ['Yearly Income', format_currency(summary.yearly_income)],
        ['Total Available Budget', format_currency(summary.total_budget)],
        ['Planned Events', format_currency(summary.total_planned_expense)],
        ['Badminton (Selected Months)', format_currency(summary.recurring_cost)],
        ['Total Planned Expenses', format_currency(summary.grand_total_planned)],
        ['Event Actuals', format_currency(summary.total_actual_expense)],
        ['Projected Balance', format_currency(summary.projected_balance)],
        ['Actual Balance', format_currency(summary.actual_balance)],
        ['Savings', f"{format_currency(variance.savings_total)} ({variance.savings_count} events)"],
        ['Overspend', f"{format_currency(variance.overspend_total)} ({variance.overspend_count} events)"],
    ]


def _income_rows(state: AppState) -> Tuple[List[str], List[List[str]]]:
    frame = income_dataframe(state.income_sources)
    headers = ['Source'] + [m.value for m in MONTH_ORDER] + ['Total']
    rows = []
    for _, record in frame.iterrows():
        rows.append(
            [record['Source']]
            + [format_currency(record[m.value], include_sign=False) for m in MONTH_ORDER]
            + [format_currency(record['Annual Total'], include_sign=False)]
        )
    return headers, rows


def _blank(value) -> bool:
    return value is None or (isinstance(value, float) and pd.isna(value))


def _expense_rows(state: AppState) -> Tuple[List[str], List[List[str]]]:
    frame = expense_ledger_dataframe(state.events, state.badminton_config)
    headers = ['Month', 'Item', 'Type', 'Planned', 'Actual', 'Variance']
    rows = []
    for record in frame.itertuples(index=False):
        rows.append([
            record.Month,
            record.Item,
            record.Type,
            format_currency(record.Planned),
            '' if _blank(record.Actual) else format_currency(record.Actual),
            '' if _blank(record.Variance) else format_variance(record.Variance),
        ])
    return headers, rows


def _task_rows(state: AppState) -> List[List[str]]:
    rows = []
    for event in state.events:
        for task in event.tasks:
            rows.append([event.name, task.title, task.assignee, format_currency(task.budget),
                         task.status.value, checklist_markers(task)])
    for task in state.central_tasks:
        rows.append(['Central Board', task.title, task.assignee, format_currency(task.budget),
                     task.status.value, checklist_markers(task)])
    return rows


def build_pdf(state: AppState, font_url: Optional[str] = None) -> ReportResult:
    """Render the plan as a PDF document held in memory."""
    family, warning = fetch_report_font(font_url)
    warnings = (warning,) if warning else ()
    rc = {'font.family': family} if family else {}

    buffer = io.BytesIO()
    with matplotlib.rc_context(rc):
        with PdfPages(buffer) as pdf:
            _table_page(pdf, "Budget Summary", ['Metric', 'Value'], _summary_rows(state),
                        col_widths=[0.5, 0.5], font_size=11)
            income_headers, income_rows = _income_rows(state)
            _table_page(pdf, "Income Breakdown", income_headers, income_rows, font_size=7)
            expense_headers, expense_rows = _expense_rows(state)
            _table_page(pdf, "Expense Breakdown", expense_headers, expense_rows,
                        col_widths=[0.12, 0.36, 0.1, 0.14, 0.14, 0.14])
            task_rows = _task_rows(state)
            if task_rows:
                _table_page(pdf, "Task Listing", ['Board', 'Task', 'Assignee', 'Budget', 'Status', 'Checklist'],
                            task_rows, col_widths=[0.18, 0.22, 0.1, 0.1, 0.08, 0.32], font_size=7)
            page_count = pdf.get_pagecount()

    logger.info("PDF report generated", extra={'pages': page_count, 'custom_font': bool(family)})
    return ReportResult(content=buffer.getvalue(), page_count=page_count, warnings=warnings)


def write_pdf(state: AppState, output_path: Path, font_url: Optional[str] = None) -> ReportResult:
    result = build_pdf(state, font_url=font_url)
    ensure_directory(output_path.parent)
    output_path.write_bytes(result.content)
    return result


def pdf_filename() -> str:
    return export_filename('pdf')
