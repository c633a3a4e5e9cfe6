"""PDF export of the structured plan view.

Builds an HTML document from the same tables the app shows and renders it
to A4 pages with WeasyPrint. The raw-text fallback view is not exportable.
"""

import html
import logging
from datetime import datetime

import markdown
import pandas as pd

from backend.models import PlanDocument
from .views import day_details, nutrition_table, overview_table, schedule_tables

logger = logging.getLogger(__name__)

PAGE_CSS = """
@page { size: A4; margin: 18mm 15mm; @bottom-center { content: counter(page) " / " counter(pages); font-size: 9pt; color: #6b7280; } }
body { font-family: "Helvetica Neue", Arial, sans-serif; font-size: 10.5pt; color: #111827; }
h1 { font-size: 20pt; margin-bottom: 2mm; }
h2 { font-size: 14pt; margin-top: 8mm; border-bottom: 1px solid #e5e7eb; padding-bottom: 1mm; }
h3 { font-size: 12pt; margin-top: 5mm; page-break-after: avoid; }
table { width: 100%; border-collapse: collapse; margin: 2mm 0 4mm; page-break-inside: auto; }
tr { page-break-inside: avoid; }
th { background: #f3f4f6; text-align: left; font-size: 9pt; text-transform: uppercase; color: #4b5563; }
th, td { border: 1px solid #e5e7eb; padding: 1.5mm 2mm; vertical-align: top; }
.meta { color: #6b7280; font-size: 9pt; }
"""


def _table_html(df: pd.DataFrame) -> str:
    if df.empty:
        return ""
    # cells can carry light markdown from the model (bold, lists)
    cells = df.astype(str).map(lambda v: markdown.markdown(html.escape(v)) if v else "")
    return cells.to_html(index=False, escape=False, border=0)


def build_plan_html(plan: PlanDocument) -> str:
    generated = datetime.now().strftime("%B %d, %Y")
    parts = [
        "<h1>Your Personalized Fitness Plan</h1>",
        f'<p class="meta">Generated {generated}</p>',
    ]

    overview = overview_table(plan)
    if not overview.empty:
        parts += ["<h2>Plan Overview</h2>", _table_html(overview)]

    schedule = schedule_tables(plan)
    if schedule:
        parts.append("<h2>Weekly Workout Schedule</h2>")
        for (title, exercises), day in zip(schedule, plan.weekly_schedule or []):
            parts.append(f"<h3>{html.escape(title)}</h3>")
            details = " · ".join(f"{k}: {html.escape(v)}" for k, v in day_details(day))
            if details:
                parts.append(f'<p class="meta">{details}</p>')
            parts.append(_table_html(exercises))

    nutrition = nutrition_table(plan)
    if not nutrition.empty:
        parts += ["<h2>Nutrition Guidelines</h2>", _table_html(nutrition)]

    body = "\n".join(p for p in parts if p)
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>Fitness Plan</title><style>{PAGE_CSS}</style></head>"
        f"<body>{body}</body></html>"
    )


def export_plan_pdf(plan: PlanDocument) -> bytes:
    """Render the structured plan to PDF bytes.

    Raises:
        ImportError: If weasyprint (or its system libraries) is unavailable.
    """
    try:
        from weasyprint import HTML
    except (ImportError, OSError) as e:
        raise ImportError(
            "weasyprint is required for PDF export. "
            "Install with: pip install weasyprint>=60.0"
        ) from e

    html_str = build_plan_html(plan)
    pdf_bytes = HTML(string=html_str).write_pdf()
    logger.info(f"Generated plan PDF: {len(pdf_bytes)} bytes, {len(plan.weekly_schedule or [])} days")
    return pdf_bytes
