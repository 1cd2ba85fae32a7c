from __future__ import annotations
from io import BytesIO
from typing import List, Optional
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from models import DailyPlan, StudySession
from planner import Shortfall, plan_stats
from timeutils import format_span

HEADER_STYLE = [
    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
    ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
]

# fixed blocks are shown greyed out, breaks in italics
KIND_STYLE = {
    "fixed": ("TEXTCOLOR", colors.grey),
    "break": ("FONTNAME", "Helvetica-Oblique"),
}


def _slot(entry: StudySession) -> str:
    return format_span(entry.start_time, entry.duration_minutes)


def _shortfall_table(shortfalls: List[Shortfall]) -> Table:
    rows = [["Exam", "Date", "Days left", "Missing (m)", "Extra/day (m)", "Level"]]
    rows += [
        [s.title, s.target_date.isoformat(), s.days_left, s.remaining_minutes,
         s.suggested_extra_minutes_per_day, s.level]
        for s in shortfalls
    ]
    table = Table(rows, hAlign="LEFT")
    table.setStyle(TableStyle(HEADER_STYLE + [("ALIGN", (2, 1), (4, -1), "RIGHT")]))
    return table


def _day_table(plan: DailyPlan) -> Table:
    rows = [["Time", "Entry", "Minutes", "Type"]]
    style = list(HEADER_STYLE)
    for row, entry in enumerate(plan.sessions, start=1):
        rows.append([_slot(entry), entry.title, entry.duration_minutes, entry.study_type or entry.kind])
        if entry.kind in KIND_STYLE:
            attr, value = KIND_STYLE[entry.kind]
            style.append((attr, (0, row), (-1, row), value))
    rows.append(["", "Total study", plan.total_study_minutes, ""])
    style += [
        ("BACKGROUND", (0, -1), (-1, -1), colors.whitesmoke),
        ("ALIGN", (2, 1), (2, -1), "RIGHT"),
    ]

    table = Table(rows, hAlign="LEFT", colWidths=[80, 210, 55, 100])
    table.setStyle(TableStyle(style))
    return table


def plans_to_pdf(
    plans: List[DailyPlan],
    shortfalls: Optional[List[Shortfall]] = None,
) -> bytes:
    """Printable version of a plan: summary line, shortfalls, then one table per day."""
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=36, rightMargin=36, topMargin=36, bottomMargin=36)
    styles = getSampleStyleSheet()

    title = "Study Plan"
    if plans:
        title += f": {plans[0].date.isoformat()} to {plans[-1].date.isoformat()}"
    stats = plan_stats(plans)
    elems = [
        Paragraph(title, styles["Title"]),
        Paragraph(
            f"{stats['total_sessions']} sessions over {stats['total_days']} days, "
            f"{stats['total_hours']} h in total ({stats['avg_minutes_per_day']} min/day)",
            styles["Normal"],
        ),
        Spacer(1, 12),
    ]

    if shortfalls:
        elems += [Paragraph("Behind schedule", styles["Heading3"]), _shortfall_table(shortfalls), Spacer(1, 12)]

    for plan in plans:
        heading = f"{plan.day_name} {plan.date.isoformat()}"
        if plan.school_end_time:
            heading += f" (school until {plan.school_end_time})"
        elems += [Paragraph(heading, styles["Heading3"]), _day_table(plan), Spacer(1, 8)]

    doc.build(elems)
    return buf.getvalue()
