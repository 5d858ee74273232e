# services/document_renderer.py
import io
from dataclasses import dataclass
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from app.schemas.wellbeing_report import WellbeingReportOut


DISCLAIMER = (
    "This report is generated from your own mood and activity logs for self-reflection only. "
    "It is not medical advice, diagnosis or treatment. If you are struggling, please contact "
    "a qualified professional."
)

LEVEL_COLORS = {
    "excellent": colors.HexColor("#2e7d32"),
    "good": colors.HexColor("#558b2f"),
    "moderate": colors.HexColor("#f9a825"),
    "low": colors.HexColor("#ef6c00"),
    "critical": colors.HexColor("#c62828"),
    "no_data": colors.HexColor("#757575"),
}


@dataclass(frozen=True)
class ReportSection:
    title: str
    header: List[str]
    rows: List[List[str]]


def _label(value: str) -> str:
    return value.replace("_", " ").title()


def _counts(counts: dict) -> str:
    return ", ".join(f"{key} ({count})" for key, count in counts.items()) or "-"


def _optional(value: Optional[object]) -> str:
    return "-" if value is None else str(value)


def report_sections(report: WellbeingReportOut) -> List[ReportSection]:
    """
    Tables shown in the document, in display order. Analysis tables are
    left out when the report has no data for them.
    """
    sections: List[ReportSection] = []

    mood = report.mood_analysis
    if mood is not None:
        sections.append(ReportSection("Mood Analysis", ["Metric", "Value"], [
            ["Check-ins", str(mood.total_logs)],
            ["Average Mood", f"{mood.average_score:.1f}/10"],
            ["Highest / Lowest", f"{mood.highest_score} / {mood.lowest_score}"],
            ["Trend", _label(mood.trend)],
            ["Most Common Mood", _optional(mood.dominant_mood)],
            ["Moods Logged", _counts(mood.mood_counts)],
        ]))

    activity = report.activity_analysis
    if activity is not None:
        sections.append(ReportSection("Activity Analysis", ["Metric", "Value"], [
            ["Activities", str(activity.total_activities)],
            ["Total Minutes", str(activity.total_minutes)],
            ["Average Duration", f"{activity.average_duration:.0f} min"],
            ["Top Categories", ", ".join(activity.top_categories) or "-"],
            ["Most Active Day", _optional(activity.most_active_day)],
        ]))

    sleep = report.sleep_analysis
    if sleep is not None:
        sections.append(ReportSection("Sleep Analysis", ["Metric", "Value"], [
            ["Average Sleep", f"{sleep.average_hours:.1f} h"],
            ["Shortest / Longest", f"{sleep.shortest_hours:.1f} h / {sleep.longest_hours:.1f} h"],
            ["Quality", _label(sleep.quality)],
            ["Consistency", _label(sleep.consistency)],
        ]))

    stress = report.stress_analysis
    if stress is not None:
        sections.append(ReportSection("Stress Analysis", ["Metric", "Value"], [
            ["Average Stress", f"{stress.average_level:.1f}/10"],
            ["Highest", f"{stress.highest_level}/10"],
            ["High-Stress Check-ins", str(stress.high_stress_entries)],
            ["Trend", _label(stress.trend)],
        ]))

    highlights = (
        [["Strength", s] for s in report.strengths]
        + [["To Improve", a] for a in report.areas_for_improvement]
    )
    if highlights:
        sections.append(ReportSection("Highlights", ["Type", "Detail"], highlights))

    sections.append(ReportSection(
        "Recommendations",
        ["Priority", "Recommendation"],
        [[_label(r.priority), f"{r.title}: {r.description}"] for r in report.recommendations],
    ))
    return sections


def _table(section: ReportSection, styles) -> Table:
    # Wrap cells in paragraphs so long descriptions break across lines
    body = [
        [Paragraph(escape(cell), styles["Normal"]) for cell in row]
        for row in section.rows
    ]
    table = Table([section.header] + body, colWidths=[2 * inch, 4.5 * inch])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
    ]))
    return table


def _level_badge(report: WellbeingReportOut) -> Table:
    level = report.wellbeing_level
    badge = Table([[_label(level)]], colWidths=[1.6 * inch])
    badge.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, -1), LEVEL_COLORS.get(level, colors.grey)),
        ('TEXTCOLOR', (0, 0), (-1, -1), colors.white),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
    ]))
    return badge


def render_report_pdf(report: WellbeingReportOut) -> bytes:
    """Render a stored report as a PDF document. No I/O beyond the returned bytes."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter, title="Wellbeing Report")
    styles = getSampleStyleSheet()
    story = []

    story.append(Paragraph("<b>Wellbeing Report</b>", styles['Title']))
    story.append(Paragraph(
        f"<b>Report Period:</b> {report.start_date:%B %d, %Y} - {report.end_date:%B %d, %Y}<br/>"
        f"<b>Generated:</b> {report.created_at:%B %d, %Y at %I:%M %p}",
        styles['Normal'],
    ))
    story.append(Spacer(1, 0.2 * inch))

    story.append(Paragraph(f"<b>Overall Score:</b> {report.overall_score}/100", styles['Heading2']))
    story.append(_level_badge(report))
    story.append(Spacer(1, 0.2 * inch))

    story.append(Paragraph("Summary", styles['Heading2']))
    story.append(Paragraph(escape(report.summary), styles['Normal']))
    story.append(Spacer(1, 0.2 * inch))

    if report.seek_help_recommended and report.help_recommendation is not None:
        story.append(Paragraph(
            f"<b>Consider talking to a professional:</b> {escape(report.help_recommendation.reason)}",
            styles['Normal'],
        ))
        story.append(Spacer(1, 0.2 * inch))

    for section in report_sections(report):
        story.append(Paragraph(section.title, styles['Heading2']))
        story.append(_table(section, styles))
        story.append(Spacer(1, 0.2 * inch))

    story.append(Paragraph(f"<i>{DISCLAIMER}</i>", styles['Italic']))

    doc.build(story)
    return buffer.getvalue()
