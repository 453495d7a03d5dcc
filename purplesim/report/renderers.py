"""Report renderers: JSON, XML and a printable HTML page."""

import json
import xml.etree.ElementTree as ET

REPORT_FORMATS = {
    "json": "application/json",
    "xml": "application/xml",
    "html": "text/html",
}

CLASSIFICATION_COLORS = {
    "secret": "#dc2626",
    "restricted": "#ea580c",
    "confidential": "#ca8a04",
    "internal": "#2563eb",
    "public": "#16a34a",
}


def _html_escape(text) -> str:
    """Minimal HTML escape for user-facing strings."""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _sev_color(sev: str) -> str:
    return {
        "critical": "#dc2626", "high": "#ea580c", "medium": "#ca8a04", "low": "#16a34a",
    }.get(sev, "#666")


def _classification_color(level: str) -> str:
    return CLASSIFICATION_COLORS.get(level, CLASSIFICATION_COLORS["public"])


def report_filename(report: dict, fmt: str) -> str:
    meta = report["metadata"]
    return f"simulation-report-{meta['simulation_id']}-{meta['classification']['level'].upper()}.{fmt}"


# ---------------------------------------------------------------------------
# JSON / XML
# ---------------------------------------------------------------------------

def render_json(report: dict) -> str:
    return json.dumps(report, indent=2)


def _sub(parent: ET.Element, tag: str, value) -> ET.Element:
    el = ET.SubElement(parent, tag)
    el.text = "" if value is None else str(value)
    return el


def render_xml(report: dict) -> str:
    """Metadata, executive summary, events and recommendations as XML."""
    meta = report["metadata"]
    summary = report["executive_summary"]

    root = ET.Element("SimulationReport")

    metadata = ET.SubElement(root, "Metadata")
    _sub(metadata, "ReportId", meta["report_id"])
    _sub(metadata, "GeneratedAt", meta["generated_at"])
    _sub(metadata, "SimulationId", meta["simulation_id"])
    _sub(metadata, "SimulationName", meta["simulation_name"])
    _sub(metadata, "Duration", meta["duration"])
    _sub(metadata, "Status", meta["status"])
    classification = ET.SubElement(metadata, "Classification")
    _sub(classification, "Level", meta["classification"]["level"])
    _sub(classification, "Label", meta["classification"]["label"])
    _sub(classification, "Description", meta["classification"]["description"])

    executive = ET.SubElement(root, "ExecutiveSummary")
    _sub(executive, "TotalThreats", summary["total_threats"])
    _sub(executive, "DetectedThreats", summary["detected_threats"])
    _sub(executive, "MitigatedThreats", summary["mitigated_threats"])
    _sub(executive, "DetectionRate", f"{summary['detection_rate']}%")
    _sub(executive, "MitigationRate", f"{summary['mitigation_rate']}%")

    events = ET.SubElement(root, "Events")
    for event in report["events"]:
        node = ET.SubElement(events, "Event")
        _sub(node, "Id", event["id"])
        _sub(node, "Timestamp", event["timestamp"])
        _sub(node, "Type", event["type"])
        _sub(node, "Severity", event["severity"])
        _sub(node, "Status", event["status"])
        _sub(node, "Title", event["title"])
        _sub(node, "Description", event["description"])
        _sub(node, "TargetSystem", event["target_system"])
        if event.get("mitre_technique"):
            _sub(node, "MitreTechnique", event["mitre_technique"])

    recommendations = ET.SubElement(root, "Recommendations")
    for rec in report["recommendations"]:
        node = ET.SubElement(recommendations, "Recommendation", priority=rec["priority"])
        _sub(node, "Title", rec["title"])
        _sub(node, "Description", rec["description"])

    ET.indent(root)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode")


# ---------------------------------------------------------------------------
# HTML section builders
# ---------------------------------------------------------------------------

def _section_heading(title: str) -> str:
    return (
        '<h2 style="color:#6366f1;font-size:20px;margin-top:32px;margin-bottom:12px;'
        f'border-bottom:1px solid #e5e7eb;padding-bottom:5px;">{title}</h2>'
    )


def _stat_card(label: str, value: str) -> str:
    return (
        '<div style="border:1px solid #e5e7eb;border-radius:8px;padding:15px;background:#f9fafb;min-width:160px;">'
        f'<div style="font-size:24px;font-weight:700;color:#6366f1;">{value}</div>'
        f'<div style="color:#666;font-size:14px;">{label}</div>'
        '</div>'
    )


def _build_classification_info(report: dict) -> str:
    meta = report["metadata"]
    return f"""
    <div style="background:#f1f5f9;border:1px solid #cbd5e1;border-radius:8px;padding:15px;margin-bottom:20px;">
        <strong>Classification Level:</strong> {_html_escape(meta["classification"]["label"])}<br>
        <strong>Description:</strong> {_html_escape(meta["classification"]["description"])}<br>
        <strong>Report ID:</strong> {_html_escape(meta["report_id"])}
    </div>"""


def _build_executive_summary(report: dict) -> str:
    summary = report["executive_summary"]
    cards = "".join([
        _stat_card("Total Threats", summary["total_threats"]),
        _stat_card("Detected Threats", summary["detected_threats"]),
        _stat_card("Mitigated Threats", summary["mitigated_threats"]),
        _stat_card("Detection Rate", f"{summary['detection_rate']}%"),
        _stat_card("Mitigation Rate", f"{summary['mitigation_rate']}%"),
        _stat_card("Avg Detection Time", f"{summary['average_detection_time']}s"),
    ])
    return f"""
    {_section_heading("Executive Summary")}
    <div style="display:flex;gap:15px;flex-wrap:wrap;margin-bottom:20px;">{cards}</div>"""


def _build_events_table(report: dict) -> str:
    events = report["events"]

    rows = ""
    for e in events:
        sev = e["severity"]
        rows += f"""
        <tr>
            <td>{_html_escape(e["timestamp"])}</td>
            <td>{_html_escape(e["type"])}</td>
            <td style="color:{_sev_color(sev)};font-weight:700;">{_html_escape(sev.upper())}</td>
            <td>{_html_escape(e["title"])}</td>
            <td>{_html_escape(e["target_system"])}</td>
            <td>{_html_escape(e.get("mitre_technique") or "N/A")}</td>
        </tr>"""

    empty = '<tr><td colspan="6" style="text-align:center;color:#666;">No events match the selected filters</td></tr>'

    return f"""
    {_section_heading(f"Security Events ({len(events)} events)")}
    <table>
        <thead><tr><th>Time</th><th>Type</th><th>Severity</th><th>Title</th><th>Target System</th><th>MITRE Technique</th></tr></thead>
        <tbody>{rows if rows else empty}</tbody>
    </table>"""


def _build_recommendations(report: dict) -> str:
    items = ""
    for r in report["recommendations"]:
        items += f"""
        <div style="border-left:4px solid #6366f1;padding:15px;margin:10px 0;background:#f8fafc;">
            <div style="font-weight:700;color:#6366f1;margin-bottom:5px;">{_html_escape(r["title"])} ({_html_escape(r["priority"])} Priority)</div>
            <div>{_html_escape(r["description"])}</div>
        </div>"""

    empty = '<div style="color:#666;">No specific recommendations at this time.</div>'

    return f"""
    {_section_heading("Security Recommendations")}
    {items if items else empty}"""


def render_html(report: dict) -> str:
    """Printable HTML page with classification banner and footer."""
    meta = report["metadata"]
    label = _html_escape(meta["classification"]["label"])
    banner_color = _classification_color(meta["classification"]["level"])

    body = (
        _build_classification_info(report)
        + _build_executive_summary(report)
        + _build_events_table(report)
        + _build_recommendations(report)
    )

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>Purple Team Simulation Report - {label}</title>
<style>
    body {{
        font-family: Arial, sans-serif;
        color: #333;
        margin: 20px;
    }}
    table {{
        width: 100%;
        border-collapse: collapse;
        margin-top: 15px;
    }}
    th, td {{
        border: 1px solid #e5e7eb;
        padding: 8px;
        text-align: left;
    }}
    th {{
        background: #f3f4f6;
    }}
    .classification-banner {{
        background: {banner_color};
        color: white;
        text-align: center;
        padding: 10px;
        font-weight: bold;
        letter-spacing: 2px;
    }}
    @media print {{ body {{ margin: 0; }} }}
</style>
</head>
<body>
<div class="classification-banner">{label}</div>
<div style="border-bottom:2px solid #6366f1;padding-bottom:20px;margin:20px 0 30px 0;">
    <div style="color:#6366f1;font-size:28px;font-weight:700;margin-bottom:10px;">Purple Team Simulation Report</div>
    <div style="color:#666;">{_html_escape(meta["simulation_name"])}</div>
    <div style="color:#666;">Generated: {_html_escape(meta["generated_at"])}</div>
    <div style="color:#666;">Duration: {_html_escape(meta["duration"])}</div>
</div>

{body}

<div class="classification-banner" style="margin-top:30px;">{label}</div>
</body>
</html>"""


_RENDERERS = {
    "json": render_json,
    "xml": render_xml,
    "html": render_html,
}


def render_report(report: dict, fmt: str) -> str:
    renderer = _RENDERERS.get(fmt)
    if renderer is None:
        raise ValueError(f"Unsupported report format: {fmt!r}")
    return renderer(report)
