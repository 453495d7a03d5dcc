"""Tests for JSON, XML and HTML report rendering."""

import json
import xml.etree.ElementTree as ET
from datetime import datetime, timezone

import pytest

from purplesim.engine.metrics import compute_metrics
from purplesim.models import EventStatus, Severity
from purplesim.report import (
    REPORT_FORMATS,
    build_report,
    render_html,
    render_json,
    render_report,
    render_xml,
    report_filename,
)

GENERATED = datetime(2025, 1, 1, 1, 0, tzinfo=timezone.utc)


@pytest.fixture
def report(make_engine, make_event):
    state = make_engine().get_state()
    state.events = [
        make_event(id="event-1", severity=Severity.CRITICAL, status=EventStatus.ACTIVE,
                   title="<script>alert(1)</script> & co"),
        make_event(id="event-2", severity=Severity.LOW, status=EventStatus.ACTIVE),
    ]
    state.metrics = compute_metrics(state.events)
    return build_report(state, classification="restricted", generated_at=GENERATED, report_id="RPT-42")


@pytest.fixture
def empty_report(make_engine):
    return build_report(make_engine().get_state(), classification="public", generated_at=GENERATED)


class TestJson:
    def test_round_trips_report(self, report):
        assert json.loads(render_json(report)) == report

    def test_indented(self, report):
        assert render_json(report).startswith('{\n  "metadata"')


class TestXml:
    def test_declaration(self, report):
        assert render_xml(report).startswith('<?xml version="1.0" encoding="UTF-8"?>\n<SimulationReport>')

    def test_structure(self, report):
        body = render_xml(report).split("\n", 1)[1]
        root = ET.fromstring(body)
        assert root.findtext("Metadata/ReportId") == "RPT-42"
        assert root.findtext("Metadata/Classification/Label") == "RESTRICTED"
        assert root.findtext("ExecutiveSummary/TotalThreats") == "2"
        assert root.findtext("ExecutiveSummary/DetectionRate") == "0.0%"
        assert [e.findtext("Id") for e in root.findall("Events/Event")] == ["event-1", "event-2"]

    def test_text_is_escaped(self, report):
        xml = render_xml(report)
        assert "&lt;script&gt;" in xml
        root = ET.fromstring(xml.split("\n", 1)[1])
        assert root.findtext("Events/Event/Title") == "<script>alert(1)</script> & co"

    def test_recommendation_priority_attribute(self, report):
        root = ET.fromstring(render_xml(report).split("\n", 1)[1])
        recs = root.findall("Recommendations/Recommendation")
        assert recs
        assert recs[0].get("priority") == "High"
        assert recs[0].findtext("Title") == "Improve Threat Detection Capabilities"


class TestHtml:
    def test_banner_top_and_bottom(self, report):
        html = render_html(report)
        assert html.count('<div class="classification-banner"') == 2
        assert "#ea580c" in html
        assert "<title>Purple Team Simulation Report - RESTRICTED</title>" in html

    def test_event_rows_escaped(self, report):
        html = render_html(report)
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; co" in html
        assert "Security Events (2 events)" in html

    def test_empty_sections(self, empty_report):
        html = render_html(empty_report)
        assert "No events match the selected filters" in html
        assert "Information that can be shared publicly" in html


class TestDispatch:
    @pytest.mark.parametrize("fmt", sorted(REPORT_FORMATS))
    def test_known_formats(self, report, fmt):
        assert render_report(report, fmt)

    def test_unknown_format(self, report):
        with pytest.raises(ValueError):
            render_report(report, "pdf")

    def test_filename(self, report):
        sim_id = report["metadata"]["simulation_id"]
        assert report_filename(report, "xml") == f"simulation-report-{sim_id}-RESTRICTED.xml"

    def test_mime_types(self):
        assert REPORT_FORMATS == {"json": "application/json", "xml": "application/xml", "html": "text/html"}
