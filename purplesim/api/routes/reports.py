"""Report generation routes."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ...bridge.contracts import ReportDownloadRequest, ReportRequest
from ...dependencies import get_simulation_engine
from ...report import REPORT_FORMATS, build_report, render_report, report_filename
from ...utils.logging import get_logger

logger = get_logger("api.reports")

router = APIRouter(prefix="/reports", tags=["reports"])


def _build(engine, body: ReportRequest) -> dict:
    return build_report(
        engine.get_state(),
        severities=body.severities,
        event_types=body.event_types,
        classification=body.classification,
    )


@router.post("/generate")
async def generate_report(body: ReportRequest, engine=Depends(get_simulation_engine)):
    """Report on the current run as JSON."""
    report = _build(engine, body)
    logger.info(
        "report_generated",
        report_id=report["metadata"]["report_id"],
        events=len(report["events"]),
        classification=body.classification,
    )
    return report


@router.post("/download")
async def download_report(body: ReportDownloadRequest, engine=Depends(get_simulation_engine)):
    """Report rendered as a JSON, XML or HTML attachment."""
    report = _build(engine, body)
    filename = report_filename(report, body.format)
    logger.info("report_downloaded", report_id=report["metadata"]["report_id"], format=body.format)
    return Response(
        content=render_report(report, body.format),
        media_type=REPORT_FORMATS[body.format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
