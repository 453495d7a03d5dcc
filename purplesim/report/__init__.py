from .builder import CLASSIFICATIONS, build_report, classification_info, generate_recommendations
from .renderers import REPORT_FORMATS, render_html, render_json, render_report, render_xml, report_filename

__all__ = [
    "CLASSIFICATIONS",
    "REPORT_FORMATS",
    "build_report",
    "classification_info",
    "generate_recommendations",
    "render_html",
    "render_json",
    "render_report",
    "render_xml",
    "report_filename",
]
