"""Output generation for edited schedules (text report, PDF)."""

from schededit.output.pdf_generator import SessionPDFGenerator
from schededit.output.report_generator import SessionReportGenerator

__all__ = [
    "SessionPDFGenerator",
    "SessionReportGenerator",
]
