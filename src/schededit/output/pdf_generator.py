"""PDF generation for edited day schedules.

This module creates printable PDFs showing:
- Per-staff timelines with client, open, tag and training slots
- The session change log
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from schededit.domain.models import (
    INDICATOR_TAG,
    INDICATOR_TRAINING,
    Client,
    ScheduleSlot,
    SourceTag,
    Staff,
    StaffSchedule,
)
from schededit.domain.timeutils import format_display_time
from schededit.editing.history import ChangeLog

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "client": (0.4, 0.7, 0.4),  # Green
    "manual": (0.4, 0.4, 0.8),  # Blue
    "open": (0.9, 0.7, 0.7),  # Light red
    "tag": (1.0, 0.9, 0.5),  # Yellow
    "training": (0.7, 0.4, 0.7),  # Purple
    "other": (0.6, 0.6, 0.6),  # Gray
    "background": (0.95, 0.95, 0.95),  # Light gray
}

LEGEND = [
    ("client", "Client"),
    ("manual", "Edited"),
    ("open", "Open"),
    ("tag", "Tag"),
    ("training", "Training"),
]


def slot_color_key(slot: ScheduleSlot) -> str:
    """Pick the legend category a slot is drawn with."""
    if slot.is_open:
        return "open"
    if slot.indicator == INDICATOR_TAG:
        return "tag"
    if slot.indicator == INDICATOR_TRAINING:
        return "training"
    if slot.client_id is not None:
        return "manual" if slot.source == SourceTag.REPAIR else "client"
    return "other"


class SessionPDFGenerator:
    """Generates printable PDF schedules for an editing session.

    Example:
        >>> generator = SessionPDFGenerator()
        >>> generator.generate(schedule, staff, clients, "schedule.pdf", change_log)
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
        day_start_minute: int = 7 * 60,
        day_end_minute: int = 19 * 60,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.day_start_minute = day_start_minute
        self.day_end_minute = day_end_minute

    def generate(
        self,
        schedule: list[StaffSchedule],
        staff_list: list[Staff],
        client_list: list[Client],
        output_path: Union[str, Path],
        change_log: Optional[ChangeLog] = None,
        title: str = "Daily Schedule",
    ) -> None:
        """Generate PDF schedule and save to file.

        Args:
            schedule: The day schedule to render.
            staff_list: Staff roster for names.
            client_list: Client roster for names.
            output_path: Path to save the PDF.
            change_log: If given, a change log page is appended.
            title: Page title.
        """
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw_document(c, schedule, staff_list, client_list, change_log, title)
        c.save()

    def generate_to_buffer(
        self,
        schedule: list[StaffSchedule],
        staff_list: list[Staff],
        client_list: list[Client],
        change_log: Optional[ChangeLog] = None,
        title: str = "Daily Schedule",
    ) -> BytesIO:
        """Generate PDF and return as bytes buffer."""
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw_document(c, schedule, staff_list, client_list, change_log, title)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw_document(
        self,
        c,
        schedule: list[StaffSchedule],
        staff_list: list[Staff],
        client_list: list[Client],
        change_log: Optional[ChangeLog],
        title: str,
    ) -> None:
        staff_map = {s.id: s for s in staff_list}
        client_map = {c.id: c for c in client_list}
        self._draw_schedule_pages(c, schedule, staff_map, client_map, title)
        if change_log is not None:
            self._draw_change_log_page(c, change_log, title)

    def _visible_span(self, schedule: list[StaffSchedule]) -> tuple[int, int]:
        """Timeline bounds: the configured day, widened to fit every slot."""
        start, end = self.day_start_minute, self.day_end_minute
        for staff_schedule in schedule:
            for slot in staff_schedule.slots:
                if slot.start_minute is not None:
                    start = min(start, slot.start)
                if slot.end_minute is not None:
                    end = max(end, slot.end)
        return (start // 60) * 60, -(-end // 60) * 60

    def _draw_schedule_pages(
        self,
        c,
        schedule: list[StaffSchedule],
        staff_map: dict[str, Staff],
        client_map: dict[str, Client],
        title: str,
    ) -> None:
        """Draw schedule pages with one timeline row per staff member."""
        ordered = sorted(
            schedule,
            key=lambda s: staff_map[s.staff_id].name if s.staff_id in staff_map else s.staff_id,
        )

        row_height = 24
        header_height = 60
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height))

        timeline_left = self.margin + 120  # Space for names
        timeline_right = self.page_width - self.margin - 20
        timeline_width = timeline_right - timeline_left
        span = self._visible_span(schedule)

        total_pages = max(1, (len(ordered) + rows_per_page - 1) // rows_per_page)
        for page_index in range(total_pages):
            page_rows = ordered[page_index * rows_per_page : (page_index + 1) * rows_per_page]

            c.setFont("Helvetica-Bold", 16)
            c.drawString(self.margin, self.page_height - self.margin - 20, title)
            c.setFont("Helvetica", 10)
            c.drawString(
                self.margin,
                self.page_height - self.margin - 35,
                f"Staff Scheduled: {len(schedule)}",
            )

            self._draw_time_axis(
                c,
                span,
                timeline_left,
                self.page_height - self.margin - header_height - 20,
                timeline_width,
            )

            y = self.page_height - self.margin - header_height - 30
            for staff_schedule in page_rows:
                y -= row_height
                self._draw_staff_row(
                    c,
                    staff_schedule,
                    staff_map,
                    client_map,
                    span,
                    timeline_left,
                    timeline_width,
                    y,
                    row_height - 4,
                )

            self._draw_legend(c, self.margin, self.margin + 10)

            c.setFont("Helvetica", 9)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"Page {page_index + 1} of {total_pages}",
            )
            c.showPage()

    def _draw_time_axis(self, c, span: tuple[int, int], x: float, y: float, width: float) -> None:
        """Draw time axis with hour markers."""
        start, end = span
        c.setFont("Helvetica", 8)
        c.setStrokeColorRGB(0.7, 0.7, 0.7)
        for minute in range(start, end + 1, 60):
            tick_x = x + (minute - start) / (end - start) * width
            c.line(tick_x, y, tick_x, y - 5)
            if minute < end:
                c.drawCentredString(tick_x, y + 5, format_display_time(minute))

    def _draw_staff_row(
        self,
        c,
        staff_schedule: StaffSchedule,
        staff_map: dict[str, Staff],
        client_map: dict[str, Client],
        span: tuple[int, int],
        timeline_x: float,
        timeline_width: float,
        y: float,
        height: float,
    ) -> None:
        """Draw a single staff member's row."""
        start, end = span
        scale = timeline_width / (end - start)

        staff = staff_map.get(staff_schedule.staff_id)
        name = staff.name if staff else staff_schedule.staff_id
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 9)
        c.drawString(self.margin, y + height / 2 - 3, name[:18])
        if staff is not None:
            c.setFont("Helvetica", 7)
            c.drawString(self.margin, y + height / 2 - 10, staff.role.value)

        c.setFillColorRGB(*COLORS["background"])
        c.rect(timeline_x, y, timeline_width, height, fill=1, stroke=0)

        for slot in staff_schedule.slots:
            slot_start = max(slot.start, start)
            slot_end = min(slot.end, end)
            if slot_start >= slot_end:
                continue
            bx = timeline_x + (slot_start - start) * scale
            bw = (slot_end - slot_start) * scale

            c.setFillColorRGB(*COLORS[slot_color_key(slot)])
            c.rect(bx, y, bw, height, fill=1, stroke=0)

            client = client_map.get(slot.client_id) if slot.client_id else None
            label = client.initials if client else slot.value
            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 7)
            c.drawCentredString(bx + bw / 2, y + height / 2 - 3, label[:12])

            c.setStrokeColorRGB(0.3, 0.3, 0.3)
            c.setLineWidth(0.5)
            c.rect(bx, y, bw, height, fill=0, stroke=1)

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        c.setFont("Helvetica", 7)
        current_x = x + 45
        for key, label in LEGEND:
            c.setFillColorRGB(*COLORS[key])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 70

    def _draw_change_log_page(self, c, change_log: ChangeLog, title: str) -> None:
        """Draw the change log, continuing onto further pages as needed."""
        line_height = 14
        top = self.page_height - self.margin - 60

        def start_page() -> float:
            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 16)
            c.drawString(self.margin, self.page_height - self.margin - 20, f"{title} - Change Log")
            c.setFont("Helvetica", 9)
            return top

        y = start_page()
        if not len(change_log):
            c.drawString(self.margin, y, "No edits applied.")

        for entry in change_log:
            if y < self.margin + line_height:
                c.showPage()
                y = start_page()
            marker = ""
            if entry.warning_type is not None:
                marker = f" [{entry.warning_type.value}]"
            if entry.triggered_advisor:
                marker += " [advisor]"
            elif entry.left_uncovered:
                marker += " [uncovered]"
            c.drawString(
                self.margin,
                y,
                f"{entry.timestamp.strftime('%H:%M:%S')}  {entry.description}{marker}",
            )
            y -= line_height

        c.showPage()
