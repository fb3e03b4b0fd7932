"""Tests for session report and PDF output."""

import pytest

from schededit.domain.edits import CancelEdit, TagEdit
from schededit.domain.models import (
    INDICATOR_TAG,
    ScheduleSlot,
    SourceTag,
    StaffSchedule,
    TimeWindow,
)
from schededit.editing.history import ChangeLog
from schededit.editing.session import ScheduleEditor
from schededit.output.pdf_generator import SessionPDFGenerator, slot_color_key
from schededit.output.report_generator import SessionReportGenerator

from conftest import make_slot


@pytest.fixture
def editor(schedule, staff_list, client_list):
    editor = ScheduleEditor(schedule, staff_list, client_list)
    editor.apply(TagEdit("s4", "Meeting", TimeWindow(780, 840)))
    return editor


class TestSessionReportGenerator:
    """Tests for the text session report."""

    def test_sections(self, editor, staff_list, client_list):
        """The report lists schedule, change log and integrity sections."""
        text = SessionReportGenerator().generate_to_string(
            editor.working_schedule, staff_list, client_list, editor.change_log
        )
        assert "SCHEDULE SESSION REPORT" in text
        assert "CHANGE LOG" in text
        assert "INTEGRITY" in text
        assert "No integrity issues found." in text
        assert "END OF REPORT" in text

    def test_schedule_lines(self, editor, staff_list, client_list):
        """Staff rows show client names and tag markers."""
        text = SessionReportGenerator().generate_to_string(
            editor.working_schedule, staff_list, client_list
        )
        assert "Alice [ACTIVE]" in text
        assert "Liam Nguyen" in text
        assert "<Tag>" in text
        assert "CHANGE LOG" not in text

    def test_empty_change_log(self, schedule, staff_list, client_list):
        """An empty log is reported explicitly."""
        text = SessionReportGenerator().generate_to_string(
            schedule, staff_list, client_list, ChangeLog()
        )
        assert "No edits applied." in text

    def test_uncovered_flag(self, schedule, staff_list, client_list):
        """Edits that drop a client without advisor follow-up are flagged."""
        editor = ScheduleEditor(schedule, staff_list, client_list)
        editor.apply(TagEdit("s2", "Lunch", TimeWindow(600, 630)))
        text = SessionReportGenerator().generate_to_string(
            editor.working_schedule, staff_list, client_list, editor.change_log
        )
        assert "(client left uncovered)" in text

    def test_advisor_section(self, schedule, staff_list, client_list):
        """An open advisor problem is included with its suggestions."""
        editor = ScheduleEditor(schedule, staff_list, client_list)
        editor.apply(CancelEdit("c2"))
        assert editor.advisor.is_active

        text = SessionReportGenerator().generate_to_string(
            editor.working_schedule, staff_list, client_list, editor.change_log, editor.advisor
        )
        assert "ADVISOR" in text
        assert f"Problem: {editor.advisor.problem}" in text
        assert "(advisor)" in text

    def test_integrity_errors(self, staff_list, client_list):
        """Validator errors are listed in the integrity section."""
        schedule = [
            StaffSchedule("s1", slots=[make_slot("a", "c1", 480, 600)]),
            StaffSchedule("s2", slots=[make_slot("b", "c1", 540, 660)]),
        ]
        text = SessionReportGenerator().generate_to_string(schedule, staff_list, client_list)
        assert "[duplicate_holder]" in text
        assert "No integrity issues found." not in text

    def test_generate_writes_file(self, editor, staff_list, client_list, tmp_path):
        """generate() saves the same text it returns."""
        path = tmp_path / "report.txt"
        content = SessionReportGenerator().generate(
            editor.working_schedule, staff_list, client_list, path, editor.change_log
        )
        assert path.read_text() == content


class TestSlotColorKey:
    """Tests for slot legend categories."""

    def test_categories(self):
        """Each slot kind maps to its legend color."""
        assert slot_color_key(make_slot("a", "c1", 480, 600)) == "client"
        assert slot_color_key(make_slot("b", None, 480, 600)) == "open"
        assert slot_color_key(
            ScheduleSlot(id="c", block="AM", value="Meeting", source=SourceTag.REPAIR, indicator=INDICATOR_TAG)
        ) == "tag"
        assert slot_color_key(
            ScheduleSlot(id="d", block="AM", value="LN", source=SourceTag.REPAIR, client_id="c1")
        ) == "manual"
        assert slot_color_key(ScheduleSlot(id="e", block="AM", value="Lunch")) == "other"


class TestSessionPDFGenerator:
    """Tests for PDF rendering."""

    def test_generate_to_buffer(self, editor, staff_list, client_list):
        """The buffer holds a PDF document."""
        pytest.importorskip("reportlab")
        buffer = SessionPDFGenerator().generate_to_buffer(
            editor.working_schedule, staff_list, client_list, editor.change_log
        )
        assert buffer.read(4) == b"%PDF"

    def test_generate_file(self, editor, staff_list, client_list, tmp_path):
        """generate() writes a PDF file."""
        pytest.importorskip("reportlab")
        path = tmp_path / "schedule.pdf"
        SessionPDFGenerator().generate(
            editor.working_schedule, staff_list, client_list, path, editor.change_log
        )
        assert path.read_bytes().startswith(b"%PDF")

    def test_visible_span_widens(self):
        """Slots outside the configured day widen the timeline to whole hours."""
        generator = SessionPDFGenerator(day_start_minute=480, day_end_minute=1020)
        schedule = [StaffSchedule("s1", slots=[make_slot("a", "c1", 405, 1050)])]
        assert generator._visible_span(schedule) == (360, 1080)
