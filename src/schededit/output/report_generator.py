"""Plain-text session reports.

The report summarises an editing session:
- The working schedule, one block per staff member
- The change log, including edits that were later undone
- The advisor's open problem and suggestions
- Integrity issues found by the schedule validator
"""

from pathlib import Path
from typing import Optional, Union

from schededit.advisor.advisor import AdvisorState
from schededit.domain.models import Client, Staff, StaffSchedule
from schededit.editing.history import ChangeLog
from schededit.validation.validator import ScheduleValidator


class SessionReportGenerator:
    """Generates a human-readable text report of an editing session.

    Example:
        >>> generator = SessionReportGenerator()
        >>> text = generator.generate_to_string(
        ...     editor.working_schedule, staff, clients, editor.change_log, editor.advisor
        ... )
    """

    def __init__(self, width: int = 80):
        self.width = width

    def generate(
        self,
        schedule: list[StaffSchedule],
        staff_list: list[Staff],
        client_list: list[Client],
        output_path: Union[str, Path],
        change_log: Optional[ChangeLog] = None,
        advisor: Optional[AdvisorState] = None,
        title: str = "SCHEDULE SESSION REPORT",
    ) -> str:
        """Generate the report and save it to a file.

        Returns:
            The generated text content.
        """
        content = self.generate_to_string(schedule, staff_list, client_list, change_log, advisor, title)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        schedule: list[StaffSchedule],
        staff_list: list[Staff],
        client_list: list[Client],
        change_log: Optional[ChangeLog] = None,
        advisor: Optional[AdvisorState] = None,
        title: str = "SCHEDULE SESSION REPORT",
    ) -> str:
        """Generate the report and return it as a string."""
        staff_map = {s.id: s for s in staff_list}
        client_map = {c.id: c for c in client_list}
        rule = "-" * self.width
        lines = []

        lines.append("=" * self.width)
        lines.append(title)
        lines.append("=" * self.width)
        lines.append("")
        lines.append(f"Staff scheduled: {len(schedule)}")
        lines.append(f"Slots: {sum(len(s.slots) for s in schedule)}")
        if change_log is not None:
            lines.append(f"Edits logged: {len(change_log)}")
        lines.append("")

        # Working schedule
        lines.append(rule)
        lines.append("SCHEDULE")
        lines.append(rule)
        ordered = sorted(
            schedule,
            key=lambda s: (staff_map[s.staff_id].name if s.staff_id in staff_map else s.staff_id),
        )
        for staff_schedule in ordered:
            staff = staff_map.get(staff_schedule.staff_id)
            name = staff.name if staff else staff_schedule.staff_id
            lines.append(f"{name} [{staff_schedule.status.value}]")
            if not staff_schedule.slots:
                lines.append("    (no slots)")
            for slot in sorted(staff_schedule.slots, key=lambda s: (s.start, s.end)):
                client = client_map.get(slot.client_id) if slot.client_id else None
                target = client.name if client else slot.value
                marker = f" <{slot.indicator}>" if slot.indicator else ""
                lines.append(
                    f"    {str(slot.window):<12} {target:<24} {slot.source.value:<9}{marker}"
                )
        lines.append("")

        # Change log
        if change_log is not None:
            lines.append(rule)
            lines.append("CHANGE LOG")
            lines.append(rule)
            if not len(change_log):
                lines.append("No edits applied.")
            for entry in change_log:
                flags = []
                if entry.triggered_advisor:
                    flags.append("advisor")
                elif entry.left_uncovered:
                    flags.append("client left uncovered")
                if entry.warning_type is not None:
                    flags.append(f"{entry.warning_type.value} warning")
                flag_str = f" ({', '.join(flags)})" if flags else ""
                lines.append(
                    f"{entry.id} {entry.timestamp.strftime('%H:%M:%S')} "
                    f"{entry.description}{flag_str}"
                )
            lines.append("")

        # Advisor
        if advisor is not None and advisor.is_active:
            lines.append(rule)
            lines.append("ADVISOR")
            lines.append(rule)
            lines.append(f"Problem: {advisor.problem}")
            for i, suggestion in enumerate(advisor.suggestions, 1):
                lines.append(f"  {i:>2}. {suggestion.description} [score {suggestion.score}]")
            lines.append("")

        # Integrity
        result = ScheduleValidator().validate(schedule, staff_list, client_list)
        lines.append(rule)
        lines.append("INTEGRITY")
        lines.append(rule)
        if result.is_valid:
            lines.append("No integrity issues found.")
        for error in result.errors:
            lines.append(str(error))

        lines.append("")
        lines.append("=" * self.width)
        lines.append("END OF REPORT")
        lines.append("=" * self.width)

        return "\n".join(lines)
