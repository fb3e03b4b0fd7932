"""Command-line interface for the schedule editor."""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from schededit.advisor.planner import CoveragePlanner, PlannerConfig
from schededit.codec.compression import (
    SnapshotFormatError,
    compress_snapshot,
    decompress_snapshot,
    estimate_compression_ratio,
    snapshot_from_schedule,
)
from schededit.domain.edits import CancelEdit, CancelType, ChangeStaffEdit, TagEdit
from schededit.domain.models import (
    Client,
    ScheduleSlot,
    Staff,
    StaffRole,
    StaffSchedule,
    TimeWindow,
)
from schededit.domain.timeutils import block_for_minute
from schededit.editing.session import ScheduleEditor
from schededit.output.pdf_generator import SessionPDFGenerator
from schededit.output.report_generator import SessionReportGenerator
from schededit.validation.validator import ScheduleValidator


def create_sample_roster() -> tuple[list[Staff], list[Client]]:
    """Create a small sample roster of staff and clients."""
    staff = [
        Staff(id="s1", name="Alice", role=StaffRole.RBT),
        Staff(id="s2", name="Bob", role=StaffRole.BT),
        Staff(id="s3", name="Carol", role=StaffRole.FLOAT),
        Staff(id="s4", name="David", role=StaffRole.LEAD_RBT, is_trainer=True),
        Staff(id="s5", name="Eve", role=StaffRole.BT),
        Staff(id="s6", name="Frank", role=StaffRole.RBT),
    ]
    clients = [
        Client(
            id="c1",
            name="Liam Nguyen",
            is_crisis_client=True,
            trained_staff_ids=["s1", "s4", "s6"],
            focus_staff_ids=["s1"],
            allowed_trainer_ids=["s4"],
        ),
        Client(
            id="c2",
            name="Mia Patel",
            trained_staff_ids=["s2", "s5"],
            focus_staff_ids=["s2"],
            excluded_staff_ids=["s3"],
        ),
        Client(
            id="c3",
            name="Noah Kim",
            trained_staff_ids=["s5", "s6", "s3"],
        ),
        Client(
            id="c4",
            name="Olivia Reyes",
            trained_staff_ids=["s4", "s6"],
            focus_staff_ids=["s6"],
        ),
    ]
    return staff, clients


def create_sample_schedule(clients: list[Client]) -> list[StaffSchedule]:
    """Create a sample day: AM and PM sessions split at noon."""
    client_map = {c.id: c for c in clients}

    def session(staff_id: str, client_id: str, start: str, end: str) -> ScheduleSlot:
        window = TimeWindow.parse(start, end)
        return ScheduleSlot(
            id=f"tpl-{staff_id}-{window.start}",
            block=block_for_minute(window.start),
            value=client_map[client_id].initials,
            client_id=client_id,
            start_minute=window.start,
            end_minute=window.end,
        )

    return [
        StaffSchedule("s1", slots=[session("s1", "c1", "8:00", "12:00"), session("s1", "c3", "12:30", "16:30")]),
        StaffSchedule("s2", slots=[session("s2", "c2", "8:00", "12:00"), session("s2", "c2", "12:30", "16:30")]),
        StaffSchedule("s3", slots=[session("s3", "c3", "8:00", "12:00")]),
        StaffSchedule("s4", slots=[session("s4", "c4", "8:00", "12:00"), session("s4", "c1", "12:30", "16:30")]),
        StaffSchedule("s5", slots=[]),
        StaffSchedule("s6", slots=[session("s6", "c4", "12:30", "16:30")]),
    ]


def run_demo(output_path: Optional[str] = None, time_limit: float = 10.0) -> None:
    """Run a scripted editing session over the sample day."""
    staff, clients = create_sample_roster()
    schedule = create_sample_schedule(clients)
    editor = ScheduleEditor(schedule, staff, clients)

    print(f"Editing sample day: {len(staff)} staff, {len(clients)} clients")

    # Float staff on a crisis client is blocked
    outcome = editor.apply(ChangeStaffEdit("s3", "c1", TimeWindow.parse("8:00", "10:00")))
    print("\n1. Assign Carol to Liam Nguyen (8:00-10:00)")
    print(f"  Applied: {outcome.applied}, blocked: {outcome.blocked}")
    for warning in outcome.warnings:
        print(f"    [{warning.type.value}] {warning.rule}: {warning.description}")

    # Cancellation leaves Bob idle; the advisor proposes follow-ups
    outcome = editor.apply(CancelEdit("c2", CancelType.ALL_DAY))
    print("\n2. Cancel Mia Patel for the day")
    print(f"  Applied: {outcome.applied}")
    if editor.advisor.is_active:
        print(f"  Advisor: {editor.advisor.problem}")
        for suggestion in editor.advisor.suggestions[:5]:
            print(f"    - {suggestion.description} [score {suggestion.score}]")
        outcome = editor.execute_suggestion(editor.advisor.suggestions[0])
        print(f"  Executed first suggestion: applied={outcome.applied}")

    # Tagging Frank uncovers Olivia Reyes; plan coverage jointly
    editor.promote_simulation()
    tag = TagEdit("s6", "Meeting", TimeWindow.parse("12:30", "14:00"))
    result = editor.simulate(tag)
    print("\n3. Preview tag 'Meeting' for Frank (12:30-14:00)")
    print(f"  Gaps: {len(result.gaps)}")
    outcome = editor.apply(tag)

    if result.gaps:
        planner = CoveragePlanner(config=PlannerConfig(time_limit_seconds=time_limit))
        plan = planner.plan(result.gaps, editor.working_schedule, staff, clients)
        print(f"  Coverage plan: {plan.status}, {len(plan.assignments)} assignment(s), "
              f"{len(plan.uncovered)} uncovered")
        for edit in plan.to_edits():
            applied = editor.apply(edit)
            print(f"    - {applied.log_entry.description if applied.log_entry else edit}")

    print(f"\nMode: {editor.mode.value}, undo available: {editor.can_undo}")
    print(f"\nChange Log ({len(editor.change_log)} entries):")
    for entry in editor.change_log:
        print(f"  {entry.id}: {entry.description}")

    result = ScheduleValidator().validate(editor.working_schedule, staff, clients)
    if result.is_valid:
        print("\nValidation: PASSED")
    else:
        print(f"\nValidation: FAILED ({len(result.errors)} errors)")
        for error in result.errors[:5]:
            print(f"    - {error}")

    if output_path:
        print(f"\nWriting report: {output_path}")
        if output_path.lower().endswith(".pdf"):
            SessionPDFGenerator().generate(
                editor.working_schedule, staff, clients, output_path, editor.change_log
            )
        else:
            SessionReportGenerator().generate(
                editor.working_schedule,
                staff,
                clients,
                output_path,
                editor.change_log,
                editor.advisor,
            )
        print("  Report created successfully!")


def run_compress(input_path: Optional[str], output_path: Optional[str]) -> int:
    """Compress a snapshot; the sample day is used when no input is given."""
    if input_path:
        snapshot = json.loads(Path(input_path).read_text())
    else:
        staff, clients = create_sample_roster()
        snapshot = snapshot_from_schedule(
            create_sample_schedule(clients), staff, date.today().isoformat()
        )

    try:
        payload = compress_snapshot(snapshot)
    except SnapshotFormatError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    stats = estimate_compression_ratio(snapshot)
    if output_path:
        Path(output_path).write_text(payload)
        print(f"Compressed snapshot written to {output_path}")
    else:
        print(payload)
    print(
        f"Size: {stats.original_size} -> {stats.compressed_size} bytes "
        f"({stats.ratio:.0%})",
        file=sys.stderr,
    )
    return 0


def run_decompress(input_path: str, output_path: Optional[str]) -> int:
    """Expand a compressed snapshot back to its long-key JSON form."""
    try:
        snapshot = decompress_snapshot(Path(input_path).read_text())
    except SnapshotFormatError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    text = json.dumps(snapshot, indent=2)
    if output_path:
        Path(output_path).write_text(text)
        print(f"Snapshot written to {output_path}")
    else:
        print(text)
    return 0


def main() -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="schededit - Daily Schedule Editor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                         Run a scripted editing session
  %(prog)s demo --output report.pdf     Write the session as a PDF
  %(prog)s demo --output report.txt     Write the session as a text report

  %(prog)s compress                     Compress the sample day snapshot
  %(prog)s compress -i day.json -o day.min.json
  %(prog)s decompress day.min.json      Expand a compressed snapshot
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser("demo", help="Run a sample editing session")
    demo_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Report file path (.pdf for PDF, anything else for text)",
    )
    demo_parser.add_argument(
        "--time-limit", "-t",
        type=float,
        default=10.0,
        help="Coverage planner time limit in seconds (default: 10)",
    )

    compress_parser = subparsers.add_parser("compress", help="Compress a schedule snapshot")
    compress_parser.add_argument(
        "--input", "-i",
        type=str,
        help="Snapshot JSON file (default: the sample day)",
    )
    compress_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output file path (default: stdout)",
    )

    decompress_parser = subparsers.add_parser("decompress", help="Expand a compressed snapshot")
    decompress_parser.add_argument("input", type=str, help="Compressed snapshot file")
    decompress_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output file path (default: stdout)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "demo":
        run_demo(args.output, args.time_limit)
        return 0
    elif args.command == "compress":
        return run_compress(args.input, args.output)
    elif args.command == "decompress":
        return run_decompress(args.input, args.output)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
