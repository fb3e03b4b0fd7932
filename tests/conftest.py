"""Shared roster and schedule fixtures."""

from typing import Optional

import pytest

from schededit.domain.models import (
    Client,
    ScheduleSlot,
    Staff,
    StaffRole,
    StaffSchedule,
)
from schededit.domain.timeutils import block_for_minute


def make_slot(
    slot_id: str,
    client_id: Optional[str],
    start: int,
    end: int,
    value: Optional[str] = None,
) -> ScheduleSlot:
    """Build a template slot for a client between two minute marks."""
    return ScheduleSlot(
        id=slot_id,
        block=block_for_minute(start),
        value=value or (client_id or "OPEN").upper(),
        client_id=client_id,
        start_minute=start,
        end_minute=end,
    )


@pytest.fixture
def staff_list():
    """Six staff members; Carol is the float, David the trainer."""
    return [
        Staff(id="s1", name="Alice", role=StaffRole.RBT),
        Staff(id="s2", name="Bob", role=StaffRole.BT),
        Staff(id="s3", name="Carol", role=StaffRole.FLOAT),
        Staff(id="s4", name="David", role=StaffRole.LEAD_RBT, is_trainer=True),
        Staff(id="s5", name="Eve", role=StaffRole.BT),
        Staff(id="s6", name="Frank", role=StaffRole.RBT),
    ]


@pytest.fixture
def client_list():
    """Three clients: a crisis client, one with an exclusion, one lapsed."""
    return [
        Client(
            id="c1",
            name="Liam Nguyen",
            is_crisis_client=True,
            trained_staff_ids=["s1", "s4"],
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
            trained_staff_ids=["s3", "s5"],
            no_longer_trained_ids=["s6"],
        ),
    ]


@pytest.fixture
def schedule():
    """Morning sessions 8:00-12:00; David is empty, Eve and Frank absent."""
    return [
        StaffSchedule("s1", slots=[make_slot("tpl-s1", "c1", 480, 720, "LN")]),
        StaffSchedule("s2", slots=[make_slot("tpl-s2", "c2", 480, 720, "MP")]),
        StaffSchedule("s3", slots=[make_slot("tpl-s3", "c3", 480, 720, "NK")]),
        StaffSchedule("s4"),
    ]
