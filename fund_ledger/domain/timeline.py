"""Batch timeline event builders.

A batch outcome carries an ordered list of plain-dict events so that callers can
log or serialize the run without depending on domain classes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .models import InstructionState


def domain_build_stage_event(
    stage: str,
    status: str,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one structured batch stage event.

    Args:
        stage: Stage name (`batch`, `read`, `commit`, `rollback`).
        status: Stage status marker.
        details: Optional structured details object.

    Returns:
        dict[str, object]: Structured timeline event.
    """

    event_payload: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        event_payload["details"] = details
    return event_payload


def domain_build_instruction_event(
    line_number: int,
    state: InstructionState,
    error_kind: str | None = None,
) -> dict[str, object]:
    """Build one instruction terminal-state event.

    Args:
        line_number: 1-based source line of the instruction.
        state: Terminal instruction state (`posted` or `failed`).
        error_kind: Error kind label when the instruction failed.

    Returns:
        dict[str, object]: Structured timeline event under the `instruction` stage.
    """

    details: dict[str, Any] = {"line_number": line_number}
    if error_kind is not None:
        details["error_kind"] = error_kind
    return domain_build_stage_event(stage="instruction", status=state.value, details=details)
