"""Job layer package for batch orchestration boundaries."""

from .batch_coordinator import BatchCoordinator
from .interfaces import BatchCommitted, BatchCoordinatorPort, BatchFailed, BatchOutcome, job_format_failure_line

__all__ = [
	"BatchCommitted",
	"BatchCoordinator",
	"BatchCoordinatorPort",
	"BatchFailed",
	"BatchOutcome",
	"job_format_failure_line",
]
