"""Main module entrypoint for command-line and service runtime.

`apply <batch-file>` applies one instruction batch atomically; `api` starts the
FastAPI service.
"""

import argparse
import sys

import uvicorn

from fund_ledger.bootstrap import bootstrap_create_application, bootstrap_create_cli_coordinator
from fund_ledger.config import SettingsLoadError, config_load_settings
from fund_ledger.jobs import BatchFailed, job_format_failure_line

MAIN_EXIT_COMMITTED = 0
MAIN_EXIT_BATCH_FAILED = 1
MAIN_EXIT_USAGE_ERROR = 2


def main(argv: list[str] | None = None) -> int:
    """Run the selected runtime command with validated startup configuration.

    Args:
        argv: Optional argument list; defaults to `sys.argv[1:]`.

    Returns:
        int: Process exit code; 0 when the batch committed.
    """

    argument_parser = argparse.ArgumentParser(prog="fund-ledger", description="Fund trade ledger runtime entrypoint")
    subparsers = argument_parser.add_subparsers(dest="command", required=True)

    apply_parser = subparsers.add_parser("apply", help="Apply one instruction batch file in a single transaction")
    apply_parser.add_argument("batch_file", type=str, help="Path to the comma-separated instruction batch file")

    subparsers.add_parser("api", help="Start the HTTP service")
    parsed_arguments = argument_parser.parse_args(argv)

    if parsed_arguments.command == "apply":
        return main_apply_batch_file(parsed_arguments.batch_file)

    settings = config_load_settings()
    uvicorn.run(
        bootstrap_create_application(),
        host=settings.application_host,
        port=settings.application_port,
    )
    return MAIN_EXIT_COMMITTED


def main_apply_batch_file(batch_file: str) -> int:
    """Apply one batch file and report the outcome.

    Args:
        batch_file: Path to the batch file.

    Returns:
        int: 0 on commit, 1 on a failed batch, 2 when the run could not start.
    """

    try:
        coordinator = bootstrap_create_cli_coordinator()
    except SettingsLoadError as error:
        print(str(error), file=sys.stderr)
        return MAIN_EXIT_USAGE_ERROR

    try:
        with open(batch_file, "rb") as batch_handle:
            outcome = coordinator.job_run(batch_handle)
    except OSError as error:
        print(f"cannot read batch file {batch_file}: {error.strerror}", file=sys.stderr)
        return MAIN_EXIT_USAGE_ERROR

    if isinstance(outcome, BatchFailed):
        print(job_format_failure_line(outcome), file=sys.stderr)
        return MAIN_EXIT_BATCH_FAILED

    print(f"committed {outcome.count} instructions")
    return MAIN_EXIT_COMMITTED


if __name__ == "__main__":
    sys.exit(main())
