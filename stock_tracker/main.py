"""Main module entrypoint for local runtime execution.

This module validates startup configuration and either launches the FastAPI
service or runs the short-data backfill in the foreground.
"""

import argparse
import logging

import uvicorn

from stock_tracker.bootstrap import bootstrap_create_application, bootstrap_create_backfill_job
from stock_tracker.config import config_load_settings, logging_configure
from stock_tracker.domain import domain_string_to_date

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Stock tracker runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "short-backfill"),
        help="Runtime command: `api` starts server, `short-backfill` fetches short data up to the end date",
        type=str,
    )
    argument_parser.add_argument(
        "--end-date",
        dest="end_date",
        type=str,
        help="Last date to fetch in YYYY-MM-DD format for `short-backfill`; defaults to today",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    logging_configure(settings.log_level)

    if parsed_arguments.command == "short-backfill":
        end_date = None
        if parsed_arguments.end_date is not None:
            parsed_end_date = domain_string_to_date(parsed_arguments.end_date)
            if parsed_end_date is None:
                argument_parser.error("--end-date must be formatted like so: yyyy-MM-dd")
            end_date = parsed_end_date.date()

        backfill_job = bootstrap_create_backfill_job(settings)
        final_status = backfill_job.job_run(end_date=end_date)
        logger.info(
            "short backfill %s: %d dates processed, %d failed",
            final_status.status,
            len(final_status.dates_processed),
            len(final_status.dates_failed),
        )
        if final_status.dates_failed:
            raise SystemExit(1)
        return

    application = bootstrap_create_application(settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
        ssl_keyfile=settings.ssl_keyfile,
        ssl_certfile=settings.ssl_certfile,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
