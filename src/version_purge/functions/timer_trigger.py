"""Timer trigger blueprint — scheduled version history purge."""

import logging

import azure.functions as func

from version_purge.config import load_config
from version_purge.orchestration.runner import purge_runner_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


@bp.timer_trigger(
    schedule="0 0 2 * * *",
    arg_name="timer",
    run_on_startup=False,
)
def timer_trigger(timer: func.TimerRequest) -> None:
    """Scheduled trigger that purges old file versions.

    Runs daily at 02:00 UTC with the purge options from the app settings.
    The run summary is stored in blob storage.
    """
    logger.info("Timer trigger fired")

    try:
        if timer.past_due:
            logger.warning("Timer trigger is past due")

        config = load_config()
        runner = purge_runner_from_config(config)
        report = runner.run()
        logger.info(
            "Purge complete: %d version(s) removed across %d folder(s), %d error(s)",
            report["versions_removed"],
            report["folders_visited"],
            report["errors"],
        )

    except Exception:
        logger.exception("Timer trigger failed")
        raise
