"""Prepare the preference database and seed the clock list before the app starts."""
from __future__ import annotations

import logging

from clockboard.config.settings import get_settings
from clockboard.tasks.service import build_runtime
from clockboard.utils.logging import setup_logging


def main() -> None:
    settings = get_settings()
    setup_logging(level=settings.log_level)
    runtime = build_runtime(settings)
    logging.getLogger("clockboard.prestart").info(
        "Preference store ready at %s with clocks %s",
        settings.database_url,
        ", ".join(runtime.registry.timezone_ids),
    )


if __name__ == "__main__":
    main()
