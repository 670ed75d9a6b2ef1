"""Pigeon bot entry point."""

import logging
import sys

from src.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
)
# httpx logs every Telegram long-poll request at INFO.
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def main() -> None:
    """Validate configuration and start polling Telegram."""
    missing = settings.missing_required()
    if missing:
        logger.critical("Missing required settings: %s", ", ".join(missing))
        sys.exit(1)

    from src.bot.telegram.app import create_app

    logger.info("Starting Pigeon on Telegram with model %s...", settings.claude_model)
    app = create_app()
    # Signals are handled in post_init so the signal name can be recorded.
    app.run_polling(stop_signals=None)


if __name__ == "__main__":
    main()
