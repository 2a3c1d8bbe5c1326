import sys

from loguru import logger

from config.settings import settings


def setup_logger(
    *,
    json_logs: bool | None = None,
    level: str | None = None,
    log_file: str | None = None,
) -> None:
    """Route mint_composer records to stdout (and optionally a rotating file).

    Builders only emit records; nothing is shown until a caller adds sinks here.
    Defaults come from settings (LOG_LEVEL, JSON_LOGS). The file sink always
    captures DEBUG so a failed issuance can be replayed instruction by instruction.
    """
    serialize = settings.json_logs if json_logs is None else json_logs
    console_level = (level or settings.log_level).upper()
    logger.remove()

    if serialize:
        logger.add(sys.stdout, serialize=True, level=console_level)
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan> - "
                "<level>{message}</level>"
            ),
            level=console_level,
            colorize=True,
        )

    if log_file:
        logger.add(
            log_file,
            rotation="20 MB",
            retention="7 days",
            level="DEBUG",
            serialize=serialize,
        )
