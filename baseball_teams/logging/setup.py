import sys
import logging
from typing import Any, Optional

from loguru import logger

from baseball_teams.config.settings import AppSettings, settings as default_settings

SENSITIVE_KEYS = ["key", "token", "password", "secret", "credential"]


def _mask(value: str) -> str:
    if len(value) > 8:
        return value[:4] + "****" + value[-4:]
    return "********"


def make_sensitive_data_filter(settings: AppSettings):
    """Builds a loguru filter that masks AWS secrets in log records."""

    def sensitive_data_filter(record: dict[str, Any]) -> bool:
        def mask_value(key: str, value: Any) -> Any:
            if isinstance(value, str):
                if any(sk in key.lower() for sk in SENSITIVE_KEYS):
                    return _mask(value)
                return value
            elif isinstance(value, dict):
                return {k: mask_value(str(k), v) for k, v in value.items()}
            elif isinstance(value, list):
                return [mask_value(key, item) for item in value]
            return value

        # Mask 'extra' values whose key looks sensitive
        if "extra" in record and isinstance(record["extra"], dict):
            for extra_key in list(record["extra"]):
                record["extra"][extra_key] = mask_value(
                    extra_key, record["extra"][extra_key]
                )

        # Replace configured secrets if they leak into the message itself
        for secret in (settings.aws_secret_access_key, settings.aws_access_key_id):
            if secret and secret in record["message"]:
                record["message"] = record["message"].replace(secret, "********")

        return True  # Keep the record after filtering/masking

    return sensitive_data_filter


class InterceptHandler(logging.Handler):
    """Routes stdlib logging records (boto3, botocore) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(settings: Optional[AppSettings] = None) -> None:
    """Configures Loguru logger based on application settings."""
    settings = settings or default_settings
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=False,  # Locals may hold credentials
        filter=make_sensitive_data_filter(settings),
    )

    logger.info(f"Logging initialized with level: {settings.log_level}")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # botocore is chatty at DEBUG, keep it at WARNING unless asked otherwise
    for noisy in ("botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(
            logging.DEBUG if settings.log_level == "DEBUG" else logging.WARNING
        )
    logger.info("Standard logging intercepted.")
