import logging


class BotocoreNoiseFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.WARNING


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    for logger_name in ["botocore", "boto3", "urllib3"]:
        logger = logging.getLogger(logger_name)
        logger.addFilter(BotocoreNoiseFilter())
