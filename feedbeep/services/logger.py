import sys
from loguru import logger
from feedbeep.config import Settings, settings as default_settings

def setup_logging(cfg: Settings = default_settings):
    logger.remove()
    logger.add(
        sys.stderr,
        level=cfg.LOG_LEVEL,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    # Add file logging
    if cfg.LOG_FILE_ENABLED:
        cfg.ensure_dirs()
        log_file = cfg.DATA_DIR / "pipeline.log"
        logger.add(log_file, rotation="10 MB", level="DEBUG")
    return logger
