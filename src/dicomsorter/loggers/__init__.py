from dicomsorter.loggers.logging_config import LoggingManager

logging_manager = LoggingManager("dicomsorter")
logger = logging_manager.get_logger()

__all__ = ["LoggingManager", "logger", "logging_manager"]
