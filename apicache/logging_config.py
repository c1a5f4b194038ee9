# logging_config.py
import logging
import logging.config
from pathlib import Path
from typing import Optional

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None, cache_log_level: Optional[str] = None):
    """
    Configure logging for applications embedding the cache

    Args:
        log_level: Level for the root logger
        log_file: Optional rotating log file path
        cache_log_level: Level for the ``apicache`` loggers (defaults to log_level)
    """
    handlers = ['console']
    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'detailed': {
                'format': '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            }
        },
        'handlers': {
            'console': {
                'level': 'DEBUG',
                'class': 'logging.StreamHandler',
                'formatter': 'standard',
                'stream': 'ext://sys.stdout'
            }
        },
        'loggers': {}
    }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        config['handlers']['file'] = {
            'level': 'DEBUG',
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'detailed',
            'filename': log_file,
            'maxBytes': 10485760,  # 10MB
            'backupCount': 5
        }
        handlers.append('file')

    config['loggers'] = {
        '': {'handlers': handlers, 'level': log_level},
        'apicache': {'handlers': handlers, 'level': cache_log_level or log_level, 'propagate': False},
        'apscheduler': {'handlers': handlers, 'level': 'WARNING', 'propagate': False},
    }

    logging.config.dictConfig(config)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured with level: {log_level}")
    if log_file:
        logger.info(f"Log file: {log_file}")
