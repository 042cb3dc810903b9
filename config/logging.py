"""
Logging configuration for the reservation service.
Plain text output by default, JSON lines when LOG_FORMAT=json.
"""

import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from config.settings import Settings, get_settings


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter with timestamp, level and logger name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name

        if hasattr(record, 'room_number'):
            log_record['room_number'] = record.room_number
        if hasattr(record, 'reservation_code'):
            log_record['reservation_code'] = str(record.reservation_code)


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL.upper()
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'json': {
                '()': CustomJsonFormatter,
                'format': '%(timestamp)s %(level)s %(logger)s %(message)s'
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': settings.LOG_FORMAT,
                'stream': 'ext://sys.stdout',
            },
        },
        'loggers': {
            'domain': {'level': level},
            'application': {'level': level},
            'infrastructure': {'level': level},
            'api': {'level': level},
        },
        'root': {'level': 'WARNING', 'handlers': ['console']},
    }


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Apply the logging configuration"""
    logging.config.dictConfig(build_logging_config(settings or get_settings()))
