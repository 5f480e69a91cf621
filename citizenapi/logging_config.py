"""
로깅 설정

모든 로그 라인에 서비스 이름을 붙이고, 포인트 원장 로거(citizenapi.services.point_service)는
레벨과 무관하게 INFO 이상을 남깁니다. 잔액 변경 로그는 감사 용도로 쓰입니다.
"""

import logging
import logging.config
import sys

LEDGER_LOGGER = "citizenapi.services.point_service"


class ServiceNameFilter(logging.Filter):
    """레코드에 service 필드 추가"""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True


def build_logging_config(log_level: str = "INFO", service_name: str = "citizenapi") -> dict:
    log_level = log_level.upper()
    ledger_level = "DEBUG" if log_level == "DEBUG" else "INFO"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "service": {"()": ServiceNameFilter, "service_name": service_name},
        },
        "formatters": {
            "detailed": {
                "format": "%(asctime)s | %(levelname)-8s | %(service)s | %(name)s\n"
                "%(pathname)s:%(lineno)d\n%(message)s",
            },
            "simple": {
                "format": "%(asctime)s | %(levelname)-8s | %(service)s | %(name)-40s | %(message)s",
            },
        },
        "handlers": {
            "console": {
                "formatter": "simple",
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "filters": ["service"],
            },
            "error_console": {
                "formatter": "detailed",
                "class": "logging.StreamHandler",
                "stream": sys.stderr,
                "level": "WARNING",
                "filters": ["service"],
            },
        },
        "loggers": {
            "": {
                "handlers": ["console", "error_console"],
                "level": log_level,
            },
            "citizenapi": {
                "handlers": ["console", "error_console"],
                "level": log_level,
                "propagate": False,
            },
            LEDGER_LOGGER: {
                "level": ledger_level,
            },
            "sqlalchemy.engine": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }


def setup_logging(log_level: str = "INFO", service_name: str = "citizenapi"):
    logging.config.dictConfig(build_logging_config(log_level, service_name))
