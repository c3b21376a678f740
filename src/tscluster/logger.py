"""
로깅 시스템
파일 및 콘솔(stderr) 로깅, 디버그 모드 지원
"""

import logging
import os
from datetime import datetime
from typing import Optional
from rich.logging import RichHandler
from rich.console import Console

DEFAULT_LOG_DIR = "/var/log/tscluster"
FALLBACK_LOG_DIR = "~/.local/state/tscluster/logs"

console = Console(stderr=True)


def _prepare_log_dir(log_dir: str) -> str:
    """로그 디렉토리 생성, 권한이 없으면 사용자 디렉토리 사용"""
    try:
        os.makedirs(log_dir, exist_ok=True)
        if os.access(log_dir, os.W_OK):
            return log_dir
    except OSError:
        pass

    fallback = os.path.expanduser(FALLBACK_LOG_DIR)
    os.makedirs(fallback, exist_ok=True)
    return fallback


class ProvisionLogger:
    """프로비저닝 로거"""

    def __init__(self, log_dir: str = DEFAULT_LOG_DIR, log_level: str = "INFO", debug: bool = False):
        self.log_dir = _prepare_log_dir(os.path.expanduser(log_dir))
        self.log_level = logging.DEBUG if debug else getattr(logging, log_level.upper())
        self.debug_mode = debug

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_file = os.path.join(self.log_dir, f"tscluster_{timestamp}.log")
        self.error_file = os.path.join(self.log_dir, f"error_{timestamp}.log")

        self.logger = logging.getLogger("tscluster")
        self.logger.setLevel(self.log_level)

        # 기존 핸들러 제거
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        # 파일 핸들러
        file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
        file_handler.setLevel(self.log_level)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        self.logger.addHandler(file_handler)

        # 에러 파일 핸들러
        error_handler = logging.FileHandler(self.error_file, encoding='utf-8')
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        self.logger.addHandler(error_handler)

        # 콘솔 핸들러 (Rich, stderr): 레벨별 색상 출력
        rich_handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_time=False,
            show_path=debug
        )
        rich_handler.setLevel(self.log_level)
        self.logger.addHandler(rich_handler)

    def debug(self, message: str):
        self.logger.debug(message)

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def get_log_files(self) -> dict:
        """로그 파일 경로 반환"""
        return {
            "main_log": self.log_file,
            "error_log": self.error_file,
            "log_dir": self.log_dir
        }


# 글로벌 로거 인스턴스
_logger: Optional[ProvisionLogger] = None


def get_logger(log_dir: str = DEFAULT_LOG_DIR,
               log_level: str = "INFO",
               debug: bool = False) -> ProvisionLogger:
    """로거 인스턴스 가져오기"""
    global _logger
    if _logger is None:
        _logger = ProvisionLogger(log_dir, log_level, debug)
    return _logger


def init_logger(log_dir: str, log_level: str, debug: bool) -> ProvisionLogger:
    """로거 초기화"""
    global _logger
    _logger = ProvisionLogger(log_dir, log_level, debug)
    return _logger
