"""
실행 파일 설치/제거 (/usr/local/bin/tscluster)
"""

import os
import sys
from typing import Optional
from .config import InstallConfig
from .host import Host
from .logger import get_logger


def current_launcher() -> str:
    """현재 실행 중인 tscluster 실행 파일 경로"""
    return os.path.realpath(sys.argv[0])


class SelfInstaller:
    """tscluster 실행 파일 설치 클래스"""

    def __init__(self, host: Host, config: InstallConfig):
        self.host = host
        self.config = config
        self.logger = get_logger()

    @property
    def install_path(self) -> str:
        return os.path.join(self.config.install_dir, self.config.install_name)

    def install(self, source: Optional[str] = None) -> str:
        source = source or current_launcher()
        if os.path.realpath(source) == os.path.realpath(self.install_path):
            self.logger.info(f"{self.config.install_name.upper()} is already installed at {self.install_path}.")
            return self.install_path

        self.host.make_dir(self.config.install_dir)
        self.host.copy(source, self.install_path)
        self.host.chmod(self.install_path, 0o755)
        self.logger.info(f"{self.config.install_name.upper()} installed to {self.install_path}.")
        return self.install_path

    def uninstall(self) -> bool:
        """제거, 설치되어 있지 않으면 False"""
        if not self.host.exists(self.install_path):
            self.logger.warning(f"{self.config.install_name.upper()} is not installed in {self.config.install_dir}.")
            return False

        self.host.remove(self.install_path)
        self.logger.info(f"{self.config.install_name.upper()} successfully uninstalled.")
        return True
