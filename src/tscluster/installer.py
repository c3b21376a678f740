"""
Tailscale 에이전트 설치 모듈
패키지 인덱스 갱신, 벤더 설치 스크립트 실행, tailscaled 서비스 활성화
"""

from dataclasses import dataclass
import requests
from rich.console import Console
from .config import AgentConfig
from .errors import NetworkError
from .host import Host
from .logger import get_logger

console = Console(stderr=True)


@dataclass
class AgentStatus:
    """tailscaled 서비스 상태"""
    service: str
    state: str
    active: bool
    enabled: bool


class AgentInstaller:
    """Tailscale 에이전트 설치 클래스

    모든 단계는 재실행해도 안전하다. 이미 설치된 패키지 재설치,
    이미 활성화된 서비스 재활성화는 오류가 아니다.
    """

    def __init__(self, host: Host, config: AgentConfig):
        self.host = host
        self.config = config
        self.logger = get_logger()

    def refresh_package_index(self):
        """패키지 인덱스 갱신"""
        self.logger.info("Updating package list...")
        self.host.run(
            self.config.update_command,
            message="Failed to update package list. Ensure you have sudo privileges"
        )

    def fetch_install_script(self) -> str:
        """벤더 설치 스크립트 다운로드"""
        try:
            response = requests.get(self.config.install_url, timeout=self.config.install_timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Failed to download Tailscale installer from {self.config.install_url}: {e}") from e
        return response.text

    def install_package(self):
        """설치 스크립트 실행"""
        self.logger.info("Installing Tailscale...")
        script = self.fetch_install_script()
        self.host.run(
            ["sh"],
            input=script,
            message="Failed to install Tailscale. Ensure you have sudo privileges"
        )

    def stop_service(self):
        """실행 중인 서비스 중지 (실행 중이 아니어도 오류 아님)"""
        self.logger.info(f"Stopping {self.config.service} service (if running)...")
        result = self.host.run(["systemctl", "stop", self.config.service], check=False)
        if result.returncode != 0:
            self.logger.debug(f"{self.config.service} was not running")

    def enable_service(self):
        """부팅 시 자동 시작 설정 및 즉시 시작"""
        self.logger.info(f"Enabling and starting the {self.config.service} service...")
        message = f"Failed to enable/start {self.config.service}. Ensure you have sudo privileges"
        self.host.run(["systemctl", "enable", self.config.service], message=message)
        self.host.run(["systemctl", "start", self.config.service], message=message)

    def query_status(self) -> AgentStatus:
        """서비스 상태 조회"""
        service = self.config.service
        result = self.host.run(["systemctl", "status", service], privileged=False, check=False)

        state = "unknown"
        for line in (result.stdout or "").splitlines():
            line = line.strip()
            if line.startswith("Active:"):
                state = line[len("Active:"):].strip()
                break

        enabled_result = self.host.run(["systemctl", "is-enabled", service], privileged=False, check=False)
        enabled = (enabled_result.stdout or "").strip() == "enabled"

        return AgentStatus(
            service=service,
            state=state,
            active=state.startswith("active"),
            enabled=enabled
        )

    def install_agent(self) -> AgentStatus:
        """에이전트 설치 전체 절차"""
        console.print("\n[bold cyan]Tailscale 에이전트 설치[/bold cyan]\n")

        self.refresh_package_index()
        self.install_package()
        self.stop_service()
        self.enable_service()

        self.logger.info("Checking Tailscale status...")
        status = self.query_status()
        self.logger.info(f"Tailscale daemon is: {status.state}")

        if not status.active:
            self.logger.warning(f"{status.service} is not active after start")

        return status
