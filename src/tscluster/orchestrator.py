"""
프로비저닝 오케스트레이터
설치 → (SSH 설정) → 메시 가입 → (sudo 설정) 순서로 실행
"""

from dataclasses import dataclass
from typing import Optional
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from .config import Config
from .enroll import IdentityEnroller, NodeRole, normalize_source
from .errors import ProvisionError
from .host import Host
from .installer import AgentInstaller
from .logger import get_logger
from .sshd import AccessConfigurator
from .sudo import PrivilegeConfigurator

console = Console(stderr=True)


@dataclass(frozen=True)
class ProvisionPlan:
    """노드 한 대에 대한 실행 계획"""
    role: NodeRole
    github_user: Optional[str] = None
    passwordless_sudo: bool = False

    def describe(self) -> str:
        text = f"{self.role.value} node"
        if self.github_user:
            text += f" with public key from {self.github_user}"
        if self.passwordless_sudo:
            text += " and passwordless sudo"
        return text


class ProvisionOrchestrator:
    """프로비저닝 오케스트레이터"""

    def __init__(self, host: Host, config: Config):
        self.host = host
        self.config = config
        self.logger = get_logger()
        self.installer = AgentInstaller(host, config.agent)
        self.access = AccessConfigurator(host, config.ssh)
        self.privilege = PrivilegeConfigurator(host, config.sudo)
        self.execution_log = []

    def log_step(self, step: str, status: str, message: str = ""):
        """실행 단계 기록"""
        self.execution_log.append({
            "step": step,
            "status": status,
            "message": message
        })

    def show_summary(self):
        """실행 결과 요약 표시"""
        table = Table(show_header=True, header_style="bold magenta", title="실행 결과 요약")
        table.add_column("단계", style="cyan", width=28)
        table.add_column("상태", width=6)
        table.add_column("메시지")

        for log in self.execution_log:
            status_icon = "✓" if log["status"] == "success" else "✗"
            status_color = "green" if log["status"] == "success" else "red"
            table.add_row(
                log["step"],
                f"[{status_color}]{status_icon}[/{status_color}]",
                log["message"]
            )

        console.print(table)

        log_files = self.logger.get_log_files()
        console.print(f"\n[bold]로그 파일:[/bold] {log_files['main_log']}")

    def _step(self, name: str, func, *args):
        """단계 실행, 실패 시 기록 후 예외 전파"""
        try:
            result = func(*args)
        except ProvisionError as e:
            self.log_step(name, "failed", e.category)
            raise
        self.log_step(name, "success", result if isinstance(result, str) else "완료")
        return result

    def run(self, plan: ProvisionPlan):
        """실행 계획 수행 (첫 오류에서 중단)"""
        console.print(Panel.fit(
            f"[bold cyan]tscluster[/bold cyan]\n{plan.describe()}",
            border_style="cyan"
        ))
        self.logger.info(f"=== Provisioning {plan.describe()} ===")

        github_user = normalize_source(plan.github_user)
        enroller = IdentityEnroller(
            self.host,
            self.config.agent,
            self.config.keys,
            self.access,
            self.config.up_args(plan.role.value)
        )

        try:
            status = self._step("Tailscale 설치", self.installer.install_agent)
            self.execution_log[-1]["message"] = status.state
            self._step("메시 네트워크 가입", enroller.enroll_node, plan.role, github_user)
            if plan.passwordless_sudo:
                self._step("비밀번호 없는 sudo", self.privilege.grant_passwordless_sudo, self.host.user)
        finally:
            self.show_summary()

        self.logger.info(f"Setup for {plan.describe()} is complete.")
