"""
SSH 접근 설정 모듈
비밀번호 로그인 비활성화 (백업 → 편집 → 검증 → 실패 시 복원)
"""

import enum
import re
from typing import List, Optional
from rich.console import Console
from .config import SSHConfig
from .errors import DependencyMissing, ValidationError
from .host import Host
from .logger import get_logger

console = Console(stderr=True)


class AccessMode(enum.Enum):
    """SSH 로그인 정책"""
    PASSWORD_LOGIN = "password"
    KEY_ONLY = "key-only"


class SSHDConfig:
    """sshd_config 문서

    주석과 공백을 포함한 원본 줄을 그대로 보존하며, 지정한 지시어만 다시 쓴다.
    """

    def __init__(self, text: str):
        self.trailing_newline = text.endswith("\n") or not text
        self.newline = "\r\n" if "\r\n" in text else "\n"
        self.lines: List[str] = text.splitlines()

    @classmethod
    def parse(cls, text: str) -> "SSHDConfig":
        return cls(text)

    @staticmethod
    def _directive_pattern(key: str):
        # 활성/주석 처리된 지시어 모두, 들여쓰기 유지
        return re.compile(rf"^(\s*)#*\s*{re.escape(key)}(?=\s|=|$)", re.IGNORECASE)

    def get(self, key: str) -> Optional[str]:
        """전역 영역의 첫 번째 활성 값 (sshd 는 처음 읽은 값을 사용)"""
        wanted = key.lower()
        for line in self.lines:
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            parts = re.split(r"\s*=\s*|\s+", stripped, maxsplit=1)
            name = parts[0].lower()
            if name == "match":
                break
            if name == wanted:
                return parts[1].strip() if len(parts) > 1 else ""
        return None

    def set(self, key: str, value: str) -> int:
        """지시어 값을 설정하고 다시 쓴 줄 수를 반환

        활성/주석 처리된 모든 인스턴스를 다시 쓴다. 인스턴스가 없으면
        첫 Match 블록 앞(없으면 파일 끝)에 추가한다.
        """
        pattern = self._directive_pattern(key)
        replacement = f"{key} {value}"
        rewritten = 0

        for index, line in enumerate(self.lines):
            match = pattern.match(line)
            if match:
                self.lines[index] = match.group(1) + replacement
                rewritten += 1

        if rewritten == 0:
            insert_at = len(self.lines)
            for index, line in enumerate(self.lines):
                if line.strip().lower().startswith("match "):
                    insert_at = index
                    break
            self.lines.insert(insert_at, replacement)

        return rewritten

    @property
    def access_mode(self) -> AccessMode:
        value = self.get("PasswordAuthentication")
        if value is not None and value.lower() == "no":
            return AccessMode.KEY_ONLY
        return AccessMode.PASSWORD_LOGIN

    def serialize(self) -> str:
        text = self.newline.join(self.lines)
        if self.trailing_newline and self.lines:
            text += self.newline
        return text


class AccessConfigurator:
    """SSH 키 전용 접근 설정 클래스"""

    def __init__(self, host: Host, config: SSHConfig):
        self.host = host
        self.config = config
        self.logger = get_logger()

    def ensure_server(self):
        """OpenSSH 서버 설치 및 서비스 활성화"""
        if not self.host.which(self.config.binary):
            self.logger.info("OpenSSH server is not installed. Installing it now...")
            self.host.run(
                list(self.config.install_command) + [self.config.package],
                message="Failed to install OpenSSH server. Ensure you have sudo privileges"
            )

        self.logger.info("Enabling and starting SSH service...")
        self.host.run(
            ["systemctl", "enable", "--now", self.config.service],
            message="Failed to enable/start SSH service. Ensure you have sudo privileges"
        )

    def backup(self):
        """편집 전 설정 백업"""
        self.logger.info("Backing up SSH configuration...")
        self.host.copy(self.config.config_path, self.config.backup_path)

    def restore(self):
        """백업에서 설정 복원"""
        self.logger.error("SSH configuration syntax error. Restoring backup...")
        self.host.copy(self.config.backup_path, self.config.config_path)

    def disable_password_login(self) -> SSHDConfig:
        """PasswordAuthentication no 적용"""
        self.logger.info("Disabling password authentication in SSH...")
        document = SSHDConfig.parse(self.host.read_text(self.config.config_path))
        before = document.access_mode
        rewritten = document.set("PasswordAuthentication", "no")
        self.logger.debug(f"Rewrote {rewritten} PasswordAuthentication line(s)")

        after = document.access_mode
        if after is not AccessMode.KEY_ONLY:
            raise ValidationError(
                f"PasswordAuthentication is still enabled in {self.config.config_path} after editing"
            )
        self.logger.info(f"Access mode: {before.value} -> {after.value}")

        self.host.write_text(self.config.config_path, document.serialize())
        return document

    def validate(self) -> bool:
        """sshd -t 로 문법 검사"""
        self.logger.info("Verifying SSH configuration syntax...")
        result = self.host.run(
            [self.config.binary, "-t", "-f", self.config.config_path],
            check=False
        )
        if result.returncode != 0:
            self.logger.debug((result.stderr or "").strip())
        return result.returncode == 0

    def restart_service(self):
        """systemd 재로드 후 SSH 재시작"""
        self.logger.info("Reloading systemd daemon...")
        self.host.run(
            ["systemctl", "daemon-reload"],
            message="Failed to reload systemd daemon. Ensure you have sudo privileges"
        )

        self.logger.info("Restarting SSH service...")
        self.host.run(
            ["systemctl", "restart", self.config.service],
            message="Failed to restart SSH service. Ensure you have sudo privileges"
        )

    def enforce_key_only_access(self):
        """비밀번호 로그인 비활성화 전체 절차

        검증에 실패하면 백업을 복원한 뒤 ValidationError 를 발생시키며, 서비스는 재시작하지 않는다.
        이미 연결된 비밀번호 세션은 유지된다.
        """
        console.print("\n[bold cyan]SSH 키 전용 접근 설정[/bold cyan]\n")

        self.ensure_server()

        if not self.host.exists(self.config.config_path):
            raise DependencyMissing(
                f"SSH configuration file ({self.config.config_path}) not found. "
                "Ensure the SSH server is installed"
            )

        self.backup()
        self.disable_password_login()

        if not self.validate():
            self.restore()
            raise ValidationError(
                f"SSH configuration restored from backup ({self.config.backup_path}). "
                "Please check the file manually"
            )

        self.restart_service()
        self.logger.info("Password authentication has been disabled. Only public key authentication is allowed.")
