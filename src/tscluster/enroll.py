"""
메시 네트워크 가입 모듈
역할별 tailscale up 플래그 결정, GitHub 공개키 등록
"""

import enum
import os
from typing import List, Optional
import requests
from rich.console import Console
from .config import AgentConfig, KeysConfig
from .errors import NetworkError, UserInputError
from .host import Host
from .logger import get_logger
from .sshd import AccessConfigurator

console = Console(stderr=True)


class NodeRole(enum.Enum):
    """노드 역할"""
    CONTROL = "control"
    MANAGED = "managed"


def normalize_source(credential_source: Optional[str]) -> Optional[str]:
    """공개키 계정 이름 정리 (빈 값은 None)"""
    if credential_source is None:
        return None
    source = credential_source.strip()
    if not source:
        return None
    if "/" in source or any(ch.isspace() for ch in source):
        raise UserInputError(f"Invalid GitHub username: {credential_source!r}")
    return source


def derive_ssh_flag(role: NodeRole, credential_source: Optional[str]) -> str:
    """Tailscale SSH 플래그 결정

    공개키 없이 가입하는 관리 노드만 메시 경유 SSH 를 사용한다.
    컨트롤 노드와 공개키가 등록된 관리 노드는 명시적으로 비활성화한다.
    """
    if role is NodeRole.MANAGED and not normalize_source(credential_source):
        return "--ssh"
    return "--ssh=false"


class IdentityEnroller:
    """노드 가입 클래스"""

    def __init__(self,
                 host: Host,
                 agent_config: AgentConfig,
                 keys_config: KeysConfig,
                 access: AccessConfigurator,
                 extra_up_args: Optional[List[str]] = None):
        self.host = host
        self.agent_config = agent_config
        self.keys_config = keys_config
        self.access = access
        self.extra_up_args = list(extra_up_args or [])
        self.logger = get_logger()

    @property
    def ssh_dir(self) -> str:
        return os.path.join(self.host.home, ".ssh")

    @property
    def authorized_keys_file(self) -> str:
        return os.path.join(self.ssh_dir, "authorized_keys")

    def keys_url(self, user: str) -> str:
        return self.keys_config.url_template.format(user=user)

    def fetch_public_keys(self, user: str) -> str:
        """공개키 다운로드 (응답 본문 그대로 반환)"""
        url = self.keys_url(user)
        self.logger.info(f"Fetching public keys from {url}...")
        try:
            response = requests.get(url, timeout=self.keys_config.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Failed to fetch public keys for {user}. "
                f"Check the GitHub username and your internet connection ({e})"
            ) from e

        keys = response.text
        if not keys.strip():
            self.logger.warning(f"No public keys are published for {user}")
        return keys

    def install_public_keys(self, user: str):
        """공개키를 authorized_keys 에 추가

        원본을 그대로 추가하므로 재실행 시 같은 키가 중복된다.
        """
        self.logger.info(f"Setting up managed node with public key from GitHub user {user}...")

        if not self.host.is_dir(self.ssh_dir):
            self.logger.info("Creating .ssh directory...")
            self.host.make_user_dir(self.ssh_dir, 0o700)

        self.access.enforce_key_only_access()

        keys = self.fetch_public_keys(user)

        self.logger.info("Appending public keys to authorized_keys...")
        self.host.append_text(self.authorized_keys_file, keys)
        self.host.chmod(self.authorized_keys_file, 0o600, privileged=False)

        self.logger.info(f"Public keys from GitHub user {user} have been added to {self.authorized_keys_file}.")

    def join(self, role: NodeRole, ssh_flag: str):
        """tailscale up 실행 (인증 URL 출력을 위해 출력을 캡처하지 않음)"""
        self.logger.info(f"Setting up a {role.value} node...")
        self.logger.info("Follow the printed URL and authenticate to Tailscale if you are not logged in yet.")
        self.host.run(
            [self.agent_config.cli, "up", ssh_flag] + self.extra_up_args,
            capture=False,
            message=f"Failed to start Tailscale in {role.value} node mode. Check your Tailscale configuration"
        )

    def enroll_node(self, role: NodeRole, credential_source: Optional[str] = None):
        """노드를 메시 네트워크에 가입"""
        console.print(f"\n[bold cyan]{role.value} 노드 가입[/bold cyan]\n")

        source = normalize_source(credential_source)
        ssh_flag = derive_ssh_flag(role, source)

        if source:
            self.install_public_keys(source)

        self.join(role, ssh_flag)
        self.logger.info(f"{role.value.capitalize()} node setup complete.")
