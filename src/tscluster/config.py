"""
설정 관리 모듈
YAML/JSON 기반 설정 파일 관리 및 기본값 제공
"""

import os
import yaml
import json
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field, asdict


@dataclass
class AgentConfig:
    """Tailscale 에이전트 설정"""
    install_url: str = "https://tailscale.com/install.sh"
    install_timeout: int = 60
    service: str = "tailscaled"
    cli: str = "tailscale"
    update_command: List[str] = field(default_factory=lambda: ["apt-get", "update"])
    control_up_args: List[str] = field(default_factory=list)
    managed_up_args: List[str] = field(default_factory=list)


@dataclass
class SSHConfig:
    """OpenSSH 서버 설정"""
    config_path: str = "/etc/ssh/sshd_config"
    backup_path: str = "/etc/ssh/sshd_config.bak"
    service: str = "ssh"
    binary: str = "sshd"
    package: str = "openssh-server"
    install_command: List[str] = field(default_factory=lambda: ["apt-get", "install", "-y"])


@dataclass
class KeysConfig:
    """공개키 제공자 설정"""
    url_template: str = "https://github.com/{user}.keys"
    timeout: int = 15


@dataclass
class SudoConfig:
    """sudo 설정"""
    sudoers_dir: str = "/etc/sudoers.d"
    validate: bool = True


@dataclass
class InstallConfig:
    """실행 파일 설치 위치"""
    install_dir: str = "/usr/local/bin"
    install_name: str = "tscluster"


@dataclass
class LoggingConfig:
    """로깅 설정"""
    log_dir: str = "/var/log/tscluster"
    log_level: str = "INFO"


class Config:
    """전체 설정 관리 클래스"""

    DEFAULT_CONFIG_PATHS = [
        "/etc/tscluster/config.yaml",
        "~/.tscluster/config.yaml",
        "./config.yaml",
    ]

    SECTIONS = ("agent", "ssh", "keys", "sudo", "install", "logging")

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.agent = AgentConfig()
        self.ssh = SSHConfig()
        self.keys = KeysConfig()
        self.sudo = SudoConfig()
        self.install = InstallConfig()
        self.logging = LoggingConfig()

        if config_path:
            self.load(config_path)
        else:
            self._load_from_default_paths()

    def _load_from_default_paths(self):
        """기본 경로에서 설정 파일 로드"""
        for path in self.DEFAULT_CONFIG_PATHS:
            expanded_path = os.path.expanduser(path)
            if os.path.exists(expanded_path):
                self.load(expanded_path)
                return

    def load(self, path: str):
        """설정 파일 로드"""
        path = os.path.expanduser(path)
        if not os.path.exists(path):
            return

        with open(path, 'r', encoding='utf-8') as f:
            if path.endswith('.json'):
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}

        self._update_from_dict(data)
        self.config_path = path

    def _update_from_dict(self, data: Dict[str, Any]):
        """딕셔너리에서 설정 업데이트 (알 수 없는 키는 무시)"""
        for section in self.SECTIONS:
            values = data.get(section) or {}
            target = getattr(self, section)
            for key, value in values.items():
                if hasattr(target, key):
                    setattr(target, key, value)

    def up_args(self, role: str) -> List[str]:
        """역할별 추가 `tailscale up` 인자"""
        if role == "control":
            return list(self.agent.control_up_args)
        return list(self.agent.managed_up_args)

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {section: asdict(getattr(self, section)) for section in self.SECTIONS}

    def save(self, path: Optional[str] = None):
        """설정 파일 저장"""
        save_path = path or self.config_path or self.DEFAULT_CONFIG_PATHS[0]
        save_path = os.path.expanduser(save_path)

        directory = os.path.dirname(save_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(save_path, 'w', encoding='utf-8') as f:
            if save_path.endswith('.json'):
                json.dump(self.to_dict(), f, indent=2)
            else:
                yaml.dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True)

    def create_sample(self, output_path: str):
        """샘플 설정 파일 생성"""
        template = """# tscluster Configuration File
# 이 파일을 /etc/tscluster/config.yaml 또는 ./config.yaml 로 복사하여 사용하세요

# Tailscale 에이전트
agent:
  install_url: "https://tailscale.com/install.sh"
  install_timeout: 60
  service: "tailscaled"
  cli: "tailscale"
  update_command: ["apt-get", "update"]
  control_up_args: []  # 예: ["--advertise-exit-node"]
  managed_up_args: []  # 예: ["--login-server", "https://headscale.example.com"]

# OpenSSH 서버
ssh:
  config_path: "/etc/ssh/sshd_config"
  backup_path: "/etc/ssh/sshd_config.bak"
  service: "ssh"
  binary: "sshd"
  package: "openssh-server"
  install_command: ["apt-get", "install", "-y"]

# 공개키 제공자
keys:
  url_template: "https://github.com/{user}.keys"
  timeout: 15

# 비밀번호 없는 sudo
sudo:
  sudoers_dir: "/etc/sudoers.d"
  validate: true  # visudo -cf 로 문법 검사

# 실행 파일 설치 위치 (tscluster install / uninstall)
install:
  install_dir: "/usr/local/bin"
  install_name: "tscluster"

# 로깅
logging:
  log_dir: "/var/log/tscluster"
  log_level: "INFO"  # DEBUG, INFO, WARNING, ERROR
"""

        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template)
