"""
공용 테스트 픽스처
"""

import subprocess
from unittest.mock import MagicMock
import pytest
import requests
from tscluster.config import Config
from tscluster.host import Host
from tscluster.logger import init_logger

SYSTEMCTL_ACTIVE = (
    "● tailscaled.service - Tailscale node agent\n"
    "     Loaded: loaded (/lib/systemd/system/tailscaled.service; enabled)\n"
    "     Active: active (running) since Mon 2026-10-12 09:00:00 UTC; 2s ago\n"
)

SSHD_CONFIG = (
    "Include /etc/ssh/sshd_config.d/*.conf\n"
    "Port 22\n"
    "#PasswordAuthentication yes\n"
    "PermitEmptyPasswords no\n"
    "UsePAM yes\n"
)


class FakeRunner:
    """subprocess.run 대체: 호출 기록 및 접두사별 응답"""

    def __init__(self):
        self.calls = []
        self.inputs = []
        self.options = []
        self.responses = []

    def respond(self, *prefix, returncode=0, stdout="", stderr="", effect=None):
        # 나중에 등록한 응답이 우선
        self.responses.insert(0, (tuple(prefix), returncode, stdout, stderr, effect))

    def __call__(self, cmd, capture_output=True, text=True, input=None, **kwargs):
        self.calls.append(list(cmd))
        self.options.append(kwargs)
        self.inputs.append(input)
        for prefix, returncode, stdout, stderr, effect in self.responses:
            if tuple(cmd[:len(prefix)]) == prefix:
                if effect:
                    effect(cmd, input)
                return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)
        return subprocess.CompletedProcess(cmd, 0, "", "")

    @property
    def commands(self):
        return [" ".join(call) for call in self.calls]

    def ran(self, command: str) -> bool:
        return any(c == command or c.startswith(command + " ") for c in self.commands)

    def index(self, command: str) -> int:
        for i, c in enumerate(self.commands):
            if c == command or c.startswith(command + " "):
                return i
        raise ValueError(command)


@pytest.fixture(autouse=True)
def logger(tmp_path):
    return init_logger(str(tmp_path / "logs"), "DEBUG", False)


@pytest.fixture
def runner():
    fake = FakeRunner()
    fake.respond("systemctl", "status", returncode=0, stdout=SYSTEMCTL_ACTIVE)
    fake.respond("systemctl", "is-enabled", returncode=0, stdout="enabled\n")
    return fake


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home" / "alice"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def host(home, runner, monkeypatch):
    h = Host(user="alice", home=str(home), use_sudo=False, runner=runner)
    monkeypatch.setattr(h, "which", lambda name: f"/usr/sbin/{name}")
    return h


@pytest.fixture
def config(tmp_path):
    etc = tmp_path / "etc"
    (etc / "ssh").mkdir(parents=True)
    (etc / "sudoers.d").mkdir()
    (etc / "ssh" / "sshd_config").write_text(SSHD_CONFIG)

    cfg = Config(str(tmp_path / "missing.yaml"))
    cfg.ssh.config_path = str(etc / "ssh" / "sshd_config")
    cfg.ssh.backup_path = str(etc / "ssh" / "sshd_config.bak")
    cfg.sudo.sudoers_dir = str(etc / "sudoers.d")
    cfg.install.install_dir = str(tmp_path / "bin")
    cfg.logging.log_dir = str(tmp_path / "logs")
    return cfg


@pytest.fixture
def http(monkeypatch):
    """requests.get 대체, URL 별 응답 본문 또는 예외 지정"""
    routes = {}
    calls = []

    def fake_get(url, timeout=None):
        calls.append(url)
        outcome = routes.get(url, "")
        if isinstance(outcome, Exception):
            raise outcome
        response = MagicMock()
        response.text = outcome
        response.raise_for_status.return_value = None
        return response

    monkeypatch.setattr(requests, "get", fake_get)
    fake_get.routes = routes
    fake_get.calls = calls
    return fake_get
