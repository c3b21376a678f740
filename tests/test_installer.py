"""
Tailscale 에이전트 설치 모듈 테스트
"""

import pytest
import requests
from tscluster.errors import NetworkError, PrivilegeError
from tscluster.installer import AgentInstaller

INSTALL_SCRIPT = "#!/bin/sh\necho installing tailscale\n"


@pytest.fixture
def installer(host, config, http):
    http.routes[config.agent.install_url] = INSTALL_SCRIPT
    return AgentInstaller(host, config.agent)


def test_install_agent_sequence(installer, runner):
    """설치 단계 순서"""
    status = installer.install_agent()

    order = [
        "apt-get update",
        "sh",
        "systemctl stop tailscaled",
        "systemctl enable tailscaled",
        "systemctl start tailscaled",
        "systemctl status tailscaled",
    ]
    indexes = [runner.index(command) for command in order]
    assert indexes == sorted(indexes)

    assert runner.inputs[runner.index("sh")] == INSTALL_SCRIPT
    assert status.active
    assert status.enabled
    assert status.state.startswith("active (running)")


def test_install_agent_twice(installer, runner):
    """재실행해도 오류 없이 서비스 활성 상태 유지"""
    first = installer.install_agent()
    second = installer.install_agent()

    assert first.active and first.enabled
    assert second.active and second.enabled


def test_stop_failure_is_ignored(installer, runner):
    runner.respond("systemctl", "stop", returncode=5, stderr="Unit tailscaled.service not loaded.")
    assert installer.install_agent().active


def test_index_refresh_failure_is_fatal(installer, runner, http):
    runner.respond("apt-get", "update", returncode=100)

    with pytest.raises(PrivilegeError):
        installer.install_agent()

    assert http.calls == []
    assert not runner.ran("sh")


def test_installer_download_failure(installer, runner, http, config):
    http.routes[config.agent.install_url] = requests.exceptions.ConnectionError("no route to host")

    with pytest.raises(NetworkError):
        installer.install_agent()

    assert not runner.ran("systemctl enable tailscaled")


def test_script_failure_is_fatal(installer, runner):
    runner.respond("sh", returncode=1)

    with pytest.raises(PrivilegeError):
        installer.install_agent()


def test_service_start_failure_is_fatal(installer, runner):
    runner.respond("systemctl", "start", returncode=1)

    with pytest.raises(PrivilegeError):
        installer.install_agent()

    assert not runner.ran("systemctl status tailscaled")


def test_query_status_inactive(installer, runner):
    runner.respond(
        "systemctl", "status",
        returncode=3,
        stdout="     Active: inactive (dead)\n"
    )
    runner.respond("systemctl", "is-enabled", returncode=1, stdout="disabled\n")

    status = installer.query_status()

    assert status.state == "inactive (dead)"
    assert not status.active
    assert not status.enabled
