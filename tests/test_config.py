"""
설정 관리 모듈 테스트
"""

import os
import tempfile
from tscluster.config import Config


def test_default_config(tmp_path):
    """기본 설정 테스트"""
    config = Config(str(tmp_path / "missing.yaml"))
    assert config.agent.service == "tailscaled"
    assert config.ssh.config_path == "/etc/ssh/sshd_config"
    assert config.ssh.backup_path == "/etc/ssh/sshd_config.bak"
    assert config.keys.url_template.format(user="alice") == "https://github.com/alice.keys"
    assert config.sudo.sudoers_dir == "/etc/sudoers.d"
    assert config.install.install_dir == "/usr/local/bin"


def test_config_load_yaml():
    """YAML 설정 파일 로드 테스트"""
    yaml_content = """
agent:
  control_up_args: ["--advertise-exit-node"]
  unknown_key: ignored

ssh:
  service: "sshd"

keys:
  url_template: "https://gitlab.com/{user}.keys"
"""

    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write(yaml_content)
        temp_path = f.name

    try:
        config = Config(temp_path)
        assert config.up_args("control") == ["--advertise-exit-node"]
        assert config.up_args("managed") == []
        assert config.ssh.service == "sshd"
        assert config.ssh.binary == "sshd"
        assert config.keys.url_template == "https://gitlab.com/{user}.keys"
        assert not hasattr(config.agent, "unknown_key")
    finally:
        os.unlink(temp_path)


def test_config_save(tmp_path):
    """설정 저장 테스트"""
    config = Config(str(tmp_path / "missing.yaml"))
    config.sudo.validate = False

    path = str(tmp_path / "saved.yaml")
    config.save(path)

    config2 = Config(path)
    assert config2.sudo.validate is False


def test_config_save_json(tmp_path):
    config = Config(str(tmp_path / "missing.yaml"))
    config.keys.timeout = 3

    path = str(tmp_path / "saved.json")
    config.save(path)

    assert Config(path).keys.timeout == 3


def test_config_to_dict(tmp_path):
    """딕셔너리 변환 테스트"""
    data = Config(str(tmp_path / "missing.yaml")).to_dict()

    assert set(data) == {"agent", "ssh", "keys", "sudo", "install", "logging"}
    assert data["sudo"]["validate"] is True


def test_create_sample_is_loadable(tmp_path):
    path = str(tmp_path / "sample" / "config.yaml")
    Config(str(tmp_path / "missing.yaml")).create_sample(path)

    config = Config(path)
    assert config.agent.install_url == "https://tailscale.com/install.sh"
    assert config.logging.log_level == "INFO"
