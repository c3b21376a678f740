"""
비밀번호 없는 sudo 설정 모듈
"""

import os
import re
from .config import SudoConfig
from .errors import UserInputError, ValidationError
from .host import Host
from .logger import get_logger

ACCOUNT_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*\$?$")

# sudo 는 0440 이 아닌, 그룹/기타 쓰기 권한이 있는 선언 파일을 거부한다
SUDOERS_FILE_MODE = 0o440


def declaration_name(account: str) -> str:
    """선언 파일 이름

    sudo 의 includedir 는 '.' 이 포함된 파일을 무시하므로 '_' 로 치환한다.
    """
    return f"{account.replace('.', '_')}-nopasswd"


class PrivilegeConfigurator:
    """sudo 권한 설정 클래스"""

    def __init__(self, host: Host, config: SudoConfig):
        self.host = host
        self.config = config
        self.logger = get_logger()

    def declaration_path(self, account: str) -> str:
        return os.path.join(self.config.sudoers_dir, declaration_name(account))

    def grant_passwordless_sudo(self, account: str) -> str:
        """계정에 비밀번호 없는 sudo 부여, 생성된 선언 파일 경로 반환"""
        if not account or not ACCOUNT_PATTERN.match(account):
            raise UserInputError(f"Invalid account name: {account!r}")

        self.logger.info(f"Configuring passwordless sudo for user {account}...")

        path = self.declaration_path(account)
        self.host.write_text(
            path,
            f"{account} ALL=(ALL) NOPASSWD: ALL\n",
            mode=SUDOERS_FILE_MODE
        )
        self.host.chmod(path, SUDOERS_FILE_MODE)

        if self.config.validate:
            result = self.host.run(["visudo", "-cf", path], check=False)
            if result.returncode != 0:
                self.host.remove(path)
                raise ValidationError(f"sudoers declaration {path} failed visudo check and was removed")

        self.logger.info(f"Passwordless sudo has been configured for user {account}.")
        return path
