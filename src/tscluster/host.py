"""
호스트 컨텍스트
명령 실행(sudo 권한 상승 포함), 바이너리 탐색, 권한이 필요한 파일 작업을 한 곳에서 제공한다.
모든 컴포넌트는 이 객체를 통해서만 호스트 상태를 변경한다.
"""

import os
import pwd
import shutil
import subprocess
from typing import Callable, List, Optional, Type
from .errors import ProvisionError, PrivilegeError, DependencyMissing
from .logger import get_logger


class Host:
    """프로비저닝 대상 호스트"""

    def __init__(self,
                 user: str,
                 home: str,
                 use_sudo: bool = False,
                 owner: Optional[str] = None,
                 runner: Optional[Callable[..., subprocess.CompletedProcess]] = None):
        """
        Args:
            user: 프로비저닝 대상 계정 (sudo 로 실행해도 실제 사용자)
            home: 대상 계정의 홈 디렉토리
            use_sudo: 권한이 필요한 명령 앞에 sudo 를 붙일지 여부
            owner: root 로 실행 중일 때 사용자 파일의 소유자로 되돌릴 계정
            runner: subprocess.run 호환 함수
        """
        self.user = user
        self.home = home
        self.use_sudo = use_sudo
        self.owner = owner
        self.runner = runner or subprocess.run
        self.logger = get_logger()

    @classmethod
    def from_environment(cls) -> "Host":
        """현재 프로세스 환경에서 호스트 컨텍스트 생성"""
        is_root = os.geteuid() == 0
        sudo_user = os.environ.get("SUDO_USER")

        if is_root and sudo_user and sudo_user != "root":
            user = sudo_user
            home = pwd.getpwnam(sudo_user).pw_dir
            owner = sudo_user
        else:
            user = pwd.getpwuid(os.geteuid()).pw_name
            home = os.path.expanduser("~")
            owner = None

        return cls(user=user, home=home, use_sudo=not is_root, owner=owner)

    def elevate(self, cmd: List[str]) -> List[str]:
        """sudo 접두사 적용"""
        if self.use_sudo:
            return ["sudo"] + list(cmd)
        return list(cmd)

    def run(self,
            cmd: List[str],
            privileged: bool = True,
            capture: bool = True,
            input: Optional[str] = None,
            check: bool = True,
            error: Type[ProvisionError] = PrivilegeError,
            message: str = "Command failed",
            log_output: bool = True) -> subprocess.CompletedProcess:
        """명령 실행

        check=True 이면 0이 아닌 종료 코드를 `error` 예외로 변환한다.
        capture=False 이면 출력이 그대로 터미널로 전달된다 (대화형 인증 URL 등).
        log_output=False 이면 출력(파일 내용 등)을 로그에 남기지 않는다.
        텍스트는 surrogateescape 로 변환되어 UTF-8 이 아닌 바이트도 그대로 보존된다.
        """
        full_cmd = self.elevate(cmd) if privileged else list(cmd)
        self.logger.debug(f"$ {' '.join(full_cmd)}")

        try:
            result = self.runner(
                full_cmd,
                capture_output=capture,
                text=True,
                errors="surrogateescape",
                input=input
            )
        except FileNotFoundError as e:
            raise DependencyMissing(f"{full_cmd[0]} not found on PATH") from e

        if capture and log_output and result.stdout:
            self.logger.debug(result.stdout.rstrip())

        if check and result.returncode != 0:
            detail = (result.stderr or "").strip() if capture else ""
            msg = f"{message}: `{' '.join(full_cmd)}` exited with {result.returncode}"
            if detail:
                msg += f" ({detail})"
            raise error(msg)

        return result

    def which(self, name: str) -> Optional[str]:
        """PATH 에서 바이너리 탐색"""
        path = shutil.which(name)
        self.logger.debug(f"which {name}: {path}")
        return path

    # 파일 작업

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def read_text(self, path: str, privileged: bool = True) -> str:
        """파일 읽기 (줄바꿈 문자 및 UTF-8 이 아닌 바이트 보존)"""
        if privileged and self.use_sudo:
            result = self.run(["cat", path], message=f"Failed to read {path}", log_output=False)
            return result.stdout

        try:
            with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
                return f.read()
        except OSError as e:
            raise PrivilegeError(f"Failed to read {path}: {e}") from e

    def write_text(self, path: str, content: str, privileged: bool = True, mode: Optional[int] = None):
        """파일 쓰기 (덮어쓰기)

        mode 가 주어지면 파일이 처음부터 해당 권한으로 생성된다.
        """
        if privileged and self.use_sudo:
            if mode is None:
                self.run(["tee", path], input=content, message=f"Failed to write {path}", log_output=False)
            else:
                self.run(["install", "-m", format(mode, "o"), "/dev/stdin", path],
                         input=content, message=f"Failed to write {path}", log_output=False)
            return

        try:
            if mode is None:
                handle = open(path, "w", encoding="utf-8", errors="surrogateescape", newline="")
            else:
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
                handle = os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="")
            with handle as f:
                f.write(content)
        except OSError as e:
            raise PrivilegeError(f"Failed to write {path}: {e}") from e

    def append_text(self, path: str, content: str):
        """사용자 파일에 내용 추가"""
        try:
            with open(path, "a", encoding="utf-8", errors="surrogateescape", newline="") as f:
                f.write(content)
        except OSError as e:
            raise PrivilegeError(f"Failed to append to {path}: {e}") from e
        self._restore_owner(path)

    def copy(self, src: str, dst: str, privileged: bool = True):
        """파일 복사 (내용 및 권한 보존)"""
        if privileged and self.use_sudo:
            self.run(["cp", "-p", src, dst], message=f"Failed to copy {src} to {dst}")
            return

        try:
            shutil.copy2(src, dst)
        except OSError as e:
            raise PrivilegeError(f"Failed to copy {src} to {dst}: {e}") from e

    def chmod(self, path: str, mode: int, privileged: bool = True):
        """권한 설정"""
        if privileged and self.use_sudo:
            self.run(["chmod", format(mode, "o"), path], message=f"Failed to chmod {path}")
            return

        try:
            os.chmod(path, mode)
        except OSError as e:
            raise PrivilegeError(f"Failed to chmod {path}: {e}") from e

    def make_user_dir(self, path: str, mode: int):
        """사용자 소유 디렉토리 생성"""
        try:
            os.makedirs(path, exist_ok=True)
            os.chmod(path, mode)
        except OSError as e:
            raise PrivilegeError(f"Failed to create {path}: {e}") from e
        self._restore_owner(path)

    def make_dir(self, path: str):
        """시스템 디렉토리 생성"""
        if self.use_sudo:
            self.run(["mkdir", "-p", path], message=f"Failed to create {path}")
            return

        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise PrivilegeError(f"Failed to create {path}: {e}") from e

    def remove(self, path: str, privileged: bool = True):
        """파일 삭제"""
        if privileged and self.use_sudo:
            self.run(["rm", "-f", path], message=f"Failed to remove {path}")
            return

        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise PrivilegeError(f"Failed to remove {path}: {e}") from e

    def _restore_owner(self, path: str):
        """root 로 실행 중이면 사용자 파일 소유권을 실제 사용자에게 되돌림"""
        if not self.owner:
            return
        try:
            entry = pwd.getpwnam(self.owner)
            os.chown(path, entry.pw_uid, entry.pw_gid)
        except (OSError, KeyError) as e:
            raise PrivilegeError(f"Failed to chown {path} to {self.owner}: {e}") from e
