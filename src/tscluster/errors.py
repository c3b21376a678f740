"""
프로비저닝 오류 정의
모든 치명적 오류는 ProvisionError 하위 클래스로 전달되며 CLI에서 종료 코드 1로 변환된다.
"""


class ProvisionError(Exception):
    """프로비저닝 기본 오류"""

    category = "ProvisionError"

    def __str__(self) -> str:
        return f"[{self.category}] {super().__str__()}"


class PrivilegeError(ProvisionError):
    """권한이 필요한 명령 실패 (sudo, 패키지 설치, 서비스 제어)"""

    category = "PrivilegeError"


class DependencyMissing(ProvisionError):
    """필요한 바이너리 또는 설정 파일 없음"""

    category = "DependencyMissing"


class ValidationError(ProvisionError):
    """편집된 설정이 문법 검사를 통과하지 못함"""

    category = "ValidationError"


class NetworkError(ProvisionError):
    """설치 스크립트 또는 공개키 다운로드 실패"""

    category = "NetworkError"


class UserInputError(ProvisionError):
    """잘못된 사용자 입력 (메뉴 선택, 계정 이름)"""

    category = "UserInputError"
