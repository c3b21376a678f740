"""
대화형 메뉴
"""

import enum
from typing import Callable, Optional
from rich.console import Console
from rich.prompt import Prompt
from .enroll import NodeRole, normalize_source
from .errors import UserInputError
from .logger import get_logger
from .orchestrator import ProvisionPlan

console = Console(stderr=True)


class MenuChoice(enum.Enum):
    """메뉴 항목: (번호, 설명, 역할, GitHub 사용자 필요, sudo 설정)"""
    CONTROL = ("1", "Set a control node", NodeRole.CONTROL, False, False)
    MANAGED_SSH = ("2", "Set a managed node with SSH", NodeRole.MANAGED, False, False)
    MANAGED_KEY = ("3", "Set a managed node with public key", NodeRole.MANAGED, True, False)
    MANAGED_KEY_SUDO = ("4", "Set a managed node with public key and passwordless sudo",
                        NodeRole.MANAGED, True, True)
    EXIT = ("5", "Exit", None, False, False)

    def __init__(self, key, label, role, needs_user, grants_sudo):
        self.key = key
        self.label = label
        self.role = role
        self.needs_user = needs_user
        self.grants_sudo = grants_sudo

    @classmethod
    def parse(cls, text: str) -> "MenuChoice":
        value = (text or "").strip()
        for choice in cls:
            if choice.key == value:
                return choice
        raise UserInputError(f"Invalid choice {value!r}. Please enter a number between 1 and {len(cls)}.")


class InteractiveMenu:
    """역할 선택 메뉴"""

    def __init__(self, ask: Optional[Callable[[str], str]] = None):
        self.ask = ask or (lambda prompt: Prompt.ask(prompt, console=console))
        self.logger = get_logger()

    def show(self):
        console.print("What would you like to do?")
        for choice in MenuChoice:
            console.print(f"{choice.key}. {choice.label}")

    def select(self) -> MenuChoice:
        """유효한 항목이 입력될 때까지 다시 묻는다"""
        while True:
            self.show()
            try:
                return MenuChoice.parse(self.ask(f"Please enter your choice [1-{len(MenuChoice)}]"))
            except UserInputError as e:
                self.logger.warning(str(e))

    def ask_github_user(self) -> str:
        while True:
            try:
                user = normalize_source(self.ask("Enter the GitHub username"))
            except UserInputError as e:
                self.logger.warning(str(e))
                continue
            if user:
                return user
            self.logger.warning("GitHub username must not be empty.")

    def build_plan(self) -> Optional[ProvisionPlan]:
        """선택 결과를 실행 계획으로 변환 (Exit 는 None)"""
        choice = self.select()
        if choice is MenuChoice.EXIT:
            self.logger.info("Exiting...")
            return None

        github_user = self.ask_github_user() if choice.needs_user else None
        return ProvisionPlan(
            role=choice.role,
            github_user=github_user,
            passwordless_sudo=choice.grants_sudo
        )
