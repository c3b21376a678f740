"""
대화형 메뉴 테스트
"""

import pytest
from tscluster.enroll import NodeRole
from tscluster.errors import UserInputError
from tscluster.menu import InteractiveMenu, MenuChoice


def scripted(*answers):
    """입력 순서대로 응답하는 ask 함수"""
    queue = list(answers)
    prompts = []

    def ask(prompt):
        prompts.append(prompt)
        return queue.pop(0)

    ask.prompts = prompts
    return ask


def test_parse_choice():
    assert MenuChoice.parse("1") is MenuChoice.CONTROL
    assert MenuChoice.parse(" 4 ") is MenuChoice.MANAGED_KEY_SUDO
    with pytest.raises(UserInputError):
        MenuChoice.parse("6")
    with pytest.raises(UserInputError):
        MenuChoice.parse("")


def test_invalid_choice_is_reprompted():
    """잘못된 입력은 경고 후 다시 묻는다"""
    ask = scripted("9", "abc", "2")
    assert InteractiveMenu(ask).select() is MenuChoice.MANAGED_SSH
    assert len(ask.prompts) == 3


@pytest.mark.parametrize("answers,role,user,sudo", [
    (("1",), NodeRole.CONTROL, None, False),
    (("2",), NodeRole.MANAGED, None, False),
    (("3", "alice"), NodeRole.MANAGED, "alice", False),
    (("4", "", "alice"), NodeRole.MANAGED, "alice", True),
])
def test_build_plan(answers, role, user, sudo):
    plan = InteractiveMenu(scripted(*answers)).build_plan()

    assert plan.role is role
    assert plan.github_user == user
    assert plan.passwordless_sudo is sudo


def test_exit_returns_none():
    assert InteractiveMenu(scripted("5")).build_plan() is None


def test_invalid_github_user_is_reprompted():
    ask = scripted("3", "bad/user", "alice")
    assert InteractiveMenu(ask).build_plan().github_user == "alice"
