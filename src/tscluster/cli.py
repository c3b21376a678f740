"""
CLI 메인 인터페이스
Click 및 Rich 기반 CLI
"""

import sys
import click
from rich.console import Console
from rich.table import Table
from . import __version__
from .config import Config
from .enroll import NodeRole
from .errors import ProvisionError
from .host import Host
from .installer import AgentInstaller
from .logger import init_logger, get_logger
from .menu import InteractiveMenu
from .orchestrator import ProvisionOrchestrator, ProvisionPlan
from .selfinstall import SelfInstaller

console = Console(stderr=True)


def _execute(func, *args):
    """명령 실행, 치명적 오류는 분류 메시지 출력 후 종료 코드 1"""
    logger = get_logger()
    try:
        return func(*args)
    except ProvisionError as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]사용자에 의해 중단되었습니다.[/yellow]")
        logger.warning("Execution interrupted by user")
        sys.exit(1)


def _provision(cfg: Config, plan: ProvisionPlan):
    orchestrator = ProvisionOrchestrator(Host.from_environment(), cfg)
    orchestrator.run(plan)


def _interactive(cfg: Config):
    console.print()
    console.print(f"[bold green]Welcome to the {cfg.install.install_name.upper()} tool![/bold green]")
    console.print()
    console.print("Run this tool on each managed node, then run it on the control node.")
    console.print()

    plan = InteractiveMenu().build_plan()
    if plan is None:
        return
    _provision(cfg, plan)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='설정 파일 경로')
@click.option('--debug', is_flag=True, help='디버그 모드')
@click.pass_context
def cli(ctx, config_path, debug):
    """tscluster - Tailscale 메시 네트워크 노드 프로비저닝

    하위 명령 없이 실행하면 대화형 메뉴가 표시됩니다.
    """
    cfg = Config(config_path)
    init_logger(cfg.logging.log_dir, cfg.logging.log_level, debug)
    get_logger().debug(f"Loaded configuration from {cfg.config_path or 'defaults'}")

    ctx.obj = cfg
    if ctx.invoked_subcommand is None:
        _execute(_interactive, cfg)


@cli.command()
@click.pass_obj
def install(cfg):
    """tscluster 를 /usr/local/bin 에 설치"""
    installer = SelfInstaller(Host.from_environment(), cfg.install)
    _execute(installer.install)


@cli.command()
@click.pass_obj
def uninstall(cfg):
    """/usr/local/bin 에서 tscluster 제거"""
    installer = SelfInstaller(Host.from_environment(), cfg.install)
    _execute(installer.uninstall)


@cli.command()
@click.option('--role', type=click.Choice([role.value for role in NodeRole]), required=True,
              help='노드 역할')
@click.option('--github-user', default=None, help='공개키를 가져올 GitHub 사용자')
@click.option('--passwordless-sudo', is_flag=True, help='현재 사용자에게 비밀번호 없는 sudo 부여')
@click.pass_obj
def setup(cfg, role, github_user, passwordless_sudo):
    """비대화형 노드 설정"""
    plan = ProvisionPlan(
        role=NodeRole(role),
        github_user=github_user,
        passwordless_sudo=passwordless_sudo
    )
    _execute(_provision, cfg, plan)


@cli.command()
@click.pass_obj
def status(cfg):
    """tailscaled 서비스 상태 확인"""
    installer = AgentInstaller(Host.from_environment(), cfg.agent)
    agent_status = _execute(installer.query_status)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("항목", style="cyan")
    table.add_column("값")
    table.add_row("서비스", agent_status.service)
    table.add_row("상태", agent_status.state)
    table.add_row("부팅 시 시작", "예" if agent_status.enabled else "아니오")
    console.print(table)

    sys.exit(0 if agent_status.active else 1)


@cli.command()
@click.argument('output', type=click.Path(), default='./config.yaml')
@click.pass_obj
def init(cfg, output):
    """샘플 설정 파일 생성"""
    cfg.create_sample(output)
    console.print(f"[green]✓ 샘플 설정 파일 생성: {output}[/green]")


def main():
    """메인 엔트리 포인트"""
    cli()


if __name__ == '__main__':
    main()
