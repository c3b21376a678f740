"""
tscluster
Tailscale 메시 네트워크에 컨트롤 노드와 관리 노드를 프로비저닝하는 도구

Features:
- Tailscale 에이전트 설치 및 서비스 활성화
- SSH 비밀번호 로그인 비활성화 (검증 실패 시 백업 복원)
- GitHub 공개키 기반 authorized_keys 구성
- 역할별 메시 네트워크 가입
- 비밀번호 없는 sudo 설정
"""

__version__ = "1.0.0"
__author__ = "DevOps Team"
