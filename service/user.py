"""
조직 구성원 모델
"""

from enum import Enum

from pydantic import BaseModel


class UserRole(str, Enum):
    ADMIN = "admin"
    MAINTAINER = "maintainer"
    REVIEWER = "reviewer"
    MEMBER = "member"


class User(BaseModel):
    """팀 정의 파일에 기재된 구성원"""

    name: str = ""
    email: str = ""
    github: str = ""  # GitHub 사용자명
    discord: str = ""  # 채팅 핸들
    role: UserRole | None = None
