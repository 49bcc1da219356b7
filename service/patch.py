"""
커밋 하나를 메일박스(git am) 형식의 패치로 표현합니다.

커밋 메시지에서 알려진 트레일러(Signed-off-by 등)를 분리해 두었다가,
병합 시 승인 트레일러를 덧붙여 다시 패치 파일을 만듭니다.
"""

from datetime import datetime
from email.utils import format_datetime

from pydantic import BaseModel

# 커밋 메시지에서 트레일러로 인식하는 키
TRAILERS = [
    "Signed-off-by",
    "Co-authored-by",
    "GitHub-Closes",
    "GitHub-Fixes",
]

# 패치 파일 끝에 붙는 git 버전 표기
PATCH_SIGNATURE = "-- \n2.39.2\n\n"


def trailer_name_from_capture(key: str) -> str:
    """
    캡처 그룹 이름을 트레일러 키로 변환하는 함수

    예: "approved_by" -> "Approved-by", "reviewed_by" -> "Reviewed-by"
    """
    return key.replace("_", "-").capitalize()


def is_trailer(line: str) -> bool:
    lowered = line.lower()
    return any(lowered.startswith(trailer.lower() + ":") for trailer in TRAILERS)


class Patch(BaseModel):
    """커밋 하나와 그 메타데이터"""

    hash: str
    title: str
    message: str = ""
    trailers: list[str] = []
    author_name: str = ""
    author_email: str = ""
    author_date: str = ""  # RFC 2822 형식
    stat: str = ""
    diff: str = ""
    filename: str = ""  # 저장된 패치 파일 경로

    @classmethod
    def from_commit(
        cls,
        hash: str,
        raw_message: str,
        author_name: str,
        author_email: str,
        author_date: datetime,
        stat: str = "",
        diff: str = "",
    ) -> "Patch":
        """
        커밋 정보로 Patch를 만드는 함수

        Args:
            hash: 커밋 해시
            raw_message: 커밋 메시지 전체 (첫 줄은 제목)
            author_name: 작성자 이름
            author_email: 작성자 이메일
            author_date: 작성 시각
            stat: diffstat
            diff: diff 본문

        Returns:
            Patch: 트레일러가 분리된 패치
        """
        lines = raw_message.split("\n")
        message = []
        trailers = []
        for line in lines[1:]:
            if is_trailer(line):
                trailers.append(line)
            else:
                message.append(line)

        while message and message[-1] == "":
            message.pop()

        return cls(
            hash=hash,
            title=lines[0],
            message="\n".join(message),
            trailers=trailers,
            author_name=author_name,
            author_email=author_email,
            author_date=format_datetime(author_date),
            stat=stat,
            diff=diff,
        )

    @property
    def full_message(self) -> str:
        """제목, 본문, 트레일러를 합친 커밋 메시지"""
        return "\n".join([self.title, self.message, *self.trailers])

    def add_trailer(self, trailer: str) -> None:
        if trailer not in self.trailers:
            self.trailers.append(trailer)

    def __str__(self) -> str:
        parts = [
            f"From {self.hash}\n",
            f"From: {self.author_name} <{self.author_email}>\n",
            f"Date: {self.author_date}\n",
            f"Subject: [PATCH] {self.title}\n",
            f"{self.message}\n",
            "\n".join(self.trailers),
            "\n---\n",
            f"{self.stat}\n",
            self.diff,
            PATCH_SIGNATURE,
        ]
        return "".join(parts)
