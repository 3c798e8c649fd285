"""Pull request 이벤트 데이터 모델 (Pydantic)."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Action(StrEnum):
    OPENED = "opened"
    SYNCHRONIZE = "synchronize"
    CLOSED = "closed"
    MERGED = "merged"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> Action:
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class Owner(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    login: str


class Repository(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    full_name: str
    owner: Owner


class Head(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    sha: str = Field(min_length=1)


class PullRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    number: int = Field(gt=0)
    head: Head


class Organization(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    login: str


class PullRequestEvent(BaseModel):
    """pull_request 웹훅 이벤트.

    - action, repository, pull_request는 필수 (null 불가)
    - organization은 개인 저장소 이벤트에서는 없을 수 있다
    - 처리하지 않는 action 값은 Action.OTHER로 정규화된다
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    action: Action
    repository: Repository
    pull_request: PullRequest
    organization: Organization | None = None

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Action.parse(v)
        return v

    @property
    def repo_name(self) -> str:
        return self.repository.name

    @property
    def pr_number(self) -> int:
        return self.pull_request.number

    @property
    def head_sha(self) -> str:
        return self.pull_request.head.sha

    @property
    def short_sha(self) -> str:
        return self.head_sha[:7]
