"""YAML/JSON 설정 로딩 + Pydantic 모델."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config.yaml"


class MissingCredentialError(RuntimeError):
    """프리뷰 저장소 접근 토큰이 없을 때 발생하는 설정 오류."""


# ── 설정 모델 ──────────────────────────────────────────


class PreviewRepositoryConfig(BaseModel):
    owner: str
    name: str
    branch: str = "main"
    host: str = "github.com"
    url: str | None = None  # 지정 시 토큰 URL 대신 그대로 사용
    token_env_var: str = "PREVIEW_REPO_TOKEN"
    pages_base_url: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class SourceConfig(BaseModel):
    url_template: str = "https://github.com/{full_name}.git"


class GitIdentityConfig(BaseModel):
    user_name: str = "GitHub Actions"
    user_email: str = "actions@github.com"


class NotifyConfig(BaseModel):
    slack_webhook_env_var: str = "SLACK_WEBHOOK_URL"


class AppConfig(BaseModel):
    """애플리케이션 전체 설정.

    원본 config.json의 camelCase 키(monitoredRepositories, previewRepository)도 허용한다.
    """

    model_config = ConfigDict(populate_by_name=True)

    monitored_repositories: list[str] = Field(min_length=1, alias="monitoredRepositories")
    preview_repository: PreviewRepositoryConfig = Field(alias="previewRepository")
    source: SourceConfig = Field(default_factory=SourceConfig)
    git: GitIdentityConfig = Field(default_factory=GitIdentityConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)

    @field_validator("monitored_repositories")
    @classmethod
    def monitored_repositories_not_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("monitored_repositories must contain at least one repository")
        return v


# ── 로딩 ───────────────────────────────────────────────


def load_config(path: Path | None = None) -> AppConfig:
    """설정 파일을 로딩하고 Pydantic 모델로 검증한다.

    yaml.safe_load로 읽으므로 JSON 설정 파일도 그대로 사용할 수 있다.
    환경변수 우선순위: 시스템 환경변수 > .env 파일 > 설정 파일 값
    """
    config_path = path or _DEFAULT_CONFIG_PATH

    dotenv_path = config_path.parent / ".env"
    load_dotenv(dotenv_path=dotenv_path, override=False)

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raise ValueError(f"Empty config file: {config_path}")

    # camelCase 키로 작성된 파일도 같은 위치를 덮어쓴다
    preview_key = "previewRepository" if "previewRepository" in raw else "preview_repository"

    if owner := os.environ.get("PREVIEW_REPO_OWNER"):
        raw.setdefault(preview_key, {})
        raw[preview_key]["owner"] = owner

    if name := os.environ.get("PREVIEW_REPO_NAME"):
        raw.setdefault(preview_key, {})
        raw[preview_key]["name"] = name

    return AppConfig.model_validate(raw)


def resolve_token(config: AppConfig) -> str:
    """프리뷰 저장소 토큰을 환경변수에서 읽는다. 없으면 네트워크 작업 전에 실패한다."""
    env_var = config.preview_repository.token_env_var
    token = os.environ.get(env_var, "")
    if not token:
        raise MissingCredentialError(f"{env_var} environment variable is required")
    return token
