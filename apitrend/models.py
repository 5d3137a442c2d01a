from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, model_validator

DEFAULT_SENSITIVE_KEYS = [
    "authorization",
    "cookie",
    "password",
    "passwd",
    "pwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "access_key",
    "private_key",
    "secret_key",
    "client_secret",
    "credential",
    "credentials",
]

DEFAULT_FILE_PATTERNS = ["*.json", "*.txt", "*.properties", "*.log"]


class PostmanSettings(BaseModel):
    collection_uid: str = Field(min_length=1)
    api_key: str = Field(min_length=1)
    api_base: str = "https://api.getpostman.com"
    timeout: float = 30.0


class PathSettings(BaseModel):
    results_dir: Path = Path("allure-results")
    report_dir: Path = Path("allure-report")
    reports_dir: Path = Path("reports")
    runs_dir: Path = Path(".runs")


class HistorySettings(BaseModel):
    dir: Path = Path(".history")
    retention: int = Field(default=3, ge=1)
    trend_file: Path = Path("reports/trend.json")
    trend_window: int = Field(default=10, ge=1)


class RedactionSettings(BaseModel):
    marker: str = "***REDACTED***"
    sensitive_keys: List[str] = Field(default_factory=lambda: list(DEFAULT_SENSITIVE_KEYS))
    file_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_FILE_PATTERNS))


class ToolSettings(BaseModel):
    newman: str = "newman"
    allure: str = "allure"
    surge: str = "surge"
    git: str = "git"


class ReportSettings(BaseModel):
    project: str = "API Automation"
    executor: Dict[str, str] = Field(default_factory=lambda: {"name": "apitrend", "type": "CLI"})
    environment: Dict[str, str] = Field(default_factory=dict)


class SurgeTarget(BaseModel):
    domain: str
    login: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None

    @model_validator(mode="after")
    def _has_credentials(self) -> "SurgeTarget":
        if self.token:
            return self
        if not (self.login and self.password):
            raise ValueError("surge needs SURGE_TOKEN or both SURGE_LOGIN and SURGE_PASSWORD")
        return self

    @property
    def public_url(self) -> str:
        if self.domain.startswith(("http://", "https://")):
            return self.domain
        return f"https://{self.domain}"


class PagesTarget(BaseModel):
    repo_url: str
    branch: str = "gh-pages"
    token: Optional[str] = None
    username: str = "x-access-token"
    public_url: Optional[str] = None
    commit_name: str = "apitrend"
    commit_email: str = "apitrend@users.noreply.github.com"


class DeploySettings(BaseModel):
    target: Literal["none", "surge", "pages"] = "none"
    surge: Optional[SurgeTarget] = None
    pages: Optional[PagesTarget] = None

    @model_validator(mode="after")
    def _target_configured(self) -> "DeploySettings":
        if self.target == "surge" and self.surge is None:
            raise ValueError("deploy target 'surge' selected but SURGE_DOMAIN is not set")
        if self.target == "pages" and self.pages is None:
            raise ValueError("deploy target 'pages' selected but PAGES_REPO_URL is not set")
        return self

    @property
    def report_url(self) -> Optional[str]:
        if self.target == "surge" and self.surge is not None:
            return self.surge.public_url
        if self.target == "pages" and self.pages is not None:
            return self.pages.public_url
        return None


class NotifySettings(BaseModel):
    webhook_url: Optional[str] = None
    timeout: float = 10.0


class StepConfig(BaseModel):
    stage: str
    handler: str
    requires: List[str] = []
    fatal: bool = False
    gating: bool = False


class PipelineConfig(BaseModel):
    postman: PostmanSettings
    paths: PathSettings = Field(default_factory=PathSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    redaction: RedactionSettings = Field(default_factory=RedactionSettings)
    tools: ToolSettings = Field(default_factory=ToolSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    deploy: DeploySettings = Field(default_factory=DeploySettings)
    notify: NotifySettings = Field(default_factory=NotifySettings)
    failure_policy: Literal["best_effort", "fail_fast"] = "best_effort"
    pipeline: Optional[List[StepConfig]] = None
