from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from apitrend.models import PipelineConfig

DEFAULT_CONFIG_FILE = Path("apitrend.yaml")

# env var -> dotted config path
ENV_FIELDS: Dict[str, str] = {
    "COLLECTION_UID": "postman.collection_uid",
    "POSTMAN_API_KEY": "postman.api_key",
    "POSTMAN_API_BASE": "postman.api_base",
    "FETCH_TIMEOUT": "postman.timeout",
    "DEPLOY_TARGET": "deploy.target",
    "SURGE_DOMAIN": "deploy.surge.domain",
    "SURGE_LOGIN": "deploy.surge.login",
    "SURGE_PASSWORD": "deploy.surge.password",
    "SURGE_TOKEN": "deploy.surge.token",
    "PAGES_REPO_URL": "deploy.pages.repo_url",
    "PAGES_BRANCH": "deploy.pages.branch",
    "GITHUB_TOKEN": "deploy.pages.token",
    "PAGES_TOKEN": "deploy.pages.token",
    "PAGES_URL": "deploy.pages.public_url",
    "WEBHOOK_URL": "notify.webhook_url",
    "HISTORY_DIR": "history.dir",
    "HISTORY_RETENTION": "history.retention",
    "TREND_WINDOW": "history.trend_window",
    "FAILURE_POLICY": "failure_policy",
}

_FIELD_TO_ENV = {path: name for name, path in ENV_FIELDS.items()}


class ConfigError(ValueError):
    pass


def _set_dotted(raw: Dict[str, Any], dotted: str, value: Any) -> None:
    node = raw
    parts = dotted.split(".")
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level.")
    # sections left empty fall back to defaults
    return {key: value for key, value in raw.items() if value is not None}


# field that names a deployment; credentials alone never select one
_TARGET_FIELDS = {"surge": "domain", "pages": "repo_url"}


def _infer_deploy_target(raw: Dict[str, Any]) -> None:
    deploy = raw.get("deploy") or {}
    if not isinstance(deploy, dict):
        raise ConfigError("deploy must be a mapping.")
    raw["deploy"] = deploy

    target = deploy.get("target")
    if not target:
        candidates = [
            name
            for name, field in _TARGET_FIELDS.items()
            if isinstance(deploy.get(name), dict) and deploy[name].get(field)
        ]
        if len(candidates) > 1:
            raise ConfigError(
                "Both surge and pages deployment are configured. Set DEPLOY_TARGET to pick one."
            )
        target = candidates[0] if candidates else "none"
        deploy["target"] = target

    # leftover credentials for the other target are not validated
    for name in _TARGET_FIELDS:
        if name != target:
            deploy.pop(name, None)


def _describe(err: ValidationError) -> str:
    lines = []
    for item in err.errors():
        dotted = ".".join(str(p) for p in item["loc"])
        env_name = _FIELD_TO_ENV.get(dotted)
        where = f"{dotted} ({env_name})" if env_name else dotted
        lines.append(f"{where}: {item['msg']}")
    return "; ".join(lines)


def load_config(
    env: Optional[Mapping[str, str]] = None,
    config_path: str | Path | None = None,
) -> PipelineConfig:
    """
    Build the pipeline configuration.
    YAML file first (optional), then environment variables on top.
    Passing ``env`` skips the process environment and .env entirely.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    if config_path is None:
        config_path = env.get("APITREND_CONFIG") or None
    path = Path(config_path) if config_path else DEFAULT_CONFIG_FILE

    raw: Dict[str, Any] = {}
    if path.exists():
        raw = _read_yaml(path)
    elif config_path:
        raise ConfigError(f"Config file not found: {path}")

    for name, dotted in ENV_FIELDS.items():
        value = env.get(name)
        if value:
            _set_dotted(raw, dotted, value)

    postman = raw.get("postman") or {}
    missing = [
        name
        for name, key in (("COLLECTION_UID", "collection_uid"), ("POSTMAN_API_KEY", "api_key"))
        if not postman.get(key)
    ]
    if missing:
        raise ConfigError(f"Missing {' or '.join(missing)} in environment or .env")

    _infer_deploy_target(raw)

    try:
        return PipelineConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(_describe(e)) from e
