from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import ConfigError
from .prompts import SYSTEM_PROMPT
from .tools.types import TOOL_FILE_OPERATION, TOOL_SHELL_COMMAND

API_KEY_ENV = "ZHIPU_API_KEY"
GLM_API_URL = "https://open.bigmodel.cn/api/paas/v4/chat/completions"
DEFAULT_MODEL = "glm-4.5"

DEFAULT_TOOLS = (TOOL_FILE_OPERATION, TOOL_SHELL_COMMAND)

DEFAULT_LOG_FILE = "simple-agent.log"
DEFAULT_HISTORY_FILE = os.path.join(os.path.expanduser("~"), ".simple_agent", "history")


@dataclass
class AgentConfig:
    api_key: str
    api_url: str = GLM_API_URL
    model: str = DEFAULT_MODEL
    system_prompt: str = SYSTEM_PROMPT
    tools: Tuple[str, ...] = DEFAULT_TOOLS
    workdir: str = "."
    request_timeout: float = 120.0  # seconds
    shell_timeout: float = 30.0  # seconds
    max_tool_rounds: int = 10  # 0 = unlimited
    log_file: str = DEFAULT_LOG_FILE
    log_level: str = "INFO"
    history_file: Optional[str] = field(default=DEFAULT_HISTORY_FILE)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def load_config(**overrides) -> AgentConfig:
    """Build the agent configuration from the environment.

    Keyword arguments that are not None override the environment values, which
    is how CLI options take precedence.
    """
    api_key = overrides.pop("api_key", None) or os.environ.get(API_KEY_ENV, "").strip()
    if not api_key:
        raise ConfigError(
            f"{API_KEY_ENV} is not set. Export it first: export {API_KEY_ENV}=your_api_key"
        )

    values = {
        "log_file": os.environ.get("SIMPLE_AGENT_LOG_FILE") or DEFAULT_LOG_FILE,
        "log_level": (os.environ.get("SIMPLE_AGENT_LOG_LEVEL") or "INFO").upper(),
        "max_tool_rounds": _env_int("SIMPLE_AGENT_MAX_TOOL_ROUNDS", 10),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    values["log_level"] = str(values["log_level"]).upper()
    if not isinstance(logging.getLevelName(values["log_level"]), int):
        raise ConfigError(f"unknown log level: {values['log_level']}")
    if values["max_tool_rounds"] < 0:
        raise ConfigError("max_tool_rounds must be zero (unlimited) or positive")
    if "workdir" in values and not os.path.isdir(values["workdir"]):
        raise ConfigError(f"workdir is not a directory: {values['workdir']}")

    return AgentConfig(api_key=api_key, **values)
