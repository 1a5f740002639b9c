from .config import AgentConfig, load_config
from .runtime import Agent

__all__ = ["AgentConfig", "load_config", "Agent"]
