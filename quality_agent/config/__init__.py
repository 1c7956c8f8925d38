"""
Configuration package for Quality Checker Agent
"""

from .agent_config import (
    AgentConfig,
    TEST_GENERATOR_REQUIRED_VARIABLES,
    get_agent_config,
    load_environment_files,
    parse_model_names,
    setup_langsmith,
    setup_logging
)

__all__ = [
    "AgentConfig",
    "TEST_GENERATOR_REQUIRED_VARIABLES",
    "get_agent_config",
    "load_environment_files",
    "parse_model_names",
    "setup_langsmith",
    "setup_logging"
]
