"""
Config Module - Black Box Interface

Purpose: Scenario configuration management
Interface: get_scenario_config(), EnvConfigProvider
Hidden: Environment parsing, defaults

Configuration is always passed explicitly into the verifier; nothing here is a
process-wide singleton.
"""

from .provider import (
    ConfigProvider,
    EnvConfigProvider,
    KubectlConfig,
    PlatformConfig,
    ScenarioConfig,
    default_pod_selector,
)

__all__ = [
    "ConfigProvider",
    "EnvConfigProvider",
    "KubectlConfig",
    "PlatformConfig",
    "ScenarioConfig",
    "default_pod_selector",
]
