from uvllint.config.loader import DEFAULT_CONFIG_NAME, discover_config_path, load_config
from uvllint.config.types import LintConfig, ReportConfig, RulesConfig

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "LintConfig",
    "ReportConfig",
    "RulesConfig",
    "discover_config_path",
    "load_config",
]
