"""Configuration management for vtrim.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (VTRIM_*)
3. Config file (~/.vtrim/config.toml)
4. Default values (lowest priority)
"""

from vtrim.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from vtrim.config.env import EnvReader
from vtrim.config.loader import (
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    get_storage_root,
    load_config_file,
)
from vtrim.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from vtrim.config.models import (
    LoggingConfig,
    ServerConfig,
    StorageConfig,
    ToolPathsConfig,
    TrimConfig,
    TrimPolicy,
    UploadConfig,
    VTrimConfig,
)
from vtrim.config.toml_parser import TomlParseError, load_toml_file, parse_toml

__all__ = [
    # Models
    "LoggingConfig",
    "ServerConfig",
    "StorageConfig",
    "ToolPathsConfig",
    "TrimConfig",
    "TrimPolicy",
    "UploadConfig",
    "VTrimConfig",
    # Builder
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "source_from_env",
    "source_from_file",
    # Loader
    "clear_config_cache",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "get_storage_root",
    "load_config_file",
    # Logging
    "build_logging_config",
    "configure_logging_from_cli",
    # TOML
    "TomlParseError",
    "load_toml_file",
    "parse_toml",
]
