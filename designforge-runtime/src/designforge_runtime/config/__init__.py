"""
Configuration for the DesignForge runtime.

``RuntimeSettings`` carries every tunable, layered from defaults, an optional
configuration file and environment variables; ``build_job`` freezes the
result into the ``JobDescriptor`` the controller consumes.
"""
from .loader import ConfigFileError, load_config_file, normalize_config
from .settings import RuntimeSettings, build_job, provider_names, providers_from_environment

__all__ = [
    "ConfigFileError",
    "RuntimeSettings",
    "build_job",
    "load_config_file",
    "normalize_config",
    "provider_names",
    "providers_from_environment",
]
