"""Core settings, paths and logging shared by the tunny installer and launcher."""

from .config import (
    ProvisionConfig,
    __version__,
    apply_env,
    installed_version,
    load_config,
    resolve_defaults,
)
from .logging_setup import configure_logging, get_logger
from .paths import PACKAGE_NAME, binary_name, binary_path, data_root, install_root

__all__ = [
    "PACKAGE_NAME",
    "ProvisionConfig",
    "__version__",
    "apply_env",
    "binary_name",
    "binary_path",
    "configure_logging",
    "data_root",
    "get_logger",
    "install_root",
    "installed_version",
    "load_config",
    "resolve_defaults",
]
