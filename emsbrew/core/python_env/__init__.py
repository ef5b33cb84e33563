from .bindings import build_ext_argv, install_argv
from .site_link import PTH_NAME, link_environment, read_link
from .venv import (
    BindingEnv,
    binding_env,
    create_venv_argv,
    main_site_packages,
    pip_install_argv,
    probe_python_version,
    venv_root_for,
)

__all__ = [
    "BindingEnv",
    "PTH_NAME",
    "binding_env",
    "build_ext_argv",
    "create_venv_argv",
    "install_argv",
    "link_environment",
    "main_site_packages",
    "pip_install_argv",
    "probe_python_version",
    "read_link",
    "venv_root_for",
]
