"""Where clink keeps its settings, and how the effective settings are chosen.

* :func:`get_config_dir` / :func:`get_data_dir` -- ``~/.config/clink`` and
  ``~/.local/share/clink`` (XDG variables honoured) on Linux/BSD, a single
  ``~/.clink`` elsewhere.
* :func:`load_config` / :func:`save_config` / :func:`set_config_value` --
  the JSON-serialised :class:`~clink.models.ClinkConfig`, written atomically.
* :func:`resolve_config` -- CLI flags over ``CLINK_*`` environment
  variables over the file over defaults.
* :func:`resolve_username` -- the name used for the Kerberos principal.

Nothing here touches the bearer credential; it only ever lives in a
:class:`~clink.auth.cache.CredentialCache`.
"""

from __future__ import annotations

import contextlib
import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from clink.exceptions import ConfigError, IdentityError
from clink.models import ClinkConfig

_APP_NAME = "clink"
_CONFIG_FILENAME = "config.json"

USERNAME_ENV = "CLINK_USERNAME"
"""Environment variable holding an explicit username override."""

_ENV_OVERRIDES: dict[str, str] = {
    "CLINK_API_URL": "api_base_url",
    "CLINK_SSO_URL": "sso_base_url",
    "CLINK_REALM": "realm",
    "CLINK_KINIT": "kinit_command",
    USERNAME_ENV: "username",
}


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, *fallback: str) -> Path:
    """Return ``<base>/clink`` for an XDG base directory.

    *base* is ``$<xdg_var>`` when set and non-empty, else ``~/<fallback...>``.
    Platforms without XDG conventions share a single ``~/.clink``.
    """
    if not _is_xdg_platform():
        return Path.home() / f".{_APP_NAME}"
    base = os.environ.get(xdg_var) or Path.home().joinpath(*fallback)
    return Path(base) / _APP_NAME


def get_config_dir() -> Path:
    """Directory holding ``config.json`` (created on demand).

    ``$XDG_CONFIG_HOME/clink`` on Linux/BSD, defaulting to ``~/.config/clink``.
    """
    path = _app_dir("XDG_CONFIG_HOME", ".config")
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Directory holding crash logs (created on demand).

    ``$XDG_DATA_HOME/clink`` on Linux/BSD, defaulting to ``~/.local/share/clink``.
    """
    path = _app_dir("XDG_DATA_HOME", ".local", "share")
    path.mkdir(parents=True, exist_ok=True)
    return path


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


# --- Config file ---


def config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_config() -> ClinkConfig:
    """Load the configuration file.

    Returns:
        The deserialised :class:`~clink.models.ClinkConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = config_path()
    if not path.is_file():
        return ClinkConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ClinkConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: ClinkConfig) -> None:
    """Persist *config* atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


def set_config_value(config: ClinkConfig, key: str, value: str) -> ClinkConfig:
    """Return a copy of *config* with the dotted *key* set to *value*.

    The value is coerced to the type of the existing field (bool, int, list
    of words, or str) and the result is re-validated.

    Raises:
        ConfigError: If the key does not exist or the value is invalid.
    """
    data: dict[str, Any] = config.model_dump(mode="json")
    parts = key.split(".")
    target = data
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            raise ConfigError(f"Unknown config key: {key}")
        target = target[part]

    leaf = parts[-1]
    if leaf not in target or isinstance(target[leaf], dict):
        raise ConfigError(f"Unknown config key: {key}")

    current = target[leaf]
    if isinstance(current, bool):
        lowered = value.lower()
        if lowered not in ("true", "false", "1", "0", "yes", "no"):
            raise ConfigError(f"Expected a boolean for {key}, got '{value}'")
        target[leaf] = lowered in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            target[leaf] = int(value)
        except ValueError:
            raise ConfigError(f"Expected an integer for {key}, got '{value}'") from None
    elif isinstance(current, list):
        target[leaf] = value.split()
    else:
        target[leaf] = value

    try:
        return ClinkConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid value for {key}: {exc}") from exc


# --- Precedence resolution ---


def resolve_config(
    cli_username: Optional[str] = None,
    cli_api_url: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> ClinkConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_username``, ``cli_api_url``, ``cli_format``)
        2. Environment variables (``CLINK_API_URL``, ``CLINK_SSO_URL``,
           ``CLINK_REALM``, ``CLINK_KINIT``, ``CLINK_USERNAME``)
        3. User config (``~/.config/clink/config.json``)
        4. Defaults
    """
    config = load_config()

    updates: dict[str, Any] = {}
    for env_var, field in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            updates[field] = value

    if cli_username is not None:
        updates["username"] = cli_username
    if cli_api_url is not None:
        updates["api_base_url"] = cli_api_url

    if updates:
        config = config.model_copy(update=updates)
    if cli_format is not None:
        config.output.format = cli_format
    return config


# --- Identity ---


def _os_username() -> Optional[str]:
    """Return the login name of the effective user from the password database."""
    if os.name != "posix":
        return None
    import pwd

    try:
        return pwd.getpwuid(os.geteuid()).pw_name
    except KeyError:
        return None


def resolve_username(override: Optional[str] = None) -> str:
    """Resolve the username for the Kerberos principal.

    Order: the explicit *override* (``--username`` / config file), the
    ``CLINK_USERNAME`` environment variable, the OS password database entry
    for the current user, then ``$USER``.

    Raises:
        IdentityError: If none of the sources yields a name.
    """
    for candidate in (
        override,
        os.environ.get(USERNAME_ENV),
        _os_username(),
        os.environ.get("USER"),
    ):
        if candidate:
            return candidate
    raise IdentityError("Couldn't determine username")
