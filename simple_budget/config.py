from pathlib import Path
import sys
import configparser
from typing import Any

INI_NAME = "simple_budget.ini"


def _resolve_config_file() -> Path:
    """The ini sits beside a frozen executable, else inside or next to the package."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().with_name(INI_NAME)
    package_dir = Path(__file__).resolve().parent
    inside = package_dir / INI_NAME
    return inside if inside.exists() else package_dir.with_name(INI_NAME)


CONFIG_FILE = _resolve_config_file()
DEFAULT_DB_FILENAME = "simple_budget.db"

SETTINGS_DEFAULTS: dict[str, Any] = {
    "log_level": "INFO",
    "currency_symbol": "₹",
    "db_timeout": 5.0,
}

_SETTINGS_FLOAT_KEYS = {"db_timeout"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _read_ini() -> configparser.ConfigParser:
    ini = configparser.ConfigParser()
    ini.read(CONFIG_FILE, encoding="utf-8")
    return ini


def _write_ini(ini: configparser.ConfigParser) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        ini.write(f)


def _section(ini: configparser.ConfigParser, name: str) -> tuple[configparser.SectionProxy, bool]:
    """Return the named section and whether it had to be created."""
    if ini.has_section(name):
        return ini[name], False
    ini.add_section(name)
    return ini[name], True


def default_db_path() -> Path:
    return CONFIG_FILE.parent / DEFAULT_DB_FILENAME


def load_db_path() -> Path:
    """Return the configured database file, or the default one beside the ini."""
    db_path = _read_ini().get("app", "db_path", fallback=None)
    if db_path:
        return Path(db_path).expanduser()
    return default_db_path()


def save_db_path(path: Path | None) -> None:
    """Remember ``path`` for the next start; None goes back to the default file."""
    ini = _read_ini()
    app, _ = _section(ini, "app")
    if path:
        app["db_path"] = str(Path(path).expanduser().resolve())
    else:
        app.pop("db_path", None)
    _write_ini(ini)


def load_app_settings() -> dict[str, Any]:
    ini = _read_ini()
    section, updated = _section(ini, "settings")
    settings: dict[str, Any] = {}
    for key, default in SETTINGS_DEFAULTS.items():
        raw_value = section.get(key)
        if raw_value is None:
            section[key] = str(default)
            raw_value = str(default)
            updated = True
        try:
            if key in _SETTINGS_FLOAT_KEYS:
                value = float(raw_value)
                if value <= 0:
                    raise ValueError(raw_value)
                settings[key] = value
            elif key == "log_level":
                level = raw_value.strip().upper()
                if level not in _LOG_LEVELS:
                    raise ValueError(raw_value)
                settings[key] = level
            else:
                settings[key] = raw_value
        except (TypeError, ValueError):
            settings[key] = default
            section[key] = str(default)
            updated = True
    if updated:
        _write_ini(ini)
    return settings
