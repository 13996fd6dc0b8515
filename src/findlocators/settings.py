from __future__ import annotations

from dataclasses import asdict, dataclass, fields
import json
from pathlib import Path
import tempfile
from typing import Any

CONFIG_DIR = Path.home() / ".findlocators"
CONFIG_PATH = CONFIG_DIR / "config.json"


@dataclass(frozen=True, slots=True)
class InspectorSettings:
    reveal_delay_ms: int = 300
    highlight_refresh_ms: int = 200
    highlight_timeout_ms: int = 3000
    headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 720
    navigation_timeout_ms: int = 30000
    log_to_file: bool = True


_DEFAULTS = InspectorSettings()


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _flag(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def settings_from_mapping(payload: dict[str, Any]) -> InspectorSettings:
    values: dict[str, Any] = {}
    for item in fields(InspectorSettings):
        default = getattr(_DEFAULTS, item.name)
        raw = payload.get(item.name, default)
        if isinstance(default, bool):
            values[item.name] = _flag(raw, default)
        else:
            values[item.name] = _positive_int(raw, default)
    return InspectorSettings(**values)


def load_settings(config_path: Path | None = None) -> InspectorSettings:
    path = config_path or CONFIG_PATH
    if not path.exists() or not path.is_file():
        return InspectorSettings()

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, TypeError, UnicodeDecodeError):
        return InspectorSettings()

    if not isinstance(payload, dict):
        return InspectorSettings()
    return settings_from_mapping(payload)


def save_settings(settings: InspectorSettings, config_path: Path | None = None) -> tuple[bool, str | None]:
    path = config_path or CONFIG_PATH

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return False, f"Could not create config folder: {exc}"

    payload = json.dumps(asdict(settings), ensure_ascii=True, indent=2, sort_keys=True)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            handle.write(payload)
            handle.flush()
            temp_path = Path(handle.name)

        temp_path.replace(path)
    except OSError as exc:
        if temp_path and temp_path.exists():
            temp_path.unlink(missing_ok=True)
        return False, f"Could not write settings: {exc}"

    return True, None
