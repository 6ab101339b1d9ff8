from __future__ import annotations

from dataclasses import asdict, dataclass
import json
from pathlib import Path
import tempfile

CONFIG_DIR = Path.home() / ".xpathfinder"
CONFIG_PATH = CONFIG_DIR / "config.json"

MAX_DIAGNOSTIC_SAMPLES = 5


@dataclass(slots=True)
class SynthesisSettings:
    wrapper_tags: tuple[str, ...] = ("html", "body")
    volatile_attributes: tuple[str, ...] = ("style", "href")
    style_prefix_length: int = 20
    max_diagnostic_samples: int = MAX_DIAGNOSTIC_SAMPLES
    frame_poll_attempts: int = 30
    frame_poll_interval: float = 0.2
    frame_poll_timeout: float = 10.0

    @property
    def sample_limit(self) -> int:
        return max(1, min(MAX_DIAGNOSTIC_SAMPLES, int(self.max_diagnostic_samples)))


def _tags(value: object, default: tuple[str, ...]) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return default
    cleaned = tuple(str(item).strip().lower() for item in value if str(item).strip())
    return cleaned or default


def _positive_int(value: object, default: int) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _positive_float(value: object, default: float) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def load_settings(config_path: Path | None = None) -> SynthesisSettings:
    path = config_path or CONFIG_PATH
    defaults = SynthesisSettings()
    if not path.exists() or not path.is_file():
        return defaults

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, TypeError):
        return defaults

    if not isinstance(payload, dict):
        return defaults

    return SynthesisSettings(
        wrapper_tags=_tags(payload.get("wrapper_tags"), defaults.wrapper_tags),
        volatile_attributes=_tags(payload.get("volatile_attributes"), defaults.volatile_attributes),
        style_prefix_length=_positive_int(payload.get("style_prefix_length"), defaults.style_prefix_length),
        max_diagnostic_samples=min(
            MAX_DIAGNOSTIC_SAMPLES,
            _positive_int(payload.get("max_diagnostic_samples"), defaults.max_diagnostic_samples),
        ),
        frame_poll_attempts=_positive_int(payload.get("frame_poll_attempts"), defaults.frame_poll_attempts),
        frame_poll_interval=_positive_float(payload.get("frame_poll_interval"), defaults.frame_poll_interval),
        frame_poll_timeout=_positive_float(payload.get("frame_poll_timeout"), defaults.frame_poll_timeout),
    )


def settings_payload(settings: SynthesisSettings) -> str:
    return json.dumps(asdict(settings), ensure_ascii=True, indent=2, sort_keys=True)


def _replace_atomically(path: Path, text: str) -> None:
    handle = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    staged = Path(handle.name)
    try:
        with handle:
            handle.write(text)
        staged.replace(path)
    except OSError:
        staged.unlink(missing_ok=True)
        raise


def save_settings(settings: SynthesisSettings, config_path: Path | None = None) -> tuple[bool, str | None]:
    """Write ``settings`` as JSON; returns ``(ok, error message)`` instead of raising."""
    path = config_path or CONFIG_PATH
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _replace_atomically(path, settings_payload(settings))
    except OSError as exc:
        return False, f"Could not write settings to {path}: {exc}"
    return True, None
