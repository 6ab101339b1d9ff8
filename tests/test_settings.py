import json
from pathlib import Path

from xpathfinder.settings import SynthesisSettings, load_settings, save_settings


def test_settings_roundtrip(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    original = SynthesisSettings(
        wrapper_tags=("html", "body", "main"),
        volatile_attributes=("style",),
        style_prefix_length=12,
        max_diagnostic_samples=3,
        frame_poll_attempts=5,
        frame_poll_interval=0.5,
        frame_poll_timeout=3.0,
    )
    ok, error = save_settings(original, config_path)
    assert ok
    assert error is None
    assert load_settings(config_path) == original
    assert not list(tmp_path.glob("*.tmp"))


def test_settings_load_fallbacks(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    assert load_settings(config_path) == SynthesisSettings()
    config_path.write_text("{invalid", encoding="utf-8")
    assert load_settings(config_path) == SynthesisSettings()
    config_path.write_text("[1, 2]", encoding="utf-8")
    assert load_settings(config_path) == SynthesisSettings()


def test_settings_load_replaces_bad_values_with_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "wrapper_tags": "html",
                "style_prefix_length": -4,
                "max_diagnostic_samples": 50,
                "frame_poll_interval": "soon",
                "frame_poll_attempts": "12",
            }
        ),
        encoding="utf-8",
    )
    loaded = load_settings(config_path)
    defaults = SynthesisSettings()
    assert loaded.wrapper_tags == defaults.wrapper_tags
    assert loaded.style_prefix_length == defaults.style_prefix_length
    assert loaded.max_diagnostic_samples == 5
    assert loaded.frame_poll_interval == defaults.frame_poll_interval
    assert loaded.frame_poll_attempts == 12


def test_sample_limit_is_clamped() -> None:
    assert SynthesisSettings(max_diagnostic_samples=0).sample_limit == 1
    assert SynthesisSettings(max_diagnostic_samples=9).sample_limit == 5
    assert SynthesisSettings().sample_limit == 5


def test_save_settings_reports_failure_instead_of_raising(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    ok, error = save_settings(SynthesisSettings(), blocker / "config.json")
    assert not ok
    assert error is not None
    assert error.startswith(f"Could not write settings to {blocker / 'config.json'}")
