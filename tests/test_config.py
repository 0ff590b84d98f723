import json
import pytest
from pydantic import ValidationError

from wavebase.config import Settings, load_settings


def test_defaults():
    s = Settings()
    assert s.sequence.sampling_frequency == 1.0
    assert s.smoother.alpha == 0.5
    assert s.fit.sigma == 1.0
    assert s.fit.max_nfev is None
    assert s.logging.level == "INFO"


def test_from_env(monkeypatch):
    monkeypatch.setenv("WAVEBASE_SMOOTHER__ALPHA", "0.25")
    monkeypatch.setenv("WAVEBASE_FIT__SIGMA", "0.1")
    s = Settings.from_env()
    assert s.smoother.alpha == 0.25
    assert s.fit.sigma == 0.1


def test_from_env_logging_level(monkeypatch):
    monkeypatch.setenv("WAVEBASE_LOGGING__LEVEL", "debug")
    s = Settings.from_env()
    assert s.logging.level == "DEBUG"


def test_load_settings_json(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text(json.dumps({"sequence": {"sampling_frequency": 250.0}, "fit": {"max_nfev": 50}}))
    s = load_settings(p)
    assert s.sequence.sampling_frequency == 250.0
    assert s.fit.max_nfev == 50


def test_load_settings_rejects_non_mapping(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text("[1, 2]")
    with pytest.raises(TypeError):
        load_settings(p)


@pytest.mark.parametrize(
    "data",
    [
        {"smoother": {"alpha": 0.0}},
        {"smoother": {"alpha": 1.5}},
        {"sequence": {"sampling_frequency": -1.0}},
        {"fit": {"sigma": 0}},
        {"logging": {"level": "LOUD"}},
    ],
)
def test_invalid_values_rejected(data):
    with pytest.raises(ValidationError):
        Settings.model_validate(data)


def test_assignment_is_validated():
    s = Settings()
    with pytest.raises(ValidationError):
        s.smoother.alpha = 2.0


try:
    import yaml  # type: ignore
except Exception:  # pragma: no cover
    yaml = None


@pytest.mark.skipif(yaml is None, reason="PyYAML not installed")
def test_load_settings_yaml(tmp_path):
    p = tmp_path / "cfg.yaml"
    p.write_text("smoother:\n  alpha: 0.75\nsequence:\n  time_offset: -2.5\n")
    s = load_settings(p)
    assert s.smoother.alpha == 0.75
    assert s.sequence.time_offset == -2.5
