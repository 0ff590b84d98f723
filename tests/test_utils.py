import logging

import numpy as np
import pytest

from wavebase.errors import ConfigurationMismatch, LengthMismatch, OutOfRange, report
from wavebase.io import load_array, load_sequence, save_array
from wavebase.config import Settings
from wavebase.types import FitResult, TimeInterval, Window
from wavebase.utils.logging import get_logger
from wavebase.utils.windows import clamp_window


def test_types():
    ti = TimeInterval(0.0, 2.5)
    assert ti.duration == 2.5
    w = Window(2, 5)
    assert w.width == 3
    r = FitResult(offset=1.0, error=0.1)
    with pytest.raises(AttributeError):
        r.offset = 2.0


@pytest.mark.parametrize(
    "begin, end, length, expected",
    [
        (1, 3, 5, Window(1, 3)),
        (0, None, 5, Window(0, 5)),
        (2, 99, 5, Window(2, 5)),
        (7, 9, 5, Window(4, 5)),
        (4, 2, 5, Window(2, 2)),
        (0, 3, 0, Window(0, 0)),
    ],
)
def test_clamp_window(begin, end, length, expected):
    assert clamp_window(begin, end, length) == expected


def test_error_hierarchy():
    assert issubclass(OutOfRange, IndexError)
    assert issubclass(ConfigurationMismatch, ValueError)
    err = LengthMismatch("bad", expected=4, actual=3)
    assert err.expected == 4
    assert "expected 4, got 3" in str(err)


def test_report_logs_and_returns(caplog):
    logger = logging.getLogger("wavebase.test")
    err = OutOfRange("too late")
    with caplog.at_level(logging.WARNING):
        assert report(err, logger) is err
    assert "OutOfRange: too late" in caplog.text


def test_logging():
    logger = get_logger("test")
    logger2 = get_logger("test", level="debug")
    assert logger is logger2
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    logger.debug("debug message")


def test_array_io_round_trip(tmp_path):
    data = np.array([1.0, 2.5, -3.0])
    for name in ("x.npy", "x.csv"):
        path = tmp_path / name
        save_array(path, data)
        np.testing.assert_allclose(load_array(path), data)
    with pytest.raises(ValueError):
        save_array(tmp_path / "c.csv", np.array([1j]))


def test_load_sequence_metadata(tmp_path):
    path = tmp_path / "x.csv"
    path.write_text("1\n2\n3\n")
    settings = Settings()
    settings.sequence.sampling_frequency = 10.0
    seq = load_sequence(path, settings=settings)
    assert len(seq) == 3
    assert seq.sampling_frequency == 10.0
    seq = load_sequence(path, settings=settings, sampling_frequency=2.0, time_offset=1.0)
    assert seq.sampling_frequency == 2.0
    assert seq.time_offset == 1.0
