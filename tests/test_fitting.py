import numpy as np
import pytest

from wavebase.config import Settings
from wavebase.core import OffsetFitter, SampledSequence, chi_square
from wavebase.types import FitResult


def pulse(n=200, centre=60.0, width=8.0):
    t = np.arange(n, dtype=float)
    return SampledSequence(np.exp(-0.5 * ((t - centre) / width) ** 2), sampling_frequency=1.0, time_offset=0.0)


def shifted(reference, delta):
    out = reference.copy()
    out.time_offset = reference.time_offset + delta
    return out


@pytest.mark.parametrize("delta", [2.5, -4.0, 7.25])
def test_recovers_known_shift(delta):
    reference = pulse()
    data = shifted(reference, delta)
    result = OffsetFitter(reference, sigma=0.01).fit(data)
    assert isinstance(result, FitResult)
    assert result.offset == pytest.approx(delta, abs=1e-4)
    assert np.isfinite(result.error)


def test_error_shrinks_with_sigma():
    reference = pulse()
    data = shifted(reference, 3.5)
    loose = OffsetFitter(reference, sigma=1.0).fit(data)
    tight = OffsetFitter(reference, sigma=0.01).fit(data)
    assert tight.error < loose.error
    assert tight.error == pytest.approx(loose.error / 100.0, rel=1e-3)


def test_fit_does_not_modify_input_and_transform_returns_result():
    reference = pulse()
    data = shifted(reference, 1.5)
    before = data.copy()
    fitter = OffsetFitter(reference, sigma=0.1)
    result = fitter.transform(data)
    assert isinstance(result, FitResult)
    assert result.offset == pytest.approx(1.5, abs=1e-4)
    assert data == before


def test_initial_offset_and_settings_defaults():
    settings = Settings()
    settings.fit.sigma = 0.5
    settings.fit.initial_offset = 2.0
    fitter = OffsetFitter(pulse(), settings=settings)
    assert fitter.sigma == 0.5
    assert fitter.initial_offset == 2.0
    assert OffsetFitter(pulse(), sigma=2.0, settings=settings).sigma == 2.0
    with pytest.raises(ValueError):
        OffsetFitter(pulse(), sigma=0.0)


def test_result_respects_bounds():
    reference = pulse(n=20, centre=10.0, width=2.0)
    data = SampledSequence(np.zeros(5), sampling_frequency=1.0)
    result = OffsetFitter(reference, initial_offset=100.0).fit(data)
    assert -4.0 <= result.offset <= 4.0


def test_degenerate_inputs_rejected():
    fitter = OffsetFitter(pulse())
    with pytest.raises(ValueError):
        fitter.fit(SampledSequence())
    with pytest.raises(ValueError):
        fitter.fit(SampledSequence([1.0]))


def test_chi_square():
    a = SampledSequence([1.0, 2.0, 3.0])
    b = SampledSequence([1.0, 1.0, 1.0])
    assert chi_square(a, b) == pytest.approx(0.0 + 1.0 + 4.0)
    assert chi_square(a, b, sigma=2.0) == pytest.approx(5.0 / 4.0)
    assert chi_square(a, a) == 0.0


def test_residuals_vanish_at_true_shift():
    reference = pulse()
    data = shifted(reference, 2.0)
    fitter = OffsetFitter(reference)
    np.testing.assert_allclose(fitter.residuals(data, 2.0), 0.0, atol=1e-12)
    assert np.any(np.abs(fitter.residuals(data, 0.0)) > 1e-3)


def test_offset_is_relative_to_reference_start():
    reference = pulse()
    reference.time_offset = 5.0
    assert OffsetFitter(reference, sigma=0.01).fit(reference.copy()).offset == pytest.approx(0.0, abs=1e-4)

    data = shifted(reference, 2.0)
    assert OffsetFitter(reference, sigma=0.01).fit(data).offset == pytest.approx(2.0, abs=1e-4)
