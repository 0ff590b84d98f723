import numpy as np
import pytest

from wavebase.config import Settings
from wavebase.core import ExponentialSmoother, SampledSequence, TransformCapability


def reference_envelope(values, alpha):
    centred = np.asarray(values, dtype=float) - np.mean(values)
    out = np.empty_like(centred)
    out[0] = alpha * abs(centred[0])
    for i in range(1, len(centred)):
        out[i] = alpha * abs(centred[i]) + (1 - alpha) * out[i - 1]
    return out


@pytest.mark.parametrize("alpha", [0.1, 0.5, 0.9])
def test_matches_recursive_definition(alpha):
    rng = np.random.default_rng(1)
    values = rng.normal(size=200) + 3.0
    seq = SampledSequence(values)
    ExponentialSmoother(alpha).transform(seq)
    np.testing.assert_allclose(seq.data, reference_envelope(values, alpha), rtol=1e-12, atol=1e-12)


def test_alpha_one_has_no_memory():
    values = np.array([1.0, 5.0, -3.0, 2.0, 0.0])
    seq = SampledSequence(values)
    ExponentialSmoother(1.0).transform(seq)
    np.testing.assert_allclose(seq.data, np.abs(values - values.mean()))


def test_small_alpha_barely_tracks_later_samples():
    alpha = 1e-4
    values = np.r_[np.zeros(80), np.full(20, 10.0)]
    seq = SampledSequence(values)
    ExponentialSmoother(alpha).transform(seq)
    centred = np.abs(values - values.mean())
    assert seq[0] == pytest.approx(alpha * centred[0])
    assert np.max(np.abs(np.diff(seq.data))) <= alpha * centred.max() + 1e-15
    assert seq.data.max() < 0.02 * centred.max()


def test_is_in_place_and_keeps_metadata():
    smoother = ExponentialSmoother(0.3)
    assert smoother.capability is TransformCapability.IN_PLACE
    seq = SampledSequence([1.0, 2.0, 6.0], sampling_frequency=8.0, time_offset=2.0)
    out = SampledSequence(dtype=float)
    smoother.transform(seq, out)
    np.testing.assert_allclose(seq.data, [1.0, 2.0, 6.0])
    np.testing.assert_allclose(out.data, reference_envelope([1.0, 2.0, 6.0], 0.3))
    assert out.sampling_frequency == 8.0
    assert out.time_offset == 2.0


def test_empty_sequence_untouched():
    seq = SampledSequence()
    ExponentialSmoother().transform(seq)
    assert len(seq) == 0


def test_alpha_validation_and_settings_default():
    with pytest.raises(ValueError):
        ExponentialSmoother(0.0)
    with pytest.raises(ValueError):
        ExponentialSmoother(1.5)
    settings = Settings()
    settings.smoother.alpha = 0.25
    assert ExponentialSmoother(settings=settings).alpha == 0.25
    assert ExponentialSmoother(0.7, settings=settings).alpha == 0.7
    assert ExponentialSmoother().alpha == 0.5
