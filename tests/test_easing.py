import pytest

from motion_synth.easing import EASING_FUNCTIONS, ease_in_out_quad, ease_out_bounce, get_easing, linear


@pytest.mark.parametrize("name", sorted(EASING_FUNCTIONS))
def test_every_curve_starts_at_zero_and_ends_at_one(name):
    fn = EASING_FUNCTIONS[name]
    assert fn(0.0) == pytest.approx(0.0, abs=1e-9)
    assert fn(1.0) == pytest.approx(1.0, abs=1e-9)


def test_inputs_are_clamped():
    assert linear(-2.0) == 0.0
    assert linear(3.0) == 1.0
    assert ease_in_out_quad(1.5) == pytest.approx(1.0)


def test_in_out_quad_is_symmetric():
    assert ease_in_out_quad(0.25) == pytest.approx(0.125)
    assert ease_in_out_quad(0.5) == pytest.approx(0.5)
    assert ease_in_out_quad(0.75) == pytest.approx(0.875)


def test_bounce_stays_in_range():
    for i in range(101):
        assert 0.0 <= ease_out_bounce(i / 100) <= 1.0 + 1e-12


def test_unknown_or_missing_name_falls_back_to_linear():
    assert get_easing(None) is linear
    assert get_easing("wobble") is linear
    assert get_easing("easeInOutQuad") is ease_in_out_quad
