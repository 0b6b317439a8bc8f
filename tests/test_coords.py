"""Tests for ms ↔ frame coordinate mapping and view ranges."""

import pytest

from otolib.coords import CoordinateMapper, ViewRange, hop_size


@pytest.mark.parametrize("rate,hop", [(44100, 110), (48000, 120), (16000, 40), (400, 1), (100, 1)])
def test_hop_size(rate, hop):
    assert hop_size(rate) == hop


def test_hop_size_rejects_non_positive_rate():
    with pytest.raises(ValueError):
        hop_size(0)


def test_mapper_round_trip():
    m = CoordinateMapper(44100)
    assert m.ms_to_coord == pytest.approx(0.001 * 44100 / 110)
    for ms in (0.0, 1.0, 123.4, 999.9):
        assert m.to_ms(m.to_coord(ms)) == pytest.approx(ms)


def test_sample_index_and_ms_agree():
    m = CoordinateMapper(48000)
    # sample 4800 is 100 ms into the file
    assert m.sample_to_coord(4800) == pytest.approx(m.to_coord(100.0))
    assert m.duration_coord(48000) == pytest.approx(400.0)


def test_pointer_is_clamped_to_signal():
    m = CoordinateMapper(44100)
    total = 500.0
    assert m.pointer_to_ms(-10.0, total) == 0.0
    assert m.pointer_to_ms(m.to_coord(10_000.0), total) == total
    assert m.pointer_to_ms(m.to_coord(250.0), total) == pytest.approx(250.0)


def test_view_range_zoom_and_pan():
    v = ViewRange(100.0, 300.0)
    z = v.zoomed(0.5)
    assert (z.x_min, z.x_max) == pytest.approx((150.0, 250.0))
    assert z.center == pytest.approx(v.center)
    out = v.zoomed(2.0)
    assert out.span == pytest.approx(400.0)
    s = v.shifted(-v.span * 0.5)
    assert (s.x_min, s.x_max) == pytest.approx((0.0, 200.0))
