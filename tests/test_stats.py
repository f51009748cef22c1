import pytest

from ckpool.stats import decay_time, suffix_string


def test_suffix_string_plain_number():
    assert suffix_string(999) == "999"


def test_suffix_string_kilo():
    assert suffix_string(1500) == "1.5K"


def test_suffix_string_mega():
    assert suffix_string(2_000_000) == "2M"


@pytest.mark.parametrize("val,suffix", [
    (1e3, "K"),
    (1e6, "M"),
    (1e9, "G"),
    (1e12, "T"),
    (1e15, "P"),
    (1e18, "E"),
])
def test_suffix_string_suffixes(val, suffix):
    assert suffix_string(val) == "1" + suffix
    assert suffix_string(val * 5) == "5" + suffix


def test_suffix_string_sigdigits():
    assert suffix_string(1234, 3) == "1.23K"


def test_suffix_string_sigdigits_fixed_width():
    small = suffix_string(1_000_000, 4)
    large = suffix_string(999_000_000, 4)
    assert small.endswith("M") and large.endswith("M")
    assert len(small) == len(large)


def test_decay_time_no_elapsed_time():
    assert decay_time(3.5, 100.0, 0, 60) == 3.5
    assert decay_time(3.5, 100.0, -1, 60) == 3.5


def test_decay_time_tiny_values_zeroed():
    assert decay_time(0.0, 1e-20, 1, 1) == 0.0


def test_decay_time_converges_to_rate():
    rate = 250.0
    f = 0.0
    for _ in range(2000):
        f = decay_time(f, rate * 5, 5, 60)
    assert f == pytest.approx(rate, rel=1e-6)


def test_decay_time_moves_toward_rate():
    rate = 100.0
    first = decay_time(0.0, rate * 10, 10, 600)
    second = decay_time(first, rate * 10, 10, 600)
    assert 0.0 < first < second < rate


def test_decay_time_exponent_capped():
    assert decay_time(1.0, 10.0, 1000, 1) == decay_time(1.0, 10.0, 1000, 0.5)