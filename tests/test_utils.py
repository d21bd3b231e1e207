import pytest

from grav.utils import FieldSync, color_from_rgba255, color_to_rgb255, try_float


@pytest.mark.parametrize("text, expected", [("8192", 8192.0), (" 1e3 ", 1000.0), ("-2.5", -2.5)])
def test_try_float_parses_numbers(text, expected):
    assert try_float(text) == expected


@pytest.mark.parametrize("text", ["", "abc", None, "nan", "inf"])
def test_try_float_rejects_garbage(text):
    assert try_float(text) is None


def test_color_conversions():
    assert color_to_rgb255((1.0, 0.5, 0.0, 1.0)) == (255, 128, 0)
    assert color_from_rgba255((255, 0, 510)) == (1.0, 0.0, 1.0, 1.0)


def test_field_sync_rewrites_only_when_the_value_moves():
    field = FieldSync()
    assert field.needs_update(8192.0) is True
    assert field.needs_update(8192.0) is False
    # the viewport doubled dt behind the field's back
    assert field.needs_update(16384.0) is True
    assert field.needs_update(16384.0) is False


def test_field_sync_mark_counts_as_written():
    field = FieldSync()
    field.mark(8192.0)
    assert field.needs_update(8192.0) is False
    field.mark(4096.0)
    assert field.needs_update(8192.0) is True
