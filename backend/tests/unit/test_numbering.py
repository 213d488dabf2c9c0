"""Unit tests for serial and drawing number generation"""

import pytest

from inspex.domain.numbering import (
    describe_door,
    door_type_for_pressure,
    drawing_number,
    next_serial,
    serial_number,
    size_code,
)
from inspex.errors import ValidationError


pytestmark = pytest.mark.unit


class TestSizeCode:
    """Test door size to serial size code mapping"""

    @pytest.mark.parametrize("size,code", [
        ("1.5", "15"),
        ("1.8", "18"),
        ("2.0", "20"),
        ("1500", "15"),
        ("2000", "20"),
    ])
    def test_known_sizes(self, size, code):
        assert size_code(size) == code

    def test_whitespace_is_ignored(self):
        assert size_code(" 1.8 ") == "18"

    def test_unknown_size_rejected(self):
        """Unknown sizes are an input error, not a silent fallback"""
        with pytest.raises(ValidationError) as exc:
            size_code("2.4")
        assert "2.4" in exc.value.message

    def test_custom_size_codes(self):
        assert size_code("3.0", {"3.0": "30"}) == "30"


class TestSerialNumber:
    """Test serial number formatting"""

    def test_serial_number_format(self):
        assert serial_number(6, "1.8") == "MF42-18-0006"

    def test_serial_number_custom_prefix(self):
        assert serial_number(123, "2.0", prefix="MF50") == "MF50-20-0123"

    def test_serial_number_wide_door_number(self):
        """Door numbers above 9999 are not truncated"""
        assert serial_number(12345, "1.5") == "MF42-15-12345"

    def test_door_number_must_be_positive(self):
        with pytest.raises(ValidationError):
            serial_number(0, "1.5")


class TestDrawingNumber:
    """Test drawing numbers derived from the counter"""

    def test_first_door_after_base(self):
        """Base 200, counter value 6 gives S206"""
        assert drawing_number(next_serial(200, 6)) == "S206"

    def test_padding_to_three_digits(self):
        assert drawing_number(7) == "S007"
        assert drawing_number(1234) == "S1234"

    def test_counter_value_must_be_positive(self):
        with pytest.raises(ValidationError):
            next_serial(200, 0)


class TestDoorType:
    """Test pressure rating to door type"""

    def test_high_pressure_is_v1(self):
        assert door_type_for_pressure(400) == "V1"

    def test_low_pressure_is_v2(self):
        assert door_type_for_pressure(140) == "V2"

    @pytest.mark.parametrize("pressure", [0, 200, "abc", None])
    def test_unknown_pressure_rejected(self, pressure):
        with pytest.raises(ValidationError):
            door_type_for_pressure(pressure)

    def test_description(self):
        assert describe_door("1.8", 400) == "1.8 Meter 400 kPa Refuge Bay Door"
