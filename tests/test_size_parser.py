import pytest

from filesize.errors import (
    EmptyInputError,
    InvalidFormatError,
    InvalidNumberError,
    NegativeSizeError,
    SizeError,
    SizeOverflowError,
    UnknownUnitError,
)
from filesize.size_parser import (
    GIB,
    INT64_MAX,
    KIB,
    MIB,
    PIB,
    SIZE_UNITS,
    TIB,
    format_size,
    parse_size,
    parse_size_or_default,
    validate_size,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("0", 0),
        ("1", 1),
        ("1024", 1024),
        ("1k", 1024),
        ("1K", 1024),
        ("1KiB", 1024),
        ("1KB", 1000),
        ("1m", MIB),
        ("1G", GIB),
        ("1TiB", TIB),
        ("1p", PIB),
        ("1MB", 1000**2),
        ("1GB", 1000**3),
        ("1TB", 1000**4),
        ("1PB", 1000**5),
        ("100b", 100),
        ("100B", 100),
        ("100byte", 100),
        ("100bytes", 100),
    ],
)
def test_parse_size_units(raw: str, expected: int) -> None:
    assert parse_size(raw) == expected


def test_parse_size_short_and_explicit_binary_agree() -> None:
    assert parse_size("4k") == parse_size("4KiB") == parse_size("4kib") == 4096
    assert parse_size("4KB") == 4000


def test_parse_size_accepts_fractional_values() -> None:
    assert parse_size("1.5k") == 1536
    assert parse_size("2.5KiB") == 2560
    assert parse_size("1.5MB") == 1_500_000
    assert parse_size("0.5m") == 512 * 1024


def test_parse_size_truncates_toward_zero() -> None:
    assert parse_size("1.9") == 1
    assert parse_size("0.9b") == 0
    assert parse_size("1.0001k") == 1024


@pytest.mark.parametrize("raw", [" 1k ", "1 k", " 1 KiB ", "\t1k\n"])
def test_parse_size_tolerates_whitespace(raw: str) -> None:
    assert parse_size(raw) == 1024


def test_parse_size_exact_for_large_integer_numerals() -> None:
    n = 2**53 + 1
    assert parse_size(str(n)) == n
    assert parse_size(str(INT64_MAX)) == INT64_MAX


@pytest.mark.parametrize("raw", ["", "   ", "\n"])
def test_parse_size_rejects_empty(raw: str) -> None:
    with pytest.raises(EmptyInputError):
        parse_size(raw)


@pytest.mark.parametrize("raw", ["abc", "k1", "1.2.3k", "1 2", "1k!", ".5k", "1.k", "1 k b", "+1"])
def test_parse_size_rejects_bad_format(raw: str) -> None:
    with pytest.raises(InvalidFormatError, match="invalid size format"):
        parse_size(raw)


@pytest.mark.parametrize("raw", ["-1", "-1k", "-0.5MiB"])
def test_parse_size_rejects_negative(raw: str) -> None:
    with pytest.raises(NegativeSizeError):
        parse_size(raw)


@pytest.mark.parametrize(("raw", "unit"), [("1ZiB", "zib"), ("1XB", "xb"), ("1xy", "xy"), ("2 Kilobytes", "kilobytes")])
def test_parse_size_rejects_unknown_unit(raw: str, unit: str) -> None:
    with pytest.raises(UnknownUnitError) as excinfo:
        parse_size(raw)
    assert excinfo.value.unit == unit


def test_parse_size_overflow_boundary() -> None:
    assert parse_size("8191p") == 8191 * PIB
    with pytest.raises(SizeOverflowError):
        parse_size("8192p")
    with pytest.raises(SizeOverflowError):
        parse_size(str(INT64_MAX + 1))
    with pytest.raises(SizeOverflowError):
        parse_size("9000.5PiB")


def test_parse_size_overflow_on_huge_fraction() -> None:
    with pytest.raises(SizeOverflowError):
        parse_size("1" * 400 + ".5")


def test_parse_size_very_long_numeral_is_rejected() -> None:
    with pytest.raises((InvalidNumberError, SizeOverflowError)):
        parse_size("1" * 5000)


def test_size_errors_are_value_errors() -> None:
    with pytest.raises(ValueError):
        parse_size("abc")
    try:
        parse_size(" 5 zz ")
    except SizeError as exc:
        assert exc.value == "5 zz"
    else:
        pytest.fail("expected SizeError")


def test_unit_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        SIZE_UNITS["x"] = 1  # type: ignore[index]
    assert all(key == key.lower() for key in SIZE_UNITS)


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0 B"),
        (-1, "0 B"),
        (1023, "1023 B"),
        (1024, "1.00 KiB"),
        (1536, "1.50 KiB"),
        (10240, "10.0 KiB"),
        (102400, "100 KiB"),
        (MIB, "1.00 MiB"),
        (5 * GIB + GIB // 4, "5.25 GiB"),
        (TIB * 12, "12.0 TiB"),
        (PIB, "1.00 PiB"),
        (PIB * 2048, "2048 PiB"),
        (INT64_MAX, "8192 PiB"),
    ],
)
def test_format_size(size: int, expected: str) -> None:
    assert format_size(size) == expected


def test_format_size_uses_binary_units_for_decimal_input() -> None:
    assert format_size(parse_size("1KB")) == "1000 B"
    assert format_size(parse_size("1MB")) == "977 KiB"


@pytest.mark.parametrize("raw", ["4k", " 1 KiB ", "", "abc", "-1", "1ZiB", "8192p"])
def test_validate_size_matches_parse(raw: str) -> None:
    error = validate_size(raw)
    try:
        parse_size(raw)
    except SizeError as exc:
        assert type(error) is type(exc)
        assert str(error) == str(exc)
    else:
        assert error is None


def test_parse_size_or_default() -> None:
    assert parse_size_or_default("100MiB", 1) == 100 * MIB
    assert parse_size_or_default("0", 7) == 0
    assert parse_size_or_default(None, 7) == 7
    assert parse_size_or_default("  ", 7) == 7
    assert parse_size_or_default("abc", 7) == 7
    assert parse_size_or_default("-1k", 7) == 7
    assert parse_size_or_default("1 KiB", KIB * 2) == KIB


@pytest.mark.parametrize("raw", ["1\xa0k", "1\u2003KiB", "4\u3000MB"])
def test_parse_size_rejects_non_ascii_gap(raw: str) -> None:
    with pytest.raises(InvalidFormatError):
        parse_size(raw)
