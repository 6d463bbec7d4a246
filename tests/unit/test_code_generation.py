import pytest

from quizhub.domain.services import (
    generate_numeric_code,
    normalize_email,
    secure_compare,
)


def test_generate_numeric_code_format_and_range():
    for _ in range(100):
        c = generate_numeric_code()
        assert len(c) == 6 and c.isdigit(), c
        assert 0 <= int(c) <= 999_999


def test_generate_numeric_code_respects_width():
    assert len(generate_numeric_code(4)) == 4
    with pytest.raises(ValueError):
        generate_numeric_code(0)


def test_secure_compare_constant_api():
    assert secure_compare("482913", "482913")
    assert not secure_compare("482913", "482914")
    assert not secure_compare("ü", "u")


def test_normalize_email():
    assert normalize_email("  User@Test.COM ") == "user@test.com"
