import pytest

from arbiter.bind.naming import (
    safe_ident,
    safe_identifier_name,
    safe_module_name,
    to_snake_case,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Valid", "valid"),
        ("Enum", "enum_"),
        ("Mod", "mod_"),
        ("2Two", "_2_two"),
    ],
)
def test_safe_module_name(name, expected):
    assert safe_module_name(name) == expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("ExampleContract", "example_contract"),
        ("AnotherTest", "another_test"),
        ("ITestInterface", "i_test_interface"),
        ("G3M", "g3m"),
        ("SD59x18Math", "sd5_9x_18_math"),
        ("ExampleOne", "example_one"),
        ("TestTwo", "test_two"),
    ],
)
def test_contract_file_names(name, expected):
    assert safe_module_name(name) == expected


def test_to_snake_case_leading_digit_kept():
    assert to_snake_case("2Two") == "2_two"


def test_to_snake_case_separators_and_trailing():
    assert to_snake_case("foo-bar") == "foo_bar"
    assert to_snake_case("--foo bar--") == "foo_bar"


def test_to_snake_case_is_idempotent():
    once = to_snake_case("SD59x18Math")
    assert to_snake_case(once) == once


def test_safe_identifier_name():
    assert safe_identifier_name("2_two") == "_2_two"
    assert safe_identifier_name("valid") == "valid"
    assert safe_identifier_name("") == ""


def test_safe_ident_keywords():
    assert safe_ident("self") == "self_"
    assert safe_ident("enum") == "enum_"
    assert safe_ident("valid") == "valid"


def test_safe_ident_rejects_invalid():
    with pytest.raises(ValueError):
        safe_ident("a-b")


def test_safe_module_name_results_are_identifiers():
    for name in ["Valid", "Enum", "Mod", "2Two", "SD59x18Math", "G3M"]:
        assert safe_module_name(name).isidentifier()