from __future__ import annotations

import pytest

from account_api.domain.errors import ValidationError
from account_api.domain.users import (
    PERMISSION_LEVELS,
    is_valid_username,
    permission_names,
    prepare_user_for_write,
    validate_user,
)


class ReversingHasher:
    def hash(self, password: str) -> str:
        return "digest:" + password[::-1]


def test_valid_user_is_cleaned(ann):
    payload = dict(ann, firstName="  Ann ", lastName=" Lee", email="  Ann@Example.COM ")

    values = validate_user(payload)

    assert values == {
        "first_name": "Ann",
        "last_name": "Lee",
        "email": "ann@example.com",
        "username": "ann_lee1",
        "password": "correcthorsebattery",
        "permission_level": 15,
    }


def test_permission_level_defaults_to_read(bob):
    assert validate_user(bob)["permission_level"] == 1


def test_unknown_fields_are_dropped(ann):
    values = validate_user(dict(ann, isAdmin=True, id="forged"))

    assert "isAdmin" not in values
    assert "id" not in values


def test_missing_fields_report_every_required_message():
    with pytest.raises(ValidationError) as info:
        validate_user({})

    assert info.value.errors == {
        "firstName": "First name is required.",
        "lastName": "Last name is required.",
        "email": "Email address is required.",
        "username": "Username is required.",
        "password": "Password is required.",
    }
    assert info.value.field == "firstName"
    assert info.value.message == "First name is required."
    assert str(info.value).startswith("User validation failed: firstName: First name is required.")


def test_whitespace_only_names_are_required_after_trim(ann):
    with pytest.raises(ValidationError) as info:
        validate_user(dict(ann, firstName="   ", lastName="\t"))

    assert info.value.errors == {
        "firstName": "First name is required.",
        "lastName": "Last name is required.",
    }


def test_name_length_limits(ann):
    assert validate_user(dict(ann, firstName="x" * 256))["first_name"] == "x" * 256

    with pytest.raises(ValidationError) as info:
        validate_user(dict(ann, firstName="x" * 257, lastName="y" * 257))

    assert info.value.errors == {
        "firstName": "The first name must be of maximum length 256 characters.",
        "lastName": "The last name must be of maximum length 256 characters.",
    }


@pytest.mark.parametrize("email", ["not-an-email", "ann@", "@example.com", "ann example@example.com"])
def test_invalid_email(ann, email):
    with pytest.raises(ValidationError) as info:
        validate_user(dict(ann, email=email))

    assert info.value.errors == {"email": "Please provide a valid email address."}


@pytest.mark.parametrize(
    "username, valid",
    [
        ("a12", True),
        ("ann_lee1", True),
        ("Ann-Lee", True),
        ("a" * 256, True),
        ("1abc", False),
        ("ab", False),
        ("a" * 257, False),
        ("_abc", False),
        ("ann lee", False),
        ("ann.lee", False),
        ("abc\n", False),
        ("", False),
        (None, False),
    ],
)
def test_username_pattern(username, valid):
    assert is_valid_username(username) is valid


def test_username_is_not_trimmed(ann):
    with pytest.raises(ValidationError) as info:
        validate_user(dict(ann, username=" ann_lee1"))

    assert info.value.errors == {"username": "Please provide a valid username."}


def test_password_length_limits(ann):
    assert validate_user(dict(ann, password="x" * 10))["password"] == "x" * 10
    assert validate_user(dict(ann, password="x" * 256))["password"] == "x" * 256

    with pytest.raises(ValidationError) as short:
        validate_user(dict(ann, password="x" * 9))
    with pytest.raises(ValidationError) as long:
        validate_user(dict(ann, password="x" * 257))

    assert short.value.errors == {"password": "The password must be of minimum length 10 characters."}
    assert long.value.errors == {"password": "The password must be of maximum length 256 characters."}


@pytest.mark.parametrize("level", range(-1, 17))
def test_permission_level_whitelist(ann, level):
    payload = dict(ann, permissionLevel=level)
    if level in {1, 2, 3, 4, 5, 6, 8, 9, 10, 12, 15}:
        assert validate_user(payload)["permission_level"] == level
    else:
        with pytest.raises(ValidationError) as info:
            validate_user(payload)
        assert info.value.errors == {
            "permissionLevel": f"`{level}` is not a valid enum value for path `permissionLevel`."
        }


def test_permission_whitelist_is_literal():
    assert PERMISSION_LEVELS == (1, 2, 3, 4, 5, 6, 8, 9, 10, 12, 15)


def test_permission_level_casting(ann):
    assert validate_user(dict(ann, permissionLevel="12"))["permission_level"] == 12
    assert validate_user(dict(ann, permissionLevel=9.0))["permission_level"] == 9

    for bad in (True, "admin", [15]):
        with pytest.raises(ValidationError) as info:
            validate_user(dict(ann, permissionLevel=bad))
        assert info.value.errors["permissionLevel"].startswith("Cast to Number failed")

    with pytest.raises(ValidationError) as info:
        validate_user(dict(ann, permissionLevel=None))
    assert info.value.errors == {"permissionLevel": "Permission level is required."}


@pytest.mark.parametrize("raw", ["١٥", "１５", "9" * 5000, "1_5", "0x0f"])
def test_permission_level_rejects_non_ascii_or_oversized_digit_strings(ann, raw):
    with pytest.raises(ValidationError) as info:
        validate_user(dict(ann, permissionLevel=raw))

    assert list(info.value.errors) == ["permissionLevel"]
    assert info.value.errors["permissionLevel"].startswith("Cast to Number failed")


def test_numbers_are_cast_for_text_fields(ann):
    assert validate_user(dict(ann, lastName=42))["last_name"] == "42"

    with pytest.raises(ValidationError) as info:
        validate_user(dict(ann, firstName={"first": "Ann"}))
    assert info.value.errors["firstName"].startswith("Cast to string failed")


def test_partial_validation_checks_only_supplied_fields():
    assert validate_user({"lastName": " Smith "}, partial=True) == {"last_name": "Smith"}
    assert validate_user({}, partial=True) == {}

    with pytest.raises(ValidationError) as info:
        validate_user({"permissionLevel": 7}, partial=True)
    assert list(info.value.errors) == ["permissionLevel"]


def test_prepare_for_write_hashes_password(ann):
    values = prepare_user_for_write(ann, ReversingHasher())

    assert values["password"] == "digest:yrettabesrohtcerroc"
    assert values["username"] == "ann_lee1"


def test_prepare_for_write_skips_hashing_without_password():
    values = prepare_user_for_write({"firstName": "Annie"}, ReversingHasher(), partial=True)

    assert values == {"first_name": "Annie"}


def test_prepare_for_write_does_not_hash_invalid_input(ann):
    class ExplodingHasher:
        def hash(self, password):
            raise AssertionError("should not hash")

    with pytest.raises(ValidationError):
        prepare_user_for_write(dict(ann, password="short"), ExplodingHasher())


@pytest.mark.parametrize(
    "level, names",
    [
        (1, ["read"]),
        (6, ["create", "update"]),
        (9, ["read", "delete"]),
        (15, ["read", "create", "update", "delete"]),
    ],
)
def test_permission_names(level, names):
    assert permission_names(level) == names
