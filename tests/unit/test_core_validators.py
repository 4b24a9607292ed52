import datetime

import pytest

from directory_gateway.core import validators
from directory_gateway.core.models import DirectoryRecord

TODAY = datetime.date(2024, 6, 1)


def _candidate(**overrides):
    fields = dict(
        email="a@b.com",
        first_name="A",
        last_name="B",
        password="p",
        birthday=datetime.date(2000, 1, 1),
    )
    fields.update(overrides)
    return DirectoryRecord(**fields)


class TestValidateForCreation:
    def test_valid_record_passes(self):
        assert validators.validate_for_creation(_candidate(), today=TODAY) is None

    def test_birthday_today_is_allowed(self):
        assert validators.validate_for_creation(_candidate(birthday=TODAY), today=TODAY) is None

    @pytest.mark.parametrize(
        "email",
        [None, "", "no-at-symbol", "user@", "@domain.com", "user@example", "a@b..com", "a@.b.com", "a@b.com."],
    )
    def test_invalid_email(self, email):
        error = validators.validate_for_creation(_candidate(email=email), today=TODAY)
        assert error.code == validators.INVALID_EMAIL
        assert error.field == "email"

    @pytest.mark.parametrize(
        "overrides, code, field",
        [
            ({"first_name": ""}, validators.BLANK_FIELD, "firstName"),
            ({"first_name": None}, validators.BLANK_FIELD, "firstName"),
            ({"last_name": "   "}, validators.BLANK_FIELD, "lastName"),
            ({"birthday": datetime.date(2024, 6, 2)}, validators.FUTURE_BIRTHDAY, "birthday"),
            ({"birthday": None}, validators.BLANK_FIELD, "birthday"),
            ({"password": ""}, validators.BLANK_FIELD, "password"),
        ],
    )
    def test_single_violation(self, overrides, code, field):
        error = validators.validate_for_creation(_candidate(**overrides), today=TODAY)
        assert (error.code, error.field) == (code, field)

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"email": "bad", "first_name": "", "password": ""}, "email"),
            ({"first_name": "", "last_name": "", "password": ""}, "firstName"),
            ({"last_name": "", "birthday": datetime.date(2099, 1, 1)}, "lastName"),
            ({"birthday": datetime.date(2099, 1, 1), "password": ""}, "birthday"),
        ],
    )
    def test_reports_first_violation_only(self, overrides, field):
        error = validators.validate_for_creation(_candidate(**overrides), today=TODAY)
        assert error.field == field


class TestHelpers:
    @pytest.mark.parametrize("value", [None, "", " ", "\t\n", 0, 5, True, False, [], ["x"], {}])
    def test_is_blank(self, value):
        assert validators.is_blank(value)

    def test_is_not_blank(self):
        assert not validators.is_blank(" x ")

    def test_is_future_is_strict(self):
        assert not validators.is_future(TODAY, TODAY)
        assert validators.is_future(TODAY + datetime.timedelta(days=1), TODAY)
        assert not validators.is_future(None, TODAY)

    def test_email_check_does_not_touch_dns(self, mocker):
        spy = mocker.spy(validators, "validate_email")
        assert validators.is_valid_email("someone@example.com")
        assert spy.call_args.kwargs["check_deliverability"] is False

    @pytest.mark.parametrize("email", [5, True, ["a@b.com"], {"email": "a@b.com"}])
    def test_non_string_email_is_invalid(self, email):
        assert not validators.is_valid_email(email)
