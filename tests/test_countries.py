from countries import (
    COUNTRIES,
    DEFAULT_MAX_DIGITS,
    extract_digits,
    filter_countries,
    get_country_by_code,
    get_country_by_name,
    is_phone_valid,
    max_phone_digits,
    phone_format,
    phone_validation_message,
)


class TestCountryLookup:

    def test_by_code(self):
        assert get_country_by_code("IT").name == "Italy"
        assert get_country_by_code("it") is None

    def test_by_name_ignores_case(self):
        assert get_country_by_name("united kingdom").dial_code == "+44"
        assert get_country_by_name("Atlantis") is None

    def test_filter_blank_returns_everything(self):
        assert filter_countries("   ") == COUNTRIES

    def test_filter_by_name_or_code(self):
        names = {c.name for c in filter_countries("land")}
        assert {"Finland", "Poland", "Ireland", "Switzerland", "Netherlands", "New Zealand", "Iceland", "Thailand"} <= names

    def test_filter_by_dial_code(self):
        codes = {c.code for c in filter_countries("+44")}
        assert codes == {"GB"}


class TestPhoneRules:

    def test_known_country(self):
        assert max_phone_digits("SG") == 8
        assert phone_format("SG") == "XXXX XXXX"

    def test_default_rule(self):
        assert max_phone_digits("NL") == DEFAULT_MAX_DIGITS
        assert phone_format("NL") == "Phone number format"

    def test_extract_digits(self):
        assert extract_digits("+1 (202) 555-0143") == "12025550143"

    def test_is_phone_valid(self):
        assert is_phone_valid("9123 4567", "SG")
        assert not is_phone_valid("9123 45678", "SG")

    def test_message(self):
        assert phone_validation_message("FR") == "Maximum 9 digits allowed"
