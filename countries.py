"""
Countries offered by the address forms, and per-country phone length rules.
"""
import re
from typing import Dict, List, NamedTuple, Optional


class Country(NamedTuple):
    name: str
    code: str
    dial_code: str


COUNTRIES: List[Country] = [
    Country("United States", "US", "+1"),
    Country("Canada", "CA", "+1"),
    Country("United Kingdom", "GB", "+44"),
    Country("Australia", "AU", "+61"),
    Country("Germany", "DE", "+49"),
    Country("France", "FR", "+33"),
    Country("Italy", "IT", "+39"),
    Country("Spain", "ES", "+34"),
    Country("Netherlands", "NL", "+31"),
    Country("Belgium", "BE", "+32"),
    Country("Switzerland", "CH", "+41"),
    Country("Austria", "AT", "+43"),
    Country("Sweden", "SE", "+46"),
    Country("Norway", "NO", "+47"),
    Country("Denmark", "DK", "+45"),
    Country("Finland", "FI", "+358"),
    Country("Poland", "PL", "+48"),
    Country("Czech Republic", "CZ", "+420"),
    Country("Hungary", "HU", "+36"),
    Country("Romania", "RO", "+40"),
    Country("Greece", "GR", "+30"),
    Country("Portugal", "PT", "+351"),
    Country("Ireland", "IE", "+353"),
    Country("Japan", "JP", "+81"),
    Country("South Korea", "KR", "+82"),
    Country("China", "CN", "+86"),
    Country("India", "IN", "+91"),
    Country("Thailand", "TH", "+66"),
    Country("Vietnam", "VN", "+84"),
    Country("Singapore", "SG", "+65"),
    Country("Malaysia", "MY", "+60"),
    Country("Indonesia", "ID", "+62"),
    Country("Philippines", "PH", "+63"),
    Country("Hong Kong", "HK", "+852"),
    Country("Taiwan", "TW", "+886"),
    Country("United Arab Emirates", "AE", "+971"),
    Country("Saudi Arabia", "SA", "+966"),
    Country("Israel", "IL", "+972"),
    Country("Turkey", "TR", "+90"),
    Country("Russia", "RU", "+7"),
    Country("Mexico", "MX", "+52"),
    Country("Brazil", "BR", "+55"),
    Country("Argentina", "AR", "+54"),
    Country("Chile", "CL", "+56"),
    Country("Colombia", "CO", "+57"),
    Country("Peru", "PE", "+51"),
    Country("South Africa", "ZA", "+27"),
    Country("Egypt", "EG", "+20"),
    Country("Nigeria", "NG", "+234"),
    Country("Kenya", "KE", "+254"),
    Country("New Zealand", "NZ", "+64"),
    Country("Pakistan", "PK", "+92"),
    Country("Bangladesh", "BD", "+880"),
    Country("Sri Lanka", "LK", "+94"),
    Country("Ukraine", "UA", "+380"),
    Country("Croatia", "HR", "+385"),
    Country("Serbia", "RS", "+381"),
    Country("Iceland", "IS", "+354"),
    Country("Luxembourg", "LU", "+352"),
    Country("Malta", "MT", "+356"),
    Country("Cyprus", "CY", "+357"),
    Country("Slovenia", "SI", "+386"),
    Country("Slovakia", "SK", "+421"),
    Country("Bulgaria", "BG", "+359"),
    Country("Lithuania", "LT", "+370"),
    Country("Latvia", "LV", "+371"),
    Country("Estonia", "EE", "+372"),
]


def get_country_by_code(code: str) -> Optional[Country]:
    return next((c for c in COUNTRIES if c.code == code), None)


def get_country_by_name(name: str) -> Optional[Country]:
    return next((c for c in COUNTRIES if c.name.lower() == name.lower()), None)


def filter_countries(search_term: str) -> List[Country]:
    """Match on country name, ISO code or dial code ("+" is ignored)."""
    if not search_term.strip():
        return list(COUNTRIES)
    term = search_term.lower().replace("+", "")
    return [
        c for c in COUNTRIES
        if term in c.name.lower()
        or term in c.code.lower()
        or term in c.dial_code.replace("+", "")
    ]


# Phone validation rules by country code
PHONE_RULES: Dict[str, Dict[str, object]] = {
    "US": {"max_digits": 10, "format": "(XXX) XXX-XXXX"},
    "CA": {"max_digits": 10, "format": "(XXX) XXX-XXXX"},
    "GB": {"max_digits": 11, "format": "XXXXX XXXXXX"},
    "IN": {"max_digits": 10, "format": "XXXXXXXXXX"},
    "DE": {"max_digits": 11, "format": "XXXXXXXXXXXX"},
    "FR": {"max_digits": 9, "format": "XXX XXX XXX"},
    "IT": {"max_digits": 10, "format": "XXX XXX XXXX"},
    "ES": {"max_digits": 9, "format": "XXX XXX XXX"},
    "AU": {"max_digits": 9, "format": "XXXX XXX XXX"},
    "JP": {"max_digits": 10, "format": "XX-XXXX-XXXX"},
    "CN": {"max_digits": 11, "format": "XXXXXXXXXXX"},
    "SG": {"max_digits": 8, "format": "XXXX XXXX"},
    "MX": {"max_digits": 10, "format": "XXXX XXX XXXX"},
    "BR": {"max_digits": 11, "format": "XX XXXXX-XXXX"},
    "ZA": {"max_digits": 10, "format": "XX XXX XXXX"},
    "NZ": {"max_digits": 9, "format": "XXX XXX XXXX"},
    "HK": {"max_digits": 8, "format": "XXXX XXXX"},
    "AE": {"max_digits": 9, "format": "XXX XXX XXXX"},
    "SA": {"max_digits": 9, "format": "XX XXX XXXX"},
}

# Countries without a rule
DEFAULT_MAX_DIGITS = 15


def max_phone_digits(country_code: str) -> int:
    rule = PHONE_RULES.get(country_code)
    return rule["max_digits"] if rule else DEFAULT_MAX_DIGITS


def phone_format(country_code: str) -> str:
    rule = PHONE_RULES.get(country_code)
    return rule["format"] if rule else "Phone number format"


def extract_digits(phone: str) -> str:
    return re.sub(r"\D", "", phone)


def is_phone_valid(phone: str, country_code: str) -> bool:
    return len(extract_digits(phone)) <= max_phone_digits(country_code)


def phone_validation_message(country_code: str) -> str:
    return f"Maximum {max_phone_digits(country_code)} digits allowed"
