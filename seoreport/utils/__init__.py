"""Utility modules for the SE Ranking report engine."""

from .config import Settings, get_settings
from .countries import COUNTRY_NAMES, country_name
from .numbers import round_half_up, to_float, to_int, to_optional_int
from .urls import brand_from_domain, clean_domain, extract_domain_from_url, validate_domain

__all__ = [
    "Settings",
    "get_settings",
    "COUNTRY_NAMES",
    "country_name",
    "round_half_up",
    "to_float",
    "to_int",
    "to_optional_int",
    "brand_from_domain",
    "clean_domain",
    "extract_domain_from_url",
    "validate_domain",
]
