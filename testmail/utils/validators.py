"""
Validation Helpers
Argument checks shared by the builder, the recipient model and the config loader
"""

import re
from collections.abc import Sized
from typing import List, TypeVar

T = TypeVar("T")

# Marks the end of one address in a comma/semicolon separated list. Only
# inserted after an "@..." run (optionally closed by '>'), so separators
# inside a display name never split the token.
ADDRESS_DELIMITER = "<|>"
_ADDRESS_END_PATTERN = re.compile(r"(@.*?>?)\s*[,;]")
_TRAILING_DELIMITER_PATTERN = re.compile(r"<\|>$")
_DELIMITER_SPLIT_PATTERN = re.compile(r"\s*<\|>\s*")


class ValidationError(ValueError):
    """Raised when a required argument is missing or empty"""


def value_null_or_empty(value) -> bool:
    """
    Check whether a value counts as "not provided"

    Args:
        value: Any argument value

    Returns:
        True for None, empty strings, empty collections and zero-length byte buffers
    """
    if value is None:
        return True
    if isinstance(value, (str, bytes, bytearray)):
        return len(value) == 0
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def check_non_empty_argument(value: T, parameter_name: str) -> T:
    """
    Require a non-empty argument, passing it through for chaining

    Args:
        value: The argument to check
        parameter_name: Name used in the error message

    Returns:
        The value, unchanged

    Raises:
        ValidationError: If the value is None or empty
    """
    if value_null_or_empty(value):
        raise ValidationError(f"{parameter_name} is required")
    return value


def extract_email_addresses(email_address_list: str) -> List[str]:
    """
    Split a comma or semicolon separated address list into single addresses.

    Display-name forms such as ``Name <addr@example.com>`` are kept intact;
    the list is only split after the address part of each entry.

    Example:
        >>> extract_email_addresses("a@x.com, Name <b@y.com>; c@z.com")
        ['a@x.com', 'Name <b@y.com>', 'c@z.com']
    """
    check_non_empty_argument(email_address_list, "emailAddressList")

    delimited = _ADDRESS_END_PATTERN.sub(r"\1" + ADDRESS_DELIMITER, email_address_list.strip())
    delimited = _TRAILING_DELIMITER_PATTERN.sub("", delimited)
    addresses = _DELIMITER_SPLIT_PATTERN.split(delimited)

    # A separator followed only by whitespace leaves an empty tail
    while len(addresses) > 1 and not addresses[-1]:
        addresses.pop()
    return addresses
