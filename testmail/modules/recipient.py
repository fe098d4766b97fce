"""
Recipient Model
A single participant of an email message and the address interpretation rules
"""

import re
from dataclasses import dataclass
from email.utils import parseaddr
from enum import Enum
from typing import Optional

from testmail.utils.validators import check_non_empty_argument

QUOTED_STRING_PATTERN = re.compile(r'"(?:[^"\\]|\\.)*"')


class RecipientType(Enum):
    """Role of a recipient in the message headers"""
    TO = "To"
    CC = "Cc"
    BCC = "Bcc"


@dataclass(frozen=True)
class Recipient:
    """
    An email participant

    ``type`` is None for from, reply-to and return-receipt recipients,
    whose role follows from where they are used.
    """
    name: Optional[str]
    address: str
    type: Optional[RecipientType] = None

    def __post_init__(self):
        check_non_empty_argument(self.address, "address")


def _is_well_formed(email_address: str, parsed_address: str) -> bool:
    """A parse only counts when brackets balance and a single user@domain came out"""
    unquoted = QUOTED_STRING_PATTERN.sub("", email_address)
    if unquoted.count("<") != unquoted.count(">") or unquoted.count("<") > 1:
        return False
    return "@" in parsed_address and not any(ch.isspace() for ch in parsed_address)


def interpret_recipient(recipient_name: Optional[str], email_address: str,
                        recipient_type: Optional[RecipientType]) -> Recipient:
    """
    Build a recipient from an address token that may carry its own display name.

    ``"Alice <alice@x.com>"`` yields name "Alice" regardless of
    ``recipient_name``; a bare ``"alice@x.com"`` keeps ``recipient_name``.
    Tokens that do not parse to a single address (``"not really <an address"``,
    ``"Bob Smith"``) are used verbatim as the address.
    """
    parsed_name, parsed_address = parseaddr(email_address)
    if not _is_well_formed(email_address, parsed_address):
        return Recipient(recipient_name, email_address, recipient_type)
    return Recipient(parsed_name or recipient_name, parsed_address, recipient_type)
