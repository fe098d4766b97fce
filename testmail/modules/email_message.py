"""
Email Data Model
Immutable result of EmailBuilder.build(), ready to hand to a mail transport
"""

from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from testmail.modules.recipient import Recipient


@dataclass(frozen=True, eq=False)
class Email:
    """
    A fully built email message

    Recipients keep their insertion order (duplicates allowed) but equality
    treats them as a multiset, so two messages addressed in a different order
    are equal. ``id`` does not take part in equality.

    When ``use_return_receipt_to`` is set without an explicit
    ``return_receipt_to``, the receipt goes to the reply-to recipient, or to
    the sender when there is no reply-to. Both may be absent, in which case
    it stays None.
    """
    id: Optional[str] = None
    from_recipient: Optional[Recipient] = None
    reply_to_recipient: Optional[Recipient] = None
    text: Optional[str] = None
    text_html: Optional[str] = None
    subject: Optional[str] = None
    recipients: Tuple[Recipient, ...] = ()
    headers: Mapping[str, str] = field(default_factory=dict)
    use_return_receipt_to: bool = False
    return_receipt_to: Optional[Recipient] = None

    def __post_init__(self):
        object.__setattr__(self, "recipients", tuple(self.recipients or ()))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers or {})))

        if self.use_return_receipt_to and self.return_receipt_to is None:
            default_receipt = self.reply_to_recipient if self.reply_to_recipient is not None else self.from_recipient
            object.__setattr__(self, "return_receipt_to", default_receipt)

    def _equality_fields(self) -> tuple:
        return (
            self.from_recipient,
            self.reply_to_recipient,
            self.text,
            self.text_html,
            self.subject,
            self.use_return_receipt_to,
            self.return_receipt_to,
        )

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Email):
            return NotImplemented
        return (
            self._equality_fields() == other._equality_fields()
            and Counter(self.recipients) == Counter(other.recipients)
            and dict(self.headers) == dict(other.headers)
        )

    def __hash__(self):
        return hash((
            self._equality_fields(),
            frozenset(Counter(self.recipients).items()),
            frozenset(self.headers.items()),
        ))

    def __str__(self):
        lines = [
            f"\tid={self.id}",
            f"\tfrom_recipient={self.from_recipient}",
            f"\treply_to_recipient={self.reply_to_recipient}",
            f"\ttext={self.text!r}",
            f"\ttext_html={self.text_html!r}",
            f"\tsubject={self.subject!r}",
            f"\trecipients={list(self.recipients)}",
        ]
        if self.use_return_receipt_to:
            lines.append("\tuse_return_receipt_to=True")
            lines.append(f"\t\treturn_receipt_to={self.return_receipt_to}")
        if self.headers:
            lines.append(f"\theaders={dict(self.headers)}")
        return "Email{\n" + ",\n".join(lines) + "\n}"
