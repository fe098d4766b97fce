from dataclasses import FrozenInstanceError

import pytest

from testmail.modules.recipient import Recipient, RecipientType, interpret_recipient
from testmail.utils.validators import ValidationError


def test_bare_address_keeps_default_name():
    recipient = interpret_recipient("Bob", "alice@x.com", RecipientType.TO)
    assert recipient == Recipient("Bob", "alice@x.com", RecipientType.TO)


def test_embedded_name_wins_over_default():
    recipient = interpret_recipient("Bob", "Alice <alice@x.com>", RecipientType.TO)
    assert recipient == Recipient("Alice", "alice@x.com", RecipientType.TO)


def test_quoted_display_name():
    recipient = interpret_recipient(None, '"Doe, John" <john@x.com>', RecipientType.CC)
    assert recipient == Recipient("Doe, John", "john@x.com", RecipientType.CC)


def test_no_default_name_and_bare_address():
    recipient = interpret_recipient(None, "carol@z.com", RecipientType.BCC)
    assert recipient.name is None
    assert recipient.address == "carol@z.com"
    assert recipient.type is RecipientType.BCC


def test_unbalanced_bracket_used_verbatim():
    recipient = interpret_recipient("Bob", "not really <an address", RecipientType.TO)
    assert recipient == Recipient("Bob", "not really <an address", RecipientType.TO)


@pytest.mark.parametrize("token", [
    "Bob Smith",
    "stray> alice@x.com",
    "<a@x.com> <b@x.com>",
])
def test_token_without_single_address_used_verbatim(token):
    recipient = interpret_recipient("Dflt", token, RecipientType.CC)
    assert recipient == Recipient("Dflt", token, RecipientType.CC)


def test_bracket_inside_quoted_name_is_not_unbalanced():
    recipient = interpret_recipient(None, '"a <b" <c@x.com>', RecipientType.TO)
    assert recipient == Recipient("a <b", "c@x.com", RecipientType.TO)


def test_address_required():
    with pytest.raises(ValidationError, match="address is required"):
        Recipient("Alice", "", RecipientType.TO)
    with pytest.raises(ValidationError):
        Recipient("Alice", None)


def test_recipient_is_immutable():
    recipient = Recipient("Alice", "alice@x.com", RecipientType.TO)
    with pytest.raises(FrozenInstanceError):
        recipient.address = "mallory@x.com"


def test_structural_equality_includes_role():
    assert Recipient("Alice", "alice@x.com", RecipientType.TO) == Recipient("Alice", "alice@x.com", RecipientType.TO)
    assert Recipient("Alice", "alice@x.com", RecipientType.TO) != Recipient("Alice", "alice@x.com", RecipientType.CC)
    assert Recipient("Alice", "alice@x.com") != Recipient(None, "alice@x.com")
    assert len({Recipient("A", "a@x.com"), Recipient("A", "a@x.com")}) == 1


def test_role_defaults_to_contextual():
    assert Recipient("Alice", "alice@x.com").type is None
