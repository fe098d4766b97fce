"""
Email Builder
Fluent accumulator for message fields, optionally seeded from configured defaults
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from testmail.modules.email_message import Email
from testmail.modules.recipient import Recipient, RecipientType, interpret_recipient
from testmail.utils.config import Config, Property
from testmail.utils.sanitization import sanitize_for_logging
from testmail.utils.validators import check_non_empty_argument, extract_email_addresses

logger = logging.getLogger(__name__)


class EmailBuilder:
    """
    Builds an immutable Email

    Every setter returns the builder so calls can be chained:

        email = (EmailBuilder(config)
                 .from_address("Alice", "alice@example.com")
                 .to_list("Bob <bob@example.com>; carol@example.com")
                 .subject("Quarterly report")
                 .text("See attachment")
                 .build())

    A builder is meant to produce a single message.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize builder

        Args:
            config: Resolved defaults for sender, reply-to, recipients and subject.
                Without a config the builder starts empty.
        """
        self._id: Optional[str] = None
        self._from_recipient: Optional[Recipient] = None
        self._reply_to_recipient: Optional[Recipient] = None
        self._text: Optional[str] = None
        self._text_html: Optional[str] = None
        self._subject: Optional[str] = None
        self._recipients: List[Recipient] = []
        self._headers: Dict[str, str] = {}
        self._use_return_receipt_to = False
        self._return_receipt_to: Optional[Recipient] = None

        if config is not None:
            self._apply_defaults(config)

    def _apply_defaults(self, config: Config):
        """Seed fields from every default property that resolved to a value"""

        def value_of(prop: Property) -> Optional[str]:
            value = config.get_property(prop)
            return None if value is None else str(value)

        if config.has_property(Property.DEFAULT_FROM_ADDRESS):
            self.from_address(value_of(Property.DEFAULT_FROM_NAME), value_of(Property.DEFAULT_FROM_ADDRESS))
        if config.has_property(Property.DEFAULT_REPLYTO_ADDRESS):
            self.reply_to(value_of(Property.DEFAULT_REPLYTO_NAME), value_of(Property.DEFAULT_REPLYTO_ADDRESS))

        defaults = (
            (Property.DEFAULT_TO_NAME, Property.DEFAULT_TO_ADDRESS, self.to_list),
            (Property.DEFAULT_CC_NAME, Property.DEFAULT_CC_ADDRESS, self.cc_list),
            (Property.DEFAULT_BCC_NAME, Property.DEFAULT_BCC_ADDRESS, self.bcc_list),
        )
        for name_property, address_property, add_list in defaults:
            if config.has_property(address_property):
                name = value_of(name_property) if config.has_property(name_property) else None
                add_list(value_of(address_property), name)

        if config.has_property(Property.DEFAULT_SUBJECT):
            self.subject(value_of(Property.DEFAULT_SUBJECT))

    def build(self) -> Email:
        """Snapshot the accumulated fields into an immutable Email"""
        email = Email(
            id=self._id,
            from_recipient=self._from_recipient,
            reply_to_recipient=self._reply_to_recipient,
            text=self._text,
            text_html=self._text_html,
            subject=self._subject,
            recipients=tuple(self._recipients),
            headers=dict(self._headers),
            use_return_receipt_to=self._use_return_receipt_to,
            return_receipt_to=self._return_receipt_to,
        )
        logger.debug(
            "Built email '%s' with %d recipient(s)",
            sanitize_for_logging(email.subject), len(email.recipients)
        )
        return email

    def id(self, email_id: Optional[str]) -> "EmailBuilder":
        """Optional message id; the transport generates one when unset"""
        self._id = email_id
        return self

    def from_address(self, name: Optional[str], address: str) -> "EmailBuilder":
        check_non_empty_argument(address, "fromAddress")
        self._from_recipient = Recipient(name, address, None)
        return self

    def from_recipient(self, recipient: Recipient) -> "EmailBuilder":
        check_non_empty_argument(recipient, "recipient")
        self._from_recipient = Recipient(recipient.name, recipient.address, None)
        return self

    def reply_to(self, name: Optional[str], address: str) -> "EmailBuilder":
        check_non_empty_argument(address, "replyToAddress")
        self._reply_to_recipient = Recipient(name, address, None)
        return self

    def reply_to_recipient(self, recipient: Recipient) -> "EmailBuilder":
        check_non_empty_argument(recipient, "recipient")
        self._reply_to_recipient = Recipient(recipient.name, recipient.address, None)
        return self

    def subject(self, subject: str) -> "EmailBuilder":
        self._subject = check_non_empty_argument(subject, "subject")
        return self

    def text(self, text: Optional[str]) -> "EmailBuilder":
        self._text = text
        return self

    def text_html(self, text_html: Optional[str]) -> "EmailBuilder":
        self._text_html = text_html
        return self

    # Recipients: three input shapes per role, all funnelled into _add_recipients.
    #   to(*addresses)           - literal addresses, no name
    #   to_list(list, name)      - ',' or ';' separated list, display names honoured
    #   to_recipients(*recips)   - existing Recipient objects, role re-stamped

    def _add_recipients(self, name: Optional[str], recipient_type: RecipientType,
                        email_addresses: Iterable[str],
                        interpret: Callable[[Optional[str], str, RecipientType], Recipient]) -> "EmailBuilder":
        for email_address in email_addresses:
            recipient = interpret(name, email_address, recipient_type)
            logger.debug(
                "Adding %s recipient %s",
                recipient_type.name, sanitize_for_logging(recipient.address)
            )
            self._recipients.append(recipient)
        return self

    def _add_addresses(self, recipient_type: RecipientType, email_addresses) -> "EmailBuilder":
        check_non_empty_argument(email_addresses, "emailAddresses")
        for email_address in email_addresses:
            check_non_empty_argument(email_address, "emailAddress")
        return self._add_recipients(None, recipient_type, email_addresses, Recipient)

    def _add_address_list(self, recipient_type: RecipientType, email_address_list: str,
                          name: Optional[str]) -> "EmailBuilder":
        check_non_empty_argument(email_address_list, "emailAddressList")
        return self._add_recipients(
            name, recipient_type, extract_email_addresses(email_address_list), interpret_recipient
        )

    def _add_recipient_objects(self, recipient_type: RecipientType, recipients) -> "EmailBuilder":
        check_non_empty_argument(recipients, "recipientsToAdd")
        for recipient in recipients:
            check_non_empty_argument(recipient, "recipient")
        for recipient in recipients:
            self._add_recipients(recipient.name, recipient_type, [recipient.address], Recipient)
        return self

    def to(self, *email_addresses: str) -> "EmailBuilder":
        return self._add_addresses(RecipientType.TO, email_addresses)

    def to_list(self, email_address_list: str, name: Optional[str] = None) -> "EmailBuilder":
        return self._add_address_list(RecipientType.TO, email_address_list, name)

    def to_recipients(self, *recipients: Recipient) -> "EmailBuilder":
        return self._add_recipient_objects(RecipientType.TO, recipients)

    def cc(self, *email_addresses: str) -> "EmailBuilder":
        return self._add_addresses(RecipientType.CC, email_addresses)

    def cc_list(self, email_address_list: str, name: Optional[str] = None) -> "EmailBuilder":
        return self._add_address_list(RecipientType.CC, email_address_list, name)

    def cc_recipients(self, *recipients: Recipient) -> "EmailBuilder":
        return self._add_recipient_objects(RecipientType.CC, recipients)

    def bcc(self, *email_addresses: str) -> "EmailBuilder":
        return self._add_addresses(RecipientType.BCC, email_addresses)

    def bcc_list(self, email_address_list: str, name: Optional[str] = None) -> "EmailBuilder":
        return self._add_address_list(RecipientType.BCC, email_address_list, name)

    def bcc_recipients(self, *recipients: Recipient) -> "EmailBuilder":
        return self._add_recipient_objects(RecipientType.BCC, recipients)

    def add_header(self, name: str, value) -> "EmailBuilder":
        """
        Add a header such as ``X-Priority``; the value is stored as str(value)
        and a repeated name replaces the earlier value.
        """
        check_non_empty_argument(name, "name")
        check_non_empty_argument(value, "value")
        self._headers[name] = str(value)
        return self

    def with_return_receipt_to(self, address: Optional[str] = None,
                               name: Optional[str] = None) -> "EmailBuilder":
        """
        Request a return receipt (Disposition-Notification-To).

        Without an address any earlier explicit receipt address is dropped and
        the receipt goes to the reply-to address, or the sender, at build time.

        Raises:
            ValidationError: If a name is given without an address
        """
        self._use_return_receipt_to = True
        if address is None and name is None:
            self._return_receipt_to = None
        else:
            self._return_receipt_to = Recipient(name, check_non_empty_argument(address, "returnReceiptToAddress"), None)
        return self

    def with_return_receipt_to_recipient(self, recipient: Recipient) -> "EmailBuilder":
        check_non_empty_argument(recipient, "recipient")
        self._use_return_receipt_to = True
        self._return_receipt_to = Recipient(
            recipient.name, check_non_empty_argument(recipient.address, "returnReceiptToAddress"), None
        )
        return self
