"""
Configuration Management Module
Resolves default property values from system properties, environment
variables and a properties file, in that order of precedence.
"""

import io
import logging
import os
import re
import threading
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, IO, Mapping, Optional, Union

from dotenv.parser import parse_stream

from testmail.utils.validators import check_non_empty_argument, value_null_or_empty

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "testmail.properties"

FALSE_VALUES = {"0", "false", "no"}
TRUE_VALUES = {"1", "true", "yes"}

# Same acceptance as a 32-bit signed integer parse; anything else stays a string
INTEGER_PATTERN = re.compile(r"[+-]?\d+")
INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

PropertyValue = Union[bool, int, str]


class ConfigurationError(ValueError):
    """Raised when a properties source is unreadable or contains unknown keys"""


class Property(Enum):
    """Recognized configuration properties and their keys"""
    JAVAXMAIL_DEBUG = "testmail.javaxmail.debug"
    TRANSPORT_STRATEGY = "testmail.transportstrategy"
    SMTP_HOST = "testmail.smtp.host"
    SMTP_PORT = "testmail.smtp.port"
    SMTP_USERNAME = "testmail.smtp.username"
    SMTP_PASSWORD = "testmail.smtp.password"
    PROXY_HOST = "testmail.proxy.host"
    PROXY_PORT = "testmail.proxy.port"
    PROXY_USERNAME = "testmail.proxy.username"
    PROXY_PASSWORD = "testmail.proxy.password"
    PROXY_SOCKS5BRIDGE_PORT = "testmail.proxy.socks5bridge.port"
    DEFAULT_SUBJECT = "testmail.defaults.subject"
    DEFAULT_FROM_NAME = "testmail.defaults.from.name"
    DEFAULT_FROM_ADDRESS = "testmail.defaults.from.address"
    DEFAULT_REPLYTO_NAME = "testmail.defaults.replyto.name"
    DEFAULT_REPLYTO_ADDRESS = "testmail.defaults.replyto.address"
    DEFAULT_TO_NAME = "testmail.defaults.to.name"
    DEFAULT_TO_ADDRESS = "testmail.defaults.to.address"
    DEFAULT_CC_NAME = "testmail.defaults.cc.name"
    DEFAULT_CC_ADDRESS = "testmail.defaults.cc.address"
    DEFAULT_BCC_NAME = "testmail.defaults.bcc.name"
    DEFAULT_BCC_ADDRESS = "testmail.defaults.bcc.address"
    DEFAULT_POOL_SIZE = "testmail.defaults.poolsize"
    DEFAULT_SESSION_TIMEOUT_MILLIS = "testmail.defaults.sessiontimeoutmillis"
    TRANSPORT_MODE_LOGGING_ONLY = "testmail.transport.mode.logging.only"

    @property
    def key(self) -> str:
        return self.value


def parse_property_value(property_value: Optional[str]) -> Optional[PropertyValue]:
    """
    Coerce a raw property string to a boolean, an integer or the string itself

    Args:
        property_value: Raw value, or None when the source has no such key

    Returns:
        False/True for "0"/"false"/"no" and "1"/"true"/"yes" (case-insensitive),
        an int for 32-bit decimal integers, otherwise the original string
    """
    if property_value is None:
        return None

    lowered = property_value.lower()
    if lowered in FALSE_VALUES:
        return False
    if lowered in TRUE_VALUES:
        return True

    if INTEGER_PATTERN.fullmatch(property_value):
        number = int(property_value)
        if INT_MIN <= number <= INT_MAX:
            return number

    return property_value


def parse_properties(content: str) -> Dict[str, str]:
    """
    Parse ``key=value`` lines with the dotenv grammar (no interpolation).

    Full-line ``#`` comments are skipped. An unquoted value ends at a
    whitespace-preceded ``#``, so values containing `` #`` must be quoted:
    ``subject="Weekly # digest"``. Surrounding single or double quotes are
    removed (write ``'"Quoted"'`` to keep them). A bare key has an empty value.

    Raises:
        ConfigurationError: For any line that is not a valid ``key=value``
            statement, e.g. ``key: value``
    """
    properties: Dict[str, str] = {}
    for binding in parse_stream(io.StringIO(content)):
        if binding.error:
            raise ConfigurationError(
                f"could not parse properties line {binding.original.line}: {binding.original.string.strip()!r}"
            )
        if binding.key is None:
            continue
        properties[binding.key] = binding.value if binding.value is not None else ""
    return properties


def read_properties(file_properties: Mapping[str, Optional[str]],
                    system_properties: Optional[Mapping[str, str]] = None,
                    environ: Optional[Mapping[str, str]] = None) -> Dict[Property, PropertyValue]:
    """
    Resolve every known property by precedence: system property, then
    environment variable, then properties file.

    Args:
        file_properties: Raw key/value pairs read from a properties source
        system_properties: Process-wide property table (highest precedence)
        environ: Environment variables (default: os.environ)

    Returns:
        Mapping of each resolved Property to its coerced value

    Raises:
        ConfigurationError: If the file source has keys that are not recognized
    """
    system_properties = system_properties or {}
    environ = os.environ if environ is None else environ

    file_properties_left = dict(file_properties)
    resolved: Dict[Property, PropertyValue] = {}

    for prop in Property:
        as_system_property = parse_property_value(system_properties.get(prop.key))
        if as_system_property is not None:
            logger.debug(
                "System property overrides %s", prop.key,
                extra={"extra_fields": {prop.key: as_system_property}}
            )
            resolved[prop] = as_system_property
            file_properties_left.pop(prop.key, None)
            continue

        as_env_property = parse_property_value(environ.get(prop.key))
        if as_env_property is not None:
            resolved[prop] = as_env_property
            file_properties_left.pop(prop.key, None)
            continue

        if prop.key in file_properties_left:
            raw_value = file_properties_left.pop(prop.key)
            if raw_value is not None:
                resolved[prop] = parse_property_value(raw_value) if isinstance(raw_value, str) else raw_value

    if file_properties_left:
        raise ConfigurationError(f"unknown properties provided {sorted(file_properties_left)}")

    return resolved


class Config:
    """
    Resolved default properties for message construction.

    Construct one and pass it to ``EmailBuilder``; reload with the
    ``load_properties*`` methods, either replacing the resolved values
    (``add_properties=False``) or merging into them.
    """

    def __init__(self, properties_file: Optional[Union[str, Path]] = DEFAULT_CONFIG_FILENAME,
                 system_properties: Optional[Mapping[str, str]] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration

        Args:
            properties_file: Properties file to load (default: testmail.properties);
                a missing file leaves only system and environment values
            system_properties: Process-wide property table, highest precedence
            environ: Environment variables (default: os.environ)
        """
        self._lock = threading.RLock()
        self._resolved: Dict[Property, PropertyValue] = {}
        self.system_properties: Mapping[str, str] = dict(system_properties or {})
        self.environ: Mapping[str, str] = os.environ if environ is None else environ

        if properties_file and Path(properties_file).is_file():
            self.load_properties(properties_file)
        else:
            logger.debug("Property file %s not found, skipping config file", properties_file)
            self.load_properties_from_mapping({})

    @property
    def resolved_properties(self) -> Mapping[Property, PropertyValue]:
        with self._lock:
            return MappingProxyType(dict(self._resolved))

    def has_property(self, prop: Property) -> bool:
        with self._lock:
            return not value_null_or_empty(self._resolved.get(prop))

    def get_property(self, prop: Property, default: Any = None) -> Any:
        with self._lock:
            return self._resolved.get(prop, default)

    def load_properties(self, filename: Union[str, Path],
                        add_properties: bool = False) -> Mapping[Property, PropertyValue]:
        """
        Load a properties file from disk

        Returns:
            Read-only view of the resolved properties, or an empty dict when
            the file does not exist (the current values are kept)
        """
        path = Path(filename)
        if not path.is_file():
            logger.debug("Property file %s not found, skipping config file", path)
            return {}

        try:
            stream = path.open("r", encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"error reading properties file {path}") from e
        return self.load_properties_from_stream(stream, add_properties)

    def load_properties_from_stream(self, stream: IO,
                                    add_properties: bool = False) -> Mapping[Property, PropertyValue]:
        """
        Load Java-style ``key=value`` properties from an open stream, closing it afterwards

        Raises:
            ValidationError: If no stream is given
            ConfigurationError: If the stream cannot be read, has malformed lines or unknown keys
        """
        check_non_empty_argument(stream, "InputStream")
        try:
            content = stream.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError("error reading properties file from stream") from e
        finally:
            try:
                stream.close()
            except OSError as e:
                logger.error("Failed to close properties stream: %s", e)

        if isinstance(content, (bytes, bytearray)):
            try:
                content = content.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ConfigurationError("error reading properties file from stream") from e

        file_properties = parse_properties(content)
        return self.load_properties_from_mapping(file_properties, add_properties)

    def load_properties_from_mapping(self, properties: Mapping[str, Optional[str]],
                                     add_properties: bool = False) -> Mapping[Property, PropertyValue]:
        with self._lock:
            resolved = read_properties(properties, self.system_properties, self.environ)
            if not add_properties:
                self._resolved.clear()
            self._resolved.update(resolved)
            logger.debug("Resolved %d configuration properties", len(self._resolved))
            return MappingProxyType(dict(self._resolved))
