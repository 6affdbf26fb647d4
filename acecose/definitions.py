"""Protocol constants for ACE and DCAF: message labels, error codes and states."""

from enum import IntEnum

COAP_DEFAULT_PORT = 5683
COAPS_DEFAULT_PORT = COAP_DEFAULT_PORT + 1

# Profile value sent in token requests; 0 means no profile is requested.
ACE_REQUEST_PROFILE = 0

MAX_OPTION_SIZE = 64


class GrantType(IntEnum):
    """OAuth grant types."""

    PASSWORD = 0
    AUTHORIZATION_CODE = 1
    CLIENT_CREDENTIALS = 2
    REFRESH_TOKEN = 3


class Profile(IntEnum):
    """Values for the ACE profile parameter."""

    DTLS = 1
    OSCORE = 2


class AceMessage(IntEnum):
    """CBOR labels for token request and response fields."""

    ACCESS_TOKEN = 1
    EXPIRES_IN = 2
    REQ_CNF = 4
    AUDIENCE = 5
    CNF = 8
    SCOPE = 9
    CLIENT_ID = 24
    CLIENT_SECRET = 25
    RESPONSE_TYPE = 26
    REDIRECT_URI = 27
    STATE = 28
    CODE = 29
    ERROR = 30
    ERROR_DESCRIPTION = 31
    ERROR_URI = 32
    GRANT_TYPE = 33
    TOKEN_TYPE = 34
    USERNAME = 35
    PASSWORD = 36
    REFRESH_TOKEN = 37
    PROFILE = 38
    CNONCE = 39
    RS_CNF = 41


class RequestCreationHint(IntEnum):
    """CBOR labels for AS request creation hints."""

    AS = 1
    KID = 2
    AUD = 5
    SCOPE = 9
    CNONCE = 39


class AceErrorCode(IntEnum):
    """Error codes of the ACE framework."""

    INVALID_REQUEST = 1
    INVALID_CLIENT = 2
    INVALID_GRANT = 3
    UNAUTHORIZED_CLIENT = 4
    UNSUPPORTED_GRANT_TYPE = 5
    INVALID_SCOPE = 6
    UNSUPPORTED_POP_KEY = 7
    INCOMPATIBLE_PROFILES = 8


class LogLevel(IntEnum):
    """Log levels in syslog order; lower values are more severe."""

    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


class DcafOption(IntEnum):
    """Options that can be set on a DCAF context."""

    TIMEOUT = 0x01


class ScopeType(IntEnum):
    """Kinds of scope information carried in a ticket."""

    AIF = 1


class TransactionState(IntEnum):
    """States of a DCAF transaction."""

    IDLE = 0
    UNAUTHORIZED = 1
    ACCESS_REQUEST = 2
    TICKET_REQUEST = 3
    TICKET_GRANT = 4
    AUTHORIZED = 5


class TransactionType(IntEnum):
    """Who started a DCAF transaction."""

    USER = 0
    SYSTEM = 1
    AUTO = 2


class MediaType(IntEnum):
    """CoAP content formats used by DCAF."""

    TEXT_PLAIN = 0
    APPLICATION_CBOR = 60


class CoapOption(IntEnum):
    """CoAP option numbers used by DCAF."""

    CONTENT_FORMAT = 12
    MAXAGE = 14