"""Protocol vocabulary.

Keep these in one place to avoid stringly-typed frame handling.
"""

# Client frames.

CONNECT = "CONNECT"
STOMP = "STOMP"
SEND = "SEND"
SUBSCRIBE = "SUBSCRIBE"
UNSUBSCRIBE = "UNSUBSCRIBE"
ACK = "ACK"
NACK = "NACK"
BEGIN = "BEGIN"
COMMIT = "COMMIT"
ABORT = "ABORT"
DISCONNECT = "DISCONNECT"

# Server frames.

CONNECTED = "CONNECTED"
MESSAGE = "MESSAGE"
RECEIPT = "RECEIPT"
ERROR = "ERROR"

# Header names.

ACCEPT_VERSION = "accept-version"
ACK_MODE = "ack"
CONTENT_LENGTH = "content-length"
CONTENT_TYPE = "content-type"
DESTINATION = "destination"
HEART_BEAT = "heart-beat"
HOST = "host"
ID = "id"
LOGIN = "login"
MESSAGE_ID = "message-id"
PASSCODE = "passcode"
RECEIPT_ID = "receipt-id"
RECEIPT_REQUEST = "receipt"
SERVER = "server"
SESSION = "session"
SUBSCRIPTION = "subscription"
TRANSACTION = "transaction"
VERSION = "version"

# Acknowledgement modes for SUBSCRIBE.

ACK_AUTO = "auto"
ACK_CLIENT = "client"
ACK_CLIENT_INDIVIDUAL = "client-individual"

# Frames whose headers are exchanged without escaping.

UNESCAPED = frozenset((CONNECT, CONNECTED))
