"""Shared constants and configuration defaults for the RCON console."""

# Connection defaults
DEFAULT_RCON_PORT = 47200
DEFAULT_CONNECT_TIMEOUT = 10.0

# Frostbite packet limits
MAX_PACKET_SIZE = 16384
HEADER_SIZE = 12
MAX_SEQUENCE = 0x3FFFFFFF

# Response status words
STATUS_OK = "OK"
STATUS_INVALID_ARGUMENTS = "InvalidArguments"
STATUS_UNKNOWN_COMMAND = "UnknownCommand"

# Logging defaults
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_EVENT_LOG_FILE = "var/logs/events.jsonl"

# Environment
ENV_PREFIX = "BFOX_RCON_"

# Console markers
PROMPT = "-> "
RESPONSE_MARKER = "<-"
