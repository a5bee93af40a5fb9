# Fallback values substituted for missing or malformed transaction fields

PLACEHOLDER_TX_HASH = b"\x00" * 32
ZERO_ADDRESS = b"\x00" * 20

ZERO_QUANTITY = "0x0"
EMPTY_ACCESS_LIST = "0x"

# Intrinsic gas cost of the cheapest valid transaction
DEFAULT_GAS_LIMIT = 21000

ADDRESS_LENGTH = 20

# Precompiled contracts occupy 0x00..01 through 0x00..09
PRECOMPILE_MIN = 1
PRECOMPILE_MAX = 9

REPLAY_SCHEMA_VERSION = "1.0"
