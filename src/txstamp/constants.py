"""Shared constants for the txstamp signing scheme."""

# Scheme defaults
SCHEME_NAME = "Jesserc"  # "\x19Jesserc Signed Message:\n<len>"
SCHEME_OFFSET = 29  # v = recovery id + 29 (Ethereum uses 27)
ETHEREUM_SCHEME_NAME = "Ethereum"
ETHEREUM_OFFSET = 27

# Stamp prefix
STAMP_MAGIC = b"\x19"
STAMP_SUFFIX = " Signed Message:\n"

# Accounts
ADDRESS_SIZE = 20  # bytes
ADDRESS_HEX_LENGTH = 2 * ADDRESS_SIZE

# Signatures
SIGNATURE_SIZE = 65  # r(32) + s(32) + recovery id(1)
DIGEST_SIZE = 32
SIG_COMPONENT_SIZE = 32
RECOVERY_IDS = (0, 1)
MAX_OFFSET = 254  # offset + 1 must fit in the trailing byte

# secp256k1 group order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

# Record field limits
MAX_UINT16 = 2**16 - 1
MAX_UINT64 = 2**64 - 1

# Defaults for the CLI
DEFAULT_CHAIN_ID = 1
DEFAULT_KEY_FILE_MODE = 0o600
