"""
Wire constants: magic numbers, struct layouts, endpoints and headers.
"""
import struct

# Magic numbers
HEADER_SIGNATURE = 0xBA5EBA11
PART_SIGNATURE = 0xCAB005E5
HEADER_VERSION = 1
PART_VERSION = 1

# Fingerprint slot: md5 hex (32) + sha1 hex (40) + NUL
FINGERPRINT_FIELD_SIZE = 73
FINGERPRINT_LENGTH = 72

# Struct formats (big-endian, all integers uint32)
# Header: signature, struct_size, version, total_size, part_count, error_code = 24 bytes
HEADER_STRUCT = struct.Struct(">IIIIII")

# Part record fixed part: signature, struct_size, version, share_id,
# fingerprint[73], size, payload_size, error_code, reserved = 105 bytes
PART_STRUCT = struct.Struct(f">IIII{FINGERPRINT_FIELD_SIZE}sIIII")

UINT32_MAX = 0xFFFFFFFF

# Sizes
HEADER_SIZE = HEADER_STRUCT.size  # 24 bytes
PART_FIXED_SIZE = PART_STRUCT.size  # 105 bytes

# Generation 2 framing
BINARY_SEPARATOR = b"\x00"
BINARY_DATA_MARKER = "BinaryData-{offset}-{size}"

# Endpoints (appended to the base API URL)
JSONRPC_ENDPOINT = "jsonrpc"
JSONRPC_BINARY_ENDPOINT = "jsonrpc_binary"
HAS_PARTS_ENDPOINT = "has_object_parts"
SEND_PARTS_ENDPOINT = "send_object_parts"
GET_PARTS_ENDPOINT = "get_object_parts"
BINARY_ENDPOINTS = frozenset(
    {
        HAS_PARTS_ENDPOINT,
        SEND_PARTS_ENDPOINT,
        GET_PARTS_ENDPOINT,
        JSONRPC_BINARY_ENDPOINT,
    }
)

# JSON-RPC methods
LIST_OBJECTS_METHOD = "list_objects"
UPDATE_OBJECTS_METHOD = "update_objects"
HAS_PARTS_V2_METHOD = "has_object_parts_v2"
SEND_PARTS_V2_METHOD = "send_object_parts_v2"
GET_PARTS_V2_METHOD = "get_object_parts_v2"
JSONRPC_VERSION = "2.0"
JSONRPC_REQUEST_ID = "0"

# Request headers
API_VERSION = "1.0"
CLIENT_TYPE = "api"
BINARY_CONTENT_TYPE = "application/octet-stream"

# Client defaults
DEFAULT_BASE_URL = "https://api.copy.com/rest"
DEFAULT_PAGE_SIZE = 10
DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1 MiB per part
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_SHARE_ID = 0
