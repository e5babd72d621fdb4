"""Wire protocol and session constants."""

# ============================================================================
# Endpoints
# ============================================================================

# Official API, formatted with (model name, method)
API_URL_FORMAT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:{method}"

# Model listing (paginated)
MODELS_URL = "https://generativelanguage.googleapis.com/v1beta/models"
MODELS_PAGE_SIZE = 50

# Key-free web endpoint
FREE_API_URL = (
    "https://gemini.google.com/_/BardChatUi/data/assistant.lamda.BardFrontendService/"
    "StreamGenerate?bl=&f.sid=&hl=en&_reqid=&rt=c"
)
FREE_API_ORIGIN = "https://gemini.google.com"

# ============================================================================
# Stream framing
# ============================================================================

# Event-stream marker for the official API
SSE_DATA_PREFIX = "data: "

# Anti-JSON-hijacking prefix sent first by the key-free endpoint
ANTI_HIJACK_PREFIX = b")]}'"

# Marker the key-free endpoint injects inside the stringified payload
LEGACY_NOISE_MARKER = r"\\nhttp://googleusercontent.com/immersive_entry_chip/0\\n"

# Upper bound for the unprocessed line buffer of a single attempt
MAX_STREAM_BUFFER_BYTES = 64 * 1024 * 1024

# ============================================================================
# Retry Configuration
# ============================================================================

MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 2.0
SUCCESS_STATUS = 200
RETRYABLE_STATUS = 503

# Sentinel statuses, never valid HTTP codes
TRANSPORT_FAILURE_STATUS = -1
BUFFER_EXHAUSTED_STATUS = -2

# ============================================================================
# Session limits
# ============================================================================

ATTACHMENT_LIMIT = 1024
MAX_FREE_MODE_CONTEXT_SIZE = 102400
FLASH_THINKING_BUDGET_CAP = 16384
DEFAULT_LANGUAGE = "en-US"

# Prompt sent when only the location side-channel is requested
LOCATION_QUERY_PROMPT = "echo 'hello'"

__all__ = [
    'API_URL_FORMAT',
    'MODELS_URL',
    'MODELS_PAGE_SIZE',
    'FREE_API_URL',
    'FREE_API_ORIGIN',
    'SSE_DATA_PREFIX',
    'ANTI_HIJACK_PREFIX',
    'LEGACY_NOISE_MARKER',
    'MAX_STREAM_BUFFER_BYTES',
    'MAX_ATTEMPTS',
    'RETRY_DELAY_SECONDS',
    'SUCCESS_STATUS',
    'RETRYABLE_STATUS',
    'TRANSPORT_FAILURE_STATUS',
    'BUFFER_EXHAUSTED_STATUS',
    'ATTACHMENT_LIMIT',
    'MAX_FREE_MODE_CONTEXT_SIZE',
    'FLASH_THINKING_BUDGET_CAP',
    'DEFAULT_LANGUAGE',
    'LOCATION_QUERY_PROMPT',
]
