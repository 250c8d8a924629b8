"""
Application-wide constants to replace magic numbers and strings.
"""
# ── Workflow statuses ──
STATUS_IDLE = "idle"
STATUS_ANALYZING = "analyzing"
STATUS_SEARCHING = "searching"
STATUS_WAITING_APPROVAL = "waiting_approval"
STATUS_GENERATING = "generating"
STATUS_FORMATTING = "formatting"
STATUS_SAVING = "saving"
STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"

TERMINAL_STATUSES = frozenset({STATUS_COMPLETED, STATUS_ERROR})

# ── Node names (also recorded in metadata.node_history) ──
NODE_ANALYZE = "analyze"
NODE_SEARCH = "search"
NODE_APPROVAL = "approval"
NODE_GENERATE = "generate"
NODE_FORMAT = "format"
NODE_SAVE = "save"

# ── Approval request kinds ──
APPROVAL_OVERWRITE_CONTENT = "overwrite_content"
APPROVAL_USE_SEARCH_RESULTS = "use_search_results"
APPROVAL_GENERATE_CONTENT = "generate_content"

# ── Content types ──
DEFAULT_CONTENT_TYPE = "general"

# ── Prompt analysis ──
# Phrases that indicate the prompt needs real-time or factual data
SEARCH_INDICATORS = (
    "latest", "current", "recent", "today", "statistics", "data", "research",
    "study", "report", "news", "trends", "market", "price", "rate", "compare",
    "versus", "vs", "what is", "who is", "when did", "where is", "how many",
    "how much",
)
QUESTION_WORDS = (
    "what", "who", "when", "where", "why", "how", "which", "can", "could",
    "should", "would", "is", "are", "do", "does",
)
SIMPLE_PROMPT_MAX_WORDS = 10
MEDIUM_PROMPT_MAX_WORDS = 50

# ── Web search ──
DEFAULT_MAX_SEARCH_RESULTS = 5
MAX_SEARCH_QUERIES = 3
MIN_QUERY_SENTENCE_LENGTH = 10

# ── Generation defaults ──
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4000

# ── Sessions ──
MAX_PROMPT_LENGTH_CHARS = 10000
DEFAULT_SESSION_TITLE = "Untitled Content"
SESSION_TITLE_MAX_CHARS = 80
SESSION_PATCH_FIELDS = frozenset({
    "title", "prompt", "content", "formatted_content", "status", "charts", "metadata",
})
# Session metadata key holding the workflow state of a run suspended for approval
SUSPENDED_STATE_KEY = "suspended_state"

# ── Stream events ──
EVENT_CONNECTED = "connected"
EVENT_STATUS = "status"
EVENT_STATE = "state"
EVENT_COMPLETE = "complete"
EVENT_ERROR = "error"
NDJSON_MEDIA_TYPE = "application/x-ndjson"
