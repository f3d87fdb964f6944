"""Constants shared across the interpreter."""

COMMAND_ESCAPE = "\\"
COMMENT_PREFIX = "%%"
LINE_CONTINUATION = "..."
SCRIPT_EXTENSION = ".neuro"

DEFAULT_COMMAND = "send"
DEFAULT_INTERPOLATION_DEPTH = 10
DEFAULT_MAX_STACK_SIZE = 10_000
DEFAULT_MAX_SCRIPT_DEPTH = 100
DEFAULT_HISTORY_SLOTS = 10

SHORT_ID_LENGTH = 8
MAX_SESSION_NAME_LENGTH = 64

# Underscore-prefixed variables that users may set directly with \set.
USER_SETTABLE_SYSTEM_VARIABLES = frozenset(
    {
        "_style",
        "_reply_way",
        "_echo_command",
        "_render_markdown",
        "_default_command",
        "_stream",
        "_editor",
        "_session_autosave",
        "_completion_mode",
    }
)
USER_SETTABLE_SYSTEM_PREFIXES = ("_prompt_",)

# Service registry names.
SERVICE_VARIABLES = "variables"
SERVICE_INTERPOLATOR = "interpolator"
SERVICE_STACK = "stack"
SERVICE_OUTPUT = "output"
SERVICE_SESSIONS = "sessions"
SERVICE_LLM = "llm"
SERVICE_SCRIPTS = "scripts"
SERVICE_CONFIG = "config"
