"""Model aliases and extended-thinking budgets."""

MODEL_MAP: dict[str, str] = {
    "haiku": "claude-haiku-4-5-20251001",
    "sonnet": "claude-sonnet-4-5-20250929",
    "opus": "claude-opus-4-1-20250805",
}

# Reverse lookup: full model string → friendly name
FRIENDLY_NAMES: dict[str, str] = {v: k for k, v in MODEL_MAP.items()}

# Thinking level → budget_tokens. "off" disables extended thinking.
THINKING_BUDGETS: dict[str, int] = {
    "off": 0,
    "minimal": 1024,
    "low": 2048,
    "medium": 8192,
    "high": 16384,
    "xhigh": 32000,
}

# Output tokens reserved for the visible answer on top of any thinking budget.
RESPONSE_TOKENS = 4096


def resolve_model(name_or_id: str) -> str:
    """Resolve a friendly name to a full model ID. Unknown names pass through."""
    return MODEL_MAP.get(name_or_id, name_or_id)


def friendly(model_id: str) -> str:
    """Return the friendly name for a model ID, or the ID itself."""
    return FRIENDLY_NAMES.get(model_id, model_id)


def thinking_budget(level: str) -> int:
    """Return the thinking token budget for a level name.

    Raises ``ValueError`` for unknown levels.
    """
    try:
        return THINKING_BUDGETS[level]
    except KeyError:
        msg = f"Unknown thinking level {level!r}. Valid options: {', '.join(THINKING_BUDGETS)}"
        raise ValueError(msg) from None
