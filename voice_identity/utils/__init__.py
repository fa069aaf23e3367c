"""Utility modules for the voice identity engine."""

from .logging import (
    get_logger,
    setup_logging,
    set_request_id,
    get_request_id,
    log_llm_call,
)
from .text import (
    split_sentences,
    split_paragraphs,
    tokenize,
    count_words,
    count_syllables,
)
from .prompts import (
    load_prompt,
    format_prompt,
    list_prompts,
    clear_prompt_cache,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "set_request_id",
    "get_request_id",
    "log_llm_call",
    # Text
    "split_sentences",
    "split_paragraphs",
    "tokenize",
    "count_words",
    "count_syllables",
    # Prompts
    "load_prompt",
    "format_prompt",
    "list_prompts",
    "clear_prompt_cache",
]
