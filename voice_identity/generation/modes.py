"""Editorial mode definitions."""

import hashlib
from dataclasses import dataclass
from typing import Dict

from ..models import EditorialMode, parse_mode
from ..utils.prompts import load_prompt

PROMPT_VERSION_LENGTH = 12


@dataclass(frozen=True)
class EditorialModeConfig:
    label: str
    description: str
    prompt_name: str

    @property
    def system_prompt(self) -> str:
        return load_prompt(self.prompt_name)


EDITORIAL_MODES: Dict[EditorialMode, EditorialModeConfig] = {
    EditorialMode.DEVELOPMENTAL: EditorialModeConfig(
        label="Developmental",
        description="Structure, argument, coherence, content gaps",
        prompt_name="editor_developmental",
    ),
    EditorialMode.LINE: EditorialModeConfig(
        label="Line",
        description="Sentence craft, word choice, rhythm, transitions",
        prompt_name="editor_line",
    ),
    EditorialMode.COPY: EditorialModeConfig(
        label="Copy",
        description="Grammar, spelling, punctuation, consistency",
        prompt_name="editor_copy",
    ),
}


def get_mode_config(mode) -> EditorialModeConfig:
    return EDITORIAL_MODES[parse_mode(mode)]


def prompt_version(base_prompt: str) -> str:
    """Short content hash identifying a base prompt revision."""
    return hashlib.sha256(base_prompt.encode("utf-8")).hexdigest()[:PROMPT_VERSION_LENGTH]
