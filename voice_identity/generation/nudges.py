"""Directional nudges for one refinement pass.

A nudge is appended to the mode prompt for a single run. It never
touches the author's voice profile.
"""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class Nudge:
    label: str
    instruction: str


NUDGE_DIRECTIONS: Dict[str, Nudge] = {
    "more_minimal": Nudge(
        label="More minimal",
        instruction=(
            "Make the text more minimal and stripped down. Remove more unnecessary words, "
            "ornamentation, and decorative language. Favor brevity over explanation."
        ),
    ),
    "more_raw": Nudge(
        label="More raw",
        instruction=(
            "Make the text feel more raw and unpolished. Preserve rough edges, imperfections, "
            "and directness that give it authentic character. Resist the urge to smooth everything out."
        ),
    ),
    "sharper": Nudge(
        label="Sharper",
        instruction=(
            "Make the text sharper and more incisive. Strengthen the points, tighten the language, "
            "and make claims hit harder. Remove hedging and qualifiers where the author's intent is clear."
        ),
    ),
    "softer": Nudge(
        label="Softer",
        instruction=(
            "Make the text softer and more approachable. Ease aggressive or confrontational language "
            "without losing the underlying point. Allow more breathing room between ideas."
        ),
    ),
    "more_emotional": Nudge(
        label="More emotional",
        instruction=(
            "Let more emotion come through in the text. Do not manufacture emotion, but amplify what "
            "is already present. Let vulnerability, conviction, or passion show more clearly."
        ),
    ),
    "more_dry": Nudge(
        label="More dry",
        instruction=(
            "Make the text drier and more matter-of-fact. Reduce emotionality, sentimentality, and "
            "ornamental language. Favor precision and understatement."
        ),
    ),
}


def validate_nudge(nudge: Optional[str]) -> Optional[str]:
    """Return the nudge key unchanged, or raise for an unknown direction."""
    if nudge is not None and nudge not in NUDGE_DIRECTIONS:
        valid = ", ".join(NUDGE_DIRECTIONS)
        raise ValueError(f"Unknown nudge direction: {nudge}. Valid directions: {valid}")
    return nudge


def apply_nudge(base_prompt: str, nudge: Optional[str]) -> str:
    if not nudge:
        return base_prompt
    instruction = NUDGE_DIRECTIONS[validate_nudge(nudge)].instruction
    return f"{base_prompt}\n\nADDITIONAL DIRECTION FOR THIS PASS:\n{instruction}"
