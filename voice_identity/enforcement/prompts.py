"""Corrective prompts for enforcement retries."""

from typing import List, Optional

from ..models import EditorialMode, EnforcementClass, parse_mode
from ..style.fingerprint import Fingerprint
from ..utils.prompts import format_prompt, load_prompt

DRIFT_MODE_RULES = {
    EditorialMode.LINE: "You may still tighten phrasing and improve rhythm, but ONLY where meaning is completely preserved.",
    EditorialMode.DEVELOPMENTAL: "You may still suggest structural reordering, but ONLY if every point survives intact.",
    EditorialMode.COPY: "Fix only mechanical errors. Do not rephrase anything.",
}


def _complexity_level(readability: float) -> str:
    grade = round(readability)
    if readability < 8:
        return f"accessible (grade ~{grade})"
    if readability < 12:
        return f"moderate (grade ~{grade})"
    return f"dense (grade ~{grade})"


def _punctuation_highlights(fingerprint: Fingerprint) -> List[str]:
    p = fingerprint.punctuation
    highlights = []
    if p.dash > 15:
        highlights.append("dashes (em-dashes or en-dashes)")
    if p.semicolon > 5:
        highlights.append("semicolons")
    if p.ellipsis > 3:
        highlights.append("ellipses")
    if p.parenthetical > 8:
        highlights.append("parentheticals")
    return highlights


def build_soft_warning_enforcement(profile: Optional[Fingerprint]) -> str:
    """Stylistic tightening suffix with numeric targets from the profile."""
    parts = [
        "",
        "─── ENFORCEMENT: STYLISTIC TIGHTENING ───",
        "Your previous output drifted from the author's measured voice. "
        "You MUST match the following stylistic targets exactly.",
        "",
    ]

    if profile is not None:
        parts.append(
            f"SENTENCE LENGTH: Target ~{round(profile.avg_sentence_length)} words per sentence "
            f"(σ ≈ {profile.sentence_length_std_dev:.1f}). Do not uniformly lengthen or shorten sentences."
        )

        if profile.contraction_frequency > 0.02:
            parts.append(
                f"CONTRACTIONS: The author uses contractions at a rate of "
                f"{profile.contraction_frequency * 100:.1f}%. USE contractions naturally. Do NOT expand them."
            )
        elif profile.contraction_frequency < 0.005:
            parts.append("CONTRACTIONS: The author avoids contractions. Do NOT introduce them.")

        if profile.hedging_frequency > 0.12:
            parts.append(
                f"HEDGING: The author hedges at {profile.hedging_frequency:.2f} phrases per sentence. "
                "PRESERVE qualifiers, uncertainty markers, and hedging language."
            )
        elif profile.hedging_frequency < 0.04:
            parts.append(
                "HEDGING: The author is direct. Do NOT introduce hedging, qualifiers, or softening language."
            )

        if profile.question_ratio > 0.08:
            parts.append(
                f"RHETORICAL QUESTIONS: The author uses questions in ~{profile.question_ratio * 100:.0f}% "
                "of sentences. Preserve this pattern."
            )

        parts.append(
            f"COMPLEXITY: The author writes at {_complexity_level(profile.readability_score)} level. "
            "Do NOT change vocabulary complexity or sentence structure complexity."
        )

        highlights = _punctuation_highlights(profile)
        if highlights:
            parts.append(
                f"PUNCTUATION: The author characteristically uses {', '.join(highlights)}. Preserve these habits."
            )

    parts.extend([
        "",
        "ENFORCEMENT RULE: Make FEWER changes than your first attempt. "
        "When uncertain between changing a phrase or leaving it, LEAVE IT.",
        "",
    ])
    return "\n".join(parts)


def build_failure_enforcement(mode) -> str:
    """Complete replacement prompt allowing at most one change."""
    mode = parse_mode(mode)
    return format_prompt("enforcement_failure", instructions=load_prompt(f"enforcement_failure_{mode.value}"))


def build_drift_enforcement(mode) -> str:
    """Meaning-preservation suffix."""
    mode = parse_mode(mode)
    body = format_prompt("enforcement_drift", mode_rule=DRIFT_MODE_RULES[mode])
    return f"\n{body}\n"


def build_enforcement_system_prompt(
    base_prompt: str,
    enforcement_class: EnforcementClass,
    mode,
    profile: Optional[Fingerprint] = None,
) -> str:
    """System prompt for a retry candidate.

    ``base_prompt`` is the mode prompt with nudge and variation already
    applied. Failure discards it entirely.
    """
    if enforcement_class == EnforcementClass.FAILURE:
        return build_failure_enforcement(mode)
    if enforcement_class == EnforcementClass.DRIFT:
        return base_prompt + build_drift_enforcement(mode)
    if enforcement_class == EnforcementClass.SOFT_WARNING:
        return base_prompt + build_soft_warning_enforcement(profile)
    return base_prompt
