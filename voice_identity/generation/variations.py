"""Controlled prompt variations for multi-candidate generation.

Each cycle is a pair of complementary editorial leanings. The two initial
candidates of a run use the two halves of one pair, so their outputs differ
in a principled direction rather than by sampling noise. The suffix is the
lowest-priority instruction in the prompt.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..models import EditorialMode, parse_mode

ENFORCED_SUFFIX = "_enforced"

_LINE_HEADER = "SUBTLE VARIATION PREFERENCE (apply only when two options are equally good):"
_DEVELOPMENTAL_HEADER = "SUBTLE VARIATION PREFERENCE (apply only when two structural approaches are equally valid):"
_COPY_HEADER = "SUBTLE VARIATION PREFERENCE (apply only when two corrections are equally valid):"


@dataclass(frozen=True)
class Variation:
    key: str
    label: str
    suffix: str

    @property
    def enforced_key(self) -> str:
        return f"{self.key}{ENFORCED_SUFFIX}"


VariationPair = Tuple[Variation, Variation]


def _variation(key: str, label: str, header: str, body: str) -> Variation:
    return Variation(key=key, label=label, suffix=f"{header}\n{body}")


LINE_VARIATIONS: List[VariationPair] = [
    (
        _variation("concision_lean", "Concision lean", _LINE_HEADER,
                   "Lean toward the option that uses fewer words. Prefer compact phrasing over expansive "
                   "phrasing when both preserve the author's meaning and voice equally well."),
        _variation("cadence_lean", "Cadence lean", _LINE_HEADER,
                   "Lean toward the option that creates better sentence-to-sentence rhythm. Prefer varied "
                   "sentence lengths and natural pacing over uniform sentence structure when both preserve "
                   "the author's meaning and voice equally well."),
    ),
    (
        _variation("precision_lean", "Precision lean", _LINE_HEADER,
                   "Pay extra attention to word precision. When a more specific or vivid word is available "
                   "and fits the author's natural vocabulary level, prefer it over a vaguer alternative."),
        _variation("flow_lean", "Flow lean", _LINE_HEADER,
                   "Pay extra attention to paragraph-level flow. Strengthen the connective tissue between "
                   "sentences so each thought leads naturally to the next."),
    ),
    (
        _variation("trim_lean", "Trim lean", _LINE_HEADER,
                   "Focus tightening efforts on removing filler phrases, unnecessary qualifiers, and "
                   "throat-clearing language. Preserve every substantive word."),
        _variation("transition_lean", "Transition lean", _LINE_HEADER,
                   "Focus refinement efforts on strengthening transitions between sentences and between "
                   "paragraphs. Make the reading path smoother without adding weight."),
    ),
]

DEVELOPMENTAL_VARIATIONS: List[VariationPair] = [
    (
        _variation("structural_economy", "Structural economy", _DEVELOPMENTAL_HEADER,
                   "When the structure allows it, prefer tighter organization. If two sections make "
                   "overlapping points, consider consolidating. Fewer well-developed sections are better "
                   "than many thin ones."),
        _variation("connective_tissue", "Connective tissue", _DEVELOPMENTAL_HEADER,
                   "When the structure allows it, prefer stronger transitions and connective tissue between "
                   "sections. Make sure the reader always knows why they moved from one section to the next."),
    ),
    (
        _variation("gap_closure", "Gap closure", _DEVELOPMENTAL_HEADER,
                   "Prioritize closing content gaps: places where the reader would need to guess or make "
                   "assumptions the author hasn't supported. Add just enough context to close the gap, "
                   "no more."),
        _variation("redundancy_reduction", "Redundancy reduction", _DEVELOPMENTAL_HEADER,
                   "Prioritize eliminating structural redundancy. Where two paragraphs or sections make "
                   "overlapping points, consolidate into the stronger version."),
    ),
    (
        _variation("arc_strengthening", "Arc strengthening", _DEVELOPMENTAL_HEADER,
                   "Strengthen the introduction-to-conclusion arc. Make sure the opening promise is clearly "
                   "fulfilled by the conclusion and that intermediate sections each advance toward that "
                   "fulfillment."),
        _variation("internal_logic", "Internal logic", _DEVELOPMENTAL_HEADER,
                   "Strengthen the internal logic of the argument. Make sure each paragraph earns its "
                   "place; every section should either set up, develop, or resolve a point the reader needs."),
    ),
]

COPY_VARIATIONS: List[VariationPair] = [
    (
        _variation("mechanical_minimal", "Mechanical minimal", _COPY_HEADER,
                   "Correct only outright errors. When a construction is unusual but defensible, leave it "
                   "as the author wrote it."),
        _variation("consistency_pass", "Consistency pass", _COPY_HEADER,
                   "Pay extra attention to consistency: the same spelling, capitalization, and number style "
                   "for the same term everywhere in the text."),
    ),
    (
        _variation("punctuation_focus", "Punctuation focus", _COPY_HEADER,
                   "Pay extra attention to punctuation: missing commas, run-on sentences, and mismatched "
                   "quotation marks or parentheses."),
        _variation("grammar_focus", "Grammar focus", _COPY_HEADER,
                   "Pay extra attention to grammar: verb tense consistency, pronoun reference, and "
                   "misplaced modifiers."),
    ),
    (
        _variation("spelling_focus", "Spelling focus", _COPY_HEADER,
                   "Pay extra attention to spelling and commonly confused words."),
        _variation("agreement_focus", "Agreement focus", _COPY_HEADER,
                   "Pay extra attention to subject-verb and noun-pronoun agreement."),
    ),
]

VARIATION_MAP: Dict[EditorialMode, List[VariationPair]] = {
    EditorialMode.LINE: LINE_VARIATIONS,
    EditorialMode.DEVELOPMENTAL: DEVELOPMENTAL_VARIATIONS,
    EditorialMode.COPY: COPY_VARIATIONS,
}


def get_variation_pair(mode, seed: int) -> VariationPair:
    """Variation pair for a mode. The seed cycles through the available pairs."""
    pairs = VARIATION_MAP[parse_mode(mode)]
    return pairs[seed % len(pairs)]


def get_variation_cycle_count(mode) -> int:
    return len(VARIATION_MAP[parse_mode(mode)])
