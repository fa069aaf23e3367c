#!/usr/bin/env python3
"""Command-line interface for the voice identity engine."""

import argparse
import json
import sys
from pathlib import Path

DEFAULT_PROFILE_STORE = "voice_profiles.json"


def _read_text(path_str: str) -> str:
    path = Path(path_str)
    if not path.exists():
        print(f"Error: File not found: {path_str}")
        sys.exit(1)
    return path.read_text()


def _load_app_config(config_path: str, required: bool):
    """Load config.json, or fall back to defaults when it isn't required."""
    from voice_identity.config import Config, load_config

    try:
        return load_config(config_path)
    except FileNotFoundError:
        if required:
            print(f"Error: {config_path} not found")
            print("Copy config.json.sample to config.json and configure your providers")
            sys.exit(1)
        return Config()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


def _tenant(args):
    from voice_identity.models import TenantContext

    return TenantContext(
        user_id=args.user,
        org_id=getattr(args, "org", None),
        document_id=getattr(args, "document", None),
    )


def cmd_fingerprint(args):
    """Print the fingerprint of a text file."""
    from voice_identity.style import extract_fingerprint

    fingerprint = extract_fingerprint(_read_text(args.input))
    print(json.dumps(fingerprint.to_dict(), indent=2))


def cmd_score(args):
    """Score a suggestion against its original."""
    from voice_identity.enforcement import classify, get_effective_thresholds
    from voice_identity.scoring import VoiceEvaluator, create_embedder_from_config, explain_stylistic
    from voice_identity.storage import JSONProfileStore
    from voice_identity.utils.logging import setup_logging

    config = _load_app_config(args.config, required=False)
    setup_logging(config.log_level, config.log_json)

    original = _read_text(args.original)
    suggestion = _read_text(args.suggestion)

    store = JSONProfileStore(args.profile_store)
    evaluator = VoiceEvaluator(
        store,
        create_embedder_from_config(config.embeddings),
        min_words_for_enforcement=config.engine.min_words_for_enforcement,
    )
    evaluation = evaluator.evaluate(original, suggestion, args.mode, _tenant(args))
    scores = evaluation.scores
    confidence = evaluation.profile_confidence
    enforcement_class = classify(scores.combined, scores.semantic, args.mode, confidence)
    thresholds = get_effective_thresholds(args.mode, confidence).thresholds

    print(f"Mode: {args.mode}  Profile: {evaluation.profile_status}", end="")
    if confidence is not None:
        print(f" (confidence {confidence:.2f}, {evaluation.profile_confidence_band})")
    else:
        print()
    print(f"\nScores:")
    print(f"  Semantic:  {scores.semantic:.3f}" + (" (heuristic fallback)" if evaluation.semantic_fallback else ""))
    print(f"  Stylistic: {scores.stylistic:.3f}")
    print(f"  Scope:     {scores.scope:.3f}")
    print(f"  Combined:  {scores.combined:.3f}")
    print(f"\nClassification: {enforcement_class.value}")
    print(f"  Pass floor {thresholds.pass_floor:.3f}, semantic pass floor {thresholds.semantic_pass_floor:.3f}")
    print(f"  Warning floor {thresholds.warning_floor:.3f}, drift ceiling {thresholds.drift_ceiling:.3f}")
    print(f"  Enforced: {evaluation.enforced}  Passed: {evaluation.passed}")

    target = evaluation.profile_fingerprint or evaluation.original_fingerprint
    comparisons = explain_stylistic(evaluation.suggestion_fingerprint, target, confidence)
    print(f"\nLargest stylistic deviations:")
    for comparison in comparisons[:args.top]:
        print(f"  {comparison.feature:28s} similarity={comparison.dampened:.3f} loss={comparison.weighted_loss:.4f}")


def cmd_contribute(args):
    """Add a writing sample to a voice profile."""
    from voice_identity.models import SourceType
    from voice_identity.profiles import ProfileService
    from voice_identity.storage import JSONProfileStore
    from voice_identity.utils.logging import setup_logging

    config = _load_app_config(args.config, required=False)
    setup_logging(config.log_level, config.log_json)

    store = JSONProfileStore(args.profile_store)
    service = ProfileService(store, min_samples_for_active=config.engine.min_samples_for_enforcement)
    result = service.contribute(_tenant(args), _read_text(args.input), SourceType(args.source_type), args.source_id)

    if result.skipped:
        print(f"Skipped: {result.reason} ({result.word_count} words)")
        return

    profile = store.get_profile(args.user, args.org)
    print(f"Profile {result.profile_id}: {profile.sample_count} samples, {profile.status.value}")
    print(f"  Alpha: {result.alpha:.3f}")
    print(f"  Confidence: {profile.confidence:.3f} ({profile.confidence_band})")


def cmd_refine(args):
    """Refine a text file with the configured generation provider."""
    from voice_identity import VoiceEngine, VoiceEngineError
    from voice_identity.llm import LLMError
    from voice_identity.models import SourceType
    from voice_identity.storage import JSONProfileStore
    from voice_identity.utils.logging import setup_logging

    config = _load_app_config(args.config, required=True)
    setup_logging(config.log_level, config.log_json)
    if args.debug:
        config.engine.debug = True
    config.engine.background_drift_checks = False

    text = _read_text(args.input)
    scratchpad = _read_text(args.scratchpad) if args.scratchpad else None
    tenant = _tenant(args)

    try:
        engine = VoiceEngine.from_config(config, store=JSONProfileStore(args.profile_store))
    except (ValueError, LLMError) as e:
        print(f"Error: Could not create engine: {e}")
        sys.exit(1)

    for sample_path in args.profile_sample or []:
        engine.contribute(tenant, _read_text(sample_path), SourceType.BASELINE_SAMPLE, sample_path, best_effort=True)

    try:
        result = engine.refine(
            text, args.mode, tenant, nudge=args.nudge, variation_seed=args.seed, scratchpad=scratchpad,
        )
    except (VoiceEngineError, ValueError) as e:
        print(f"Error: Refinement failed: {e}")
        sys.exit(1)
    finally:
        engine.close()

    meta = result.candidate_metadata
    print("=" * 60)
    print(f"Outcome: {result.enforcement_outcome.value} (initial class {result.enforcement_class.value})")
    print(f"Candidates: {meta.total_candidates}  Retry: {meta.retry_attempted}  Seed: {meta.variation_seed}")
    if meta.returned_original:
        print("No candidate preserved the author's voice; returning the original text.")
    if meta.evaluation:
        print(json.dumps(meta.evaluation, indent=2))
    print("=" * 60)

    if args.output:
        Path(args.output).write_text(result.suggested_text)
        print(f"Output written to: {args.output}")
    else:
        print(result.suggested_text)


def main():
    from voice_identity.models import EditorialMode, SourceType
    from voice_identity.generation.nudges import NUDGE_DIRECTIONS

    parser = argparse.ArgumentParser(
        description="Voice Identity Engine - Refine text without losing the author's voice"
    )
    parser.add_argument(
        "--config", "-c",
        default="config.json",
        help="Path to configuration file (default: config.json)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    modes = [m.value for m in EditorialMode]

    def add_tenant_arguments(sub):
        sub.add_argument("--user", "-u", default="local", help="Author id (default: local)")
        sub.add_argument("--org", help="Optional tenant id for an org-scoped profile")
        sub.add_argument(
            "--profile-store",
            default=DEFAULT_PROFILE_STORE,
            help=f"JSON file holding voice profiles (default: {DEFAULT_PROFILE_STORE})"
        )

    # Fingerprint command
    fingerprint_parser = subparsers.add_parser(
        "fingerprint",
        help="Print the style fingerprint of a text"
    )
    fingerprint_parser.add_argument("input", help="Text file to fingerprint")
    fingerprint_parser.set_defaults(func=cmd_fingerprint)

    # Score command
    score_parser = subparsers.add_parser(
        "score",
        help="Score a suggestion against its original"
    )
    score_parser.add_argument("original", help="Original text file")
    score_parser.add_argument("suggestion", help="Suggested rewrite file")
    score_parser.add_argument("--mode", "-m", choices=modes, default="line", help="Editorial mode (default: line)")
    score_parser.add_argument("--top", type=int, default=5, help="Stylistic features to show (default: 5)")
    add_tenant_arguments(score_parser)
    score_parser.set_defaults(func=cmd_score)

    # Contribute command
    contribute_parser = subparsers.add_parser(
        "contribute",
        help="Add a writing sample to a voice profile"
    )
    contribute_parser.add_argument("input", help="Text file with the author's writing")
    contribute_parser.add_argument(
        "--source-type",
        choices=[s.value for s in SourceType],
        default=SourceType.PUBLISHED_POST.value,
        help="Where the sample came from (default: published_post)"
    )
    contribute_parser.add_argument("--source-id", help="Id of the source document")
    add_tenant_arguments(contribute_parser)
    contribute_parser.set_defaults(func=cmd_contribute)

    # Refine command
    refine_parser = subparsers.add_parser(
        "refine",
        help="Refine text with voice enforcement"
    )
    refine_parser.add_argument("input", help="Text file to refine")
    refine_parser.add_argument("--mode", "-m", choices=modes, default="line", help="Editorial mode (default: line)")
    refine_parser.add_argument("--nudge", choices=list(NUDGE_DIRECTIONS), help="One-time direction for this pass")
    refine_parser.add_argument("--seed", type=int, default=0, help="Variation seed (default: 0)")
    refine_parser.add_argument("--document", help="Document id; a new run supersedes older runs for it")
    refine_parser.add_argument("--scratchpad", help="Text file with the author's style notes for this pass")
    refine_parser.add_argument(
        "--profile-sample",
        action="append",
        help="Writing sample to add to the profile before refining (repeatable)"
    )
    refine_parser.add_argument("--output", "-o", help="Write the result to this file")
    refine_parser.add_argument("--debug", action="store_true", help="Show evaluation detail")
    add_tenant_arguments(refine_parser)
    refine_parser.set_defaults(func=cmd_refine)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
