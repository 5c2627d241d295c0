"""CLI entrypoint: recover a flow graph from a saved model response."""

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

from .config import PipelineSettings, load_rules_from_env, load_settings_from_env
from .errors import PipelineError
from .processor import PipelineOutcome, process

logger = logging.getLogger("flow_graph")


def build_artifact(outcome: PipelineOutcome, input_path: str) -> Dict[str, Any]:
    artifact = outcome.graph.to_json()
    artifact["meta"] = {
        "input_path": input_path,
        "accepted": outcome.accepted,
        "diagnostics": [asdict(diagnostic) for diagnostic in outcome.diagnostics],
        "violations": [asdict(violation) for violation in outcome.violations],
    }
    return artifact


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Repair and validate a flow graph produced by a language model."
    )
    parser.add_argument("--input-path", required=True, help="File holding the raw model output.")
    parser.add_argument(
        "--output-path",
        default="03_data/flow_graph.json",
        help="Where to save the normalized graph artifact JSON.",
    )
    parser.add_argument(
        "--skip-semantics",
        action="store_true",
        help="Only check structure; do not apply content rules.",
    )
    parser.add_argument("--max-attempts", type=int, default=None, help="Parse attempts before giving up.")
    parser.add_argument("--window-radius", type=int, default=None, help="Characters patched around a parse error.")
    parser.add_argument("--verbose", action="store_true", help="Log every repair step.")
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    env_settings = load_settings_from_env()
    settings = PipelineSettings(
        max_attempts=args.max_attempts if args.max_attempts is not None else env_settings.max_attempts,
        window_radius=args.window_radius if args.window_radius is not None else env_settings.window_radius,
    )
    rules = None if args.skip_semantics else load_rules_from_env()

    input_path = Path(args.input_path)
    raw = input_path.read_text(encoding="utf-8")
    try:
        outcome = process(raw, rules=rules, settings=settings)
    except PipelineError as error:
        logger.error("Pipeline failed for %s: %s", input_path, error)
        print(f"Failed: {error}")
        return 1

    artifact = build_artifact(outcome, str(input_path))
    output_path = Path(args.output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(artifact, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Flow graph artifact saved to: {output_path.resolve()}")
    print(
        "Counts:",
        f"nodes={len(outcome.graph.nodes)}",
        f"edges={len(outcome.graph.edges)}",
        f"diagnostics={len(outcome.diagnostics)}",
        f"violations={len(outcome.violations)}",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
