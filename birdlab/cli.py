"""Command-line interface.

Usage:
    birdlab classify robin.wav --model efficiency
    birdlab classify robin.wav --json
    birdlab models
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from birdlab.constants import MODELS_DIR
from birdlab.exceptions import BirdlabError
from birdlab.inference import MODEL_CONFIGS, InferenceEngine
from birdlab.pipeline import classify


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="birdlab", description="Bird species classification from audio clips"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    classify_parser = subparsers.add_parser("classify", help="Classify an audio file")
    classify_parser.add_argument("path", help="Audio file (wav, mp3, ogg, flac, webm)")
    classify_parser.add_argument(
        "--model",
        choices=sorted(MODEL_CONFIGS),
        default="precision",
        help="Classifier variant",
    )
    classify_parser.add_argument(
        "--models-dir",
        default=str(MODELS_DIR),
        help="Directory containing model artifacts",
    )
    classify_parser.add_argument(
        "--json", action="store_true", help="Print results as JSON"
    )

    subparsers.add_parser("models", help="List available classifier variants")
    return parser


def _cmd_classify(args: argparse.Namespace) -> int:
    try:
        result = classify(args.path, model=args.model, models_dir=args.models_dir)
    except BirdlabError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    config = MODEL_CONFIGS[args.model]
    mode = "model" if result.metadata.get("model_loaded") else "mock inference"
    print(f"{args.path} ({result.signal.duration:.2f}s) - {config.name} ({mode})")
    for r in result.results:
        print(f"  {r.species:<12} {r.confidence:6.1%}")
    print(f"Inference time: {result.top.inference_time:.2f} ms")
    return 0


def _cmd_models(args: argparse.Namespace) -> int:
    engine = InferenceEngine()
    for variant, config in MODEL_CONFIGS.items():
        print(
            f"{variant:<12} {config.id:<16} {config.name:<16} "
            f"accuracy={config.accuracy:.0%} memory={config.memory_kb}KB "
            f"path={engine.model_path(variant)}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "classify":
        return _cmd_classify(args)
    return _cmd_models(args)


if __name__ == "__main__":
    sys.exit(main())
