"""
Simple Scoring Script

Sends local images to a running image scoring service and prints the scores.

Usage:
    python evaluation_cli.py pairwise <image1> <image2> [--context TEXT] [--service-url URL]
    python evaluation_cli.py compare <base_image> <target> [<target> ...] [--context TEXT] [--service-url URL]
"""

import argparse
import json
from pathlib import Path
import sys

import requests

from image_scoring.constants import PATH_PREFIX

DEFAULT_SERVICE_URL = "http://localhost:8000"


def _file_field(name: str, path: Path):
    return (name, (path.name, path.read_bytes(), "application/octet-stream"))


def evaluate_pairwise(service_url: str, image1: Path, image2: Path, context: str | None = None) -> dict:
    """Score two local images against each other."""
    files = [_file_field("image1", image1), _file_field("image2", image2)]
    data = {"context": context} if context else {}
    response = requests.post(
        f"{service_url}{PATH_PREFIX}/v1/evaluation/pairwise",
        files=files,
        data=data,
        timeout=300,
    )
    if response.status_code == 200:
        return response.json()
    return {"error": f"HTTP {response.status_code}", "detail": response.text}


def compare(service_url: str, base_image: Path, targets: list[Path], context: str | None = None) -> dict:
    """Score each target image against the base image."""
    files = [_file_field("base_image", base_image)] + [_file_field("target_images", target) for target in targets]
    data = {"context": context} if context else {}
    response = requests.post(
        f"{service_url}{PATH_PREFIX}/v1/evaluation/compare/upload",
        files=files,
        data=data,
        timeout=300,
    )
    if response.status_code == 200:
        return response.json()
    return {"error": f"HTTP {response.status_code}", "detail": response.text}


def print_comparison(result: dict, targets: list[Path]) -> None:
    print(f"{'rank':>4}  {'score':>5}  image")
    for entry in sorted(result["results"], key=lambda r: r.get("rank") or 0):
        print(f"{entry.get('rank', '-'):>4}  {entry['score']:>5}  {targets[entry['image_index']]}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Score images through the image scoring service")
    parser.add_argument("--service-url", default=DEFAULT_SERVICE_URL, help="Service base URL")
    parser.add_argument("--context", default=None, help="Evaluation instructions passed to the workflow")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pairwise_parser = subparsers.add_parser("pairwise", help="Evaluate two images")
    pairwise_parser.add_argument("image1", type=Path)
    pairwise_parser.add_argument("image2", type=Path)

    compare_parser = subparsers.add_parser("compare", help="Compare targets against a base image")
    compare_parser.add_argument("base_image", type=Path)
    compare_parser.add_argument("targets", type=Path, nargs="+")

    args = parser.parse_args(argv)
    service_url = args.service_url.rstrip("/")

    try:
        if args.command == "pairwise":
            result = evaluate_pairwise(service_url, args.image1, args.image2, args.context)
        else:
            result = compare(service_url, args.base_image, args.targets, args.context)
    except (OSError, requests.RequestException) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if "error" in result:
        print(f"Error: {result['error']}: {result['detail']}", file=sys.stderr)
        return 1

    if args.command == "compare":
        print_comparison(result, args.targets)
    else:
        print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
