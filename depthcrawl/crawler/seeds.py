"""
Seed list loading.
"""

import json
from pathlib import Path
from typing import Any, List

from .url_frontier import FrontierEntry


def parse_seeds(data: Any) -> List[FrontierEntry]:
    """
    Validate decoded seed data: a list of {"url": str, "depth": int >= 0}.
    """
    if not isinstance(data, list):
        raise ValueError("Seed list must be a JSON array")

    seeds = []
    for index, item in enumerate(data):
        if not isinstance(item, dict) or 'url' not in item or 'depth' not in item:
            raise ValueError(f"Seed #{index} must be an object with 'url' and 'depth'")

        url, depth = item['url'], item['depth']
        if not isinstance(url, str) or not url:
            raise ValueError(f"Seed #{index} has an invalid url: {url!r}")
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
            raise ValueError(f"Seed #{index} has an invalid depth: {depth!r}")

        seeds.append(FrontierEntry(url=url, depth=depth))

    return seeds


def load_seeds(seed_path: str) -> List[FrontierEntry]:
    """Load the seed list from a JSON file."""
    path = Path(seed_path)
    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {path}")

    with open(path, 'r', encoding='utf-8') as file:
        try:
            data = json.load(file)
        except json.JSONDecodeError as e:
            raise ValueError(f"Seed file is not valid JSON: {e}")

    return parse_seeds(data)
