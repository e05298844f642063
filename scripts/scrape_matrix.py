#!/usr/bin/env python3
"""
Download the public portfolio matrix page and save it as data/portfolios.json.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import requests

from allotment.inventory import parse_matrix_html

logger = logging.getLogger("scrape_matrix")


def fetch_matrix(url: str) -> dict:
    """
    Fetch the matrix from the registration site.

    A ``.../api/portfolios`` URL returns the JSON document directly; any other
    URL is treated as the rendered matrix page and parsed.
    """
    response = requests.get(url, timeout=10)
    response.raise_for_status()

    if "application/json" in response.headers.get("Content-Type", ""):
        return response.json()
    return parse_matrix_html(response.text)


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("url", nargs="?", default="http://localhost:3000/api/portfolios")
    parser.add_argument("-o", "--output", default=str(Path(__file__).parent.parent / "data" / "portfolios.json"))
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s  %(message)s", datefmt="%H:%M:%S")

    logger.info("Fetching %s", args.url)
    try:
        matrix = fetch_matrix(args.url)
    except requests.RequestException as exc:
        logger.error("Failed to fetch matrix: %s", exc)
        return 1

    if not matrix:
        logger.error("No portfolio tables found")
        return 1

    output_path = Path(args.output)
    output_path.parent.mkdir(exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(matrix, f, indent=2)

    logger.info("Saved %d committees to %s", len(matrix), output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
