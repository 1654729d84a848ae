"""Command-line interface for the scoring engine."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from shopscore.config import get_settings
from shopscore.scoring.models import ScoringCriteria
from shopscore.scoring.ranker import rank_products
from shopscore.services.normalizers import UnknownSourceError, normalize_records


def create_example_products() -> list[dict[str, Any]]:
    """Example batch mixing Tiki, eBay and Chotot field names."""
    return [
        {
            "id": 27435621,
            "name": "Bình giữ nhiệt inox 500ml",
            "price": 185000,
            "rating_average": 4.7,
            "review_count": 1250,
            "discount_rate": 25,
            "quantity_sold": {"text": "Đã bán 3,2k", "value": 3200},
            "badges": [{"code": "best_seller"}],
            "thumbnail_url": "https://salt.tikicdn.com/cache/280x280/ts/product/binh.jpg",
        },
        {
            "title": "Vintage Brass Compass",
            "price": "$324.99",
            "link": "https://www.ebay.com/itm/186512345678",
            "rating": 4.5,
            "reviewCount": 6,
        },
        {
            "ad_id": 118234567,
            "subject": "Xe đạp thể thao cũ",
            "cost_price": 1500000,
            "url": "https://www.chotot.com/118234567.htm",
        },
    ]


def _load_records(args: argparse.Namespace) -> list[Any]:
    if args.file:
        data = json.loads(Path(args.file).read_text(encoding="utf-8"))
    elif args.json:
        data = json.loads(args.json)
    else:
        print("Using example products (use --file or --json to provide your own)\n")
        return create_example_products()

    if isinstance(data, dict):
        # Accept a request body shaped like {"products": [...]}
        data = data.get("products", [data])
    return data


def _build_criteria(args: argparse.Namespace) -> ScoringCriteria:
    return ScoringCriteria.model_validate(
        {
            "weights": {
                "profit_weight": args.profit_weight,
                "review_weight": args.review_weight,
                "trend_weight": args.trend_weight,
            },
            "thresholds": {
                "min_review_score": args.min_review_score,
                "min_review_count": args.min_review_count,
                "min_profit_margin": args.min_profit_margin,
                "min_final_score": args.min_final_score,
            },
        }
    )


def score_command(args: argparse.Namespace) -> int:
    """Score products from JSON or use the example batch."""
    records = _load_records(args)
    try:
        pairs = normalize_records(records, args.source)
    except UnknownSourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = rank_products(
        [product for product, _ in pairs],
        criteria=_build_criteria(args),
        config=get_settings().scoring,
    )
    shown = result.scored if args.all else result.ranked

    if args.json_output:
        print(json.dumps([s.model_dump(by_alias=True) for s in shown], indent=2, ensure_ascii=False))
        return 0

    print(f"Scored {result.total_count} products, {result.qualified_count} qualified")
    print(f"{'=' * 60}")

    for rank, item in enumerate(shown, start=1):
        status = "PASS" if item.meets_thresholds else "FAIL"
        print(f"\n{rank}. [{status}] {item.product_name}  (id: {item.product_id})")
        print(f"   Cost:         {item.cost_price:,.2f}")
        print(f"   Selling:      {item.selling_price:,.2f}")
        print(f"   Net Profit:   {item.net_profit:,.2f}")
        print(f"   Margin:       {item.profit_margin:.2f}%")
        print(f"   Rating:       {item.rating:.1f} ({item.review_count} reviews)")
        scores = item.scores
        print(
            f"   Scores:       profit {scores.profit_score:.2f} | "
            f"review {scores.review_score:.2f} | trend {scores.trend_score:.2f} | "
            f"final {scores.final_score:.2f}"
        )
        for reason in item.rejection_reasons:
            print(f"     - {reason}")

    print(f"\n{'=' * 60}")
    return 0


def config_command(args: argparse.Namespace) -> int:
    """Print the scoring defaults in effect."""
    config = get_settings().scoring
    print(json.dumps(config.model_dump(by_alias=True), indent=2))
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="shopscore",
        description="Marketplace Product Scoring Engine",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Score command
    score_parser = subparsers.add_parser("score", help="Score and rank products")
    source = score_parser.add_mutually_exclusive_group()
    source.add_argument("--file", type=str, help="Path to a JSON file of products")
    source.add_argument("--json", type=str, help="Products as JSON string")
    score_parser.add_argument(
        "--source",
        type=str,
        default="auto",
        help="Marketplace: tiki, ebay, chotot or auto (default: auto)",
    )
    score_parser.add_argument("--profit-weight", type=float, help="Profit score weight")
    score_parser.add_argument("--review-weight", type=float, help="Review score weight")
    score_parser.add_argument("--trend-weight", type=float, help="Trend score weight")
    score_parser.add_argument("--min-review-score", type=float, help="Minimum rating (0-5)")
    score_parser.add_argument("--min-review-count", type=int, help="Minimum review count")
    score_parser.add_argument(
        "--min-profit-margin",
        type=float,
        help="Minimum profit margin as fraction (e.g. 0.15 = 15%%)",
    )
    score_parser.add_argument("--min-final-score", type=float, help="Minimum final score")
    score_parser.add_argument(
        "--all",
        action="store_true",
        help="Show rejected products too, in input order",
    )
    score_parser.add_argument(
        "--json-output",
        action="store_true",
        help="Print scored products as JSON",
    )

    # Example command
    example_parser = subparsers.add_parser(
        "example",
        help="Show example products JSON",
    )
    example_parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty print JSON",
    )

    # Config command
    subparsers.add_parser("config", help="Show scoring defaults")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        stream=sys.stderr,
    )

    if args.command == "score":
        return score_command(args)
    elif args.command == "config":
        return config_command(args)
    elif args.command == "example":
        data = create_example_products()
        if args.pretty:
            print(json.dumps(data, indent=2, ensure_ascii=False))
        else:
            print(json.dumps(data, ensure_ascii=False))
    else:
        parser.print_help()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
