#!/usr/bin/env python3
"""
Report Generator

Runs a complete SE Ranking report for one domain and writes it as JSON.

Usage:
    # Set the API key first (or pass --api-key):
    export SERANKING_API_KEY=your_key

    python scripts/generate_report.py example.com
    python scripts/generate_report.py example.com --output example.json --rate-limit 3
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from seoreport.collector import (
    CollectionConfig,
    FatalConfigurationError,
    ReportOrchestrator,
    SeRankingClient,
)
from seoreport.services import resolve_api_key
from seoreport.utils import clean_domain, get_settings, validate_domain

logger = logging.getLogger(__name__)


def print_progress(step: str, percent: int) -> None:
    print(f"  [{percent:3d}%] {step}")


async def generate_report(domain: str, api_key: str = None, output: str = None, rate_limit: float = None) -> Path:
    """Generate one report and write it to ``output``."""
    settings = get_settings()

    cleaned = clean_domain(domain)
    if not validate_domain(cleaned):
        raise FatalConfigurationError(f"Invalid domain: {domain}")

    key, mode = resolve_api_key(api_key, settings)

    print(f"\n{'='*70}")
    print("SE RANKING REPORT")
    print(f"{'='*70}")
    print(f"Domain:       {cleaned}")
    print(f"Key:          {mode}")
    print(f"{'='*70}\n")

    start_time = datetime.now()

    async with SeRankingClient(
        api_key=key,
        base_url=settings.SERANKING_BASE_URL,
        rate_limit=rate_limit or settings.RATE_LIMIT_PER_SECOND,
        enable_logging=settings.ENABLE_CALL_LOGGING,
        mode=mode,
        timeout=settings.API_TIMEOUT,
    ) as client:
        orchestrator = ReportOrchestrator(client, on_progress=print_progress)
        report = await orchestrator.generate(CollectionConfig(
            domain=cleaned,
            max_competitors=settings.MAX_COMPETITORS,
            prompts_per_engine=settings.PROMPTS_PER_ENGINE,
            aggregate_limit=settings.AGGREGATE_LIMIT,
        ))

    path = Path(output or f"{cleaned.replace('.', '_')}_report.json")
    path.write_text(report.model_dump_json(indent=2), encoding="utf-8")

    duration = (datetime.now() - start_time).total_seconds()
    print(f"\n{'='*70}")
    print(f"Traffic:        {report.executive.traffic:,}")
    print(f"Keywords:       {report.executive.keywords:,}")
    print(f"Backlinks:      {report.executive.backlinks:,}")
    print(f"AI SoV:         {report.executive.ai_share_of_voice}")
    print(f"API calls:      {len(report.api_responses)}")
    print(f"Credits used:   {report.total_credits:,}")
    print(f"Duration:       {duration:.1f}s")
    print(f"{'='*70}")

    return path


def main():
    """Main entry point."""
    load_dotenv()
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    parser = argparse.ArgumentParser(
        description="Generate an SEO report from SE Ranking data"
    )
    parser.add_argument(
        "domain",
        help="Domain to analyze (e.g., example.com)"
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="SE Ranking API key (default: SERANKING_API_KEY, then the shared key)"
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output JSON file (default: <domain>_report.json)"
    )
    parser.add_argument(
        "--rate-limit",
        type=float,
        default=None,
        help="Requests per second (default: RATE_LIMIT_PER_SECOND)"
    )

    args = parser.parse_args()

    try:
        path = asyncio.run(generate_report(
            domain=args.domain,
            api_key=args.api_key,
            output=args.output,
            rate_limit=args.rate_limit,
        ))
    except FatalConfigurationError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"\nReport saved to: {path}")


if __name__ == "__main__":
    main()
