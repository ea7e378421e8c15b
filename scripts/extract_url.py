#!/usr/bin/env python3
"""Extract a single URL and print the result as JSON.

Usage:
    python scripts/extract_url.py https://x.com/acme/status/555
    python scripts/extract_url.py https://example.com/post --platform generic
    python scripts/extract_url.py https://redd.it/abc123 --enrich --database sqlite:///./local.db
"""

import argparse
import asyncio
import json
import os
import sys

# Add parent directory so we can import from linkvault
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from linkvault.core.db import init_db  # noqa: E402
from linkvault.core.logging import get_logger, setup_logging  # noqa: E402
from linkvault.errors import LinkvaultError  # noqa: E402
from linkvault.models.contracts import PlatformKind  # noqa: E402
from linkvault.pipeline.enrichment import EnrichmentPipeline  # noqa: E402
from linkvault.pipeline.models import SubmissionRequest  # noqa: E402
from linkvault.processing_strategies.registry import get_content_extractor  # noqa: E402
from linkvault.repositories.saved_item_store import (  # noqa: E402
    SqlAlchemyDomainLoader,
    SqlAlchemySavedItemStore,
)
from linkvault.services.domain_classifier import (  # noqa: E402
    DOMAIN_ORDER,
    DomainCache,
    KeywordDomainClassifier,
)
from linkvault.services.gateways import ExtractiveSummarizer  # noqa: E402
from linkvault.services.platform_detection import detect_platform, platform_label  # noqa: E402
from linkvault.utils.url_utils import normalize_url  # noqa: E402

setup_logging(json_files=False)
logger = get_logger(__name__)


async def extract(url: str, platform: PlatformKind | None) -> int:
    canonical = normalize_url(url)
    kind = platform or detect_platform(canonical)
    print(f"Canonical URL: {canonical}", file=sys.stderr)
    print(f"Platform: {platform_label(kind)}", file=sys.stderr)

    try:
        extracted = await get_content_extractor().extract(canonical, kind)
    except LinkvaultError as e:
        print(f"Extraction failed: {e}", file=sys.stderr)
        return 1

    print(json.dumps(extracted.model_dump(mode="json"), indent=2, ensure_ascii=False))
    return 0


async def enrich(url: str, user_id: str, note: str | None, database_url: str) -> int:
    init_db(database_url)
    loader = SqlAlchemyDomainLoader()
    added = loader.ensure_domains(DOMAIN_ORDER)
    if added:
        logger.info("Seeded %d domains", added)

    store = SqlAlchemySavedItemStore()
    pipeline = EnrichmentPipeline(
        store=store,
        summarizer=ExtractiveSummarizer(),
        domain_classifier=KeywordDomainClassifier(DomainCache(loader)),
    )
    result = await pipeline.process(SubmissionRequest(url=url, user_id=user_id, note=note))

    item = store.get(result.item_id) if result.item_id is not None else None
    output = {
        "result": result.model_dump(mode="json"),
        "item": {
            "id": item.id,
            "url": item.url,
            "status": item.status,
            "title": item.title,
            "summary": item.summary,
            "tags": item.tags,
            "source": item.source,
            "image_url": item.image_url,
            "domain_id": item.domain_id,
        }
        if item
        else None,
    }
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0 if result.success else 1


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Extract content from a URL")
    parser.add_argument("url", help="URL to extract")
    parser.add_argument(
        "--platform",
        choices=[kind.value for kind in PlatformKind if kind != PlatformKind.EMAIL],
        help="Override platform detection",
    )
    parser.add_argument(
        "--enrich",
        action="store_true",
        help="Run the full enrichment pipeline with local collaborators",
    )
    parser.add_argument(
        "--database",
        default="sqlite:///./linkvault.db",
        help="Database URL used with --enrich (default: %(default)s)",
    )
    parser.add_argument("--user-id", default="local", help="Owner of the saved item")
    parser.add_argument("--note", help="Note attached to the saved item")

    args = parser.parse_args()

    if args.enrich:
        exit_code = asyncio.run(enrich(args.url, args.user_id, args.note, args.database))
    else:
        platform = PlatformKind(args.platform) if args.platform else None
        exit_code = asyncio.run(extract(args.url, platform))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
