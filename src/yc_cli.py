import asyncio
import argparse
import logging
import sys

from scraper import config
from scraper.aggregator import persist_results
from scraper.browser import ScrapeError
from scraper.ycombinator import scrape_yc_companies

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

RESULTS_PREFIX = "yc-startups-detailed"


def summarize(companies) -> None:
    """Log a short per-company summary of what was scraped."""
    logger.info("\n=== Scrape Summary ===")
    logger.info(f"Total companies: {len(companies)}")
    failed = [c for c in companies if c.get("detail_status") == "failed"]
    if failed:
        logger.warning(f"Detail pages that failed: {len(failed)}")
    for company in companies:
        logger.info(f"\n{company.get('name', 'N/A')} ({company.get('batch', 'N/A')})")
        logger.info(f"  Website: {company.get('website', 'N/A')}")
        logger.info(f"  Founders: {len(company.get('founders', []))}")
        contacts = company.get("contacts", {})
        if contacts.get("emails"):
            logger.info(f"  Emails: {', '.join(contacts['emails'])}")
        for platform, handles in contacts.get("social", {}).items():
            logger.info(f"  {platform}: {', '.join(handles)}")
        logger.info(f"  Open jobs: {len(company.get('jobs', []))}")
        if company.get("detail_status") == "failed":
            logger.info(f"  Detail error: {company.get('detail_error')}")


async def run(limit: int, output_dir: str, delay: float) -> str:
    companies = await scrape_yc_companies(limit=limit, delay=delay)
    filepath = persist_results(companies, RESULTS_PREFIX, directory=output_dir)
    summarize(companies)
    logger.info(f"\nResults saved to: {filepath}")
    return filepath


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Scrape recently launched YC companies')
    parser.add_argument('--limit', type=int, default=10, help='Number of companies to scrape (1-50)')
    parser.add_argument('--output-dir', type=str, default=config.RESULTS_DIR, help='Directory for the result file')
    parser.add_argument('--delay', type=float, default=config.POLITE_DELAY_SECONDS,
                        help='Seconds to wait between detail pages')
    args = parser.parse_args(argv)

    if not 1 <= args.limit <= 50:
        parser.error("--limit must be between 1 and 50")

    try:
        asyncio.run(run(args.limit, args.output_dir, args.delay))
    except ScrapeError as e:
        logger.error(f"Error in main: {str(e)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
