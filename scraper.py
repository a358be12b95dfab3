#!/usr/bin/env python3
"""
UBA Psicología Course Catalog Scraper
Builds the indexed subjects / chairs / sections / meets dataset for one term
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from queue import Queue, Empty
from threading import Lock
from typing import List, Optional

import requests

from aggregator import CatalogAggregator
from constants import (
    BASE_URL, DEFAULT_MAX_WORKERS, DEFAULT_RATE_LIMIT, DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_TERM, DEFAULT_TIMEOUT, DETAIL_PAGE_PATH, HTTP_HEADERS, LIST_PAGE_PATH,
    PROGRAMS, SEDES,
)
from exporter import save_dataset, sort_dataset
from models import CatalogDataset, DetailPage, Program, Sede, Term
from parsers import parse_detail_page, parse_list_page
from scheduler import run_bounded
from utils import decode_iso88591, term_display_name

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """A page could not be fetched (bad status or network failure)"""


class CatalogScraper:
    """Fetches the list page, then every chair's detail page with bounded concurrency"""

    def __init__(self,
                 base_url: str = BASE_URL,
                 max_workers: int = DEFAULT_MAX_WORKERS,
                 rate_limit_per_second: int = DEFAULT_RATE_LIMIT,
                 timeout: float = DEFAULT_TIMEOUT,
                 retry_attempts: int = DEFAULT_RETRY_ATTEMPTS):

        self.base_url = base_url.rstrip('/')
        self.max_workers = max_workers
        self.rate_limit_per_second = rate_limit_per_second
        self.timeout = timeout
        self.retry_attempts = retry_attempts

        # Rate limiting
        self.last_request_times = []
        self.request_lock = Lock()

        # Session pool
        self.session_pool = Queue()
        self.init_session_pool(max_workers)

        self.stats = {
            'programs': 0,
            'chairs': 0,
            'materias': 0,
            'sections': 0,
            'meets': 0,
            'missing_materia_header': 0,
            'requests': 0,
            'start_time': None,
            'end_time': None,
        }

    def init_session_pool(self, pool_size: int):
        for _ in range(pool_size):
            self.session_pool.put(self._new_session())

    def _new_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(HTTP_HEADERS)
        return session

    def get_session(self) -> requests.Session:
        """Get a session from the pool, or a fresh one if it is empty"""
        try:
            return self.session_pool.get_nowait()
        except Empty:
            return self._new_session()

    def return_session(self, session: requests.Session):
        self.session_pool.put(session)

    def rate_limited_request(self, method, *args, **kwargs):
        """Make a request while keeping under ``rate_limit_per_second``"""
        with self.request_lock:
            now = time.time()
            self.last_request_times = [t for t in self.last_request_times if now - t < 1.0]

            if self.rate_limit_per_second and len(self.last_request_times) >= self.rate_limit_per_second:
                sleep_time = 1.0 - (now - self.last_request_times[0])
                if sleep_time > 0:
                    time.sleep(sleep_time)
                now = time.time()

            self.last_request_times.append(now)
            self.stats['requests'] += 1

        return method(*args, **kwargs)

    def list_url(self) -> str:
        return f"{self.base_url}{LIST_PAGE_PATH}"

    def detail_url(self, chair_id: int) -> str:
        return f"{self.base_url}{DETAIL_PAGE_PATH}?catedra={chair_id}"

    def fetch_text(self, url: str) -> str:
        """GET a page and decode it from the site's ISO-8859-1 bytes.

        Connection errors and timeouts are retried ``retry_attempts`` times; a
        non-success status fails immediately.
        """
        session = self.get_session()
        try:
            for attempt in range(max(self.retry_attempts, 0) + 1):
                try:
                    response = self.rate_limited_request(session.get, url, timeout=self.timeout)
                except (requests.ConnectionError, requests.Timeout) as e:
                    if attempt < self.retry_attempts:
                        logger.debug(f"Retrying {url} after {e} (attempt {attempt + 1})")
                        continue
                    raise TransportError(f"Failed to fetch {url}: {e}") from e

                if not response.ok:
                    raise TransportError(f"Failed {response.status_code} {url}")
                return decode_iso88591(response.content)
        finally:
            self.return_session(session)

    def fetch_detail(self, chair_id: int) -> DetailPage:
        return parse_detail_page(self.fetch_text(self.detail_url(chair_id)))

    def scrape_term(self, term_id: str) -> CatalogDataset:
        """Run the full pipeline for one term and return the sorted dataset"""
        self.stats['start_time'] = datetime.now()
        updated_at = int(time.time() * 1000)
        logger.info(f"🚀 Scraping catalog for term {term_id}...")

        listings = parse_list_page(self.fetch_text(self.list_url()))
        self.stats['programs'] = len(listings)
        for listing in listings:
            logger.info(f"📚 {listing.program}: {len(listing.entries)} chairs")

        aggregator = CatalogAggregator(term_id, updated_at)
        jobs = []
        for listing in listings:
            aggregator.register_program(listing.program)
            for stub in listing.entries:
                jobs.append((listing, stub))

        details = run_bounded(
            [lambda stub=stub: self.fetch_detail(stub.chair_id) for _, stub in jobs],
            max_workers=self.max_workers,
        )

        # merge on this thread, in list-page order
        for (listing, stub), detail in zip(jobs, details):
            aggregator.add_chair(listing.program, listing.program_name, stub, detail)

        dataset = CatalogDataset(
            term=Term(id=term_id, name=term_display_name(term_id), updated_at=updated_at),
            programs=[Program(code=code, name=name) for code, name, _ in PROGRAMS],
            sedes=[Sede(**sede) for sede in SEDES],
            materias=list(aggregator.materias.values()),
            catedras=aggregator.catedras,
            sections=aggregator.sections,
            meets=aggregator.meets,
            indexes=aggregator.indexes,
        )
        sort_dataset(dataset)

        self.stats.update({
            'chairs': aggregator.stats['chairs'],
            'missing_materia_header': aggregator.stats['missing_materia_header'],
            'materias': len(dataset.materias),
            'sections': len(dataset.sections),
            'meets': len(dataset.meets),
            'end_time': datetime.now(),
        })
        self.log_final_stats()
        return dataset

    def log_final_stats(self):
        duration = self.stats['end_time'] - self.stats['start_time']

        logger.info("📊 SCRAPING STATISTICS")
        logger.info("=" * 60)
        logger.info(f"⏱️  Total time: {duration}")
        logger.info(f"🎓 Programs: {self.stats['programs']}")
        logger.info(f"👥 Chairs: {self.stats['chairs']}")
        logger.info(f"📚 Subjects: {self.stats['materias']}")
        logger.info(f"📖 Sections: {self.stats['sections']}")
        logger.info(f"🗓️  Meets: {self.stats['meets']}")
        logger.info(f"🌐 Requests: {self.stats['requests']}")
        if self.stats['missing_materia_header']:
            logger.warning(f"⚠️ Chairs without subject header: {self.stats['missing_materia_header']}")


def setup_logging(debug: bool = False, log_file: Optional[str] = 'psi_scraper.log'):
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='UBA Psicología course catalog scraper')
    parser.add_argument('--term', default=DEFAULT_TERM, help='Term identifier, e.g. 2025-2')
    parser.add_argument('--output-dir', '-o', help='Output directory (defaults to ./<term>)')
    parser.add_argument('--max-workers', type=int, default=DEFAULT_MAX_WORKERS, help='Concurrent detail page fetches')
    parser.add_argument('--rate-limit', type=int, default=DEFAULT_RATE_LIMIT, help='Requests per second limit')
    parser.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT, help='Per-request timeout in seconds')
    parser.add_argument('--retry-attempts', type=int, default=DEFAULT_RETRY_ATTEMPTS, help='Retries on connection errors')
    parser.add_argument('--csv', action='store_true', help='Also write a flat meets.csv')
    parser.add_argument('--log-file', default='psi_scraper.log', help='Log file path (empty to disable)')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug, args.log_file or None)

    output_dir = args.output_dir or args.term
    logger.info(f"🎓 Term: {args.term}")
    logger.info(f"📁 Output directory: {output_dir}")

    scraper = CatalogScraper(
        max_workers=args.max_workers,
        rate_limit_per_second=args.rate_limit,
        timeout=args.timeout,
        retry_attempts=args.retry_attempts,
    )

    try:
        dataset = scraper.scrape_term(args.term)
        save_dataset(dataset, output_dir, write_csv=args.csv)
    except KeyboardInterrupt:
        logger.error("⏹️ Scraping interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"💥 Scraping failed: {e}")
        logger.debug("Traceback:", exc_info=True)
        return 1

    logger.info("✅ Scraping completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
