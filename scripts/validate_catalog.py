"""
Validate a movie catalog file and print its indexes.

This script:
1) Loads movies from data/movies.json (or the path given as the first argument)
2) Reports how many records were usable
3) Logs the genre and year indexes the API will serve
4) Runs a default discovery query as a smoke test

Usage:
    python -m scripts.validate_catalog [path/to/movies.json]
"""

import sys  # command-line argument
import time  # measure step timings
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from moboe.data_loader import CatalogLoader  # data ingestion
from moboe.discovery import search  # smoke-test query
from moboe.models import Query  # discovery request


def main(argv=None):
	argv = sys.argv[1:] if argv is None else argv
	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Validate Movie Catalog")
	logger.info("=" * 60)

	# Resolve project root and the catalog path
	root = Path(__file__).resolve().parents[1]  # project root
	data_path = Path(argv[0]) if argv else root / 'data' / 'movies.json'  # input dataset

	# 1) Load data
	logger.info("[1/3] Loading catalog...")
	t0 = time.time()  # start timer
	catalog = CatalogLoader().load_catalog(str(data_path))  # read dataset
	logger.info(f"[OK] Loaded {len(catalog)} movies in {time.time() - t0:.2f}s")  # confirm count

	# 2) Indexes
	logger.info("[2/3] Genre and year indexes...")
	for name, count in catalog.genre_counts().items():
		logger.info(f"  {name:<15} {count}")
	years = catalog.available_years()
	if years:
		logger.info(f"  Years: {years[-1]} - {years[0]} ({len(years)} distinct)")

	# 3) Smoke-test discovery
	logger.info("[3/3] Default discovery query...")
	page = search(catalog, Query())
	for movie in page.results:
		logger.info(f"  {movie.rating:>4} | {movie.title} ({movie.year})")
	logger.info(f"[OK] {page.total_count} movies across {page.total_pages} page(s)")
	logger.info("=" * 60)
	return 0


if __name__ == '__main__':
	sys.exit(main())  # invoke validator
