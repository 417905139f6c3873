"""
Tests for catalog loading: JSON documents, JSON lines, field aliases and invalid records.
Run: pytest tests/test_data_loader.py
"""

import json
from pathlib import Path

import pytest

from moboe.data_loader import CatalogLoader
from moboe.errors import NotFound

ROOT = Path(__file__).resolve().parents[1]


def test_load_bundled_catalog():
	"""The shipped dataset loads completely and builds its indexes."""
	catalog = CatalogLoader().load_catalog(str(ROOT / 'data' / 'movies.json'))

	assert len(catalog) == 20
	first = catalog.get_movie(1)
	assert first.title == 'The Shawshank Redemption'
	assert first.genres == ('Drama', 'Crime')
	assert first.poster_url.startswith('https://')
	assert 'Sci-Fi' in catalog.available_genres()
	years = catalog.available_years()
	assert years == sorted(years, reverse=True)
	assert sum(catalog.genre_counts().values()) == sum(len(m.genres) for m in catalog)


def test_json_document_aliases_and_invalid_records(tmp_path):
	document = {
		'movies': [
			{'id': 1, 'title': 'Nova', 'year': 2020, 'genre': ['Sci-Fi'], 'rating': 7.2, 'poster': 'p1.jpg', 'overview': 'Space.'},
			{'id': '2', 'title': 'Echo', 'releaseYear': '2019', 'genres': 'Drama, Mystery', 'rating': '8.9', 'url': 'p2.jpg'},
			{'id': 3, 'title': 'No Genres', 'year': 2001, 'genre': [], 'rating': 5.0},  # empty genres
			{'id': 4, 'title': 'No Rating', 'year': 2001, 'genre': ['Drama']},  # missing rating
			{'id': 5, 'title': 'Bad Year', 'year': 'soon', 'genre': ['Drama'], 'rating': 5.0},  # unparseable
			{'id': 6, 'title': 'Too High', 'year': 2001, 'genre': ['Drama'], 'rating': 11},  # out of range
			{'id': 1, 'title': 'Duplicate Nova', 'year': 2020, 'genre': ['Sci-Fi'], 'rating': 1.0},  # duplicate id
			'not an object',
		],
	}
	path = tmp_path / 'movies.json'
	path.write_text(json.dumps(document), encoding='utf-8')

	catalog = CatalogLoader().load_catalog(str(path))

	assert [m.id for m in catalog] == [1, 2]
	assert catalog.get_movie(1).title == 'Nova'  # first record wins
	echo = catalog.get_movie(2)
	assert echo.year == 2019
	assert echo.genres == ('Drama', 'Mystery')
	assert echo.rating == 8.9
	assert echo.poster_url == 'p2.jpg'
	assert echo.overview == ''


def test_jsonl_skips_malformed_lines(tmp_path):
	lines = [
		json.dumps({'id': 10, 'title': 'Line One', 'year': 1999, 'genres': ['Drama'], 'rating': 7.0}),
		'{this is not json',
		'',
		json.dumps({'id': 11, 'title': 'Line Two', 'year': 2005, 'genres': ['Comedy'], 'rating': 6.0}),
	]
	path = tmp_path / 'movies.jsonl'
	path.write_text('\n'.join(lines), encoding='utf-8')

	catalog = CatalogLoader().load_catalog(str(path))

	assert [m.title for m in catalog] == ['Line One', 'Line Two']


def test_missing_file_raises():
	with pytest.raises(FileNotFoundError):
		CatalogLoader().load_catalog('does/not/exist.json')


def test_catalog_lookups(catalog):
	with pytest.raises(NotFound):
		catalog.get_movie(999)
	assert catalog.find_movie(999) is None

	# related: share a genre, catalog order, never the movie itself
	related = catalog.related_movies(2)
	assert [m.id for m in related] == [3, 5]
	assert all(m.id != 2 for m in related)
	assert len(catalog.related_movies(1, limit=1)) == 1

	assert catalog.genre_counts()['Sci-Fi'] == 3
	assert catalog.available_genres()[0] == 'Sci-Fi'  # first seen


def test_random_movie_and_genre_hints(catalog):
	import random

	picked = catalog.random_movie(random.Random(7))
	assert picked in list(catalog)

	assert catalog.suggest_genre('sci-fi') == 'Sci-Fi'  # case differs -> hint
	assert catalog.suggest_genre('Sci-Fi') is None  # exact canonical name needs no hint
	assert catalog.suggest_genre('Zzzzqqq') is None


if __name__ == '__main__':
	test_load_bundled_catalog()
	print("Catalog loading test complete!")
