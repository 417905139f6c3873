"""
Tests for the discovery engine: conjunctive filters, sorting, pagination and invalid queries.
Run: pytest tests/test_discovery.py
"""

import pytest

from moboe.catalog import Catalog
from moboe.discovery import search, matches_term, matches_genres, matches_year, matches_rating, title_sort_key
from moboe.errors import InvalidQuery
from moboe.models import Movie, Query


def ids(page):
	return [m.id for m in page.results]


def test_min_rating_scenario():
	catalog = Catalog([
		Movie(id=1, title='Nova', year=2020, genres=('Sci-Fi',), rating=7.2),
		Movie(id=2, title='Echo', year=2019, genres=('Drama',), rating=8.9),
	])
	page = search(catalog, Query(search_term='', genres=frozenset(), min_rating=8.0, sort_by='rating', page=1, page_size=10))

	assert [m.title for m in page.results] == ['Echo']  # only Echo clears 8.0
	assert page.total_count == 1


def test_search_term_is_case_insensitive_on_title_or_overview(catalog):
	assert ids(search(catalog, Query(search_term='NOVA', sort_by='title'))) == [1]
	assert ids(search(catalog, Query(search_term='ferry'))) == [3]  # overview match
	# whitespace-only terms match everything
	assert search(catalog, Query(search_term='   ')).total_count == len(catalog)


def test_genre_filter_is_any_match_and_case_sensitive(catalog):
	page = search(catalog, Query(genres=frozenset({'Romance', 'Action'}), sort_by='title'))
	assert ids(page) == [7, 3, 4]
	assert search(catalog, Query(genres=frozenset({'drama'}))).total_count == 0  # no case folding


def test_year_filter_exact(catalog):
	assert sorted(ids(search(catalog, Query(year=2019)))) == [2, 3]
	assert search(catalog, Query(year=1900)).total_count == 0


def test_filters_are_conjunctive(catalog):
	"""A movie appears iff it satisfies every predicate on its own."""
	queries = [
		Query(search_term='a', genres=frozenset({'Drama'}), min_rating=7.5, page_size=100),
		Query(genres=frozenset({'Sci-Fi', 'Comedy'}), year=2020, page_size=100),
		Query(search_term='star', min_rating=6.0, page_size=100),
		Query(year=2021, min_rating=6.6, page_size=100),
	]
	for query in queries:
		expected = {
			m.id for m in catalog
			if matches_term(m, query.search_term)
			and matches_genres(m, query.genres)
			and matches_year(m, query.year)
			and matches_rating(m, query.min_rating)
		}
		assert set(ids(search(catalog, query))) == expected, f"conjunction for {query}"


def test_rating_sort_is_stable_and_popularity_is_an_alias(catalog):
	by_rating = ids(search(catalog, Query(sort_by='rating', page_size=100)))
	# Nova (1) and Harbor Lights (3) tie at 7.2; catalog order keeps 1 first
	assert by_rating == [2, 5, 7, 1, 3, 6, 4, 8]
	assert ids(search(catalog, Query(sort_by='popularity', page_size=100))) == by_rating


def test_year_sort_descending_stable(catalog):
	assert ids(search(catalog, Query(sort_by='year', page_size=100))) == [4, 6, 1, 8, 2, 3, 5, 7]


def test_title_sort_is_accent_and_case_insensitive(catalog):
	titles = [m.title for m in search(catalog, Query(sort_by='title', page_size=100)).results]
	assert titles == ['Deep Space Nine Lives', 'Echo', 'Éclair', 'Harbor Lights', 'Iron Comet',
		'Laugh Track', 'Nova', 'Quiet Field']
	assert title_sort_key('Éclair') == 'eclair'


def test_pagination_covers_every_movie_exactly_once(catalog):
	for page_size in (1, 3, 5, 8, 20):
		seen = []
		first = search(catalog, Query(page_size=page_size))
		for page in range(1, first.total_pages + 1):
			seen.extend(ids(search(catalog, Query(page=page, page_size=page_size))))
		assert len(seen) == first.total_count, f"page_size={page_size}"
		assert len(set(seen)) == len(seen), f"page_size={page_size} repeated a movie"


def test_page_past_the_end_is_empty(catalog):
	page = search(catalog, Query(page=99, page_size=5))
	assert page.results == []
	assert page.total_count == len(catalog)
	assert page.total_pages == 2  # ceil(8 / 5)


def test_empty_catalog():
	page = search(Catalog([]), Query())
	assert (page.results, page.total_count, page.total_pages) == ([], 0, 0)


@pytest.mark.parametrize('query', [
	Query(page_size=0),
	Query(page_size=-3),
	Query(page=0),
	Query(sort_by='views'),
])
def test_invalid_queries_raise(catalog, query):
	with pytest.raises(InvalidQuery):
		search(catalog, query)
