"""
Shared fixtures: a small in-memory catalog, memory storage and a controllable clock.
"""

from datetime import datetime, timedelta, timezone

import pytest

from moboe.catalog import Catalog
from moboe.models import Movie
from moboe.storage import MemoryStorage


class FakeClock:
	"""Returns a strictly increasing time, one minute per call."""

	def __init__(self, start=None):
		self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

	def __call__(self):
		self.now = self.now + timedelta(minutes=1)
		return self.now


def make_movie(id, title, year, genres, rating, overview=''):
	return Movie(id=id, title=title, year=year, genres=tuple(genres), rating=rating,
		poster_url=f'https://img.example/{id}.jpg', overview=overview)


SAMPLE_MOVIES = [
	make_movie(1, 'Nova', 2020, ['Sci-Fi'], 7.2, 'A pilot drifts toward a dying star.'),
	make_movie(2, 'Echo', 2019, ['Drama'], 8.9, 'A sound engineer hears her own future.'),
	make_movie(3, 'Harbor Lights', 2019, ['Drama', 'Romance'], 7.2, 'Two strangers meet at a ferry terminal.'),
	make_movie(4, 'Iron Comet', 2021, ['Action', 'Sci-Fi'], 6.5, 'Miners fight to stop a comet.'),
	make_movie(5, 'Quiet Field', 2018, ['Drama'], 8.1, 'A farmer keeps a secret about the harvest.'),
	make_movie(6, 'Laugh Track', 2021, ['Comedy'], 6.9, 'A sitcom writer loses his sense of humor.'),
	make_movie(7, 'Éclair', 2017, ['Comedy', 'Romance'], 7.5, 'A pastry chef in Lyon falls for a critic.'),
	make_movie(8, 'Deep Space Nine Lives', 2020, ['Sci-Fi', 'Comedy'], 5.8, 'A cat survives aboard a starship.'),
]


@pytest.fixture
def movies():
	return list(SAMPLE_MOVIES)


@pytest.fixture
def catalog(movies):
	return Catalog(movies)


@pytest.fixture
def storage():
	return MemoryStorage()


@pytest.fixture
def clock():
	return FakeClock()
