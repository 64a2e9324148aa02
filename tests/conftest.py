"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import DocumentStore
from main import create_app

# One valid create payload and one partial update per resource route
SAMPLES = {
    "favmusic": (
        {"userId": "u1", "musicName": "Song", "singer": "Artist", "reason": "x"},
        {"singer": "Another Artist"},
    ),
    "favvehicle": (
        {"userId": "u1", "vehicleName": "Model T", "typeOfVehicle": "car", "launchYear": 1908, "reason": "classic"},
        {"launchYear": 1909},
    ),
    "games": (
        {"userId": "u1", "gameName": "Chess", "platform": "indoor", "reason": "strategy", "isDigital": False},
        {"isDigital": True},
    ),
    "mobileapps": (
        {"userId": "u1", "appName": "Maps", "platform": "Android", "category": "travel", "reason": "useful"},
        {"category": "navigation"},
    ),
    "youtubechannels": (
        {"userId": "u1", "channelName": "Numberphile", "creatorName": "Brady", "genre": "math", "reason": "fun"},
        {"genre": "science"},
    ),
    "favprogramminglanguages": (
        {"userId": "u1", "programmingLanguageName": "Python", "useCase": "scripting", "reason": "readable"},
        {"useCase": "web services"},
    ),
}


class TickingClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="mongodb://localhost:27017",
        database_name="collecthub_test",
        log_level="WARNING",
        log_file="",
        debug=False,
        cors_origins=["*"],
    )


@pytest.fixture
def store() -> DocumentStore:
    """In-memory MongoDB stand-in."""
    return DocumentStore(mongomock.MongoClient(), "collecthub_test")


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def app(settings, store):
    return create_app(settings, store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
