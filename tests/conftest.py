"""Shared pytest fixtures."""

from pathlib import Path

import pytest

from asset_server.settings import CategorySettings, Settings

from .helpers import ObserverFactory, make_files


@pytest.fixture
def observer_factory() -> ObserverFactory:
    return ObserverFactory()


@pytest.fixture
def gary_dir(tmp_path: Path) -> Path:
    return make_files(tmp_path / "gary", "Gary1.jpg", "Gary2.jpg")


@pytest.fixture
def gary_category(gary_dir: Path) -> CategorySettings:
    return CategorySettings(
        name="gary",
        directory=str(gary_dir),
        default="Gary76.jpg",
        base_url="https://cdn.example.com/gary/",
    )


@pytest.fixture
def settings(tmp_path: Path, gary_category: CategorySettings) -> Settings:
    goober_dir = tmp_path / "goober"
    goober_dir.mkdir()
    quotes = tmp_path / "quotes.json"
    quotes.write_text('["Stay hungry.", "Keep it simple."]', encoding="utf-8")
    index = tmp_path / "index.html"
    index.write_text("<h1>assets</h1>", encoding="utf-8")
    return Settings(
        categories={
            "gary": gary_category,
            "goober": CategorySettings(
                name="goober",
                directory=str(goober_dir),
                default="goober8.jpg",
                base_url="https://cdn.example.com/goober",
            ),
        },
        quotes_file=str(quotes),
        jokes_file=str(tmp_path / "missing-jokes.json"),
        index_file=str(index),
    )
