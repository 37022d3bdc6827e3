import pytest
from sqlmodel import Session

from marketplace.database import make_engine, create_db_and_tables
from marketplace.infrastructure.storage.local_image_store import LocalImageStore


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'db' / 'mercari.sqlite3'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def image_store(tmp_path):
    store = LocalImageStore(str(tmp_path / "images"))
    store.ensure_default_image()
    return store
