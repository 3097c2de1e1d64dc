# tests/core/test_storage.py

import pytest

from catalyst_core.db.session import build_engine, build_session_factory, init_db
from catalyst_core.domain.models import EntityType
from catalyst_core.errors import StorageUnavailable
from catalyst_core.repositories import EntitiesRepository
from catalyst_core.store import MeasurementStore


@pytest.fixture(scope="function")
def file_factory(tmp_path):
    """Sessions on a file database, where each session gets its own connection."""
    engine = build_engine(f"sqlite:///{tmp_path / 'store.db'}", echo=False, timeout=0.2)
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


def test_reads_do_not_block_other_writers(file_factory):
    with file_factory() as reader_session, file_factory() as writer_session:
        reader = MeasurementStore(reader_session)
        writer = MeasurementStore(writer_session)

        france = writer.registry.get_or_create_entity("country", "France")

        assert reader.registry.get_entity(france.id).name == "France"
        assert [e.id for e in reader.registry.list_entities()] == [france.id]
        assert reader.facts.query() == []
        assert reader.latest.latest_by_year() == {}
        assert reader.projection.flat_measurements() == []
        assert not reader_session.in_transaction()

        spain = writer.registry.get_or_create_entity("country", "Spain")
        assert spain.id != france.id


def test_read_keeps_a_transaction_the_caller_opened(store, session):
    france = store.registry.get_or_create_entity("country", "France")
    EntitiesRepository(session).create(entity_type=EntityType.COUNTRY, name="Spain")

    assert store.registry.get_entity(france.id).name == "France"
    assert session.in_transaction()
    assert store.registry.find_entity("country", "Spain") is not None
    session.rollback()


def test_locked_database_is_storage_unavailable(file_factory):
    with file_factory() as holder, file_factory() as other:
        # An uncommitted insert keeps the write lock.
        EntitiesRepository(holder).create(entity_type=EntityType.COUNTRY, name="France")

        with pytest.raises(StorageUnavailable) as excinfo:
            MeasurementStore(other).registry.get_or_create_entity("country", "Spain")
        assert excinfo.value.code == "storage_unavailable"

        holder.rollback()
        assert MeasurementStore(other).registry.get_or_create_entity("country", "Spain").id is not None
