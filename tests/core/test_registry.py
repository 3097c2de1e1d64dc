# tests/core/test_registry.py

import pytest

from catalyst_core.db import models
from catalyst_core.domain.models import EntityType, MetricDirection, TagKind
from catalyst_core.errors import ConstraintViolation, NotFoundError, ReferentialIntegrityError


# --- Entities ---

def test_get_or_create_entity_is_idempotent(store, session):
    first = store.registry.get_or_create_entity("country", "France", iso2="FR", iso3="FRA")
    second = store.registry.get_or_create_entity(EntityType.COUNTRY, "France")

    assert first.id == second.id
    assert second.iso3 == "FRA"
    assert session.query(models.Entity).count() == 1


def test_same_name_different_type_is_a_new_entity(store):
    country = store.registry.get_or_create_entity("country", "Georgia")
    project = store.registry.get_or_create_entity("project", "Georgia")
    assert country.id != project.id


@pytest.mark.parametrize(
    "kwargs",
    [
        {"entity_type": "planet", "name": "Mars"},
        {"entity_type": "country", "name": "   "},
        {"entity_type": "country", "name": "France", "iso2": "FRA"},
        {"entity_type": "country", "name": "France", "iso3": "FR"},
    ],
)
def test_entity_constraints(store, session, kwargs):
    with pytest.raises(ConstraintViolation):
        store.registry.get_or_create_entity(**kwargs)
    assert session.query(models.Entity).count() == 0


def test_find_entity_by_iso(store):
    france = store.registry.get_or_create_entity("country", "France", iso2="FR", iso3="FRA")
    store.registry.get_or_create_entity("country", "Spain", iso2="ES", iso3="ESP")

    assert [e.id for e in store.registry.find_entity_by_iso("fr")] == [france.id]
    assert [e.id for e in store.registry.find_entity_by_iso("FRA")] == [france.id]
    with pytest.raises(ConstraintViolation):
        store.registry.find_entity_by_iso("FRAN")


def test_lost_race_returns_the_winners_row(store):
    winner = store.registry.get_or_create_entity("organization", "Acme")

    repo = store.registry._entities
    real_lookup = repo.get_by_natural_key
    calls = []

    def stale_lookup(entity_type, name):
        # The first lookup runs "before" the other caller committed.
        calls.append(name)
        if len(calls) == 1:
            return None
        return real_lookup(entity_type, name)

    repo.get_by_natural_key = stale_lookup

    loser = store.registry.get_or_create_entity("organization", "Acme")

    assert loser.id == winner.id
    assert len(calls) == 2
    assert len(store.registry.list_entities(entity_type="organization")) == 1


def test_get_missing_entity(store):
    with pytest.raises(NotFoundError):
        store.registry.get_entity(404)


# --- Frameworks & metrics ---

def test_metric_by_framework_name_creates_framework(store):
    metric = store.registry.get_or_create_metric("Demo", code="X.1", name="Test Metric", unit="%")
    framework = store.registry.find_framework("Demo")

    assert framework is not None
    assert metric.framework_id == framework.id
    assert metric.direction == MetricDirection.NEUTRAL


def test_get_or_create_metric_is_idempotent(store):
    framework = store.registry.get_or_create_framework("SDG")
    first = store.registry.get_or_create_metric(framework.id, code="1.1.1", name="Poverty rate", direction=-1)
    second = store.registry.get_or_create_metric("SDG", code="1.1.1", name="Poverty rate")

    assert first.id == second.id
    assert first.direction == -1


def test_metric_without_code_is_keyed_by_name(store):
    first = store.registry.get_or_create_metric("Demo", name="Happiness")
    second = store.registry.get_or_create_metric("Demo", name="Happiness")
    assert first.id == second.id
    assert first.code is None


def test_metric_name_taken_by_other_code(store):
    store.registry.get_or_create_metric("Demo", code="A", name="Shared name")
    with pytest.raises(ConstraintViolation) as excinfo:
        store.registry.get_or_create_metric("Demo", code="B", name="Shared name")
    assert excinfo.value.details["existing_code"] == "A"


def test_metric_direction_must_be_known(store):
    with pytest.raises(ConstraintViolation):
        store.registry.get_or_create_metric("Demo", code="X", name="X", direction=2)


def test_metric_with_unknown_framework_id(store):
    with pytest.raises(NotFoundError):
        store.registry.get_or_create_metric(99, code="X", name="X")


def test_find_and_list_metrics(store):
    gdp = store.registry.get_or_create_metric("WorldBank", code="NY.GDP", name="GDP")
    store.registry.get_or_create_metric("Demo", code="X.1", name="Test Metric")

    assert store.registry.find_metric("WorldBank", code="NY.GDP").id == gdp.id
    assert store.registry.find_metric("WorldBank", name="GDP").id == gdp.id
    assert store.registry.find_metric("Nope", code="NY.GDP") is None
    assert [m.id for m in store.registry.list_metrics(framework="WorldBank")] == [gdp.id]
    assert len(store.registry.list_metrics()) == 2


def test_delete_framework_is_restricted_by_metrics(store):
    metric = store.registry.get_or_create_metric("Demo", code="X.1", name="Test Metric")

    with pytest.raises(ReferentialIntegrityError):
        store.registry.delete_framework(metric.framework_id)

    store.facts.delete_metric(metric.id)
    store.registry.delete_framework(metric.framework_id)
    assert store.registry.list_frameworks() == []


# --- Sources ---

def test_sources_are_keyed_by_name(store):
    first = store.registry.get_or_create_source("World Bank", url="https://data.worldbank.org")
    second = store.registry.get_or_create_source("World Bank", url="https://example.org")

    assert first.id == second.id
    assert second.url == "https://data.worldbank.org"
    assert store.registry.find_source("World Bank").id == first.id


# --- Tags ---

def test_tags_are_idempotent_and_link_once(store):
    france = store.registry.get_or_create_entity("country", "France")
    tag = store.registry.get_or_create_tag("sdg", "SDG 13")
    again = store.registry.get_or_create_tag(TagKind.SDG, "SDG 13")

    assert tag.id == again.id
    assert store.registry.tag_entity(france.id, tag.id) is True
    assert store.registry.tag_entity(france.id, tag.id) is False
    assert [t.id for t in store.registry.entity_tags(france.id)] == [tag.id]

    assert store.registry.untag_entity(france.id, tag.id) is True
    assert store.registry.entity_tags(france.id) == []


def test_tag_kind_must_be_known(store):
    with pytest.raises(ConstraintViolation):
        store.registry.get_or_create_tag("mood", "happy")


def test_tag_metric(store):
    metric = store.registry.get_or_create_metric("Demo", code="X.1", name="Test Metric")
    tag = store.registry.get_or_create_tag("topic", "economy")

    store.registry.tag_metric(metric.id, tag.id)
    assert [t.name for t in store.registry.metric_tags(metric.id)] == ["economy"]

    with pytest.raises(NotFoundError):
        store.registry.tag_metric(metric.id, 999)


def test_iso_codes_are_stored_upper_case(store):
    france = store.registry.get_or_create_entity("country", "France", iso2="fr", iso3="fra")

    assert (france.iso2, france.iso3) == ("FR", "FRA")
    assert [e.id for e in store.registry.find_entity_by_iso("fra")] == [france.id]
    assert [e.id for e in store.registry.find_entity_by_iso("Fr")] == [france.id]


def test_list_entities_paging(store):
    for name in ("Austria", "Belgium", "Croatia"):
        store.registry.get_or_create_entity("country", name)

    assert store.registry.list_entities(limit=0) == []
    assert [e.name for e in store.registry.list_entities(limit=1, offset=1)] == ["Belgium"]
    with pytest.raises(ConstraintViolation):
        store.registry.list_entities(limit=-1)
