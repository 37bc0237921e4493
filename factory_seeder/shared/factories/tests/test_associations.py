"""Tests for association-attribute filtering."""

from enum import Enum

import pytest

from factory_seeder.core.exceptions import AssociationAttributeConflictError
from factory_seeder.shared.execution_log import ExecutionLog
from factory_seeder.shared.factories import FactoryIntrospector, filter_association_attributes
from factory_seeder.shared.factories.associations import is_symbolic, looks_plural


class Kind(Enum):
    SPAM = "spam"


@pytest.fixture
def introspector(catalog) -> FactoryIntrospector:
    return FactoryIntrospector(catalog)


def test_known_collections_are_stripped(introspector):
    info = introspector.info("post")

    outcome = filter_association_attributes({"comments": "spam", "title": "Hello"}, info)

    assert outcome.kept == {"title": "Hello"}
    assert outcome.stripped == {"comments": "collection association"}


def test_known_collections_stripped_whatever_the_value(introspector):
    info = introspector.info("user")

    outcome = filter_association_attributes({"posts": [1, 2], "name": "Ada"}, info)

    assert outcome.kept == {"name": "Ada"}
    assert set(outcome.stripped) == {"posts"}


def test_reflected_models_skip_heuristic(introspector):
    info = introspector.info("user")

    outcome = filter_association_attributes({"roles": "admin"}, info)

    assert outcome.kept == {"roles": "admin"}
    assert outcome.stripped == {}


def test_heuristic_for_unreflected_models(introspector):
    info = introspector.info("gadget")

    outcome = filter_association_attributes(
        {
            "tags": "red",
            "kinds": Kind.SPAM,
            "labels": "Not A Token",
            "status": "active",
            "name": "gizmo",
        },
        info,
    )

    assert outcome.stripped == {
        "tags": "looks like a collection association",
        "kinds": "looks like a collection association",
    }
    assert outcome.kept == {"labels": "Not A Token", "status": "active", "name": "gizmo"}


def test_raise_policy(introspector):
    info = introspector.info("post")

    with pytest.raises(AssociationAttributeConflictError) as exc_info:
        filter_association_attributes({"comments": "x", "title": "t"}, info, policy="raise")

    assert exc_info.value.keys == ["comments"]


def test_raise_policy_allows_clean_attributes(introspector):
    info = introspector.info("post")

    outcome = filter_association_attributes({"title": "t"}, info, policy="raise")

    assert outcome.kept == {"title": "t"}


def test_warnings_go_to_execution_log(introspector):
    info = introspector.info("post")
    log = ExecutionLog("factory.generate")

    filter_association_attributes({"comments": "x"}, info, log=log)

    assert [e.level for e in log.entries] == ["warning"]
    assert log.entries[0].message == (
        "Ignoring attribute 'comments' for factory 'post': collection association"
    )


@pytest.mark.parametrize(
    ("key", "expected"),
    [("tags", True), ("users", True), ("address", False), ("status", False), ("basis", False), ("tag", False)],
)
def test_looks_plural(key, expected):
    assert looks_plural(key) is expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [(Kind.SPAM, True), ("admin", True), ("Admin", False), ("two words", False), (3, False)],
)
def test_is_symbolic(value, expected):
    assert is_symbolic(value) is expected
