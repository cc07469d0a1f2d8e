import pytest

from gallery.conditions import CONDITION_COLLECTIONS, Condition, resolve_condition
from gallery.errors import InvalidCondition, MissingCondition


@pytest.mark.parametrize(
    "condition,collection",
    [("sun", "Sunny Day"), ("cloud", "Cloudy Day"), ("rain", "Rainy Day"), ("snow", "Snow Day")],
)
def test_known_conditions(condition, collection):
    assert resolve_condition(condition) == collection


def test_unknown_condition():
    with pytest.raises(InvalidCondition):
        resolve_condition("banana")


@pytest.mark.parametrize("condition", [None, ""])
def test_missing_condition(condition):
    with pytest.raises(MissingCondition):
        resolve_condition(condition)


def test_table_covers_every_condition():
    assert set(CONDITION_COLLECTIONS) == set(Condition)
