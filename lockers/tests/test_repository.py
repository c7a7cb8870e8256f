"""
Unit tests for the locker repository.
"""

import pytest
from dataclasses import replace

from lockers.chain.types import LockerStatus
from lockers.transactions.errors import InvalidQuantity, InvalidState, NotFound
from lockers.transactions.repository import LockerRepository


@pytest.fixture
def repository():
    return LockerRepository()


def _create(repository, quantity=100):
    return repository.create(
        originator="alice",
        beneficiary="bob",
        resource_type=1,
        quantity=quantity,
        genesis_height=10,
        termination_height=1018,
    )


class TestLockerRepository:
    """Tests for id assignment and record replacement."""

    def test_ids_are_sequential(self, repository):
        """Ids start at 1 and increase by one."""
        assert repository.sequence == 0
        assert _create(repository) == 1
        assert _create(repository) == 2
        assert repository.sequence == 2
        assert len(repository) == 2

    def test_new_locker_is_pending(self, repository):
        """Created lockers start pending with the given fields."""
        record = repository.get(_create(repository, quantity=250))
        assert record.status == LockerStatus.PENDING
        assert record.quantity == 250
        assert (record.genesis_height, record.termination_height) == (10, 1018)

    def test_rejects_non_positive_quantity(self, repository):
        """Zero and negative quantities never consume an id."""
        for quantity in (0, -1, False):
            with pytest.raises(InvalidQuantity):
                _create(repository, quantity=quantity)
        assert repository.sequence == 0

    def test_exists(self, repository):
        """exists covers exactly the assigned ids."""
        _create(repository)
        assert repository.exists(1)
        assert not repository.exists(0)
        assert not repository.exists(2)
        assert not repository.exists("1")

    def test_set_replaces_record(self, repository):
        """set stores an updated record."""
        record = repository.get(_create(repository))
        repository.set(replace(record, status=LockerStatus.COMPLETED, quantity=0))
        assert repository.get(1).status == LockerStatus.COMPLETED

    def test_set_unknown_id(self, repository):
        """set refuses ids that were never created."""
        record = repository.get(_create(repository))
        with pytest.raises(NotFound):
            repository.set(replace(record, locker_id=7))

    def test_identity_fields_immutable(self, repository):
        """Originator, beneficiary, resource type and genesis cannot change."""
        record = repository.get(_create(repository))
        for change in ({"originator": "mallory"}, {"beneficiary": "mallory"},
                       {"resource_type": 9}, {"genesis_height": 0}):
            with pytest.raises(InvalidState):
                repository.set(replace(record, **change))

    def test_termination_never_decreases(self, repository):
        """Termination height can only move forward."""
        record = repository.get(_create(repository))
        with pytest.raises(InvalidState):
            repository.set(replace(record, termination_height=1017))
        repository.set(replace(record, termination_height=1019))

    def test_all_in_id_order(self, repository):
        """all yields records in id order."""
        for _ in range(3):
            _create(repository)
        assert [r.locker_id for r in repository.all()] == [1, 2, 3]
