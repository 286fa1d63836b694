"""Tests for the in-memory record collection."""

import pytest

from voterportal.models import VoterRecord
from voterportal.services.record_collection import RecordCollection


def make_record(voter_no: str, booth: str = "1", **fields) -> VoterRecord:
    return VoterRecord(booth=booth, voter_no=voter_no, house_no="7", **fields)


@pytest.fixture
def collection():
    """Collection with three members of one house."""
    return RecordCollection([make_record("3"), make_record("5"), make_record("4")])


class TestFindAndUpdate:
    """Test identity-keyed lookup and replacement."""

    def test_find_by_identity(self, collection):
        assert collection.find("1", "5").voter_no == "5"

    def test_find_missing(self, collection):
        assert collection.find("2", "5") is None

    def test_update_one_replaces_matching_record(self, collection):
        """Only the record with the same (booth, voter_no) changes."""
        updated = collection.find("1", "5").model_copy(update={"name": "Gita"})

        assert collection.update_one(updated) is True

        assert collection.find("1", "5").name == "Gita"
        assert [r.voter_no for r in collection] == ["3", "5", "4"]

    def test_update_one_absent_key_is_noop(self, collection):
        """Updating a record that is no longer loaded leaves the list unchanged."""
        before = collection.snapshot()

        assert collection.update_one(make_record("99", name="Ghost")) is False

        assert collection.records == before

    def test_same_voter_no_in_other_booth_untouched(self):
        """Voter numbers repeat across booths; identity includes the booth."""
        collection = RecordCollection([make_record("5", booth="1"), make_record("5", booth="2")])

        collection.update_one(make_record("5", booth="2", name="Second"))

        assert collection.find("1", "5").name == ""
        assert collection.find("2", "5").name == "Second"

    def test_replace_all(self, collection):
        collection.replace_all([make_record("10")])
        assert len(collection) == 1
        assert collection.find("1", "3") is None


class TestSnapshot:
    """Test that saves see a stable copy."""

    def test_snapshot_unaffected_by_later_edits(self, collection):
        snapshot = collection.snapshot()

        collection.update_one(collection.find("1", "3").model_copy(update={"aadhar": "123456789012"}))
        collection.remove_one("1", "4")

        assert [r.voter_no for r in snapshot] == ["3", "5", "4"]
        assert snapshot[0].aadhar == ""


class TestAppendNew:
    """Test creation of unsaved members."""

    def test_next_voter_no_is_max_plus_one(self, collection):
        assert collection.next_voter_no() == "6"

    def test_first_member_of_empty_collection(self):
        assert RecordCollection().next_voter_no() == "1"

    def test_append_new_fields(self, collection):
        record = collection.append_new("1", house_no="7", name="Naya")

        assert record.voter_no == "6"
        assert record.is_new is True
        assert record.house_no == "7"
        assert record.name == "Naya"
        assert record.gender == "पु"
        assert record.original_age == "0"

    def test_append_new_keeps_given_age(self, collection):
        assert collection.append_new("1", house_no="7", original_age="34").original_age == "34"

    def test_append_new_goes_to_top(self, collection):
        collection.append_new("1", house_no="7")
        assert collection.records[0].voter_no == "6"

    def test_repeated_appends_number_one_to_n(self):
        """n appends to an empty collection yield voter numbers 1..n."""
        collection = RecordCollection()

        for _ in range(5):
            collection.append_new("1", house_no="7")

        assert sorted(int(r.voter_no) for r in collection) == [1, 2, 3, 4, 5]
        assert all(r.is_new for r in collection)

    def test_non_numeric_voter_numbers(self):
        """Voter numbers count by their leading digits."""
        collection = RecordCollection([make_record("12A"), make_record("B7")])
        assert collection.next_voter_no() == "13"

    def test_ward_carried(self):
        collection = RecordCollection()
        record = collection.append_new("1", house_no="7", ward="A")
        assert record.ward == "A"


class TestRemoveOne:
    """Test removal by identity."""

    def test_remove_existing(self, collection):
        assert collection.remove_one("1", "5") is True
        assert [r.voter_no for r in collection] == ["3", "4"]

    def test_remove_missing_is_noop(self, collection):
        assert collection.remove_one("1", "99") is False
        assert len(collection) == 3
