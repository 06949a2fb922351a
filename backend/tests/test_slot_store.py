from __future__ import annotations

import threading

import pytest

from whentomeet.core.constants import CALENDAR_KEY
from whentomeet.core.errors import ValidationError
from whentomeet.services.slot_store import normalize_table
from whentomeet.services.types import SlotEntry

WEEK = "2024-03-03"
OTHER_WEEK = "2024-03-10"


def _entry(user_id: str, name: str, color: str = "#ef4444") -> SlotEntry:
    return SlotEntry(user_id=user_id, user_name=name, color=color)


def test_unknown_week_is_empty(slots):
    assert slots.get_table(WEEK) == {}
    assert slots.get_all() == {}


def test_mark_unmark_scenario(slots, ann, bob):
    slots.upsert_slot(WEEK, 1, 4, ann.entry())
    assert slots.get_table(WEEK) == {"1-4": [{"userId": "u1", "userName": "Ann", "color": "#ef4444"}]}

    slots.upsert_slot(WEEK, 1, 4, bob.entry())
    assert [e["userId"] for e in slots.get_table(WEEK)["1-4"]] == ["u1", "u2"]

    slots.remove_slot(WEEK, 1, 4, "u1")
    assert slots.get_table(WEEK) == {"1-4": [{"userId": "u2", "userName": "Bob", "color": "#3b82f6"}]}

    slots.remove_slot(WEEK, 1, 4, "u2")
    assert "1-4" not in slots.get_table(WEEK)


def test_repeated_upsert_keeps_one_entry_with_latest_values(slots, bob):
    slots.upsert_slot(WEEK, 2, 2, bob.entry())
    slots.upsert_slot(WEEK, 2, 2, _entry("u1", "Ann"))
    slots.upsert_slot(WEEK, 2, 2, _entry("u1", "Annie", "#22c55e"))
    entries = slots.get_table(WEEK)["2-2"]
    assert entries == [
        {"userId": "u2", "userName": "Bob", "color": "#3b82f6"},
        {"userId": "u1", "userName": "Annie", "color": "#22c55e"},
    ]


def test_upsert_overwrites_in_place(slots, ann, bob):
    slots.upsert_slot(WEEK, 0, 0, ann.entry())
    slots.upsert_slot(WEEK, 0, 0, bob.entry())
    slots.upsert_slot(WEEK, 0, 0, _entry("u1", "Ann B"))
    assert [e["userName"] for e in slots.get_table(WEEK)["0-0"]] == ["Ann B", "Bob"]


def test_remove_absent_user_is_noop(slots, blobs, ann):
    slots.upsert_slot(WEEK, 3, 3, ann.entry())
    before = blobs.get(CALENDAR_KEY)
    assert slots.remove_slot(WEEK, 3, 3, "nobody") is False
    assert slots.remove_slot(WEEK, 5, 5, "u1") is False
    assert slots.remove_slot(OTHER_WEEK, 3, 3, "u1") is False
    assert blobs.get(CALENDAR_KEY) == before


def test_removing_last_entry_deletes_key(slots, ann):
    slots.upsert_slot(WEEK, 6, 17, ann.entry())
    assert slots.remove_slot(WEEK, 6, 17, "u1") is True
    table = slots.get_table(WEEK)
    assert "6-17" not in table
    assert all(entries for entries in table.values())


def test_mark_slot_dispatches_on_selected(slots, ann):
    slots.mark_slot(WEEK, 1, 1, ann.entry(), True)
    assert slots.is_marked(WEEK, 1, 1, "u1")
    slots.mark_slot(WEEK, 1, 1, ann.entry(), False)
    assert not slots.is_marked(WEEK, 1, 1, "u1")


def test_out_of_grid_coordinates_rejected(slots, ann):
    with pytest.raises(ValidationError):
        slots.upsert_slot(WEEK, 7, 0, ann.entry())
    assert slots.get_all() == {}


def test_weeks_are_independent(slots, ann):
    slots.upsert_slot(WEEK, 1, 1, ann.entry())
    slots.upsert_slot(OTHER_WEEK, 2, 2, ann.entry())
    assert set(slots.get_all()) == {WEEK, OTHER_WEEK}
    assert list(slots.get_table(WEEK)) == ["1-1"]
    assert list(slots.get_table(OTHER_WEEK)) == ["2-2"]


def test_put_table_replaces_whole_week(slots, ann, bob):
    slots.upsert_slot(WEEK, 1, 1, ann.entry())
    slots.upsert_slot(OTHER_WEEK, 1, 1, ann.entry())
    slots.put_table(WEEK, {"4-4": [bob.entry().to_json()], "5-5": []})
    assert slots.get_table(WEEK) == {"4-4": [{"userId": "u2", "userName": "Bob", "color": "#3b82f6"}]}
    assert list(slots.get_table(OTHER_WEEK)) == ["1-1"]


def test_normalize_table_dedupes_users_and_validates():
    table = normalize_table(
        {
            "0-0": [
                {"userId": "u1", "userName": "Ann", "color": "#ef4444"},
                {"userId": "u2", "userName": "Bob", "color": "#3b82f6"},
                {"userId": "u1", "userName": "Annie", "color": "#22c55e"},
            ],
            "0-1": [],
        }
    )
    assert table == {
        "0-0": [
            {"userId": "u1", "userName": "Annie", "color": "#22c55e"},
            {"userId": "u2", "userName": "Bob", "color": "#3b82f6"},
        ]
    }
    with pytest.raises(ValidationError):
        normalize_table({"9-9": []})
    with pytest.raises(ValidationError):
        normalize_table({"0-0": [{"userId": "u1"}]})
    with pytest.raises(ValidationError):
        normalize_table({"0-0": "u1"})


def test_put_table_folds_spellings_of_one_slot_into_its_canonical_key(slots, ann, bob):
    slots.put_table(
        WEEK,
        {
            "01-4": [ann.entry().to_json()],
            "1-4": [bob.entry().to_json(), {"userId": "u1", "userName": "Annie", "color": "#22c55e"}],
            "1-04": [],
        },
    )
    assert slots.get_table(WEEK) == {
        "1-4": [
            {"userId": "u1", "userName": "Annie", "color": "#22c55e"},
            {"userId": "u2", "userName": "Bob", "color": "#3b82f6"},
        ]
    }

    assert slots.remove_slot(WEEK, 1, 4, "u1") is True
    assert not slots.is_marked(WEEK, 1, 4, "u1")
    assert slots.get_table(WEEK) == {"1-4": [{"userId": "u2", "userName": "Bob", "color": "#3b82f6"}]}


def test_put_table_rejects_key_with_trailing_newline(slots, ann):
    with pytest.raises(ValidationError):
        slots.put_table(WEEK, {"1-4\n": [ann.entry().to_json()]})
    assert slots.get_table(WEEK) == {}


def test_cascade_rename_touches_only_that_user(slots, ann, bob):
    slots.upsert_slot(WEEK, 1, 4, ann.entry())
    slots.upsert_slot(WEEK, 1, 4, bob.entry())
    slots.upsert_slot(OTHER_WEEK, 0, 0, ann.entry())
    slots.upsert_slot(OTHER_WEEK, 0, 1, bob.entry())

    assert slots.cascade_rename("u1", "Annie", "#22c55e") == 2

    annie = {"userId": "u1", "userName": "Annie", "color": "#22c55e"}
    bob_json = bob.entry().to_json()
    assert slots.get_table(WEEK)["1-4"] == [annie, bob_json]
    assert slots.get_table(OTHER_WEEK) == {"0-0": [annie], "0-1": [bob_json]}


def test_cascade_rename_unknown_user_writes_nothing(slots, blobs, ann):
    slots.upsert_slot(WEEK, 1, 1, ann.entry())
    before = blobs.get(CALENDAR_KEY)
    assert slots.cascade_rename("ghost", "Ghost", "#000000") == 0
    assert blobs.get(CALENDAR_KEY) == before


def test_cascade_delete_leaves_no_entries_or_empty_lists(slots, blobs, ann, bob):
    slots.upsert_slot(WEEK, 1, 4, ann.entry())
    slots.upsert_slot(WEEK, 1, 4, bob.entry())
    slots.upsert_slot(WEEK, 2, 2, ann.entry())
    slots.upsert_slot(OTHER_WEEK, 3, 3, ann.entry())
    # stale empty list written by an older client
    calendar = blobs.get(CALENDAR_KEY)
    calendar[OTHER_WEEK]["6-6"] = []
    blobs.set(CALENDAR_KEY, calendar)

    assert slots.cascade_delete("u1") == 3

    for table in slots.get_all().values():
        for entries in table.values():
            assert entries
            assert all(e["userId"] != "u1" for e in entries)
    assert slots.get_table(WEEK) == {"1-4": [bob.entry().to_json()]}
    assert slots.get_table(OTHER_WEEK) == {}


def test_concurrent_marks_in_one_process_are_not_lost(slots):
    def mark(i: int) -> None:
        slots.upsert_slot(WEEK, i % 7, i % 18, _entry(f"user-{i}", f"User {i}"))

    threads = [threading.Thread(target=mark, args=(i,)) for i in range(40)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    total = sum(len(entries) for entries in slots.get_table(WEEK).values())
    assert total == 40
