from uuid import uuid4

import pytest

from ielts_trainer.client import Collection
from ielts_trainer.exceptions import CollectionRemovalError
from ielts_trainer.services.collection_service import CollectionView


def seed(client, collection, count):
    rows = []
    for i in range(count):
        row = client.add_question(question_text=f"Question {i}")
        client.add_entry(collection, row["id"])
        rows.append(row)
    client.writes.clear()
    return rows


def test_empty_collection_renders_empty_state(fake_client):
    view = CollectionView(fake_client, Collection.FAVORITES)
    assert view.load() == []
    rendered = view.render()
    assert rendered.empty is True
    assert rendered.count == 0
    assert rendered.items == []
    assert rendered.message


def test_load_lists_newest_first(fake_client):
    rows = seed(fake_client, Collection.WRONG_BOOK, 3)
    view = CollectionView(fake_client, Collection.WRONG_BOOK)
    questions = view.load()
    assert [q.id for q in questions] == [r["id"] for r in reversed(rows)]


def test_load_skips_deleted_questions(fake_client):
    rows = seed(fake_client, Collection.FAVORITES, 2)
    del fake_client.questions[rows[0]["id"]]
    questions = CollectionView(fake_client, Collection.FAVORITES).load()
    assert [q.id for q in questions] == [rows[1]["id"]]


def test_remove_drops_exactly_that_pair(fake_client):
    rows = seed(fake_client, Collection.FAVORITES, 3)
    view = CollectionView(fake_client, Collection.FAVORITES)
    view.load()

    assert view.remove(rows[1]["id"]) is True

    remaining = {r["id"] for r in rows} - {rows[1]["id"]}
    assert {q.id for q in view.questions} == remaining
    assert set(fake_client.entries[Collection.FAVORITES]) == remaining
    assert fake_client.writes == [("delete", Collection.FAVORITES, rows[1]["id"])]


def test_remove_does_not_touch_other_collection(fake_client):
    row = fake_client.add_question()
    fake_client.add_entry(Collection.FAVORITES, row["id"])
    fake_client.add_entry(Collection.WRONG_BOOK, row["id"])

    CollectionView(fake_client, Collection.WRONG_BOOK).remove(row["id"])

    assert fake_client.entries[Collection.FAVORITES] == [row["id"]]
    assert fake_client.entries[Collection.WRONG_BOOK] == []


def test_remove_failure_keeps_item(fake_client):
    rows = seed(fake_client, Collection.WRONG_BOOK, 2)
    view = CollectionView(fake_client, Collection.WRONG_BOOK)
    view.load()
    fake_client.fail_on.add("remove_entry")

    with pytest.raises(CollectionRemovalError):
        view.remove(rows[0]["id"])

    assert len(view.questions) == 2
    assert len(fake_client.entries[Collection.WRONG_BOOK]) == 2


def test_removing_last_item_gives_empty_state(fake_client):
    rows = seed(fake_client, Collection.FAVORITES, 1)
    view = CollectionView(fake_client, Collection.FAVORITES)
    view.load()
    view.remove(rows[0]["id"])
    assert view.render().empty is True


def test_only_one_item_expanded(fake_client):
    rows = seed(fake_client, Collection.FAVORITES, 2)
    view = CollectionView(fake_client, Collection.FAVORITES)
    view.load()

    view.toggle_expand(rows[0]["id"])
    view.toggle_expand(rows[1]["id"])
    items = {item.id: item for item in view.render().items}

    assert items[rows[1]["id"]].expanded is True
    assert items[rows[1]["id"]].correct_answer == "Paris"
    assert items[rows[0]["id"]].expanded is False
    assert items[rows[0]["id"]].correct_answer is None


def test_toggle_expand_twice_collapses(fake_client):
    rows = seed(fake_client, Collection.FAVORITES, 1)
    view = CollectionView(fake_client, Collection.FAVORITES)
    view.load()
    view.toggle_expand(rows[0]["id"])
    assert view.toggle_expand(rows[0]["id"]) is None
    assert view.render().expanded_id is None


def test_remove_reports_missing_pair(fake_client):
    seed(fake_client, Collection.FAVORITES, 1)
    view = CollectionView(fake_client, Collection.FAVORITES)
    view.load()

    assert view.remove(uuid4()) is False
    assert len(view.questions) == 1
