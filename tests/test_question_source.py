import pytest

from ielts_trainer.exceptions import QuestionSourceError, RecordValidationError
from ielts_trainer.services.question_source import (
    RANDOM_QUESTIONS_PROCEDURE, QuestionSource, build_rpc_params,
)

from conftest import make_question_row


@pytest.mark.parametrize("difficulty", ["easy", "medium", "hard", None])
def test_mixed_never_filters_difficulty(difficulty):
    params = build_rpc_params("mixed", difficulty)
    assert params["p_difficulty"] is None
    assert params["p_category"] == "mixed"


def test_other_categories_keep_difficulty():
    assert build_rpc_params("writing", "hard", limit=1) == {
        "p_category": "writing",
        "p_difficulty": "hard",
        "p_limit": 1,
    }


def test_fetch_calls_procedure_with_limit_one(fake_client):
    row = make_question_row()
    fake_client.rpc_rows = [row]

    questions = QuestionSource(fake_client).fetch("reading", "easy")

    assert fake_client.rpc_calls == [
        (RANDOM_QUESTIONS_PROCEDURE, {"p_category": "reading", "p_difficulty": "easy", "p_limit": 1})
    ]
    assert len(questions) == 1
    assert questions[0].id == row["id"]


def test_fetch_empty_result_is_not_an_error(fake_client):
    assert QuestionSource(fake_client).fetch("writing", "hard") == []


def test_fetch_store_failure_raises_source_error(fake_client):
    fake_client.fail_on.add("rpc")
    with pytest.raises(QuestionSourceError):
        QuestionSource(fake_client).fetch("reading", "easy")


def test_fetch_malformed_row_raises_validation_error(fake_client):
    fake_client.rpc_rows = [{"id": "not-a-uuid", "type": "essay"}]
    with pytest.raises(RecordValidationError):
        QuestionSource(fake_client).fetch("reading", "easy")
