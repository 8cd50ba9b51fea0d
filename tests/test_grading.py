from ielts_trainer.services.grading_service import GradingService, grading_service


def test_exact_match_is_correct():
    assert grading_service.is_correct("Paris", "Paris")


def test_trailing_space_and_case_are_ignored():
    assert grading_service.is_correct("Paris ", "Paris")
    assert grading_service.is_correct("paris", "Paris")
    assert grading_service.is_correct("  london ", "London")


def test_stored_answer_is_trimmed_too():
    assert grading_service.is_correct("Paris", "  PARIS\n")


def test_different_answer_is_wrong():
    assert not grading_service.is_correct("Rome", "Paris")


def test_inner_whitespace_still_matters():
    assert not grading_service.is_correct("New  York", "New York")


def test_option_text_graded_verbatim():
    option = "B) The author disagrees"
    assert grading_service.is_correct(option, option)
    assert not grading_service.is_correct("B", option)


def test_normalize():
    assert GradingService.normalize("  MiXeD Case\t") == "mixed case"
