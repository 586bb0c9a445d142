import pytest

from app.personality import (
    QUESTION_BANK,
    TYPE_PROFILES,
    AnswerSet,
    Choice,
    Dimension,
    IncompleteAnswersError,
    InvalidIndexError,
    Question,
    QuizState,
    UnknownTypeCodeError,
    all_type_codes,
    answer,
    classify,
    go_to,
    learning_style_for,
    lookup,
)


def _answers(*choices):
    answers = AnswerSet(len(choices))
    for i, c in enumerate(choices):
        answers.record_answer(i, c)
    return answers


def _q(dim):
    return Question(dim, "?", "a", "b")


# --- Answer collector ---

def test_record_answer_overwrites():
    answers = AnswerSet(2)
    answers.record_answer(0, "A")
    answers.record_answer(0, "B")
    assert answers[0] is Choice.B
    assert len(answers) == 1


def test_is_complete_only_when_every_index_answered():
    answers = AnswerSet(3)
    answers.record_answer(0, "A")
    answers.record_answer(2, "B")
    assert not answers.is_complete()
    assert answers.missing() == [1]
    answers.record_answer(1, "a")
    assert answers.is_complete()


@pytest.mark.parametrize("index", [-1, 8, 100])
def test_out_of_range_index_rejected(index):
    answers = AnswerSet(len(QUESTION_BANK))
    with pytest.raises(InvalidIndexError):
        answers.record_answer(index, "A")
    assert len(answers) == 0


def test_invalid_choice_rejected():
    with pytest.raises(ValueError):
        AnswerSet(1).record_answer(0, "C")


def test_answer_transition_returns_new_state():
    state = QuizState.start()
    nxt = answer(state, "A")
    assert state.cursor == 0 and len(state.answers) == 0
    assert nxt.cursor == 1 and nxt.answers[0] is Choice.A


def test_answer_cursor_stops_at_last_question():
    state = QuizState.start()
    for _ in range(len(QUESTION_BANK)):
        state = answer(state, "B")
    assert state.cursor == len(QUESTION_BANK) - 1
    assert state.is_complete


def test_revisiting_a_question_overwrites_it():
    state = QuizState.start()
    state = answer(state, "A")
    state = answer(state, "A")
    state = go_to(state, 0)
    state = answer(state, "B")
    assert state.answers[0] is Choice.B
    assert state.cursor == 1
    with pytest.raises(InvalidIndexError):
        go_to(state, len(QUESTION_BANK))


# --- Classifier ---

def test_all_a_is_estj():
    assert classify(QUESTION_BANK, _answers(*"A" * 8)) == "ESTJ"


def test_all_b_is_infp():
    assert classify(QUESTION_BANK, _answers(*"B" * 8)) == "INFP"


def test_single_tie_resolves_to_first_letter():
    # bank order is EI SN TF JP EI SN TF JP
    answers = _answers("A", "B", "A", "B", "B", "B", "A", "B")
    assert classify(QUESTION_BANK, answers) == "ENTP"


@pytest.mark.parametrize("dim", list(Dimension))
def test_tie_break_per_dimension(dim):
    questions = [_q(dim), _q(dim)]
    code = classify(questions, {0: "A", 1: "B"})
    position = [Dimension.EI, Dimension.SN, Dimension.TF, Dimension.JP].index(dim)
    assert code[position] == dim.first
    # dimensions with no questions are 0-0 ties as well
    assert code == "ESTJ"


def test_classify_is_deterministic():
    answers = _answers("A", "B", "B", "A", "B", "A", "A", "B")
    assert classify(QUESTION_BANK, answers) == classify(QUESTION_BANK, answers)


def test_adding_a_where_a_leads_keeps_letter():
    questions = [_q(Dimension.EI)] * 3
    base = classify(questions, {0: "A", 1: "A", 2: "B"})
    assert base[0] == "E"
    questions = questions + [_q(Dimension.EI)]
    assert classify(questions, {0: "A", 1: "A", 2: "B", 3: "A"})[0] == "E"


def test_b_majority_wins():
    questions = [_q(Dimension.TF)] * 3
    assert classify(questions, {0: "A", 1: "B", 2: "B"})[2] == "F"


def test_incomplete_answers_rejected():
    answers = AnswerSet(len(QUESTION_BANK))
    answers.record_answer(0, "A")
    with pytest.raises(IncompleteAnswersError) as exc:
        classify(QUESTION_BANK, answers)
    assert exc.value.missing == list(range(1, 8))


def test_answer_set_size_must_match_bank():
    with pytest.raises(IncompleteAnswersError):
        classify(QUESTION_BANK[:4], _answers(*"A" * 8))


# --- Type lookup ---

def test_table_covers_every_code():
    codes = all_type_codes()
    assert len(codes) == 16
    for code in codes:
        profile = lookup(code)
        assert profile.name and profile.description
    assert set(codes) == set(TYPE_PROFILES)


def test_lookup_istj():
    assert lookup("ISTJ").name == "The Inspector"
    assert lookup("ISTJ").description


@pytest.mark.parametrize("code", ["ZZZZ", "istj", "", "ESTJX"])
def test_lookup_unknown(code):
    with pytest.raises(UnknownTypeCodeError):
        lookup(code)


def test_learning_style():
    assert learning_style_for("ISTJ") == "Kinesthetic"
    assert learning_style_for("INFP") == "Visual"
    assert learning_style_for(None) == "Visual"
