"""Mapper de preguntas (cable <-> UI).

Las respuestas correctas viajan como letras `a`-`d` separadas por comas en
`correctOption`; la UI usa índices 0-3. Las cuatro opciones se conservan
siempre (aunque estén vacías) para que la ida y vuelta sea estable.
"""

from __future__ import annotations

from typing import Any

from core.domain.models import Question
from core.mappers._fields import as_opt_int, as_str, pick

OPTION_LETTERS = ("a", "b", "c", "d")


def _letters_to_indexes(value: object) -> list[int]:
    indexes: set[int] = set()
    for token in as_str(value).split(","):
        letter = token.strip().lower()
        if letter in OPTION_LETTERS:
            indexes.add(OPTION_LETTERS.index(letter))
    return sorted(indexes)


def map_question(data: object) -> Question:
    options = [as_str(pick(data, letter)) for letter in OPTION_LETTERS]
    indexes = _letters_to_indexes(pick(data, "correctOption"))
    return Question(
        id=as_opt_int(pick(data, "id")),
        text=as_str(pick(data, "questionText", "text")),
        options=options,
        correct_answer_index=indexes[0] if indexes else -1,
        correct_answer_indexes=indexes,
        explanation=as_str(pick(data, "explanation")),
        position=as_opt_int(pick(data, "position")),
    )


def question_payload(question: Question) -> dict[str, Any]:
    options = (list(question.options) + ["", "", "", ""])[:4]

    valid = sorted({i for i in question.correct_answer_indexes if 0 <= i < 4})
    if valid:
        correct = ",".join(OPTION_LETTERS[i] for i in valid)
    elif 0 <= question.correct_answer_index < 4:
        correct = OPTION_LETTERS[question.correct_answer_index]
    else:
        correct = ""

    payload: dict[str, Any] = {
        "QuestionText": question.text,
        "CorrectOption": correct,
        "QuestionType": len(valid) or 1,
        "Explanation": question.explanation,
        "A": options[0],
        "B": options[1],
        "C": options[2],
        "D": options[3],
    }
    if question.position is not None:
        payload["Position"] = question.position
    return payload

