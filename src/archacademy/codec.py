"""JSON interchange encoding for lesson sections.

Every section is written as ``{"type": <SectionKind>, "data": {...}}``. The
decoder reads ``type`` first and dispatches through ``_CODECS``; an unknown
tag, a missing required field or a value outside its closed set raises
``DecodeError`` rather than falling back to a default.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from enum import StrEnum
from typing import Any, TypeVar, cast

from .models import (
    CuriosityQA,
    LessonCuriosity,
    LessonDestination,
    LessonEnvironmentPrompt,
    LessonFillInBlanks,
    LessonFunFact,
    LessonMathVisual,
    LessonQuestion,
    LessonReading,
    LessonSection,
    MathVisualType,
    Science,
    SectionKind,
)

MAX_HINTS = 3

E = TypeVar("E", bound=StrEnum)


class DecodeError(ValueError):
    """Encoded section data is malformed or incomplete."""


def _required(data: dict[str, Any], key: str) -> object:
    if key not in data or data[key] is None:
        raise DecodeError(f"Missing required field '{key}'.")
    return data[key]


def _str(data: dict[str, Any], key: str) -> str:
    value = _required(data, key)
    if not isinstance(value, str):
        raise DecodeError(f"Field '{key}' must be a string.")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    if data.get(key) is None:
        return None
    return _str(data, key)


def _int(data: dict[str, Any], key: str) -> int:
    value = _required(data, key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Field '{key}' must be an integer.")
    return value


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    value = _required(data, key)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise DecodeError(f"Field '{key}' must be a list of strings.")
    return list(cast(list[str], value))


def _enum(enum_type: type[E], data: dict[str, Any], key: str) -> E:
    raw = _str(data, key)
    try:
        return enum_type(raw)
    except ValueError as exc:
        raise DecodeError(f"Field '{key}' has unknown {enum_type.__name__} value '{raw}'.") from exc


def _optional_enum(enum_type: type[E], data: dict[str, Any], key: str) -> E | None:
    if data.get(key) is None:
        return None
    return _enum(enum_type, data, key)


def _compact(payload: dict[str, object]) -> dict[str, object]:
    """Drop keys whose value is None so optional fields are written as absent."""
    return {key: value for key, value in payload.items() if value is not None}


# -- per-kind payload codecs -------------------------------------------------


def _encode_reading(section: LessonReading) -> dict[str, object]:
    return _compact(
        {
            "title": section.title,
            "body": section.body,
            "science": section.science,
            "illustration_icon": section.illustration_icon,
            "caption": section.caption,
        }
    )


def _decode_reading(data: dict[str, Any]) -> LessonReading:
    return LessonReading(
        title=_optional_str(data, "title"),
        body=_str(data, "body"),
        science=_optional_enum(Science, data, "science"),
        illustration_icon=_optional_str(data, "illustration_icon"),
        caption=_optional_str(data, "caption"),
    )


def _encode_fun_fact(section: LessonFunFact) -> dict[str, object]:
    return {"text": section.text}


def _decode_fun_fact(data: dict[str, Any]) -> LessonFunFact:
    return LessonFunFact(text=_str(data, "text"))


def _encode_question(section: LessonQuestion) -> dict[str, object]:
    return _compact(
        {
            "question": section.question,
            "options": list(section.options),
            "correct_index": section.correct_index,
            "explanation": section.explanation,
            "science": section.science,
            "hints": list(section.hints) if section.hints is not None else None,
        }
    )


def _decode_question(data: dict[str, Any]) -> LessonQuestion:
    options = _str_list(data, "options")
    if len(options) < 2:
        raise DecodeError("Question needs at least two options.")
    correct_index = _int(data, "correct_index")
    if not 0 <= correct_index < len(options):
        raise DecodeError(f"Question correct_index {correct_index} is out of range.")
    hints = _str_list(data, "hints") if data.get("hints") is not None else None
    if hints is not None and len(hints) > MAX_HINTS:
        raise DecodeError(f"Question has more than {MAX_HINTS} hints.")
    return LessonQuestion(
        question=_str(data, "question"),
        options=options,
        correct_index=correct_index,
        explanation=_str(data, "explanation"),
        science=_enum(Science, data, "science"),
        hints=hints,
    )


def _encode_fill_in_blanks(section: LessonFillInBlanks) -> dict[str, object]:
    return _compact(
        {
            "title": section.title,
            "text": section.text,
            "distractors": list(section.distractors),
            "science": section.science,
        }
    )


def _decode_fill_in_blanks(data: dict[str, Any]) -> LessonFillInBlanks:
    return LessonFillInBlanks(
        title=_optional_str(data, "title"),
        text=_str(data, "text"),
        distractors=_str_list(data, "distractors"),
        science=_optional_enum(Science, data, "science"),
    )


def _encode_environment_prompt(section: LessonEnvironmentPrompt) -> dict[str, object]:
    return {
        "destination": section.destination,
        "title": section.title,
        "description": section.description,
        "icon": section.icon,
    }


def _decode_environment_prompt(data: dict[str, Any]) -> LessonEnvironmentPrompt:
    return LessonEnvironmentPrompt(
        destination=_enum(LessonDestination, data, "destination"),
        title=_str(data, "title"),
        description=_str(data, "description"),
        icon=_str(data, "icon"),
    )


def _encode_curiosity(section: LessonCuriosity) -> dict[str, object]:
    return {"questions": [{"question": qa.question, "answer": qa.answer} for qa in section.questions]}


def _decode_curiosity(data: dict[str, Any]) -> LessonCuriosity:
    raw = _required(data, "questions")
    if not isinstance(raw, list):
        raise DecodeError("Field 'questions' must be a list.")
    pairs: list[CuriosityQA] = []
    for item in cast(list[object], raw):
        if not isinstance(item, dict):
            raise DecodeError("Curiosity entries must be objects.")
        entry = cast(dict[str, Any], item)
        pairs.append(CuriosityQA(question=_str(entry, "question"), answer=_str(entry, "answer")))
    return LessonCuriosity(questions=pairs)


def _encode_math_visual(section: LessonMathVisual) -> dict[str, object]:
    return {
        "type": section.type,
        "title": section.title,
        "science": section.science,
        "total_steps": section.total_steps,
        "caption": section.caption,
    }


def _decode_math_visual(data: dict[str, Any]) -> LessonMathVisual:
    total_steps = _int(data, "total_steps")
    if total_steps <= 0:
        raise DecodeError("Math visual total_steps must be positive.")
    return LessonMathVisual(
        type=_enum(MathVisualType, data, "type"),
        title=_str(data, "title"),
        science=_enum(Science, data, "science"),
        total_steps=total_steps,
        caption=_str(data, "caption"),
    )


_Encoder = Callable[[Any], dict[str, object]]
_Decoder = Callable[[dict[str, Any]], LessonSection]

_CODECS: dict[SectionKind, tuple[type, _Encoder, _Decoder]] = {
    SectionKind.READING: (LessonReading, _encode_reading, _decode_reading),
    SectionKind.FUN_FACT: (LessonFunFact, _encode_fun_fact, _decode_fun_fact),
    SectionKind.QUESTION: (LessonQuestion, _encode_question, _decode_question),
    SectionKind.FILL_IN_BLANKS: (LessonFillInBlanks, _encode_fill_in_blanks, _decode_fill_in_blanks),
    SectionKind.ENVIRONMENT_PROMPT: (
        LessonEnvironmentPrompt,
        _encode_environment_prompt,
        _decode_environment_prompt,
    ),
    SectionKind.CURIOSITY: (LessonCuriosity, _encode_curiosity, _decode_curiosity),
    SectionKind.MATH_VISUAL: (LessonMathVisual, _encode_math_visual, _decode_math_visual),
}


def section_to_dict(section: LessonSection) -> dict[str, object]:
    """Return the tagged ``{"type", "data"}`` form of one section."""
    payload_type, encoder, _ = _CODECS[section.kind]
    if not isinstance(section, payload_type):
        raise TypeError(f"Section {section!r} does not match its kind '{section.kind}'.")
    return {"type": str(section.kind), "data": encoder(section)}


def section_from_dict(raw: object) -> LessonSection:
    """Rebuild one section from its tagged form."""
    if not isinstance(raw, dict):
        raise DecodeError("Encoded section must be an object.")
    item = cast(dict[str, Any], raw)
    tag = item.get("type")
    if not isinstance(tag, str):
        raise DecodeError("Encoded section is missing its 'type' tag.")
    try:
        kind = SectionKind(tag)
    except ValueError as exc:
        raise DecodeError(f"Unknown section type '{tag}'.") from exc
    data = item.get("data")
    if not isinstance(data, dict):
        raise DecodeError(f"Section '{tag}' is missing its 'data' object.")
    _, _, decoder = _CODECS[kind]
    return decoder(cast(dict[str, Any], data))


def encode_sections(sections: list[LessonSection]) -> bytes:
    """Encode sections as compact UTF-8 JSON, preserving order."""
    payload = [section_to_dict(section) for section in sections]
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode_sections(encoded: bytes | str) -> list[LessonSection]:
    """Decode sections written by `encode_sections`."""
    try:
        raw: object = json.loads(encoded)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"Encoded sections are not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise DecodeError("Encoded sections root must be a JSON array.")
    return [section_from_dict(item) for item in cast(list[object], raw)]
