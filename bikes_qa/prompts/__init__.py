"""
Prompt templates for the two LLM calls of a turn.

The single-prompt templates carry positional slots:
- SQL_PROMPT:    {0} = question
- ANSWER_PROMPT: {0} = question, {1} = SQL, {2} = CSV results

Changing the slot order is a breaking change and must ship together with
the .txt file that uses it.

The chat templates have no slots; they are sent as system messages around
the user's question (see bikes_qa.pipeline).
"""
from __future__ import annotations

from pathlib import Path

PROMPTS_DIR = Path(__file__).resolve().parent


def _load(name: str) -> str:
    return (PROMPTS_DIR / name).read_text(encoding="utf-8")


SQL_PROMPT = _load("sql.txt")
ANSWER_PROMPT = _load("answer.txt")
CHAT_SQL_PROMPT = _load("chat_sql.txt").strip()
CHAT_ANSWER_PROMPT = _load("chat_answer.txt").strip()


def render_sql_prompt(question: str) -> str:
    return SQL_PROMPT.format(question)


def render_answer_prompt(question: str, sql: str, csv_text: str) -> str:
    return ANSWER_PROMPT.format(question, sql, csv_text)


__all__ = [
    "SQL_PROMPT",
    "ANSWER_PROMPT",
    "CHAT_SQL_PROMPT",
    "CHAT_ANSWER_PROMPT",
    "render_sql_prompt",
    "render_answer_prompt",
]
