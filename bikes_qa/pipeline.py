"""
Question -> SQL -> rows -> CSV -> answer.

This module:
- Asks the LLM for SQL, runs it, renders the rows as CSV
- Asks the LLM again to phrase the result as an answer
- Contains NO input() or print()
- Keeps no state between questions
"""
from __future__ import annotations

import threading
from contextlib import closing
from typing import Any, List, Optional, TextIO

from .llm import LLMError, Message, system_message, user_message
from .prompts import (
    CHAT_ANSWER_PROMPT,
    CHAT_SQL_PROMPT,
    render_answer_prompt,
    render_sql_prompt,
)
from .sql.executor import DatabaseError
from .sql.safety import UnsafeSQLError, safe_select_only, strip_sql_fences
from .sql.serialize import SerializeError, rows_to_csv


class PipelineError(RuntimeError):
    """A pipeline step failed. str() reads "<tag>: <cause>"."""

    def __init__(self, tag: str, cause: Any):
        super().__init__(f"{tag}: {cause}")
        self.tag = tag
        self.cause = cause


class Pipeline:
    def __init__(
        self,
        llm: Any,
        db: Any,
        chat: bool = False,
        debug_sink: Optional[TextIO] = None,
        timeout: Optional[float] = None,
        select_only: bool = False,
    ):
        self.llm = llm
        self.db = db
        self.chat = chat
        self.debug_sink = debug_sink
        self.timeout = timeout
        self.select_only = select_only

    @classmethod
    def from_settings(cls, settings: Any, llm: Any, db: Any, debug_sink: Optional[TextIO] = None) -> "Pipeline":
        return cls(
            llm,
            db,
            chat=settings.chat,
            debug_sink=debug_sink if settings.debug else None,
            timeout=settings.turn_timeout,
            select_only=settings.select_only,
        )

    def answer(self, question: str) -> str:
        """Answer one question. Raises PipelineError tagged with the failing step."""
        expired = threading.Event()
        timer = None
        if self.timeout is not None:
            def _expire() -> None:
                expired.set()
                self.db.interrupt()

            timer = threading.Timer(self.timeout, _expire)
            timer.daemon = True
            timer.start()
        try:
            return self._run(question, expired)
        finally:
            if timer is not None:
                timer.cancel()

    def cancel(self) -> None:
        """Abort the in-flight database statement of the current turn."""
        self.db.interrupt()

    def _run(self, question: str, expired: threading.Event) -> str:
        if self.chat:
            messages: List[Message] = [system_message(CHAT_SQL_PROMPT), user_message(question)]
        else:
            messages = [user_message(render_sql_prompt(question))]

        try:
            sql = strip_sql_fences(self.llm.complete(messages))
        except LLMError as e:
            raise PipelineError("get SQL", e) from e

        self._trace("SQL", sql)

        if self.select_only:
            try:
                safe_select_only(sql)
            except UnsafeSQLError as e:
                raise PipelineError("query", e) from e

        try:
            cursor = self.db.query(sql)
        except DatabaseError as e:
            if expired.is_set():
                raise PipelineError("interrupted", "turn deadline exceeded") from e
            raise PipelineError("query", e) from e

        with closing(cursor):
            try:
                csv_text = rows_to_csv(cursor)
            except SerializeError as e:
                raise PipelineError("scan", e) from e

        self._trace("CSV", csv_text)

        if self.chat:
            messages = messages + [
                system_message("SQL:\n" + sql),
                system_message("Results csv:\n" + csv_text),
                system_message(CHAT_ANSWER_PROMPT),
            ]
        else:
            messages = [user_message(render_answer_prompt(question, sql, csv_text))]

        try:
            return self.llm.complete(messages)
        except LLMError as e:
            raise PipelineError("get answer", e) from e

    def _trace(self, label: str, text: str) -> None:
        if self.debug_sink is None:
            return
        self.debug_sink.write(f"{label}:\n{text}")
        if not text.endswith("\n"):
            self.debug_sink.write("\n")
        self.debug_sink.flush()
