from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

from .config import ConfigError, load_settings
from .llm import LLMError, connect
from .pipeline import Pipeline, PipelineError
from .sql.executor import Database, DatabaseError

log = logging.getLogger(__name__)

WELCOME = "Welcome to bikes data system! Ask away."
PROMPT = ">>> "
GOODBYE = "Ciao!"


def run_repl(pipeline: Any, stdin: TextIO, stdout: TextIO, stderr: TextIO) -> int:
    """
    Read questions line by line and print one answer (or error) per question.

    Returns the process exit status: 0 on end of input, 1 if reading stdin fails.
    """
    stdout.write(WELCOME + "\n" + PROMPT)
    stdout.flush()

    try:
        for raw in stdin:
            question = raw.strip()
            if not question:
                stdout.write(PROMPT)
                stdout.flush()
                continue

            try:
                answer = pipeline.answer(question)
            except PipelineError as e:
                stdout.write(f"ERROR: {e}\n")
            except KeyboardInterrupt:
                pipeline.cancel()
                stdout.write("\nERROR: interrupted\n")
            else:
                stdout.write(answer + "\n")
            stdout.write(PROMPT)
            stdout.flush()
    except KeyboardInterrupt:
        pass
    except (OSError, UnicodeDecodeError) as e:
        stderr.write(f"error: scan: {e}\n")
        return 1

    stdout.write("\n" + GOODBYE + "\n")
    stdout.flush()
    return 0


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(stream=sys.stdout, level=logging.DEBUG, format="level=%(levelname)s logger=%(name)s msg=%(message)s")
    else:
        logging.basicConfig(stream=sys.stderr, level=logging.WARNING)
    # Keep HTTP client chatter out of the trace
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def main() -> int:
    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"error: config: {e}", file=sys.stderr)
        return 1

    _configure_logging(settings.debug)

    try:
        llm = connect(settings)
    except LLMError as e:
        print(f"error: connect: {e}", file=sys.stderr)
        return 1

    try:
        db = Database.open(settings.db_file)
    except DatabaseError as e:
        print(f"error: open db: {e}", file=sys.stderr)
        return 1

    with db:
        pipeline = Pipeline.from_settings(settings, llm, db, debug_sink=sys.stdout)
        log.debug("ready: db=%s dialect=%s", db.path, settings.dialect)
        return run_repl(pipeline, sys.stdin, sys.stdout, sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
