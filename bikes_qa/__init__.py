# bikes_qa - ask questions about bike rides in plain English
"""
bikes_qa - a natural-language front-end to a DuckDB database of bike rides.
"""

__version__ = "0.1.0"

from .pipeline import Pipeline, PipelineError
from .repl import main, run_repl

__all__ = [
    "__version__",
    "Pipeline",
    "PipelineError",
    "main",
    "run_repl",
]
