"""Evaluation of compiled queries against in-memory records."""

from hquery.executor.environment import Environment
from hquery.executor.evaluator import Evaluator, Row, evaluate
from hquery.executor.executor import Executor, filter_records

__all__ = ["Environment", "Evaluator", "Executor", "Row", "evaluate", "filter_records"]
