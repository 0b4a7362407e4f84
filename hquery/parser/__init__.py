"""Parser and serializer for the query language."""

from hquery.parser.parser import ParseError, Parser, compile_query
from hquery.parser.serializer import serialize

__all__ = ["ParseError", "Parser", "compile_query", "serialize"]
