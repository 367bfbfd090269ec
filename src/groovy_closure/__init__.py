"""Convert Groovy lambda expressions into equivalent closure literals."""

from .closure_text import closure_text
from .document import Document, LambdaPointer
from .intentions import ConvertLambdaToClosureAction, convert_all
from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError, parse_closure, parse_source
from .psi import BlockBody, ExpressionBody, LambdaNode, ParameterList, as_lambda, find_lambdas

__all__ = [
    "BlockBody",
    "ConvertLambdaToClosureAction",
    "Document",
    "ExpressionBody",
    "LambdaNode",
    "LambdaPointer",
    "LexError",
    "ParameterList",
    "ParseError",
    "as_lambda",
    "closure_text",
    "convert_all",
    "find_lambdas",
    "parse_closure",
    "parse_source",
    "tokenize",
]
