"""Editor intention that rewrites a lambda expression as a closure literal."""
from __future__ import annotations

import logging

from lark import Tree

from .closure_text import closure_text
from .document import Document
from .messages import message
from .psi import find_lambdas

logger = logging.getLogger(__name__)


class ConvertLambdaToClosureAction:
    """
    Offered on a lambda, invoked later.

    Only a pointer to the lambda is kept between offer and invoke; the node
    is re-resolved on invoke and the action does nothing if it went stale or
    has no body.
    """

    start_in_write_action = True

    def __init__(self, document: Document, lambda_tree: Tree):
        self._document = document
        self._pointer = document.pointer(lambda_tree)

    @property
    def text(self) -> str:
        return self.family_name

    @property
    def family_name(self) -> str:
        return message("action.convert.lambda.to.closure")

    def is_available(self) -> bool:
        return self._document.resolve(self._pointer) is not None

    def invoke(self) -> bool:
        """Convert the lambda; False when there was nothing to do."""
        lam = self._document.resolve(self._pointer)
        if lam is None:
            return False

        text = closure_text(lam)
        if text is None:
            logger.debug("lambda at path %s has no body", self._pointer.path)
            return False

        self._document.replace_with_parsed_text(lam, text)
        return True


def convert_all(document: Document) -> int:
    """Convert every lambda that has a body; returns how many were converted."""
    converted = 0
    while True:
        for node in find_lambdas(document.tree):
            if ConvertLambdaToClosureAction(document, node).invoke():
                converted += 1
                break
        else:
            return converted
