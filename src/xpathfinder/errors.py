from __future__ import annotations


class XPathFinderError(Exception):
    """Base class for errors raised by xpathfinder."""


class EmptyChainError(XPathFinderError, ValueError):
    def __init__(self, message: str = "Ancestor chain is empty.") -> None:
        super().__init__(message)


class ChainIntegrityError(XPathFinderError, ValueError):
    pass


class QuerySyntaxError(XPathFinderError):
    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(f"Invalid XPath {expression!r}: {reason}")
        self.expression = expression
        self.reason = reason
