from typing import Protocol


class OracleError(Exception):
    """The generation oracle could not produce code for a request."""


class CodeOracle(Protocol):
    def generate(self, request: str) -> str: ...
