from __future__ import annotations


class TransformError(Exception):
    """
    Base class for split/merge failures.
    `kind` is a stable name the caller can switch on (API layer, logs).
    """

    kind = "TransformError"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "path": self.path}


class InputNotFound(TransformError):
    kind = "InputNotFound"


class NoSourceFiles(TransformError):
    kind = "NoSourceFiles"


class NoEntryPoint(TransformError):
    kind = "NoEntryPoint"


class MultipleEntryPoints(TransformError):
    kind = "MultipleEntryPoints"

    def __init__(self, message: str, candidates: list[str], path: str | None = None) -> None:
        super().__init__(message, path)
        self.candidates = candidates

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["candidates"] = list(self.candidates)
        return data


class WriteFailure(TransformError):
    kind = "WriteFailure"


class SourceLexError(TransformError):
    kind = "SourceLexError"


class SourceDecodeError(TransformError):
    kind = "SourceDecodeError"


class InvalidPolicy(TransformError):
    kind = "InvalidPolicy"
