"""Error catalog shared by the recorder, indexer and assembler."""
from __future__ import annotations

ERRORS = {
  "E_LOGIC": "Invalid recorder state for this operation",
  "E_STORAGE": "Frame log could not be created or written",
  "E_ARGUMENT": "Malformed input",
  "E_EXTERNAL_PROCESS": "Encoder process failed",
  "E_INVARIANT": "Frame log is corrupted",
  "E_PROTOCOL": "Unexpected response from the screencast source",
}


class ScreencastError(Exception):
    code = "E_SCREENCAST"

    def __init__(self, detail: str | None = None):
        self.detail = detail
        message = ERRORS.get(self.code, "Screencast error")
        super().__init__(f"{message}: {detail}" if detail else message)

    def to_dict(self) -> dict:
        out = {"code": self.code, "message": ERRORS.get(self.code, "")}
        if self.detail:
            out["detail"] = self.detail
        return out


class LogicError(ScreencastError, RuntimeError):
    code = "E_LOGIC"


class StorageError(ScreencastError, OSError):
    code = "E_STORAGE"


class ArgumentError(ScreencastError, ValueError):
    code = "E_ARGUMENT"


class InternalInvariantError(ScreencastError, ValueError):
    code = "E_INVARIANT"


class ProtocolError(ScreencastError):
    code = "E_PROTOCOL"


class ExternalProcessError(ScreencastError):
    code = "E_EXTERNAL_PROCESS"

    def __init__(self, detail: str | None = None, returncode: int | None = None):
        self.returncode = returncode
        super().__init__(detail)

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["returncode"] = self.returncode
        return out
