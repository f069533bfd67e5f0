"""Error taxonomy shared by the config model, restore engine and git layer.

Library code raises these with ``raise ... from exc`` so the CLI can print
the full cause chain.
"""


class WorkspacesError(Exception):
    """Base class for every error surfaced to the CLI."""


class ParseError(WorkspacesError):
    """The config source is malformed or violates the schema."""


class PathError(WorkspacesError):
    """A path could not be made absolute."""


class ConfigNotFoundError(PathError):
    """The config file does not exist."""


class NotFoundError(WorkspacesError):
    """A path does not name a declared workspace or project."""


class FsError(WorkspacesError):
    """Directory creation failed for a reason other than already-exists."""


class TransportError(WorkspacesError):
    """The git transport or the network failed."""


class AuthExhausted(WorkspacesError):
    """Every credential source was tried and none was accepted."""


def error_chain(exc: BaseException) -> str:
    """Render ``exc`` and its causes as ``outer: inner: root``."""
    parts = []
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current) or type(current).__name__
        if text not in parts:
            parts.append(text)
        if current.__cause__ is not None or current.__suppress_context__:
            current = current.__cause__
        else:
            current = current.__context__
    return ": ".join(parts)
