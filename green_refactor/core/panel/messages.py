"""
Messages posted by the report view to the host.

Closed set of commands; each carries the optimized code captured when the
report was rendered and the revision of that render.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class ShowDiff:
    code: str
    revision: Optional[int] = None

    command = "showDiff"


@dataclass(frozen=True)
class ApplyFix:
    code: str
    revision: Optional[int] = None

    command = "applyFix"


PanelMessage = Union[ShowDiff, ApplyFix]

_COMMANDS = {
    ShowDiff.command: ShowDiff,
    ApplyFix.command: ApplyFix,
}


def parse_message(payload: Dict[str, Any]) -> PanelMessage:
    """
    {"command": "showDiff" | "applyFix", "code": str, "revision"?: int}
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Panel message must be an object, got {type(payload).__name__}")

    command = payload.get("command")
    message_type = _COMMANDS.get(command)
    if message_type is None:
        raise ValueError(f"Unknown panel command: {command!r}")

    code = payload.get("code")
    if not isinstance(code, str):
        raise ValueError(f"'{command}' requires a string 'code' payload")

    revision = payload.get("revision")
    if revision is not None and (isinstance(revision, bool) or not isinstance(revision, int)):
        raise ValueError(f"Invalid revision: {revision!r}")

    return message_type(code=code, revision=revision)


def to_payload(message: PanelMessage) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"command": message.command, "code": message.code}
    if message.revision is not None:
        payload["revision"] = message.revision
    return payload
