import re


# ``` with an optional language tag (```json, ```python, ```c++ ...)
_FENCE_RE = re.compile(r"```[\w+#.-]*")


def sanitize_response(raw: str) -> str:
    """
    Narrow a raw model response to its likely JSON object.

    - drops every ``` fence marker, wherever the model placed it
    - trims surrounding whitespace
    - keeps the span from the first '{' to the last '}' inclusive

    If either brace is missing the (fence-stripped, trimmed) text is
    returned as is; parsing will then fail cleanly.
    Does NOT parse or validate anything.
    """
    content = _FENCE_RE.sub("", raw).strip()

    first_open = content.find("{")
    last_close = content.rfind("}")

    if first_open != -1 and last_close != -1 and first_open < last_close:
        content = content[first_open:last_close + 1]

    return content
