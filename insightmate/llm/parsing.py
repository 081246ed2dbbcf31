import json
import re

_FENCED = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)
_BARE_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_BARE_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


def extract_json(text: str | None) -> dict | list | None:
    """Extract JSON from model output that may carry markdown fences or prose.

    Tries a direct parse, then a fenced code block, then the outermost
    object, then the outermost array.  Returns None when nothing parses.
    """
    if not text:
        return None

    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    fenced = _FENCED.search(text)
    if fenced:
        try:
            return json.loads(fenced.group(1).strip())
        except json.JSONDecodeError:
            pass

    for pattern in (_BARE_OBJECT, _BARE_ARRAY):
        match = pattern.search(text)
        if match:
            try:
                return json.loads(match.group())
            except json.JSONDecodeError:
                pass

    return None
