"""User-visible strings, looked up by key."""

from typing import Dict

MESSAGES: Dict[str, str] = {
    "action.convert.lambda.to.closure": "Convert to closure",
    "cli.no.lambda.at.offset": "No convertible lambda at offset %d",
    "cli.converted": "Converted %d lambda(s)",
}


def message(key: str, *args: object) -> str:
    """Message for key, %-formatted with args if any; raises KeyError for unknown keys."""
    text = MESSAGES[key]
    return text % args if args else text
