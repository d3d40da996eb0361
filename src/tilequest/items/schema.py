import json
import logging
from functools import lru_cache
from importlib import resources
from typing import Any, Dict

from jsonschema import Draft202012Validator

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _item_validator() -> Draft202012Validator:
    """Build the validator for the packaged item schema once."""
    text = resources.files("tilequest.items").joinpath("item.schema.json").read_text(encoding="utf-8")
    schema = json.loads(text)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_item_dict(data: Dict[str, Any]) -> None:
    """
    Validate one catalog entry against the item schema.

    Every error is logged with the entry's id so a bad catalog points at the
    offending item; the first error is raised.

    Raises:
        jsonschema.ValidationError if the entry is invalid.
    """
    errors = sorted(_item_validator().iter_errors(data), key=lambda e: list(e.path))
    if errors:
        item_id = data.get("id", "<no id>") if isinstance(data, dict) else "<not a mapping>"
        for err in errors:
            logger.error("Catalog item %s: %s at %s", item_id, err.message, list(err.path) or "<root>")
        raise errors[0]


__all__ = [
    "validate_item_dict",
]
