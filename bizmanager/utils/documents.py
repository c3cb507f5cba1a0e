"""Helpers for moving between MongoDB documents and models."""
import logging
from typing import Callable, Iterable, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError


logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_object_id(value: str, label: str) -> ObjectId:
    """
    Parse a string ID coming from a request.

    Raises:
        ValueError: If the value is not a valid ObjectId
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValueError(f"Invalid {label} ID format")


def convert_all(docs: Iterable[dict], convert: Callable[[dict], T], kind: str) -> list[T]:
    """
    Convert documents one by one, leaving out the ones that cannot be read.

    A malformed document is logged and skipped instead of failing the whole
    listing.
    """
    models = []
    for doc in docs:
        try:
            models.append(convert(doc))
        except (KeyError, TypeError, ValidationError) as exc:
            logger.warning("Skipping malformed %s %s: %s", kind, doc.get("_id"), exc)
    return models
