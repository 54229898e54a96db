from __future__ import annotations
from typing import List, Tuple

from .errors import MalformedIdentifier
from .models import Identifier

"""
AIR identifier grammar.

    urn:air:{ecosystem}:{type}:{source}:{modelId}@{versionId}[:{layer}[.{format}]]

- segments are separated by ':' and counted before anything is indexed
- the id segment carries model and version ids around the first '@'
- anything after the id segment is the layer; text after its first '.' is the format
"""

DELIMITER = ":"
VERSION_SEP = "@"
FORMAT_SEP = "."
MIN_SEGMENTS = 6

# segment positions
ECOSYSTEM, TYPE, SOURCE, ID = 2, 3, 4, 5


def _tokenize(text: str) -> List[str]:
    parts = text.split(DELIMITER)
    if len(parts) < MIN_SEGMENTS:
        raise MalformedIdentifier(text, f"expected at least {MIN_SEGMENTS} ':'-separated segments, got {len(parts)}")
    return parts


def _parse_int(text: str, value: str, what: str) -> int:
    # isdigit() alone accepts non-ASCII digits like '²'
    if not value or not (value.isascii() and value.isdigit()):
        raise MalformedIdentifier(text, f"{what} {value!r} is not a non-negative integer")
    return int(value)


def _split_ids(text: str, segment: str) -> Tuple[int, int]:
    if VERSION_SEP not in segment:
        raise MalformedIdentifier(text, f"id segment {segment!r} has no '{VERSION_SEP}' version separator")
    model, version = segment.split(VERSION_SEP, 1)
    return _parse_int(text, model, "model id"), _parse_int(text, version, "version id")


def parse_urn(text: str) -> Identifier:
    parts = _tokenize(text)
    for idx, what in ((ECOSYSTEM, "ecosystem"), (TYPE, "type"), (SOURCE, "source")):
        if not parts[idx]:
            raise MalformedIdentifier(text, f"{what} segment is empty")
    model_id, version_id = _split_ids(text, parts[ID])

    layer = fmt = None
    if len(parts) > MIN_SEGMENTS:
        layer = DELIMITER.join(parts[MIN_SEGMENTS:])
        if FORMAT_SEP in layer:
            layer, fmt = layer.split(FORMAT_SEP, 1)

    return Identifier(
        urn=text,
        ecosystem=parts[ECOSYSTEM],
        resource_type=parts[TYPE],
        source=parts[SOURCE],
        model_id=model_id,
        version_id=version_id,
        layer=layer,
        format=fmt,
    )
