import json
import logging
from pathlib import Path
from typing import Any, Sequence, Tuple, Union

from pydantic import ValidationError

from .errors import ParseError, TranscriptNotFound
from .models import SyncFragment

logger = logging.getLogger(__name__)

def parse_fragments(data: Any) -> Tuple[SyncFragment, ...]:
    """
    Builds the fragment table from a decoded sync map (a JSON array of
    {src, tgt, begin, end} records). Source order is kept as-is; lookups
    assume it is ascending by `begin` and non-overlapping.
    """
    if not isinstance(data, list):
        raise ParseError(f"Sync map must be a list of fragments, got {type(data).__name__}")

    fragments = []
    for i, record in enumerate(data):
        if not isinstance(record, dict):
            raise ParseError(f"Fragment {i} is not an object")
        try:
            fragments.append(SyncFragment.model_validate(record))
        except ValidationError as e:
            raise ParseError(f"Invalid fragment {i}: {e}") from e

    _warn_if_unordered(fragments)
    return tuple(fragments)

def load_fragments(path: Union[str, Path]) -> Tuple[SyncFragment, ...]:
    path = Path(path)
    if not path.is_file():
        raise TranscriptNotFound(f"No sync map at {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ParseError(f"Sync map {path} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"Sync map {path} is not UTF-8: {e}") from e

    fragments = parse_fragments(data)
    logger.info(f"Loaded {len(fragments)} fragments from {path}")
    return fragments

def _warn_if_unordered(fragments: Sequence[SyncFragment]):
    for i in range(1, len(fragments)):
        prev, cur = fragments[i - 1], fragments[i]
        if cur.begin < prev.begin or cur.begin < prev.end:
            logger.warning(
                f"Fragments {i - 1} and {i} are out of order or overlap "
                f"([{prev.begin}, {prev.end}] / [{cur.begin}, {cur.end}]); lookups may miss"
            )
            return
