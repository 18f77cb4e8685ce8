# src/rankladder/ladder/seeds.py

"""Seed shapes accepted when a season's ladder is bootstrapped."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from rankladder.ladder.rules import MAX_RANK

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderedNames:
    """Names listed best-first; each name's rank is its 1-based position."""

    names: Sequence[Any] = field(default_factory=tuple)


@dataclass(frozen=True)
class ExplicitEntries:
    """(name, rank) pairs written exactly as given, ties and gaps included."""

    entries: Sequence[tuple[Any, Any]] = field(default_factory=tuple)


Seeds = Union[OrderedNames, ExplicitEntries]


def clean_name(raw: Any) -> str:
    """Trim a raw name; None and non-strings are coerced like the wire format."""
    if raw is None:
        return ""
    return str(raw).strip()


def coerce_rank(raw: Any) -> int | None:
    """Return `raw` as an int in 1..MAX_RANK, or None when it isn't one."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        value = raw
    else:
        try:
            # Exact for integer strings; floats would round large values.
            value = int(str(raw).strip())
        except ValueError:
            try:
                number = float(raw)
            except (TypeError, ValueError):
                return None
            if not number.is_integer():
                return None
            value = int(number)
    if not 1 <= value <= MAX_RANK:
        return None
    return value


def iter_seed_ranks(seeds: Seeds) -> Iterator[tuple[str, int]]:
    """
    Yield the valid (name, rank) pairs of `seeds`, in input order.

    Items with a blank name or an unusable rank are skipped with a warning;
    a bad item never spoils the rest of the batch. In an ordered list a
    skipped blank still consumes its position.
    """
    if isinstance(seeds, OrderedNames):
        for position, raw_name in enumerate(seeds.names, start=1):
            name = clean_name(raw_name)
            if not name:
                logger.warning("Skipping blank seed name", extra={"position": position})
                continue
            yield name, position
        return

    for raw_name, raw_rank in seeds.entries:
        name = clean_name(raw_name)
        rank = coerce_rank(raw_rank)
        if not name or rank is None:
            logger.warning(
                "Skipping invalid seed entry",
                extra={"seed_name": name, "seed_rank": raw_rank},
            )
            continue
        yield name, rank
