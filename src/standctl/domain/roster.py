"""Roster merge — fold per-stand buyer sources into one deduplicated list.

Pure functions, no I/O. The roster service gathers a
:class:`StandContribution` per stand and hands the full set to
:func:`merge_roster` once every fetch has settled.

INVARIANT: a stand id appears at most once in an entry's ``stand_ids``,
so ``stand_count == len(stand_ids)`` even when a buyer surfaces through
both the direct-buyer list and the link list of the same stand.
"""

from __future__ import annotations

import locale
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from standctl.domain.models import Buyer, RosterEntry, StandBuyerLink


@dataclass(frozen=True)
class StandContribution:
    """Everything one stand contributes to the roster."""

    stand_id: str
    buyers: list[Buyer] = field(default_factory=list)
    links: list[StandBuyerLink] = field(default_factory=list)


def _accumulate(
    found: dict[str, tuple[Buyer, list[str]]],
    buyer: Buyer | None,
    stand_id: str,
) -> None:
    if buyer is None or not buyer.id:
        return
    existing = found.get(buyer.id)
    if existing is None:
        found[buyer.id] = (buyer, [stand_id])
        return
    stand_ids = existing[1]
    if stand_id not in stand_ids:
        stand_ids.append(stand_id)


def roster_sort_key(entry: Buyer) -> tuple[str, str]:
    """Case-insensitive, locale-aware ``"<first> <last>"`` key; id breaks ties."""
    name = f"{entry.first_name or ''} {entry.last_name or ''}".casefold()
    return locale.strxfrm(name), entry.id or ""


def merge_roster(contributions: Iterable[StandContribution]) -> list[RosterEntry]:
    """Merge direct buyers and link buyers across stands.

    Direct buyers of a stand are processed before its links. The first
    record seen for a buyer id supplies the buyer fields; later sightings
    only add stand ids. Buyers without an id are skipped.
    """
    found: dict[str, tuple[Buyer, list[str]]] = {}
    for contribution in contributions:
        for buyer in contribution.buyers:
            _accumulate(found, buyer, contribution.stand_id)
        for link in contribution.links:
            _accumulate(found, link.buyer, contribution.stand_id)

    entries = [
        RosterEntry(**buyer.model_dump(), stand_ids=tuple(stand_ids))
        for buyer, stand_ids in found.values()
    ]
    entries.sort(key=roster_sort_key)
    return entries


def roster_lookup(entries: Iterable[Buyer]) -> dict[str, Buyer]:
    """Index buyers (or roster entries) by id."""
    return {entry.id: entry for entry in entries if entry.id}


def resolve_link_buyer(link: StandBuyerLink, lookup: Mapping[str, Buyer]) -> Buyer | None:
    """Resolve the buyer a link points at.

    The lookup table wins over the link's own snapshot, which may be stale.
    """
    ref = link.buyer_ref
    if ref and ref in lookup:
        return lookup[ref]
    return link.buyer
