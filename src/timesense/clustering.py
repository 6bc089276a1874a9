"""Fuzzy grouping of cosmetically different application names."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable, Optional

from .models import AppDurationMap, CanonicalGroup

SIMILARITY_THRESHOLD = 0.3

_FILE_SUFFIXES: tuple[str, ...] = (".app", ".exe", ".lnk", ".desktop")
_VENDOR_PREFIXES: tuple[str, ...] = ("microsoft ", "google ", "apple ")
_DECORATIONS: tuple[str, ...] = (".app", " (1)", " (2)", " - ", " — ")


def normalize_app_name(name: str) -> str:
    """Lower-case a name and drop launcher suffixes and vendor prefixes.

    ``"Microsoft Word.exe"`` and ``"word"`` both normalize to ``"word"``.
    """
    normalized = name.strip().lower()
    for suffix in _FILE_SUFFIXES:
        if normalized.endswith(suffix):
            normalized = normalized[: -len(suffix)].rstrip()
            break
    for prefix in _VENDOR_PREFIXES:
        if normalized.startswith(prefix):
            normalized = normalized[len(prefix):]
            break
    return normalized.strip()


def _strip_decorations(value: str) -> str:
    for decoration in _DECORATIONS:
        value = value.replace(decoration, "")
    return value


def levenshtein_distance(first: str, second: str) -> int:
    """Classic edit distance over code points, unit cost per edit."""
    if len(first) < len(second):
        first, second = second, first
    previous = list(range(len(second) + 1))
    for i, left in enumerate(first, start=1):
        current = [i]
        for j, right in enumerate(second, start=1):
            cost = 0 if left == right else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]


def are_similar_names(first: str, second: str) -> bool:
    """Decide whether two raw application names refer to the same app."""
    if first.lower() == second.lower():
        return True

    left = normalize_app_name(first)
    right = normalize_app_name(second)
    if left in right or right in left:
        return True

    left = _strip_decorations(left)
    right = _strip_decorations(right)
    if left == right:
        return True

    longest = max(len(left), len(right))
    if longest == 0:
        return True
    return levenshtein_distance(left, right) / longest < SIMILARITY_THRESHOLD


def _find_group(name: str, groups: Iterable[CanonicalGroup]) -> Optional[CanonicalGroup]:
    for group in groups:
        if are_similar_names(name, group.canonical_name):
            return group
    return None


def clustering_order(durations: AppDurationMap) -> list[tuple[str, timedelta]]:
    """Order in which names are offered to the clusterer: longest first, then by name."""
    return sorted(durations.items(), key=lambda item: (-item[1], item[0]))


def cluster_durations(durations: AppDurationMap) -> list[CanonicalGroup]:
    """Group near-duplicate names, largest total first.

    Assignment is first-match-wins against the canonical names chosen so far,
    so the visiting order decides membership; :func:`clustering_order` fixes it.
    """
    groups: list[CanonicalGroup] = []
    for name, duration in clustering_order(durations):
        group = _find_group(name, groups)
        if group is None:
            group = CanonicalGroup(canonical_name=name)
            groups.append(group)
        group.add(name, duration)
    return sorted(groups, key=lambda group: group.total_duration, reverse=True)
