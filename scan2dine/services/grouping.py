"""
Menu Grouping

Partitions a flat item list into category buckets. The admin editor and
the public menu both render through these functions.
"""

from typing import Iterable

from scan2dine.schemas import MenuItem

OTHER_CATEGORY = "Other"


def category_of(item: MenuItem) -> str:
    """Bucket label of an item; missing or empty categories go to Other."""
    return item.category or OTHER_CATEGORY


def group_by_category(items: Iterable[MenuItem]) -> dict[str, list[MenuItem]]:
    """
    Group items by category.

    Buckets appear in the order their category is first seen, and items
    keep their input order inside a bucket. Every item lands in exactly
    one bucket.

    Example:
        >>> grouped = group_by_category(items)
        >>> list(grouped)
        ['Starters', 'Desserts', 'Other']
    """
    groups: dict[str, list[MenuItem]] = {}
    for item in items:
        groups.setdefault(category_of(item), []).append(item)
    return groups


def category_names(items: Iterable[MenuItem]) -> list[str]:
    """Distinct bucket labels in first-seen order."""
    return list(group_by_category(items))
