"""Assign bullet points to taxonomy categories and group them."""

from typing import Dict, FrozenSet, Iterable, List, Tuple

from commitresume.models.resume import BulletGroup, BulletPoint, Category

# Checked in order; the first keyword set containing the verb wins.
CATEGORY_RULES: Tuple[Tuple[FrozenSet[str], Category], ...] = (
    (frozenset({"developed", "built", "created", "implemented", "designed"}), Category.DEVELOPMENT),
    (frozenset({"optimized", "improved", "enhanced", "refactored"}), Category.PERFORMANCE),
    (frozenset({"fixed", "resolved", "debugged", "corrected"}), Category.PROBLEM_SOLVING),
    (frozenset({"integrated", "configured", "deployed", "established"}), Category.INTEGRATION),
    (frozenset({"tested", "validated", "automated"}), Category.QUALITY),
)


def categorize(bullet: BulletPoint) -> Category:
    """Map a bullet point to a category by its action verb."""
    verb = bullet.action_verb.strip().lower()
    for keywords, category in CATEGORY_RULES:
        if verb in keywords:
            return category
    return Category.GENERAL


def group_bullet_points(bullet_points: Iterable[BulletPoint]) -> List[BulletGroup]:
    """Bucket bullet points by category, largest bucket first.

    Bullets keep their encounter order inside a bucket and buckets with equal
    counts keep the order in which they were first seen.
    """
    buckets: Dict[Category, List[BulletPoint]] = {}
    for bullet in bullet_points:
        buckets.setdefault(categorize(bullet), []).append(bullet)

    groups = [
        BulletGroup(category=category, bullet_points=bullets, count=len(bullets))
        for category, bullets in buckets.items()
    ]
    return sorted(groups, key=lambda group: group.count, reverse=True)
