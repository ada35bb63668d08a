# allocator.py
"""
Splits a section's required question count across the chapters chosen for it.

Every chapter has a cap (how many active questions of the section's type it
holds). The split starts even, gives the remainder to the earliest chapters,
clamps to the caps and then hands whatever the clamped chapters could not
take to the chapters that still have room.
"""
from typing import Dict, Iterable, List, Tuple


def distribute_questions(required: int, chapters: Iterable[Tuple[str, int]]) -> Dict[str, int]:
    """
    Returns {chapter_id: count}. Chapters that end up with 0 are left out.

    The total is min(required, sum of caps); no chapter goes over its cap.
    """
    chapters = list(chapters)
    if required < 0:
        raise ValueError("required question count cannot be negative")

    caps: Dict[str, int] = {}
    for chapter_id, available in chapters:
        if available < 0:
            raise ValueError(f"chapter {chapter_id} has a negative available count")
        if chapter_id in caps:
            raise ValueError(f"chapter {chapter_id} is listed more than once")
        caps[chapter_id] = available

    if required == 0 or not chapters:
        return {}

    base, extra = divmod(required, len(chapters))
    allocation: Dict[str, int] = {}
    shortfall = 0
    for index, (chapter_id, available) in enumerate(chapters):
        desired = base + (1 if index < extra else 0)
        allocation[chapter_id] = min(desired, available)
        shortfall += desired - allocation[chapter_id]

    while shortfall > 0:
        open_chapters = [cid for cid, _ in chapters if allocation[cid] < caps[cid]]
        if not open_chapters:
            break
        share, rest = divmod(shortfall, len(open_chapters))
        placed = 0
        for index, chapter_id in enumerate(open_chapters):
            want = share + (1 if index < rest else 0)
            give = min(want, caps[chapter_id] - allocation[chapter_id])
            allocation[chapter_id] += give
            placed += give
        shortfall -= placed

    return {cid: count for cid, count in allocation.items() if count > 0}


def default_chapter_count(available: int, required: int, configured: int) -> int:
    """Count a chapter starts with when it is ticked in the chapter picker."""
    remaining = max(0, required - configured)
    count = min(available, remaining) if remaining > 0 else available
    return max(1, count)


def clamp_chapter_count(count: int, available: int) -> int:
    # 0 means the chapter gets dropped from the section
    return max(0, min(count, available))


def allocation_to_configs(allocation: Dict[str, int]) -> List[dict]:
    return [
        {"chapter_id": chapter_id, "question_count": count}
        for chapter_id, count in allocation.items()
    ]
