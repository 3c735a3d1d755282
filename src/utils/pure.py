import dataclasses
import uuid
from typing import Any, List, Literal, Mapping, Optional, Sequence, Tuple, TypeVar

R = TypeVar("R")


def new_id(prefix: str) -> str:
    """Collision-resistant record id, e.g. 'm-3f2a...'."""
    return f"{prefix}-{uuid.uuid4().hex}"


def update_by_id(
    collection: Sequence[R], record_id: str, patch: Mapping[str, Any]
) -> Tuple[Tuple[R, ...], bool]:
    """
    Replace the record whose id matches with a shallow-merged copy.

    Returns (new collection, found). When nothing matches the collection is
    returned unchanged with found=False. Order is preserved.
    """
    found = False
    result = []
    for rec in collection:
        if not found and rec.id == record_id:
            rec = dataclasses.replace(rec, **patch)
            found = True
        result.append(rec)
    return tuple(result), found


def find_by_id(collection: Sequence[R], record_id: str) -> Optional[R]:
    return next((rec for rec in collection if rec.id == record_id), None)


def _cell(value: Any) -> str:
    # pipes and newlines would break the row
    return str(value).replace("|", "\\|").replace("\n", " ")


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[Any]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows; cells are converted with str().
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all left ('l').

    Returns:
        str: Markdown formatted table.
    """
    if not rows and not headers:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [_cell(h) for h in headers]
    rows = [[_cell(c) for c in row] for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["l"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])
