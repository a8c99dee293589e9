# payroll_api/common/parsing.py
from datetime import date, datetime
from typing import Optional


def parse_date(s) -> Optional[date]:
    if not s:
        return None
    if isinstance(s, datetime):
        return s.date()
    if isinstance(s, date):
        return s
    try:
        return date.fromisoformat(str(s)[:10])
    except ValueError:
        return None


def parse_id_list(raw) -> Optional[list[int]]:
    """[1, "2"] -> [1, 2]; None stays None; floats, bools and other junk -> ValueError."""
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)):
        raise ValueError("expected a list of ids")
    out = []
    for x in raw:
        if isinstance(x, int) and not isinstance(x, bool):
            out.append(x)
        elif isinstance(x, str) and x.strip().isdigit():
            out.append(int(x.strip()))
        else:
            raise ValueError(f"invalid id {x!r}")
    return out
