"""Merge-on-update: reconcile a partial update with the live record."""
from __future__ import annotations
import datetime
from dataclasses import replace
from typing import Optional

from ..models import DirectoryRecord, UpdateRequest
from ..validators import is_blank, is_future


def merge_update(
    current: DirectoryRecord,
    request: UpdateRequest,
    today: Optional[datetime.date] = None,
) -> DirectoryRecord:
    """Overlay the supplied fields of ``request`` onto ``current``.

    A blank string or a future (or missing) birthday counts as not supplied
    and keeps the current value. The id always comes from ``request.id``,
    which the caller sets from the path. Role is left untouched.
    """
    def pick(incoming: Optional[str], existing: Optional[str]) -> Optional[str]:
        return existing if is_blank(incoming) else incoming

    birthday = current.birthday
    if request.birthday is not None and not is_future(request.birthday, today):
        birthday = request.birthday

    return replace(
        current,
        id=request.id if request.id is not None else current.id,
        email=pick(request.email, current.email),
        birthday=birthday,
        first_name=pick(request.first_name, current.first_name),
        last_name=pick(request.last_name, current.last_name),
        password=pick(request.password, current.password),
    )
