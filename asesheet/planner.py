# Sprite sheet layout: which frame goes in which cell

import logging
from typing import List, Optional, Sequence, Tuple

import attr

from asesheet.document import Document, Tag
from asesheet.errors import InsufficientFrames


@attr.frozen
class Placement:
    frame_index: int
    x: int
    y: int


@attr.frozen
class SheetPlan:
    """Grid of equally sized cells filled row by row.

    Cells past the last placement stay transparent. The sheet buffer needs
    byte_size bytes on top of the decoded source frames.
    """

    cell_size: Tuple[int, int]
    columns: int
    rows: int
    placements: Tuple[Placement, ...]

    @property
    def size(self) -> Tuple[int, int]:
        return (self.columns * self.cell_size[0], self.rows * self.cell_size[1])

    @property
    def byte_size(self) -> int:
        width, height = self.size
        return width * height * 4


def plan_sheet(
    document: Document,
    tags: Sequence[str],
    frames_per_tag: int = 1,
    columns: Optional[int] = None,
) -> SheetPlan:
    """Lay out frames_per_tag frames from the start of each tag, in order.

    Tile i shows frame tags[i // frames_per_tag].first + i % frames_per_tag
    at cell (i % columns, i // columns). Without columns, everything goes in
    one row.
    """

    if not tags:
        raise ValueError("No tags to lay out")
    if frames_per_tag < 1:
        raise ValueError(f"Bad frames per tag: {frames_per_tag}")
    if columns is not None and columns < 1:
        raise ValueError(f"Bad column count: {columns}")

    resolved: List[Tag] = [document.tag(name) for name in tags]
    for tag in resolved:
        if len(tag) < frames_per_tag:
            raise InsufficientFrames(
                tag.name, have=len(tag), need=frames_per_tag, path=document.path
            )

    count = len(resolved) * frames_per_tag
    columns = columns or count
    rows = (count + columns - 1) // columns
    width, height = document.canvas

    placements = tuple(
        Placement(
            frame_index=resolved[i // frames_per_tag].first + i % frames_per_tag,
            x=(i % columns) * width,
            y=(i // columns) * height,
        )
        for i in range(count)
    )

    plan = SheetPlan(
        cell_size=(width, height),
        columns=columns,
        rows=rows,
        placements=placements,
    )
    logging.debug(
        f"Sheet plan: {count} tiles in {columns}x{rows} cells"
        f" of {width}x{height}px ({plan.byte_size} bytes)"
    )
    return plan
