import logging

import PIL.Image  # type: ignore

from asesheet.document import Document
from asesheet.planner import SheetPlan


def compose(plan: SheetPlan, document: Document) -> PIL.Image.Image:
    sheet = PIL.Image.new("RGBA", plan.size, (0, 0, 0, 0))
    for placement in plan.placements:
        frame = document.frame(placement.frame_index)
        logging.debug(
            f"Frame {placement.frame_index} -> ({placement.x},{placement.y})"
        )
        # No mask: every byte (alpha included) replaces what was there.
        sheet.paste(frame, box=(placement.x, placement.y))
    return sheet
