# The command line verbs, each reading one Aseprite file

import logging
from typing import List

from asesheet import compositor, document, encoder, planner
from asesheet.config import AssembleJob, ConvertJob, InfoJob, SeparateJob
from asesheet.errors import WrongFrameCount


def convert(job: ConvertJob) -> None:
    doc = document.open_document(job.input_path)
    if doc.frame_count != 1:
        raise WrongFrameCount(doc.path, doc.frame_count)
    encoder.encode_png(doc.frame(0), job.output_path)


def assemble(job: AssembleJob) -> None:
    doc = document.open_document(job.input_path)
    plan = planner.plan_sheet(
        doc,
        job.tags,
        frames_per_tag=job.frames_per_tag,
        columns=job.columns,
    )
    logging.debug(
        f"Assembling {len(plan.placements)} frames"
        f" ({plan.columns}x{plan.rows} cells)"
    )
    sheet = compositor.compose(plan, doc)
    encoder.encode_png(sheet, job.output_path)


def separate(job: SeparateJob) -> None:
    """Write the first frame of each tag as <output_dir>/<tag>.png.

    Stops at the first bad tag; files already written are left in place.
    """

    doc = document.open_document(job.input_path)
    for name in job.tags:
        tag = doc.tag(name)
        encoder.encode_png(doc.frame(tag.first), job.output_dir / f"{name}.png")


def info(job: InfoJob) -> str:
    doc = document.open_document(job.input_path)
    width, height = doc.canvas
    lines: List[str] = [
        f"{doc.path}: {width}x{height}px, {doc.frame_count} frame(s)"
    ]
    for tag in doc.tags:
        lines.append(f'  tag "{tag.name}": frames {tag.first}-{tag.last} ({len(tag)})')
    if not doc.tags:
        lines.append("  (no tags)")
    return "\n".join(lines)
