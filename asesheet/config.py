# Job descriptions, one per command line verb

from pathlib import Path
from typing import List, Optional

import attr


@attr.define
class ConvertJob:
    input_path: Path
    output_path: Path


@attr.define
class AssembleJob:
    input_path: Path
    output_path: Path
    tags: List[str]
    frames_per_tag: int = 1
    columns: Optional[int] = None


@attr.define
class SeparateJob:
    input_path: Path
    output_dir: Path
    tags: List[str]


@attr.define
class InfoJob:
    input_path: Path
