import logging
from pathlib import Path
from typing import Union

import PIL.Image  # type: ignore

from asesheet.errors import WriteError


def encode_png(image: PIL.Image.Image, path: Union[str, Path]) -> None:
    path = Path(path)
    logging.debug(f"Writing: {path} ({image.size[0]}x{image.size[1]}px)")
    try:
        image.save(path, format="PNG")
    except OSError as exc:
        raise WriteError(path, exc.strerror or exc) from exc
    except ValueError as exc:
        raise WriteError(path, exc) from exc
