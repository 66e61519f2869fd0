import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import attr
import PIL.Image  # type: ignore

import aseprite  # type: ignore

from asesheet.errors import LoadError, TagMissing

ASE_MAGIC = b"\xe0\xa5"  # little-endian 0xA5E0 at offset 4

NORMAL_LAYER = 0

LAYER_VISIBLE = 1
LAYER_BACKGROUND = 8
LAYER_REFERENCE = 64

HEADER_LAYER_OPACITY_VALID = 1

LINKED_CEL = 1
IMAGE_CELS = (0, 2)  # raw, zlib-compressed

CLEAR_PIXEL = bytes(4)


@attr.frozen
class Tag:
    """Named animation clip covering frames first..last inclusive."""

    name: str
    first: int
    last: int

    def __len__(self) -> int:
        return self.last - self.first + 1


@attr.frozen
class Layer:
    index: int
    name: str
    opacity: int
    blend_mode: int
    background: bool


class Document:
    """A parsed Aseprite file with frames flattened to RGBA on demand.

    Only normal layers that are visible (along with every enclosing group)
    and are not reference layers contribute to a frame. Flattened frames are
    cached; callers must not modify the returned images.
    """

    def __init__(self, path: Path, ase):
        self.path = path
        self._ase = ase
        self._cache: Dict[int, PIL.Image.Image] = {}

        header = ase.header
        if header.color_depth not in (8, 16, 32):
            raise LoadError(path, f"unsupported color depth {header.color_depth}")
        if not ase.frames:
            raise LoadError(path, "no frames")
        if header.width < 1 or header.height < 1:
            raise LoadError(path, f"bad canvas {header.width}x{header.height}")

        first_frame = ase.frames[0]
        self._layers = _drawn_layers(first_frame)
        self._palette = _palette_table(first_frame)
        self._tags = _tags(first_frame)
        for tag in self._tags:
            if not 0 <= tag.first <= tag.last < len(ase.frames):
                raise LoadError(
                    path,
                    f'tag "{tag.name}" covers frames {tag.first}-{tag.last}'
                    f" of {len(ase.frames)}",
                )

    @property
    def canvas(self) -> Tuple[int, int]:
        return (self._ase.header.width, self._ase.header.height)

    @property
    def frame_count(self) -> int:
        return len(self._ase.frames)

    @property
    def tags(self) -> Tuple[Tag, ...]:
        return self._tags

    def tag(self, name: str) -> Tag:
        # Duplicate names resolve to the first tag in the file.
        for tag in self._tags:
            if tag.name == name:
                return tag
        raise TagMissing(name, self.path)

    def frame(self, index: int) -> PIL.Image.Image:
        if not 0 <= index < self.frame_count:
            raise IndexError(f"Frame {index} not in 0-{self.frame_count - 1}")

        image = self._cache.get(index)
        if image is None:
            try:
                image = self._flatten(index)
            except (ValueError, IndexError, KeyError, TypeError) as exc:
                raise LoadError(
                    self.path, f"frame {index} can't be decoded ({exc})"
                ) from exc
            self._cache[index] = image
        return image

    def _flatten(self, index: int) -> PIL.Image.Image:
        logging.debug(f"Flattening frame {index} of {self.path}")
        image = PIL.Image.new("RGBA", self.canvas, (0, 0, 0, 0))
        cels = _cels_by_layer(self._ase.frames[index])
        for layer in self._layers:
            cel = cels.get(layer.index)
            if cel is not None and cel.cel_type == LINKED_CEL:
                linked = self._ase.frames[cel.data["link"]]
                cel = _cels_by_layer(linked).get(layer.index)
            if cel is None:
                continue
            if cel.cel_type not in IMAGE_CELS:
                logging.debug(f'Skipping cel type {cel.cel_type} in "{layer.name}"')
                continue
            if layer.blend_mode != 0:
                logging.debug(f"Blend mode {layer.blend_mode} drawn as normal")

            cel_image = self._cel_image(cel, layer)
            layer_image = PIL.Image.new("RGBA", self.canvas, (0, 0, 0, 0))
            layer_image.paste(cel_image, box=(cel.x_pos, cel.y_pos))
            image = PIL.Image.alpha_composite(image, layer_image)
        return image

    def _cel_image(self, cel, layer: Layer) -> PIL.Image.Image:
        size = (cel.data["width"], cel.data["height"])
        pixels = cel.data["data"]
        depth = self._ase.header.color_depth

        if depth == 32:
            image = PIL.Image.frombytes("RGBA", size, pixels[: size[0] * size[1] * 4])
        elif depth == 16:
            gray = PIL.Image.frombytes("LA", size, pixels[: size[0] * size[1] * 2])
            image = gray.convert("RGBA")
        else:
            table = list(self._palette)
            if not layer.background:
                table[self._ase.header.palette_mask] = CLEAR_PIXEL
            rgba = b"".join(table[i] for i in pixels[: size[0] * size[1]])
            image = PIL.Image.frombytes("RGBA", size, rgba)

        opacity = cel.opacity
        if self._ase.header.flags & HEADER_LAYER_OPACITY_VALID:
            opacity = opacity * layer.opacity // 255
        if opacity < 255:
            alpha = image.getchannel("A").point(lambda a: a * opacity // 255)
            image.putalpha(alpha)
        return image


def open_document(path: Union[str, Path]) -> Document:
    path = Path(path)
    logging.debug(f"Reading: {path}")
    try:
        with open(path, "rb") as ase_file:
            data = ase_file.read()
    except OSError as exc:
        raise LoadError(path, exc.strerror or exc) from exc

    if data[4:6] != ASE_MAGIC:
        raise LoadError(path, "not an Aseprite file")
    try:
        return Document(path, aseprite.AsepriteFile(data))
    except LoadError:
        raise
    except Exception as exc:
        raise LoadError(path, f"corrupt Aseprite file ({exc!r})") from exc


def _drawn_layers(frame) -> List[Layer]:
    layers: List[Layer] = []
    hidden_level: Optional[int] = None
    for chunk in frame.chunks:
        if not isinstance(chunk, aseprite.LayerChunk):
            continue

        level = chunk.layer_child_level
        if hidden_level is not None and level > hidden_level:
            continue  # inside a hidden group
        hidden_level = None

        if not (chunk.flags & LAYER_VISIBLE) or (chunk.flags & LAYER_REFERENCE):
            hidden_level = level
        elif chunk.layer_type == NORMAL_LAYER:
            layers.append(
                Layer(
                    index=chunk.layer_index,
                    name=chunk.name,
                    opacity=chunk.opacity,
                    blend_mode=chunk.blend_mode,
                    background=bool(chunk.flags & LAYER_BACKGROUND),
                )
            )
    return layers


def _cels_by_layer(frame) -> Dict[int, Any]:
    return {
        chunk.layer_index: chunk
        for chunk in frame.chunks
        if isinstance(chunk, aseprite.CelChunk)
    }


def _palette_table(frame) -> List[bytes]:
    table = [CLEAR_PIXEL] * 256
    for chunk in frame.chunks:
        if isinstance(chunk, aseprite.PaletteChunk):
            for i, c in enumerate(chunk.colors, chunk.first_color_index):
                if i < len(table):
                    table[i] = bytes(
                        c[n] for n in ("red", "green", "blue", "alpha")
                    )
    return table


def _tags(frame) -> Tuple[Tag, ...]:
    return tuple(
        Tag(name=t["name"], first=t["from"], last=t["to"])
        for chunk in frame.chunks
        if isinstance(chunk, aseprite.FrameTagsChunk)
        for t in chunk.tags
    )
