import struct
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import attr
import PIL.Image  # type: ignore
import pytest

from asesheet.document import Tag
from asesheet.errors import TagMissing

CELL = (3, 2)


def make_frame(index: int, size: Tuple[int, int] = CELL, alpha: int = 255):
    """Frame whose every pixel is distinct: (index, x, y) in RGB."""

    image = PIL.Image.new("RGBA", size)
    image.putdata(
        [
            ((index + 1) * 10, x * 20 + 1, y * 20 + 1, alpha)
            for y in range(size[1])
            for x in range(size[0])
        ]
    )
    return image


@attr.define
class FakeDocument:
    frames: List[PIL.Image.Image]
    tag_ranges: Dict[str, Tuple[int, int]] = attr.Factory(dict)
    path: Path = Path("fake.ase")

    @property
    def canvas(self):
        return self.frames[0].size

    @property
    def frame_count(self):
        return len(self.frames)

    @property
    def tags(self):
        return tuple(Tag(n, f, t) for n, (f, t) in self.tag_ranges.items())

    def tag(self, name):
        if name not in self.tag_ranges:
            raise TagMissing(name, self.path)
        first, last = self.tag_ranges[name]
        return Tag(name=name, first=first, last=last)

    def frame(self, index):
        return self.frames[index]


@pytest.fixture
def fake_document():
    def make(frame_count: int, tag_ranges: Dict[str, Tuple[int, int]]):
        frames = [make_frame(i) for i in range(frame_count)]
        return FakeDocument(frames=frames, tag_ranges=tag_ranges)

    return make


@pytest.fixture
def use_document(monkeypatch):
    """Make open_document hand out the given document for any path."""

    from asesheet import document

    opened: List[Path] = []

    def install(doc):
        def fake_open(path):
            opened.append(Path(path))
            doc.path = Path(path)
            return doc

        monkeypatch.setattr(document, "open_document", fake_open)
        return opened

    return install


def region(image: PIL.Image.Image, x: int, y: int, size=CELL) -> bytes:
    return image.crop((x, y, x + size[0], y + size[1])).tobytes()


#
# Minimal Aseprite writer for decoder tests
#


def _string(text: str) -> bytes:
    data = text.encode("utf-8")
    return struct.pack("<H", len(data)) + data


def _chunk(chunk_type: int, body: bytes) -> bytes:
    return struct.pack("<IH", 6 + len(body), chunk_type) + body


RAW_CEL, LINKED_CEL, COMPRESSED_CEL, TILEMAP_CEL = 0, 1, 2, 3
NORMAL_LAYER, GROUP_LAYER, TILEMAP_LAYER = 0, 1, 2


@attr.define
class AseCel:
    """One cel. 8bpp images hold palette indices (mode "L")."""

    image: Optional[PIL.Image.Image] = None
    x: int = 0
    y: int = 0
    opacity: int = 255
    kind: int = RAW_CEL
    link: int = 0
    payload: Optional[bytes] = None  # replaces the encoded pixels


@attr.define
class AseLayer:
    name: str
    # Per frame: AseCel, (image, x, y) or None for no cel
    cels: Sequence[Union[None, AseCel, Tuple[PIL.Image.Image, int, int]]]
    visible: bool = True
    opacity: int = 255
    child_level: int = 0
    layer_type: int = NORMAL_LAYER
    background: bool = False
    reference: bool = False

    @property
    def flags(self) -> int:
        flags = 2  # editable
        flags |= 1 if self.visible else 0
        flags |= 8 if self.background else 0
        flags |= 64 if self.reference else 0
        return flags


def _pixels(image: PIL.Image.Image, color_depth: int) -> bytes:
    if color_depth == 32:
        return image.convert("RGBA").tobytes()
    if color_depth == 16:
        return image.convert("LA").tobytes()
    assert image.mode in ("L", "P")
    return image.tobytes()


def _layer_chunk(layer: AseLayer) -> bytes:
    body = struct.pack(
        "<HHHHHHB3s",
        layer.flags,
        layer.layer_type,
        layer.child_level,
        0,
        0,
        0,
        layer.opacity,
        bytes(3),
    )
    body += _string(layer.name)
    if layer.layer_type == TILEMAP_LAYER:
        body += struct.pack("<I", 0)  # tileset index
    return _chunk(0x2004, body)


def _cel_chunk(layer_index: int, cel: AseCel, color_depth: int) -> bytes:
    body = struct.pack(
        "<HhhBHh5s", layer_index, cel.x, cel.y, cel.opacity, cel.kind, 0, bytes(5)
    )
    if cel.kind == LINKED_CEL:
        return _chunk(0x2005, body + struct.pack("<H", cel.link))

    assert cel.image is not None
    body += struct.pack("<HH", *cel.image.size)
    if cel.kind == TILEMAP_CEL:
        tiles = bytes(cel.image.size[0] * cel.image.size[1] * 4)
        body += struct.pack(
            "<HIIII10s",
            32,
            0x1FFFFFFF,
            0x20000000,
            0x40000000,
            0x80000000,
            bytes(10),
        )
        return _chunk(0x2005, body + zlib.compress(tiles))

    pixels = cel.payload
    if pixels is None:
        pixels = _pixels(cel.image, color_depth)
    if cel.kind == COMPRESSED_CEL:
        pixels = zlib.compress(pixels)
    return _chunk(0x2005, body + pixels)


def _palette_chunk(palette: Sequence[Tuple[int, int, int, int]]) -> bytes:
    body = struct.pack("<III8s", len(palette), 0, len(palette) - 1, bytes(8))
    for color in palette:
        body += struct.pack("<HBBBB", 0, *color)
    return _chunk(0x2019, body)


def write_ase(
    path: Path,
    size: Tuple[int, int],
    layers: Sequence[AseLayer],
    tags: Sequence[Tuple[str, int, int]] = (),
    color_depth: int = 32,
    palette: Sequence[Tuple[int, int, int, int]] = (),
    transparent_index: int = 0,
    layer_opacity_valid: bool = True,
) -> Path:
    frame_count = len(layers[0].cels)
    frames_data = b""
    for frame_index in range(frame_count):
        chunks: List[bytes] = []
        if frame_index == 0:
            if palette:
                chunks.append(_palette_chunk(palette))
            chunks.extend(_layer_chunk(layer) for layer in layers)
            if tags:
                body = struct.pack("<H8s", len(tags), bytes(8))
                for name, first, last in tags:
                    body += struct.pack(
                        "<HHBH6s3sB", first, last, 0, 0, bytes(6), bytes(3), 0
                    )
                    body += _string(name)
                chunks.append(_chunk(0x2018, body))

        for layer_index, layer in enumerate(layers):
            cel = layer.cels[frame_index]
            if cel is None:
                continue
            if isinstance(cel, tuple):
                image, x, y = cel
                cel = AseCel(image=image, x=x, y=y)
            chunks.append(_cel_chunk(layer_index, cel, color_depth))

        frame_body = b"".join(chunks)
        frames_data += (
            struct.pack(
                "<IHHH2sI",
                16 + len(frame_body),
                0xF1FA,
                len(chunks),
                100,
                bytes(2),
                len(chunks),
            )
            + frame_body
        )

    header = struct.pack(
        "<IHHHHHIHIIB3sHBBhhHH84s",
        128 + len(frames_data),
        0xA5E0,
        frame_count,
        size[0],
        size[1],
        color_depth,
        1 if layer_opacity_valid else 0,
        100,
        0,
        0,
        transparent_index,
        bytes(3),
        len(palette),
        1,
        1,
        0,
        0,
        16,
        16,
        bytes(84),
    )
    path.write_bytes(header + frames_data)
    return path
