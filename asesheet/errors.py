# User-visible errors; anything else escaping the CLI is a bug

from pathlib import Path


class SheetError(Exception):
    pass


class LoadError(SheetError):
    def __init__(self, path: Path, cause: object):
        super().__init__(f"{path} can't be loaded: {cause}")
        self.path = path
        self.cause = cause


class WrongFrameCount(SheetError):
    def __init__(self, path: Path, found: int):
        super().__init__(
            f"Convert only supports a single frame, "
            f"{found} frames found in {path}"
        )
        self.path = path
        self.found = found


class TagMissing(SheetError):
    def __init__(self, tag: str, path: Path):
        super().__init__(f'Tag "{tag}" doesn\'t exist in image {path}')
        self.tag = tag
        self.path = path


class InsufficientFrames(SheetError):
    def __init__(self, tag: str, have: int, need: int, path: Path):
        super().__init__(
            f'Tag "{tag}" in {path} doesn\'t contain enough frames, '
            f"it has {have} but we need {need}"
        )
        self.tag = tag
        self.have = have
        self.need = need
        self.path = path


class WriteError(SheetError):
    def __init__(self, path: Path, cause: object):
        super().__init__(f"Cannot save image to {path}: {cause}")
        self.path = path
        self.cause = cause
