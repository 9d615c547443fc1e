"""
STYLEBOX - Errors

Exceptions raised by the style store, history bridge and style file codec.
The StyleManager catches StyleError and reports its message to the user.
"""

from typing import Optional


class StyleError(Exception):
    """Base class for all style engine failures."""


class StyleExistsError(StyleError):
    """Raised when creating a style whose name is already taken."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"style with name '{name}' already exists")


class StyleNotFoundError(StyleError):
    """Raised when an operation targets an unknown style."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"style '{name}' does not exist")


class StyleIOError(StyleError):
    """Raised when a style file cannot be opened, created or replaced."""

    def __init__(self, path, reason: Optional[str] = None):
        self.path = path
        message = f"failed to access style file {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class StyleParseError(StyleError):
    """Raised when a style file is not a well-formed style document."""

    def __init__(self, path, reason: Optional[str] = None):
        self.path = path
        message = f"failed to parse style file {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class OverwriteRefusedError(StyleError):
    """Raised when a backup file exists and overwriting was not requested."""

    def __init__(self, name: str, path):
        self.name = name
        self.path = path
        super().__init__(f"style file for {name} exists")


class ImageNotFoundError(StyleError):
    """Raised when an operation targets an image the library does not know."""

    def __init__(self, imgid: int):
        self.imgid = imgid
        super().__init__(f"image {imgid} does not exist")
