"""Error taxonomy for catalog generation and room conversion.

Every failure names exactly one violated precondition and renders a
one-line message suitable for a terminal or an inline UI alert.
"""

from pathlib import Path
from typing import Optional, Sequence


class CatalogToolError(Exception):
    """Base class for all catalog tool failures."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


def _describe(cause: BaseException) -> str:
    return str(cause) or cause.__class__.__name__


class NonExistingPath(CatalogToolError):
    def __init__(self, kind: str, path: Path):
        self.kind = kind
        self.path = Path(path)
        super().__init__(f"{kind.capitalize()} path {self.path} doesn't exist")


class NotADirectory(CatalogToolError):
    def __init__(self, kind: str, path: Path):
        self.kind = kind
        self.path = Path(path)
        super().__init__(f"{kind.capitalize()} path {self.path} isn't a directory")


class WrongExtension(CatalogToolError):
    def __init__(self, path: Path, supported_extensions: Sequence[str]):
        self.path = Path(path)
        self.supported_extensions = list(supported_extensions)
        supported = " or ".join(f".{ext}" for ext in self.supported_extensions)
        super().__init__(
            f"Unsupported path extension for {self.path}: "
            f"this tool only supports {supported} extension"
        )


class CannotCreateCatalog(CatalogToolError):
    def __init__(self, cause: BaseException):
        super().__init__(f"Can't create catalog bundle: {_describe(cause)}", cause)


class CannotCreateHierarchy(CatalogToolError):
    def __init__(self, cause: BaseException):
        super().__init__(
            f"Can't create catalog folder hierarchy: {_describe(cause)}", cause
        )


class CannotParseHierarchy(CatalogToolError):
    def __init__(self, path: Path, cause: BaseException):
        self.path = Path(path)
        super().__init__(f"Can't parse {self.path}: {_describe(cause)}", cause)


class CannotParseCatalog(CatalogToolError):
    def __init__(self, path: Optional[Path], reason: str, cause: Optional[BaseException] = None):
        self.path = Path(path) if path is not None else None
        where = f" {self.path}" if self.path is not None else ""
        super().__init__(f"Can't parse catalog index{where}: {reason}", cause)


class FolderHierarchyNotCreated(CatalogToolError):
    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(
            f"Folder hierarchy not created at {self.path}. "
            "Run roomcat create-folders first"
        )


class FolderHierarchyCompromised(CatalogToolError):
    def __init__(self, path: Path, offending: Optional[str] = None):
        self.path = Path(path)
        self.offending = offending
        super().__init__(
            f"Folder hierarchy at {self.path} contains files that aren't part "
            "of the catalog. You need to remove them."
        )


class CannotRemoveModelFile(CatalogToolError):
    def __init__(self, path: Path, cause: BaseException):
        self.path = Path(path)
        super().__init__(
            f"Can't remove model file at {self.path}: {_describe(cause)}", cause
        )


class CannotConvertRoom(CatalogToolError):
    def __init__(self, path: Path, cause: BaseException):
        self.path = Path(path)
        super().__init__(f"Can't convert room at {self.path}: {_describe(cause)}", cause)


class CannotConvertModel(CatalogToolError):
    def __init__(self, path: Path, cause: BaseException):
        self.path = Path(path)
        super().__init__(f"Can't convert model at {self.path}: {_describe(cause)}", cause)


class CannotFindCatalog(CatalogToolError):
    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Cannot find catalog at {self.path}")


class ModelProviderError(CatalogToolError):
    """Raised when a model file cannot be registered in a ModelProvider."""


class CannotParseVocabulary(CatalogToolError):
    def __init__(self, path: Path, cause: BaseException):
        self.path = Path(path)
        super().__init__(f"Can't parse vocabulary {self.path}: {_describe(cause)}", cause)
