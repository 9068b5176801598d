"""Named static resources (page shells, stylesheets, images)."""

from dataclasses import dataclass
from importlib import resources as package_resources

import structlog

logger = structlog.get_logger(__name__)

OCTET_STREAM = "application/octet-stream"

MIME_TYPES = {
    ".txt": "text/plain",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}

DEFAULT_RESOURCES = ("article.html", "search.html", "styles.css")


def infer_mime_type(name: str) -> str:
    """Infer a MIME type from the suffix after the last dot of ``name``."""
    separator = name.rfind(".")
    if separator < 0:
        return OCTET_STREAM
    return MIME_TYPES.get(name[separator:].lower(), OCTET_STREAM)


def is_text_mime_type(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type == "application/javascript"


@dataclass(frozen=True)
class ResourceFile:
    """A registered resource.

    Attributes:
        name: Registration name
        mime_type: MIME type inferred from the name
        data: Raw bytes
    """

    name: str
    mime_type: str
    data: bytes

    @property
    def is_text(self) -> bool:
        return is_text_mime_type(self.mime_type)

    def text(self) -> str:
        return self.data.decode("utf-8")


class ResourceManager:
    """Registry of named resources."""

    def __init__(self) -> None:
        self._resources: dict[str, ResourceFile] = {}

    @classmethod
    def with_defaults(cls) -> "ResourceManager":
        """Create a manager holding the bundled page shells and stylesheet."""
        manager = cls()
        bundled = package_resources.files("wikireader.web") / "res"
        for name in DEFAULT_RESOURCES:
            manager.register(name, (bundled / name).read_bytes())
        return manager

    def register(self, name: str, data: bytes) -> ResourceFile:
        """Register a resource, inferring its MIME type from ``name``.

        Raises:
            UnicodeDecodeError: If a text resource is not valid UTF-8
        """
        resource = ResourceFile(name=name, mime_type=infer_mime_type(name), data=bytes(data))
        if resource.is_text:
            # Fail at registration rather than at first use
            resource.text()
        self._resources[name] = resource
        logger.debug("resource_registered", name=name, mime_type=resource.mime_type)
        return resource

    def find_resource(self, name: str) -> ResourceFile | None:
        return self._resources.get(name)

    def find_template(self, name: str) -> str | None:
        """Return a text resource's content, or None if absent or binary."""
        resource = self._resources.get(name)
        if resource is None or not resource.is_text:
            return None
        return resource.text()
