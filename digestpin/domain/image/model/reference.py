"""Container image references and registry manifest URLs.

A reference has the form ``registry-host[/repository-path][:tag]``. The first
``/``-delimited segment is always taken as the registry host, so ``nginx:1.25``
is looked up at ``https://nginx/v2//manifests/1.25`` and the repository path
may be empty.
"""

from digestpin.domain.shared.error import UnresolvedImage
from digestpin.domain.shared.model.value import ValueObject

DIGEST_MARKER = "sha256"
DEFAULT_TAG = "latest"


def registry_manifest_url(
    host: str,
    repository_path: str,
    tag: str,
    scheme: str = "https",
) -> str:
    """Build a Docker Registry HTTP API V2 manifest URL."""
    return f"{scheme}://{host}/v2/{repository_path}/manifests/{tag}"


def is_digest_pinned(image: str) -> bool:
    """Check whether an image reference already carries a digest."""
    return "@" in image or DIGEST_MARKER in image


class ImageReference(ValueObject):
    """A tag-addressed image reference, split for a registry lookup."""

    repository: str
    tag: str = DEFAULT_TAG

    @classmethod
    def parse(cls, image: str | None) -> "ImageReference":
        """Parse an unpinned image reference.

        Raises:
            UnresolvedImage: If the reference is empty, already pinned, or
                has no repository.
        """
        if image is None or not image.strip():
            raise UnresolvedImage("Image reference is empty", image=image)

        image = image.strip()
        if is_digest_pinned(image):
            raise UnresolvedImage(f"Image reference {image!r} is already digest-pinned", image=image)

        # A colon before the last slash belongs to a host:port prefix
        tag_sep = image.find(":", image.rfind("/") + 1)
        if tag_sep == -1:
            repository, tag = image, DEFAULT_TAG
        else:
            repository, tag = image[:tag_sep], image[tag_sep + 1 :] or DEFAULT_TAG

        if not repository:
            raise UnresolvedImage(f"Image reference {image!r} has no repository", image=image)
        return cls(repository=repository, tag=tag)

    @property
    def registry_host(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repository_path(self) -> str:
        _, _, path = self.repository.partition("/")
        return path

    def manifest_url(self, scheme: str = "https") -> str:
        return registry_manifest_url(self.registry_host, self.repository_path, self.tag, scheme)

    def pinned(self, digest: str) -> str:
        """Return the digest-pinned form ``repository@digest``."""
        return f"{self.repository}@{digest}"

    def __str__(self) -> str:
        return f"{self.repository}:{self.tag}"
