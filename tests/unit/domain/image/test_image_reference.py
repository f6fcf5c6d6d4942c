"""Unit tests for ImageReference parsing and manifest URL construction."""

import pytest

from digestpin.domain.image.model.reference import (
    DEFAULT_TAG,
    ImageReference,
    is_digest_pinned,
    registry_manifest_url,
)
from digestpin.domain.shared.error import UnresolvedImage


class TestImageReferenceParse:
    def test_splits_repository_and_tag(self):
        ref = ImageReference.parse("example.com/app:v1")

        assert ref.repository == "example.com/app"
        assert ref.tag == "v1"
        assert ref.registry_host == "example.com"
        assert ref.repository_path == "app"

    def test_tag_defaults_to_latest(self):
        ref = ImageReference.parse("example.com/app")
        assert ref.tag == DEFAULT_TAG == "latest"

    def test_empty_tag_defaults_to_latest(self):
        assert ImageReference.parse("example.com/app:").tag == "latest"

    def test_nested_repository_path(self):
        ref = ImageReference.parse("reg.io/team/sub/svc:2.0")

        assert ref.registry_host == "reg.io"
        assert ref.repository_path == "team/sub/svc"
        assert ref.tag == "2.0"

    def test_registry_port_is_not_a_tag(self):
        ref = ImageReference.parse("localhost:5000/app:v1")

        assert ref.registry_host == "localhost:5000"
        assert ref.repository_path == "app"
        assert ref.tag == "v1"

    def test_registry_port_without_tag(self):
        ref = ImageReference.parse("localhost:5000/team/app")

        assert ref.repository == "localhost:5000/team/app"
        assert ref.tag == "latest"

    def test_strips_surrounding_whitespace(self):
        assert ImageReference.parse("  example.com/app:v1 \n").repository == "example.com/app"

    @pytest.mark.parametrize("image", [None, "", "   "])
    def test_empty_reference_is_unresolved(self, image):
        with pytest.raises(UnresolvedImage, match="empty"):
            ImageReference.parse(image)

    def test_missing_repository_is_unresolved(self):
        with pytest.raises(UnresolvedImage, match="no repository") as exc_info:
            ImageReference.parse(":v1")
        assert exc_info.value.image == ":v1"
        assert exc_info.value.code == "UNRESOLVED_IMAGE"

    def test_single_segment_repository_is_the_host(self):
        ref = ImageReference.parse("repo:tag")

        assert ref.registry_host == "repo"
        assert ref.repository_path == ""
        assert ref.tag == "tag"
        assert ref.manifest_url() == "https://repo/v2//manifests/tag"
        assert ref.pinned("sha256:D") == "repo@sha256:D"

    def test_pinned_reference_is_rejected(self):
        with pytest.raises(UnresolvedImage, match="already digest-pinned"):
            ImageReference.parse("reg.io/ns/svc@sha256:deadbeef")


class TestImageReferenceFormatting:
    def test_manifest_url(self):
        ref = ImageReference.parse("example.com/app:v1")
        assert ref.manifest_url() == "https://example.com/v2/app/manifests/v1"

    def test_manifest_url_with_scheme(self):
        ref = ImageReference.parse("localhost:5000/team/app")
        assert ref.manifest_url("http") == "http://localhost:5000/v2/team/app/manifests/latest"

    def test_pinned_drops_tag(self):
        ref = ImageReference.parse("example.com/app:v1")
        assert ref.pinned("sha256:abc123") == "example.com/app@sha256:abc123"

    def test_str(self):
        assert str(ImageReference.parse("example.com/app")) == "example.com/app:latest"

    def test_equal_references_hash_equal(self):
        a = ImageReference.parse("example.com/app:v1")
        b = ImageReference.parse("example.com/app:v1")

        assert a == b
        assert len({a, b}) == 1


class TestRegistryManifestUrl:
    def test_builds_v2_manifest_url(self):
        assert (
            registry_manifest_url("ghcr.io", "org/tool", "1.2.3")
            == "https://ghcr.io/v2/org/tool/manifests/1.2.3"
        )


class TestIsDigestPinned:
    @pytest.mark.parametrize(
        "image,expected",
        [
            ("reg.io/ns/svc@sha256:deadbeef", True),
            ("reg.io/ns/svc:v1@sha256:deadbeef", True),
            ("reg.io/ns/svc@sha512:cafe", True),
            ("reg.io/ns/svc:v1", False),
            ("reg.io/ns/svc", False),
        ],
    )
    def test_detects_digest(self, image, expected):
        assert is_digest_pinned(image) is expected
