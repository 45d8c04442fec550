from __future__ import annotations

import itertools

import pytest

from bluestorage.blob import (
    API_VERSION,
    STANDARD_HEADERS,
    BlobSigningError,
    RequestDescriptor,
    canonical_headers,
    canonical_query,
    canonical_resource,
)

URI = "testacct.blob.core.windows.net/container/photos/cat.jpg"


class TestCanonicalHeaders:
    def test_sorted_with_trailing_newline(self) -> None:
        rendered = canonical_headers(
            {"x-ms-date": "Mon, 19 Oct 2026 12:00:00 GMT", "x-ms-client-request-id": "abc"}
        )
        assert rendered == (
            "x-ms-client-request-id:abc\n"
            "x-ms-date:Mon, 19 Oct 2026 12:00:00 GMT\n"
            f"x-ms-version:{API_VERSION}\n"
        )

    def test_permutations_render_identically(self) -> None:
        pairs = [
            ("x-ms-date", "Mon, 19 Oct 2026 12:00:00 GMT"),
            ("x-ms-blob-content-type", "image/jpeg"),
            ("x-ms-client-request-id", "id-1"),
            ("x-ms-blob-cache-control", "max-age=60"),
        ]
        outputs = {canonical_headers(dict(order)) for order in itertools.permutations(pairs)}
        assert len(outputs) == 1

    def test_non_extension_headers_are_dropped(self) -> None:
        rendered = canonical_headers({"Content-Type": "text/plain", "x-ms-date": "d"})
        assert "Content-Type" not in rendered
        assert rendered.startswith("x-ms-date:d\n")

    def test_version_is_inserted_and_overrides(self) -> None:
        assert canonical_headers({}) == f"x-ms-version:{API_VERSION}\n"
        assert canonical_headers({"x-ms-version": "2009-09-19"}, "2015-04-05") == (
            "x-ms-version:2015-04-05\n"
        )

    def test_names_lowercased_and_values_folded(self) -> None:
        rendered = canonical_headers({"X-MS-Meta-Name": "  two   words \n here "})
        assert "x-ms-meta-name:two words here\n" in rendered


class TestCanonicalResource:
    def test_prefixes_account_and_strips_query(self) -> None:
        uri = URI + "?comp=block&blockid=abc"
        assert canonical_resource(uri) == "/testacct/container/photos/cat.jpg"

    def test_container_only(self) -> None:
        assert canonical_resource("testacct.blob.core.windows.net/container") == "/testacct/container"

    def test_scheme_is_tolerated(self) -> None:
        assert canonical_resource("https://" + URI) == "/testacct/container/photos/cat.jpg"


class TestCanonicalQuery:
    def test_empty(self) -> None:
        assert canonical_query(URI) == ""

    def test_pairs_sorted_and_newline_joined(self) -> None:
        uri = URI + "?comp=block&blockid=YWJjZA%3D%3D"
        assert canonical_query(uri) == "blockid:YWJjZA==\ncomp:block"

    def test_repeated_names_are_comma_joined(self) -> None:
        assert canonical_query(URI + "?include=a&Include=b") == "include:a,b"


class TestRequestDescriptor:
    def test_standard_headers_always_present_in_order(self) -> None:
        descriptor = RequestDescriptor.build("get", URI)
        assert [name for name, _ in descriptor.standard_headers] == list(STANDARD_HEADERS)
        assert all(value == "" for _, value in descriptor.standard_headers)
        assert descriptor.method == "GET"

    def test_headers_split_case_insensitively(self) -> None:
        descriptor = RequestDescriptor.build(
            "PUT",
            URI + "?comp=block",
            {"content-length": "12", "X-MS-Date": "d", "x-ms-client-request-id": "rid"},
        )
        assert descriptor.header("Content-Length") == "12"
        assert descriptor.header("x-ms-date") == "d"
        assert descriptor.request_id == "rid"
        assert descriptor.canonicalized_resource == "/testacct/container/photos/cat.jpg\ncomp:block"
        assert descriptor.canonicalized_query == "comp:block"

    def test_http_headers_skip_empty_standard_values(self) -> None:
        descriptor = RequestDescriptor.build("PUT", URI, {"Content-Length": "3"})
        headers = descriptor.http_headers()
        assert headers["Content-Length"] == "3"
        assert "Range" not in headers
        assert headers["x-ms-version"] == API_VERSION

    def test_unsignable_header_is_rejected(self) -> None:
        with pytest.raises(BlobSigningError):
            RequestDescriptor.build("PUT", URI, {"Authorization": "nope"})
