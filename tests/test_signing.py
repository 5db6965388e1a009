"""
Test suite for bce-auth-v1 request signing

This module tests header selection, canonical request construction, the
two-stage HMAC chain and token assembly, plus the requests integration.
"""

import re
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
import requests

from bos_sdk.signing import (
    # Core signing
    Authorizer,
    authorize,
    build_auth_prefix,
    derive_signing_key,
    sign,
    assemble_token,
    # Types
    Credential,
    SigningRequest,
    SigningOptions,
    SigningError,
    SigningErrorCodes,
    # Header selection
    select_headers_to_sign,
    is_default_signed_header,
    # Canonicalization
    CanonicalRequestBuilder,
    build_canonical_request,
    get_canonical_uri,
    get_canonical_query_string,
    get_canonical_headers,
    get_signed_headers,
    # Configuration
    SigningConfig,
    create_signing_config,
    DEFAULT_EXPIRY_SECONDS,
    # Utilities
    uri_encode,
    format_auth_timestamp,
    format_http_date,
    generate_timestamp,
    calculate_content_md5,
    # HTTP Integration
    BceAuth,
    split_url,
)


FIXED_TIME = datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

TOKEN_PATTERN = re.compile(
    r'^bce-auth-v1/AK/\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z/1800//[0-9a-f]{64}$'
)


def fixed_clock():
    return FIXED_TIME


@pytest.fixture
def authorizer():
    config = create_signing_config() \
        .access_key("AK") \
        .secret_key("SK") \
        .timestamp_generator(fixed_clock) \
        .build()
    return Authorizer(config)


class TestSigningUtilities:
    """Test utility functions"""

    def test_uri_encode_unreserved(self):
        assert uri_encode("AZaz09-_.~") == "AZaz09-_.~"

    def test_uri_encode_reserved(self):
        assert uri_encode("a b") == "a%20b"
        assert uri_encode("a/b") == "a%2Fb"
        assert uri_encode("a+b=c&d") == "a%2Bb%3Dc%26d"
        assert uri_encode("*") == "%2A"

    def test_uri_encode_utf8(self):
        assert uri_encode("中") == "%E4%B8%AD"

    def test_uri_encode_integer(self):
        assert uri_encode(8) == "8"

    def test_format_auth_timestamp(self):
        assert format_auth_timestamp(FIXED_TIME) == "2023-01-02T03:04:05Z"

    def test_format_auth_timestamp_naive_is_utc(self):
        assert format_auth_timestamp(datetime(2023, 1, 2, 3, 4, 5)) == "2023-01-02T03:04:05Z"

    def test_format_auth_timestamp_converts_to_utc(self):
        beijing = timezone(timedelta(hours=8))
        local = datetime(2023, 1, 2, 11, 4, 5, tzinfo=beijing)
        assert format_auth_timestamp(local) == "2023-01-02T03:04:05Z"

    def test_format_auth_timestamp_drops_fraction(self):
        value = FIXED_TIME.replace(microsecond=999999)
        assert format_auth_timestamp(value) == "2023-01-02T03:04:05Z"

    def test_generate_timestamp(self):
        timestamp = generate_timestamp()
        assert timestamp.tzinfo is not None
        assert timestamp.microsecond == 0
        now = datetime.now(timezone.utc)
        assert abs((now - timestamp).total_seconds()) < 2

    def test_format_http_date(self):
        assert format_http_date(FIXED_TIME) == "Mon, 02 Jan 2023 03:04:05 GMT"

    def test_calculate_content_md5(self):
        # md5("bos test") in base64
        assert calculate_content_md5("bos test") == calculate_content_md5(b"bos test")
        assert calculate_content_md5(b"") == "1B2M2Y8AsgTpgAmY7PhCfg=="


class TestHeaderSelection:
    """Test which headers are bound into the signature"""

    def test_mandatory_headers_always_selected(self):
        headers = {
            "Host": "bucket.gz.example.com",
            "Content-Length": "8",
            "Content-Type": "text/plain",
            "Content-MD5": "abc==",
        }
        selection = select_headers_to_sign(headers)
        assert set(selection.selected.keys()) == set(headers.keys())
        assert selection.has_explicit_signed_header is False

    def test_bce_headers_always_selected(self):
        selection = select_headers_to_sign({"x-bce-acl": "private", "X-Bce-Meta-Author": "me"})
        assert "x-bce-acl" in selection.selected
        assert "x-bce-meta-author" in selection.selected
        assert selection.has_explicit_signed_header is False

    def test_other_headers_excluded_by_default(self):
        selection = select_headers_to_sign({"Host": "h", "Range": "bytes=0-2", "Date": "now"})
        assert list(selection.selected.keys()) == ["Host"]

    def test_explicit_header_selected_case_insensitively(self):
        selection = select_headers_to_sign({"Author": "Thomas", "Range": "x"}, ["AUTHOR"])
        assert list(selection.selected.keys()) == ["Author"]
        assert selection.has_explicit_signed_header is True

    def test_explicit_request_for_default_header_is_not_explicit(self):
        selection = select_headers_to_sign({"Host": "h"}, ["host"])
        assert selection.has_explicit_signed_header is False

    def test_explicit_request_for_missing_header(self):
        selection = select_headers_to_sign({"Host": "h"}, ["author"])
        assert selection.has_explicit_signed_header is False
        assert "author" not in selection.selected

    def test_selection_preserves_names_and_values(self):
        selection = select_headers_to_sign({"CONTENT-TYPE": "text/plain"})
        assert list(selection.selected.items()) == [("CONTENT-TYPE", "text/plain")]
        assert selection.selected["content-type"] == "text/plain"

    def test_is_default_signed_header(self):
        assert is_default_signed_header("Host")
        assert is_default_signed_header(" content-md5 ")
        assert is_default_signed_header("X-BCE-Date")
        assert not is_default_signed_header("Date")
        assert not is_default_signed_header("x-bcex")

    def test_non_string_header_name(self):
        with pytest.raises(SigningError) as exc_info:
            select_headers_to_sign({1: "x"})
        assert exc_info.value.code == SigningErrorCodes.INVALID_HEADERS


class TestCanonicalRequest:
    """Test canonical request construction"""

    def test_canonical_uri_leading_slash(self):
        assert get_canonical_uri("/a/b") == get_canonical_uri("a/b") == "/a/b"
        assert get_canonical_uri("///a/b") == "/a/b"
        assert get_canonical_uri("") == "/"

    def test_canonical_uri_encoding(self):
        uri = get_canonical_uri("/dir/my file+1.txt")
        assert uri == "/dir/my%20file%2B1.txt"
        assert "%2F" not in uri

    def test_canonical_uri_keeps_trailing_slash(self):
        assert get_canonical_uri("dir/") == "/dir/"

    def test_query_sorted(self):
        assert get_canonical_query_string({"b": "2", "a": "1"}) == "a=1&b=2"

    def test_query_valueless_flag(self):
        assert get_canonical_query_string({"x": None, "acl": None, "y": "1"}) == "acl&x&y=1"

    def test_query_empty_value_distinct_from_flag(self):
        assert get_canonical_query_string({"x": ""}) == "x="
        assert get_canonical_query_string({"x": None}) == "x"

    def test_query_empty(self):
        assert get_canonical_query_string({}) == ""

    def test_query_encoding(self):
        query = {"prefix": "a b/c", "delimiter": "/"}
        assert get_canonical_query_string(query) == "delimiter=%2F&prefix=a%20b%2Fc"

    def test_query_sorts_on_formatted_pair(self):
        # "a-b=1" < "a=2" because "-" (0x2D) sorts before "=" (0x3D)
        assert get_canonical_query_string({"a": "2", "a-b": "1"}) == "a-b=1&a=2"

    def test_query_integer_value(self):
        assert get_canonical_query_string({"offset": 8}) == "offset=8"

    def test_headers_case_insensitive(self):
        assert get_canonical_headers({"Content-Type": "text/plain"}) == \
            get_canonical_headers({"content-type": "text/plain"}) == \
            "content-type:text%2Fplain"

    def test_headers_trimmed_sorted_and_joined(self):
        headers = {" Host ": " bucket.gz.example.com ", "Content-Length": 8}
        assert get_canonical_headers(headers) == \
            "content-length:8\nhost:bucket.gz.example.com"

    def test_headers_bytes_value(self):
        assert get_canonical_headers({"Content-Type": b" text/plain "}) == "content-type:text%2Fplain"

    def test_headers_none_value(self):
        with pytest.raises(SigningError):
            get_canonical_headers({"Host": None})

    def test_signed_headers(self):
        assert get_signed_headers(["Host", "x-bce-acl", "Author"]) == "author;host;x-bce-acl"

    def test_build_canonical_request(self):
        canonical = build_canonical_request(
            "GET", "bos_test.txt", {}, {"Host": "bucket.gz.example.com"}
        )
        assert canonical == "GET\n/bos_test.txt\n\nhost:bucket.gz.example.com"

    def test_method_used_verbatim(self):
        canonical = build_canonical_request("get", "/", {}, {})
        assert canonical.startswith("get\n")

    def test_builder_signed_headers_empty_without_explicit(self):
        request = SigningRequest("GET", "/", headers={"Host": "h", "x-bce-acl": "private"})
        builder = CanonicalRequestBuilder(request, select_headers_to_sign(request.headers))
        assert builder.signed_headers() == ""

    def test_builder_signed_headers_lists_all_selected(self):
        request = SigningRequest(
            "GET", "/", headers={"Host": "h", "x-bce-acl": "private", "Author": "me", "Range": "r"},
            options=SigningOptions(sign_headers=["author"])
        )
        selection = select_headers_to_sign(request.headers, request.options.sign_headers)
        builder = CanonicalRequestBuilder(request, selection)
        assert builder.signed_headers() == "author;host;x-bce-acl"


class TestSignatureEngine:
    """Test the two-stage HMAC chain against known vectors"""

    def test_hmac_known_answer(self):
        # RFC 4231 test case 2
        assert sign("Jefe", "what do ya want for nothing?") == \
            "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"

    def test_build_auth_prefix(self):
        assert build_auth_prefix("AK", "2023-01-02T03:04:05Z", 1800) == \
            "bce-auth-v1/AK/2023-01-02T03:04:05Z/1800"

    def test_derive_signing_key(self):
        key = derive_signing_key("SK", "bce-auth-v1/AK/2023-01-02T03:04:05Z/1800")
        assert key == "97735f86605e8ca9beda0ae56a7de79dd55b0b2371fe3937d1048461a6b30b82"

    def test_sign_uses_hex_key(self):
        signing_key = "97735f86605e8ca9beda0ae56a7de79dd55b0b2371fe3937d1048461a6b30b82"
        canonical = "GET\n/bos_test.txt\n\nhost:bucket.gz.example.com"
        assert sign(signing_key, canonical) == \
            "9a2b1149a43c7fae0c40e44bbfa55681c8daf28559099cf0c447e9e5d0847b44"

    def test_sign_is_pure(self):
        canonical = "GET\n/\n\nhost:h"
        assert sign("key", canonical) == sign("key", canonical)

    def test_assemble_token(self):
        assert assemble_token("prefix", "", "sig") == "prefix//sig"
        assert assemble_token("prefix", "host", "sig") == "prefix/host/sig"


class TestAuthorizer:
    """Test end-to-end token production"""

    def test_end_to_end_known_token(self, authorizer):
        token = authorizer.authorize("GET", "/bos_test.txt", {}, {"Host": "bucket.gz.example.com"})
        assert token == (
            "bce-auth-v1/AK/2023-01-02T03:04:05Z/1800//"
            "9a2b1149a43c7fae0c40e44bbfa55681c8daf28559099cf0c447e9e5d0847b44"
        )

    def test_end_to_end_with_explicit_header(self, authorizer):
        headers = {
            "Host": "bucket.gz.example.com",
            "Content-Length": "8",
            "x-bce-meta-k": "v",
            "Author": "Thomas",
            "Range": "bytes=0-2",
        }
        result = authorizer.sign_request(SigningRequest(
            method="PUT",
            path="dir/my file.txt",
            query={"partNumber": 1, "acl": None},
            headers=headers,
            options=SigningOptions(sign_headers=["Author"], expired_in=3600)
        ))

        assert result.canonical_request == (
            "PUT\n/dir/my%20file.txt\nacl&partNumber=1\n"
            "author:Thomas\ncontent-length:8\nhost:bucket.gz.example.com\nx-bce-meta-k:v"
        )
        assert result.signed_headers == "author;content-length;host;x-bce-meta-k"
        assert result.auth_prefix == "bce-auth-v1/AK/2023-01-02T03:04:05Z/3600"
        assert result.signature == "2bcd4074d8af9c6b26fcfc7ddc4b5fae2d61f387705b97a53b2917976827e94c"
        assert result.token == (
            "bce-auth-v1/AK/2023-01-02T03:04:05Z/3600/"
            "author;content-length;host;x-bce-meta-k/"
            "2bcd4074d8af9c6b26fcfc7ddc4b5fae2d61f387705b97a53b2917976827e94c"
        )

    def test_token_pattern_with_real_clock(self):
        token = Authorizer.from_keys("AK", "SK").authorize(
            "GET", "/bos_test.txt", {}, {"Host": "bucket.gz.example.com"}
        )
        assert TOKEN_PATTERN.match(token)

    def test_deterministic(self, authorizer):
        args = ("GET", "/a", {"b": "2", "a": None}, {"Host": "h", "x-bce-acl": "private"})
        assert authorizer.authorize(*args) == authorizer.authorize(*args)

    def test_options_mapping(self, authorizer):
        token = authorizer.authorize(
            "GET", "/", {}, {"Host": "h", "Author": "me"},
            {"sign_headers": ["author"], "expired_in": 60}
        )
        assert token.startswith("bce-auth-v1/AK/2023-01-02T03:04:05Z/60/author;host/")

    def test_unrequested_header_does_not_change_signature(self, authorizer):
        base = authorizer.authorize("GET", "/", {}, {"Host": "h"})
        extra = authorizer.authorize("GET", "/", {}, {"Host": "h", "Range": "bytes=0-1"})
        assert base == extra

    def test_signed_header_changes_signature(self, authorizer):
        base = authorizer.authorize("GET", "/", {}, {"Host": "h", "Range": "a"}, {"sign_headers": ["range"]})
        other = authorizer.authorize("GET", "/", {}, {"Host": "h", "Range": "b"}, {"sign_headers": ["range"]})
        assert base.rsplit("/", 1)[1] != other.rsplit("/", 1)[1]

    def test_default_expiry_from_config(self):
        config = SigningConfig(Credential("AK", "SK"), default_expiry_seconds=600,
                               timestamp_generator=fixed_clock)
        token = Authorizer(config).authorize("GET", "/")
        assert token.startswith("bce-auth-v1/AK/2023-01-02T03:04:05Z/600//")

    def test_clock_sampled_once(self):
        clock = Mock(side_effect=[FIXED_TIME, FIXED_TIME + timedelta(seconds=5)])
        config = SigningConfig(Credential("AK", "SK"), timestamp_generator=clock)
        result = Authorizer(config).sign_request(SigningRequest("GET", "/"))
        assert clock.call_count == 1
        assert result.timestamp == "2023-01-02T03:04:05Z"
        assert result.auth_prefix == "bce-auth-v1/AK/2023-01-02T03:04:05Z/1800"

    def test_secret_not_in_output(self, authorizer):
        result = authorizer.sign_request(SigningRequest("GET", "/", headers={"Host": "h"}))
        assert "SK" not in result.token.split("/")[:-1]
        assert "SK" not in result.canonical_request

    def test_module_authorize(self):
        token = authorize(Credential("AK", "SK"), "GET", "/bos_test.txt",
                          headers={"Host": "bucket.gz.example.com"})
        assert TOKEN_PATTERN.match(token)

    def test_from_keys_invalid(self):
        with pytest.raises(SigningError) as exc_info:
            Authorizer.from_keys("", "SK")
        assert exc_info.value.code == SigningErrorCodes.INVALID_CREDENTIAL


class TestSigningTypes:
    """Test signing type validation"""

    def test_credential_repr_hides_secret(self):
        assert "SK-secret" not in repr(Credential("AK", "SK-secret"))

    def test_credential_validation(self):
        with pytest.raises(ValueError):
            Credential("AK", "")
        with pytest.raises(ValueError):
            Credential(None, "SK")

    def test_signing_options_normalized(self):
        options = SigningOptions(sign_headers=[" Author ", "RANGE"])
        assert options.sign_headers == frozenset({"author", "range"})
        assert SigningOptions(sign_headers="Author").sign_headers == frozenset({"author"})

    def test_signing_options_expiry_validation(self):
        with pytest.raises(ValueError):
            SigningOptions(expired_in=0)
        with pytest.raises(ValueError):
            SigningOptions(expired_in="60")

    def test_signing_options_coerce(self):
        assert SigningOptions.coerce(None) == SigningOptions()
        options = SigningOptions.coerce({"sign_headers": ["A"], "expired_in": 5})
        assert options.sign_headers == frozenset({"a"})
        assert options.expired_in == 5

    def test_signing_options_coerce_invalid_expiry(self):
        with pytest.raises(SigningError) as exc_info:
            SigningOptions.coerce({"expired_in": -5})
        assert exc_info.value.code == SigningErrorCodes.INVALID_EXPIRY

    def test_signing_request_validation(self):
        with pytest.raises(SigningError):
            SigningRequest("", "/")
        with pytest.raises(SigningError):
            SigningRequest("GET", "/", query=[("a", "b")])

    def test_signing_request_defaults(self):
        request = SigningRequest("GET", "/", query=None, headers=None)
        assert request.query == {}
        assert request.headers == {}
        assert request.options.expired_in is None


class TestSigningConfiguration:
    """Test signing configuration and builders"""

    def test_builder(self):
        config = create_signing_config().access_key("AK").secret_key("SK").default_expiry(900).build()
        assert config.credential.access_key == "AK"
        assert config.default_expiry_seconds == 900

    def test_builder_default_expiry(self):
        config = create_signing_config().credential(Credential("AK", "SK")).build()
        assert config.default_expiry_seconds == DEFAULT_EXPIRY_SECONDS == 1800

    def test_builder_missing_keys(self):
        with pytest.raises(SigningError):
            create_signing_config().access_key("AK").build()

    def test_builder_invalid_expiry(self):
        with pytest.raises(SigningError) as exc_info:
            create_signing_config().access_key("AK").secret_key("SK").default_expiry(0).build()
        assert exc_info.value.code == SigningErrorCodes.INVALID_EXPIRY

    def test_authorizer_rejects_invalid_config(self):
        with pytest.raises(SigningError):
            Authorizer(SigningConfig(Credential("AK", "SK"), timestamp_generator="now"))


class TestRequestsIntegration:
    """Test the requests authentication handler"""

    def test_split_url(self):
        netloc, path, query = split_url("https://b.gz.bcebos.com/dir/my%20file.txt?acl&prefix=a%2Fb&x=")
        assert netloc == "b.gz.bcebos.com"
        assert path == "/dir/my file.txt"
        assert query == {"acl": None, "prefix": "a/b", "x": ""}

    def test_split_url_plus_is_space(self):
        assert split_url("https://b.gz.bcebos.com/?prefix=a+b%2Bc")[2] == {"prefix": "a b+c"}

    def test_split_url_repeated_key(self):
        with pytest.raises(SigningError) as exc_info:
            split_url("https://b.gz.bcebos.com/?a=1&a=2")
        assert exc_info.value.code == SigningErrorCodes.INVALID_QUERY

    def test_split_url_root(self):
        assert split_url("https://b.gz.bcebos.com")[1] == "/"

    def test_bce_auth_signs_prepared_request(self, authorizer):
        prepared = requests.Request(
            "GET", "https://bucket.gz.example.com/bos_test.txt",
            auth=BceAuth(authorizer)
        ).prepare()

        assert prepared.headers["Host"] == "bucket.gz.example.com"
        assert prepared.headers["Authorization"] == (
            "bce-auth-v1/AK/2023-01-02T03:04:05Z/1800//"
            "9a2b1149a43c7fae0c40e44bbfa55681c8daf28559099cf0c447e9e5d0847b44"
        )

    def test_bce_auth_matches_authorizer(self, authorizer):
        prepared = requests.Request(
            "PUT", "https://bucket.gz.example.com/a%20b?acl",
            headers={"Author": "me"}, data=b"bos test",
            auth=BceAuth(authorizer, sign_headers=["author"], expired_in=60)
        ).prepare()

        expected = authorizer.authorize(
            "PUT", "/a b", {"acl": None},
            {"Host": "bucket.gz.example.com", "Author": "me", "Content-Length": "8"},
            {"sign_headers": ["author"], "expired_in": 60}
        )
        assert prepared.headers["Authorization"] == expected

    def test_bce_auth_params_with_space(self, authorizer):
        prepared = requests.Request(
            "GET", "https://bucket.gz.example.com/",
            params={"prefix": "a b"},
            auth=BceAuth(authorizer)
        ).prepare()

        assert prepared.url.endswith("?prefix=a+b")
        expected = authorizer.authorize(
            "GET", "/", {"prefix": "a b"}, {"Host": "bucket.gz.example.com"}
        )
        assert prepared.headers["Authorization"] == expected
