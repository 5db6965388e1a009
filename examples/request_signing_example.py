#!/usr/bin/env python3
"""
BOS Python SDK - Request Signing Example

Shows how bce-auth-v1 tokens are built: which headers are signed, what the
canonical request looks like and how the token is assembled. Runs offline.
"""

from datetime import datetime, timezone

from bos_sdk import (
    Authorizer,
    SigningOptions,
    SigningRequest,
    create_signing_config,
)


def basic_signing_example():
    """Sign a plain GET with the default header set"""
    print("=== Basic Request Signing Example ===")

    authorizer = Authorizer.from_keys("example-access-key", "example-secret-key")
    token = authorizer.authorize(
        "GET",
        "/photos/cat.jpg",
        headers={"Host": "mybucket.gz.bcebos.com", "Range": "bytes=0-99"},
    )

    # Range is not signed, so the signed header list is empty
    print(f"Authorization: {token}")


def explicit_headers_example():
    """Sign an extra header and inspect the intermediate values"""
    print("\n=== Explicitly Signed Headers Example ===")

    config = (create_signing_config()
              .access_key("example-access-key")
              .secret_key("example-secret-key")
              .default_expiry(600)
              .timestamp_generator(lambda: datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
              .build())
    authorizer = Authorizer(config)

    result = authorizer.sign_request(SigningRequest(
        method="PUT",
        path="/docs/report 2023.pdf",
        query={"acl": None},
        headers={
            "Host": "mybucket.gz.bcebos.com",
            "Content-Length": "0",
            "x-bce-acl": "public-read",
            "Author": "Thomas",
        },
        options=SigningOptions(sign_headers=["author"]),
    ))

    print("Canonical request:")
    print(result.canonical_request)
    print(f"\nSigned headers: {result.signed_headers}")
    print(f"Authorization: {result.token}")


if __name__ == "__main__":
    basic_signing_example()
    explicit_headers_example()
