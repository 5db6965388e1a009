#!/usr/bin/env python3
"""
BOS Python SDK - Bucket Client Example

Uploads, reads and deletes an object. Needs BOS_ACCESS_KEY, BOS_SECRET_KEY,
BOS_BUCKET and BOS_REGION in the environment.
"""

import logging
import sys

from bos_sdk import BosClient, BosError, ServerCommunicationError, load_config_from_env


def main() -> int:
    logging.basicConfig(level=logging.INFO)

    with BosClient(load_config_from_env()) as client:
        try:
            client.put_object("/bos_example.txt", "bos test")
            print(client.get_object("/bos_example.txt", headers={"Range": "bytes=0-2"}))
            print(client.get_object_meta("/bos_example.txt"))
            client.delete_object("/bos_example.txt")
        except BosError as e:
            print(f"BOS error {e.bos_code} (request id {e.request_id}): {e.message}", file=sys.stderr)
            return 1
        except ServerCommunicationError as e:
            print(f"Transport error: {e}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
