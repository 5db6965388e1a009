"""
Command-line interface for BOS Python SDK
Provides request signing and basic object operations
"""

import argparse
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from . import __version__
from .config import load_config_from_env, load_config_from_file
from .exceptions import BosError, BosSDKError, ServerCommunicationError
from .http_client import BosClient
from .signing import Authorizer, SigningError, SigningOptions, SigningRequest


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='bos-cli',
        description='BOS SDK command-line interface for request signing and object operations'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'BOS Python SDK {__version__}'
    )

    parser.add_argument(
        '--config',
        help='JSON configuration file (defaults to BOS_* environment variables)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_sign_parser(subparsers)
    setup_object_parsers(subparsers)

    return parser


def setup_sign_parser(subparsers):
    """Setup request signing subcommand."""
    sign_parser = subparsers.add_parser('sign', help='Compute the Authorization header for a request')
    sign_parser.add_argument('method', help='HTTP method (e.g. GET)')
    sign_parser.add_argument('path', help='Request path')
    sign_parser.add_argument('--access-key', help='Access key (default: BOS_ACCESS_KEY / BOS_KEY)')
    sign_parser.add_argument('--secret-key', help='Secret key (default: BOS_SECRET_KEY / BOS_SECRET)')
    sign_parser.add_argument(
        '--query', action='append', default=[], metavar='KEY[=VALUE]',
        help='Query parameter; omit "=" for a valueless flag (repeatable)'
    )
    sign_parser.add_argument(
        '--header', action='append', default=[], metavar='"NAME: VALUE"',
        help='Request header (repeatable)'
    )
    sign_parser.add_argument(
        '--sign-header', action='append', default=[], metavar='NAME',
        help='Extra header to include in the signature (repeatable)'
    )
    sign_parser.add_argument('--expires', type=int, help='Token validity in seconds (default: 1800)')
    sign_parser.add_argument('--show-canonical', action='store_true', help='Also print the canonical request')


def setup_object_parsers(subparsers):
    """Setup object operation subcommands."""
    get_parser = subparsers.add_parser('get', help='Download an object')
    get_parser.add_argument('path', help='Object path')
    get_parser.add_argument('--output', '-o', help='Write content to file instead of stdout')

    put_parser = subparsers.add_parser('put', help='Upload an object')
    put_parser.add_argument('path', help='Object path')
    put_parser.add_argument('file', help='File to upload')
    put_parser.add_argument('--content-type', help='Content-Type header')

    meta_parser = subparsers.add_parser('meta', help='Show object metadata')
    meta_parser.add_argument('path', help='Object path')

    delete_parser = subparsers.add_parser('delete', help='Delete an object')
    delete_parser.add_argument('path', help='Object path')

    list_parser = subparsers.add_parser('list', help='List objects')
    list_parser.add_argument('--prefix', help='Only keys starting with this prefix')
    list_parser.add_argument('--delimiter', help='Group keys by this delimiter')


def parse_query_args(items: List[str]) -> Dict[str, Optional[str]]:
    """Parse ``KEY=VALUE`` / ``KEY`` items into a query mapping."""
    query: Dict[str, Optional[str]] = {}
    for item in items:
        if '=' in item:
            key, value = item.split('=', 1)
            query[key] = value
        else:
            query[item] = None
    return query


def parse_header_args(items: List[str]) -> Dict[str, str]:
    """Parse ``NAME: VALUE`` items into a header mapping."""
    headers: Dict[str, str] = {}
    for item in items:
        if ':' not in item:
            raise ValueError(f"Invalid header (expected 'Name: value'): {item}")
        name, value = item.split(':', 1)
        headers[name.strip()] = value.strip()
    return headers


def handle_sign_command(args) -> int:
    """Handle request signing command."""
    access_key = args.access_key or os.environ.get('BOS_ACCESS_KEY') or os.environ.get('BOS_KEY')
    secret_key = args.secret_key or os.environ.get('BOS_SECRET_KEY') or os.environ.get('BOS_SECRET')
    if not access_key or not secret_key:
        print("Error: access key and secret key are required", file=sys.stderr)
        return 1

    try:
        authorizer = Authorizer.from_keys(access_key, secret_key)
        request = SigningRequest(
            method=args.method,
            path=args.path,
            query=parse_query_args(args.query),
            headers=parse_header_args(args.header),
            options=SigningOptions(sign_headers=args.sign_header, expired_in=args.expires)
        )
        result = authorizer.sign_request(request)
    except (SigningError, ValueError) as e:
        print(f"Error signing request: {e}", file=sys.stderr)
        return 1

    if args.show_canonical:
        print("Canonical request:")
        print(result.canonical_request)
        print()
    print(result.token)
    return 0


def load_client(args) -> BosClient:
    """Create a client from --config or the environment."""
    if args.config:
        config = load_config_from_file(args.config)
    else:
        config = load_config_from_env()
    return BosClient(config)


def handle_object_command(args) -> int:
    """Handle object operation commands."""
    with load_client(args) as client:
        if args.command == 'get':
            content = client.get_object(args.path)
            if args.output:
                with open(args.output, 'wb') as f:
                    f.write(content)
                print(f"Saved {len(content)} bytes to {args.output}")
            else:
                sys.stdout.buffer.write(content)
                sys.stdout.flush()
        elif args.command == 'put':
            with open(args.file, 'rb') as f:
                content = f.read()
            headers = {'Content-Type': args.content_type} if args.content_type else {}
            result = client.put_object(args.path, content, headers=headers)
            print(f"Uploaded {args.path} (ETag: {result.get('ETag', 'unknown')})")
        elif args.command == 'meta':
            print(json.dumps(client.get_object_meta(args.path), indent=2))
        elif args.command == 'delete':
            client.delete_object(args.path)
            print(f"Deleted {args.path}")
        elif args.command == 'list':
            query = {'prefix': args.prefix, 'delimiter': args.delimiter}
            result = client.list_objects(query={k: v for k, v in query.items() if v})
            for item in result.get('contents', []):
                print(item['key'])
    return 0


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        if args.command == 'sign':
            return handle_sign_command(args)
        elif args.command in ('get', 'put', 'meta', 'delete', 'list'):
            return handle_object_command(args)
        else:
            # No command specified, show help
            parser.print_help()
            return 1

    except BosError as e:
        print(f"BOS error: {e}", file=sys.stderr)
        return 1
    except ServerCommunicationError as e:
        print(f"Server communication error: {e}", file=sys.stderr)
        return 1
    except (BosSDKError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130


if __name__ == '__main__':
    sys.exit(main())
