"""
SessionMock CLI

Command-line checks for mock fixture files.

Commands:
    validate    - Load a fixture file and summarize its mocks
    resolve     - Show which mock answers consecutive requests for a URL

Examples:
    sessionmock validate tests/fixtures/mocks.yaml
    sessionmock resolve tests/fixtures/mocks.yaml https://api.example.com/users --repeat 3
"""

import argparse
import sys
from collections import Counter
from typing import List, Optional

from .common.errors import FixtureError, InvalidPatternError
from .mock.fixtures import FixtureLoader, register_fixtures
from .mock.registry import MockRegistry
from .mock.request import Request


def cmd_validate(args) -> int:
    """
    Validate a fixture file.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    try:
        definitions = FixtureLoader(args.fixture_file).load()
        registry = MockRegistry()
        # Registering compiles the patterns
        for definition in definitions:
            definition.register(registry)
    except (FixtureError, InvalidPatternError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    counts = Counter(definition.policy for definition in definitions)
    print(f"✅ {args.fixture_file}: {len(definitions)} mocks")
    for policy in ('once', 'always', 'pattern'):
        if counts[policy]:
            print(f"   {policy}: {counts[policy]}")
    return 0


def cmd_resolve(args) -> int:
    """
    Resolve a URL against a fixture file, repeatedly.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code (1 if the file is invalid)
    """
    registry = MockRegistry()
    try:
        register_fixtures(args.fixture_file, registry)
    except (FixtureError, InvalidPatternError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    request = Request(url=args.url, method=args.method)
    for attempt in range(1, args.repeat + 1):
        resolved = registry.resolve(request)
        if resolved is None:
            print(f"[{attempt}] {request} -> no match")
            continue

        response = resolved.response
        if response.is_failure:
            print(f"[{attempt}] {request} -> {resolved.rule!r}: error {response.error}")
            continue

        print(f"[{attempt}] {request} -> {resolved.rule!r}: {response.status_code} after {resolved.delay}s")
        if args.verbose:
            for name, value in response.headers.items():
                print(f"      {name}: {value}")
            print(f"      {response.body.decode('utf-8', errors='replace')}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='sessionmock',
        description='Check sessionmock fixture files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    validate_parser = subparsers.add_parser('validate', help='Validate a fixture file')
    validate_parser.add_argument('fixture_file', help='YAML or JSON fixture file')

    resolve_parser = subparsers.add_parser('resolve', help='Resolve a URL against a fixture file')
    resolve_parser.add_argument('fixture_file', help='YAML or JSON fixture file')
    resolve_parser.add_argument('url', help='Absolute request URL')
    resolve_parser.add_argument('-m', '--method', default='GET', help='HTTP method (default: GET)')
    resolve_parser.add_argument('-n', '--repeat', type=int, default=1, help='Number of consecutive requests (default: 1)')
    resolve_parser.add_argument('-v', '--verbose', action='store_true', help='Print headers and body')

    args = parser.parse_args(argv)

    if args.command == 'validate':
        return cmd_validate(args)
    if args.command == 'resolve':
        return cmd_resolve(args)

    parser.print_help()
    return 1


if __name__ == '__main__':
    sys.exit(main())
