"""Entry point for alefbet CLI client."""

import argparse
import sys

from cli.api_client import AlefbetAPIClient
from cli.console import ConsoleUI


def main():
    parser = argparse.ArgumentParser(description='Alefbet - Hebrew letter practice')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    args = parser.parse_args()

    client = AlefbetAPIClient(base_url=args.server)
    ui = ConsoleUI(client)

    try:
        ui.run()
    except KeyboardInterrupt:
        print('\nGoodbye!')
        sys.exit(0)


if __name__ == '__main__':
    main()
