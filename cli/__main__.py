"""Entry point for the scripture memory CLI client."""

import argparse
import sys

from cli.api_client import ScriptureAPIClient
from cli.console import ConsoleUI


def main():
    parser = argparse.ArgumentParser(description='Scripture Memory - fill-in-the-blank practice')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--device',
        default='cli',
        help='Device ID used for the local progress cache (default: cli)'
    )
    args = parser.parse_args()

    client = ScriptureAPIClient(base_url=args.server, device_id=args.device)
    ui = ConsoleUI(client)

    try:
        ui.run()
    except KeyboardInterrupt:
        print('\nGoodbye!')
        ui.shutdown()
        sys.exit(0)


if __name__ == '__main__':
    main()
