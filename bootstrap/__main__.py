# bootstrap/__main__.py
"""
Assemble the configuration the way the service does at startup and print
resolved settings.

    python -m bootstrap --env Development ConnectionString FeatureX
"""
import argparse
import asyncio
import sys
from pathlib import Path

from bootstrap.config.config_service import assemble_configuration
from bootstrap.exceptions import BootstrapError
from bootstrap.logging_setup import setup_logging
from configs.resolver import DEFAULT_SETTING_NAME


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='bootstrap', description='Resolve configuration values.')
    parser.add_argument('keys', nargs='+', help='Setting keys to resolve')
    parser.add_argument('--env', dest='environment_name', default=None, help='Environment name (default: ASPNETCORE_ENVIRONMENT)')
    parser.add_argument('--base-path', type=Path, default=Path.cwd(), help='Directory holding appsettings files')
    parser.add_argument('--local', action='store_true', default=None, help='Skip secret store and key vault')
    parser.add_argument('--setting', default=DEFAULT_SETTING_NAME, help='Setting section name')
    parser.add_argument('--plural-sections', action='store_true', help="Also try '{setting}s:{key}'")
    parser.add_argument('--timeout', type=float, default=None, help='Seconds to wait for the secret fetch')
    parser.add_argument('--log-level', default='WARNING')
    return parser


async def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logging(args.log_level)

    try:
        service = await assemble_configuration(
            base_path=args.base_path,
            environment_name=args.environment_name,
            is_local=args.local,
            include_plural_sections=args.plural_sections,
            secret_fetch_timeout=args.timeout,
        )
    except (BootstrapError, asyncio.TimeoutError) as e:
        logger.error('Configuration assembly failed: %s', e)
        return 1

    for key in args.keys:
        print(f'{key}={service.get_config_value(key, setting_name=args.setting)}')
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
