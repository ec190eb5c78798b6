#!/usr/bin/env python3
"""
CLI Module - Handles command-line interface and argument parsing
"""

import argparse
import logging
from typing import Optional

from trace_sending import Config

logger = logging.getLogger("cli")


class CLI:
    """Command Line Interface handler"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.parser = self._create_parser()

    def parse_args(self, args: Optional[list] = None):
        """Parse command line arguments"""
        return self.parser.parse_args(args)

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser"""
        config = self.config
        parser = argparse.ArgumentParser(
            description='Synthetic Trace Generator - sends generated distributed traces to a Wavefront proxy',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog='''
EXAMPLES:
  python main.py --config topology.yaml
      Send a trace from the configured topology every 30 seconds

  python main.py --dry-run --count 5 --app-count 3 --services-per-app 4
      Log five traces from a small random topology instead of sending them

  python main.py --config topology.yaml --list-entrypoints --export-graph output/graph
      Inspect a topology without sending anything
            '''
        )

        parser.add_argument('--config', type=str, default=config.TOPOLOGY_FILE or None,
                            metavar='TOPOLOGY_FILE',
                            help='YAML topology file (default: random topology)')
        parser.add_argument('--frequency-ms', type=int, default=config.SEND_FREQUENCY_MS,
                            help=f'Milliseconds between traces (default: {config.SEND_FREQUENCY_MS})')
        parser.add_argument('--count', type=int, default=None,
                            help='Number of traces to send before exiting (default: run forever)')
        parser.add_argument('--dry-run', action='store_true',
                            help='Log spans instead of sending them')
        parser.add_argument('--seed', type=int, default=None,
                            help='Seed for the random source, for reproducible topologies')
        parser.add_argument('--verbose', action='store_true',
                            help='Enable debug logging')

        # Inspection
        parser.add_argument('--list-entrypoints', action='store_true',
                            help='Print the topology summary and entrypoints, then exit')
        parser.add_argument('--export-graph', type=str, metavar='OUTPUT_DIR',
                            help='Write the call graph as DOT and adjacency list files')

        # Random topology sizes
        random_group = parser.add_argument_group('random topology')
        random_group.add_argument('--app-count', type=int, default=config.TOPOLOGY_APP_COUNT)
        random_group.add_argument('--services-per-app', type=int, default=config.TOPOLOGY_SERVICES_PER_APP)
        random_group.add_argument('--operations-per-service', type=int,
                                  default=config.TOPOLOGY_OPERATIONS_PER_SERVICE)
        random_group.add_argument('--internal-calls', type=int, default=config.TOPOLOGY_INTERNAL_CALL_COUNT)

        return parser

    def validate_args(self, args) -> bool:
        """Validate argument combinations"""
        if args.frequency_ms <= 0:
            logger.error("--frequency-ms must be positive")
            return False

        if args.count is not None and args.count < 1:
            logger.error("--count must be at least 1")
            return False

        for name in ('app_count', 'services_per_app', 'operations_per_service', 'internal_calls'):
            if getattr(args, name) < 0:
                logger.error(f"--{name.replace('_', '-')} must not be negative")
                return False

        return True
