#!/usr/bin/env python3
"""
Synthetic Trace Generator - Topology Loading and Trace Emission

Builds a topology of applications, services and operations (from a YAML
document, or randomly when none is given) and periodically sends a trace
generated from a random entrypoint to a Wavefront proxy.

Usage Examples:
    # Random topology, one trace every 30 seconds
    python main.py

    # Configured topology, sent every 5 seconds
    python main.py --config topology.yaml --frequency-ms 5000

    # Inspect a topology without sending anything
    python main.py --config topology.yaml --list-entrypoints --export-graph output/graph

    # Log three traces instead of sending them
    python main.py --dry-run --count 3
"""

import sys
import os
import logging
import random

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from synthetic_traces import CircularReferenceError, ConfigurationError, Topology, TopologyBuilder
from trace_sending import Config, LoggingClient, TraceSender, WavefrontClient
from dependency_analysis import export_call_graph, topology_summary
from pipeline import CLI, TraceEmitter

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("main-pipeline")


def build_topology(args, config: Config, rng: random.Random) -> Topology:
    """Load the configured topology, or synthesize a random one."""
    builder = TopologyBuilder(
        app_count=args.app_count,
        services_per_app=args.services_per_app,
        operations_per_service=args.operations_per_service,
        internal_calls_per_app=args.internal_calls,
        default_error_chance=config.ERROR_PERCENTAGE,
        rng=rng
    )
    if args.config:
        return builder.load_file(args.config)
    return builder.build(None)


def list_entrypoints(topology: Topology) -> None:
    print(topology_summary(topology))
    print()
    print("Entrypoints:")
    for operation in topology.entrypoints():
        print(f"  - {operation.slug}")


def main(argv=None) -> int:
    """Main entry point with command-line argument parsing."""
    config = Config()
    cli = CLI(config)
    args = cli.parse_args(argv)

    if not cli.validate_args(args):
        return 1

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    rng = random.Random(args.seed)

    try:
        topology = build_topology(args, config, rng)
    except FileNotFoundError as e:
        logger.error(f"Topology file not found: {e}")
        return 1
    except (ConfigurationError, CircularReferenceError) as e:
        logger.error(f"Invalid topology: {e}")
        return 1

    if args.export_graph:
        for output_file in export_call_graph(topology, args.export_graph):
            logger.info(f"Call graph: {output_file}")

    if args.list_entrypoints:
        list_entrypoints(topology)
        return 0

    if not topology.entrypoints():
        logger.error("Topology has no entrypoints - nothing to send")
        return 1

    if args.dry_run:
        client = LoggingClient()
    else:
        logger.info(f"Sending traces to: {config.tracing_endpoint}")
        client = WavefrontClient(config)

    emitter = TraceEmitter(topology, TraceSender(client), args.frequency_ms, rng=rng)
    try:
        emitter.run(max_cycles=args.count)
    except KeyboardInterrupt:
        logger.info("Interrupted - stopping trace emission")
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
