"""
Call Graph Export for Synthetic Topologies

Renders the operation call graph of a topology as a DOT file, a
human-readable adjacency list and a text summary.
"""

import logging
from pathlib import Path
from typing import Dict, List

import networkx as nx

from synthetic_traces import Topology

logger = logging.getLogger("dependency-graph")


def generate_dot_graph(graph: nx.DiGraph) -> str:
    """Generate DOT format string for Graphviz visualization."""
    dot_lines = ["digraph operation_calls {"]
    dot_lines.append("  rankdir=LR;")
    dot_lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")
    dot_lines.append("  edge [color=gray];")
    dot_lines.append("")

    # Group operations by application
    applications = {}
    for node, data in graph.nodes(data=True):
        applications.setdefault(data.get('application', 'unknown'), []).append(node)

    for index, (application, nodes) in enumerate(sorted(applications.items())):
        dot_lines.append(f"  subgraph cluster_{index} {{")
        dot_lines.append(f'    label="{application}";')
        for node in sorted(nodes):
            dot_lines.append(f'    "{node}";')
        dot_lines.append("  }")

    dot_lines.append("")

    for u, v in graph.edges():
        weight = graph[u][v].get('weight', 1)
        if weight > 1:
            dot_lines.append(f'  "{u}" -> "{v}" [label="{weight}"];')
        else:
            dot_lines.append(f'  "{u}" -> "{v}";')

    dot_lines.append("}")
    return "\n".join(dot_lines)


def generate_adjacency_list(graph: nx.DiGraph, output_file) -> None:
    """Generate human-readable adjacency list file."""
    with open(output_file, 'w') as f:
        f.write("OPERATION CALL GRAPH ADJACENCY LIST\n")
        f.write("=" * 50 + "\n\n")

        for operation in sorted(graph.nodes()):
            calls = list(graph.successors(operation))
            called_by = list(graph.predecessors(operation))

            f.write(f"Operation: {operation}\n")
            f.write(f"  Calls: {calls if calls else ['(none)']}\n")
            f.write(f"  Called by: {called_by if called_by else ['(none)']}\n")
            f.write("\n")


def get_call_graph_summary(topology: Topology) -> Dict:
    """Get a summary of the topology and its call graph."""
    graph = topology.call_graph()
    roots = sorted(n for n in graph.nodes() if graph.in_degree(n) == 0)
    leaves = sorted(n for n in graph.nodes() if graph.out_degree(n) == 0)
    cross_application = [
        (u, v) for u, v in graph.edges()
        if graph.nodes[u].get('application') != graph.nodes[v].get('application')
    ]
    longest_chain = nx.dag_longest_path(graph) if graph.number_of_edges() else []

    return {
        'total_applications': len(topology.applications()),
        'total_services': sum(len(app.services) for app in topology.applications()),
        'total_operations': graph.number_of_nodes(),
        'total_calls': graph.number_of_edges(),
        'cross_application_calls': len(cross_application),
        'entrypoints': [op.slug for op in topology.entrypoints()],
        'root_operations': roots,
        'leaf_operations': leaves,
        'longest_call_chain': longest_chain,
    }


def topology_summary(topology: Topology) -> str:
    """Get a text summary of the topology structure."""
    summary = get_call_graph_summary(topology)
    lines = ["Topology Summary:"]
    lines.append(f"  Applications: {summary['total_applications']}")
    lines.append(f"  Services: {summary['total_services']}")
    lines.append(f"  Operations: {summary['total_operations']}")
    lines.append(f"  Calls: {summary['total_calls']} ({summary['cross_application_calls']} cross-application)")
    lines.append(f"  Entrypoints: {len(summary['entrypoints'])}")
    if summary['longest_call_chain']:
        lines.append(f"  Longest call chain: {' -> '.join(summary['longest_call_chain'])}")
    return "\n".join(lines)


def export_call_graph(topology: Topology, output_dir: str) -> List[str]:
    """
    Write the DOT file and adjacency list of a topology's call graph.

    Returns:
        List of generated output file paths
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    graph = topology.call_graph()

    dot_file = output_path / "call_graph.dot"
    with open(dot_file, 'w') as f:
        f.write(generate_dot_graph(graph))
    logger.info(f"DOT file saved: {dot_file}")

    adj_file = output_path / "call_graph_adjacency.txt"
    generate_adjacency_list(graph, adj_file)
    logger.info(f"Adjacency list saved: {adj_file}")

    return [str(dot_file), str(adj_file)]
