"""
Dependency Analysis Package

This package renders the operation call graph of a synthetic topology.
"""

from .dependency_graph import (
    export_call_graph,
    generate_adjacency_list,
    generate_dot_graph,
    get_call_graph_summary,
    topology_summary,
)

__all__ = ['export_call_graph', 'generate_adjacency_list', 'generate_dot_graph',
           'get_call_graph_summary', 'topology_summary']
