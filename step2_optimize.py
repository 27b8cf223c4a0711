"""
Step 2: Optimize Network for Display
====================================
Large networks render slowly. Keep the top-K most connected nodes
and only the edges whose two endpoints both survive.

Reads: results/graph_data.json
Writes: results/graph_data_optimized.json

Usage:
    python step2_optimize.py                 # Use MAX_NODES from config
    python step2_optimize.py --max-nodes 20
    python step2_optimize.py --max-nodes 0   # Keep everything
"""

import argparse

from config import GRAPH_JSON_PATH, OPTIMIZED_JSON_PATH, MAX_NODES, ensure_dirs
from network_utils import load_graph_json, save_graph_json, optimize_network_graph


def main(argv=None):
    parser = argparse.ArgumentParser(description='Step 2: Optimize network')
    parser.add_argument('--max-nodes', type=int, default=MAX_NODES)
    parser.add_argument('--input', default=str(GRAPH_JSON_PATH))
    parser.add_argument('--output', default=str(OPTIMIZED_JSON_PATH))
    args = parser.parse_args(argv)

    print("=" * 60)
    print("  Step 2: Optimize Network")
    print("=" * 60)

    ensure_dirs()
    graph = load_graph_json(args.input, verbose=True)
    print(f"  Loaded: {graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges")

    optimized = optimize_network_graph(graph, args.max_nodes)
    print(f"  Kept (max {args.max_nodes}): "
          f"{optimized.number_of_nodes()} nodes, {optimized.number_of_edges()} edges")

    save_graph_json(optimized, args.output)
    print(f"\n  Saved: {args.output}")
    print("=" * 60)

    return optimized


if __name__ == '__main__':
    main()
