"""
Step 1: Build Influence Network
===============================
Which people, organisations and ventures influence each other?

Pipeline:
  1. Read the CSV (local file or URL)
  2. Split rows, respecting quoted fields
  3. Decode Name / Influence / Ventures / Connections / Quotes / Image
  4. Extract typed relationships from the Influence field
  5. Build a NetworkX MultiDiGraph (one node per id, one edge per typed pair)

Reads: data/network_graph_relationships.csv (or --csv)
Writes: results/influence_network.graphml + results/graph_data.json

Usage:
    python step1_build_graph.py                         # Build with config defaults
    python step1_build_graph.py --csv https://host/x.csv
    python step1_build_graph.py --policy any-nonempty --ventures --connections
    python step1_build_graph.py --load                  # Load existing graph
"""

import argparse
import sys

from config import (
    DATA_CSV_PATH, GRAPHML_PATH, GRAPH_JSON_PATH,
    EDGE_TARGET_POLICY, ID_SCHEME, DELIMITER, RELATIONSHIP_SCHEME,
    EDGE_TARGET_POLICIES, ID_SCHEMES, DELIMITERS, RELATIONSHIP_SCHEMES,
    resolve_options, ensure_dirs,
)
from csv_utils import NetworkDataError
from network_utils import (
    load_network_csv,
    validate_network_graph,
    save_network_graph,
    load_network_graph,
    save_graph_json,
)


def options_from_args(args):
    """Translate CLI flags into TransformOptions."""
    return resolve_options(
        edge_target_policy=args.policy,
        derive_edges_from_ventures=args.ventures,
        derive_edges_from_connections=args.connections,
        id_scheme=args.id_scheme,
        delimiter=args.delimiter,
        relationship_scheme=args.scheme,
        match_last_names=args.last_names,
    )


def print_summary(graph):
    """Print node/edge counts and the most connected people."""
    n_people = sum(1 for _, d in graph.nodes(data=True) if d.get('node_type') == 'person')
    n_ventures = sum(1 for _, d in graph.nodes(data=True) if d.get('node_type') == 'venture')
    type_counts = {}
    for _, _, d in graph.edges(data=True):
        type_counts[d['type']] = type_counts.get(d['type'], 0) + 1

    print(f"\n  Network Summary:")
    print(f"    People nodes:      {n_people}")
    print(f"    Venture nodes:     {n_ventures}")
    print(f"    Total edges:       {graph.number_of_edges()}")
    for label, count in sorted(type_counts.items(), key=lambda x: -x[1]):
        print(f"      {label:18s}: {count}")

    ranked = sorted(graph.nodes(data=True), key=lambda x: -x[1].get('connection_count', 0))
    print(f"\n  Top 5 most-connected:")
    for node_id, d in ranked[:5]:
        print(f"    {d.get('name', node_id):24s}: {d.get('connection_count', 0)} connections")


def build(args):
    """Full pipeline: CSV → rows → records → graph → GraphML + JSON."""
    ensure_dirs()
    options = options_from_args(args)

    print("=" * 60)
    print("  Step 1: Build Influence Network")
    print("=" * 60)
    print(f"  Source: {args.csv}")
    print(f"  Edge target policy: {options.edge_target_policy}")
    print(f"  Id scheme: {options.id_scheme}")
    print(f"  Relationship scheme: {options.relationship_scheme}")

    if args.load:
        print(f"\n  Loading existing graph: {GRAPHML_PATH}")
        graph = load_network_graph(GRAPHML_PATH)
    else:
        print("\n  Parsing CSV...")
        graph = load_network_csv(args.csv, options=options, verbose=True)

    validate_network_graph(graph)
    print_summary(graph)

    if not args.load:
        save_network_graph(graph, GRAPHML_PATH)
        save_graph_json(graph, GRAPH_JSON_PATH)
        print(f"\n  Saved: {GRAPHML_PATH}")
        print(f"  Saved: {GRAPH_JSON_PATH}")
    print("=" * 60)
    return graph


def build_parser():
    parser = argparse.ArgumentParser(description='Step 1: Build influence network')
    parser.add_argument('--csv', default=DATA_CSV_PATH, help='CSV path or http(s) URL')
    parser.add_argument('--load', action='store_true', help='Load existing GraphML instead of parsing')
    parser.add_argument('--policy', choices=EDGE_TARGET_POLICIES, default=EDGE_TARGET_POLICY)
    parser.add_argument('--id-scheme', choices=ID_SCHEMES, default=ID_SCHEME)
    parser.add_argument('--delimiter', choices=DELIMITERS, default=DELIMITER)
    parser.add_argument('--scheme', choices=RELATIONSHIP_SCHEMES, default=RELATIONSHIP_SCHEME)
    parser.add_argument('--ventures', action='store_true', help='Add venture nodes and business edges')
    parser.add_argument('--connections', action='store_true', help='Add edges from the Connections column')
    parser.add_argument('--last-names', action='store_true', help='Resolve targets given by last name only')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        return build(args)
    except NetworkDataError as exc:
        print(f"\n  ERROR: {exc}")
        sys.exit(1)


if __name__ == '__main__':
    main()
