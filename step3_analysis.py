"""
Step 3: Network Analysis
========================
Tabular summaries of the influence network.

  A. Node table: connections, in/out degree, ventures, quotes
  B. Relationship table: edge counts per type / category / origin
  C. Components: size of each weakly connected group

Reads: results/graph_data.json
Writes: results/stats/nodes.csv, relationships.csv, components.csv

Usage:
    python step3_analysis.py
    python step3_analysis.py --input results/graph_data_optimized.json
"""

import argparse

import networkx as nx
import pandas as pd

from config import GRAPH_JSON_PATH, STATS_DIR, ensure_dirs
from network_utils import load_graph_json

NODE_COLUMNS = [
    'id', 'name', 'node_type', 'connection_count', 'in_degree', 'out_degree',
    'n_ventures', 'n_quotes', 'placeholder',
]
RELATIONSHIP_COLUMNS = ['type', 'category', 'origin', 'count']


def node_summary_frame(graph):
    """One row per node, most connected first (ties keep graph order)."""
    rows = []
    for node_id, d in graph.nodes(data=True):
        rows.append({
            'id': node_id,
            'name': d.get('name', node_id),
            'node_type': d.get('node_type', 'person'),
            'connection_count': int(d.get('connection_count', 0)),
            'in_degree': graph.in_degree(node_id),
            'out_degree': graph.out_degree(node_id),
            'n_ventures': len(d.get('ventures', [])),
            'n_quotes': len(d.get('quotes', [])),
            'placeholder': bool(d.get('placeholder', False)),
        })
    df = pd.DataFrame(rows, columns=NODE_COLUMNS)
    return df.sort_values('connection_count', ascending=False, kind='stable').reset_index(drop=True)


def relationship_summary_frame(graph):
    """Edge counts per (type, category, origin)."""
    rows = [
        {'type': d.get('type', ''), 'category': d.get('category', ''), 'origin': d.get('origin', '')}
        for _, _, d in graph.edges(data=True)
    ]
    if not rows:
        return pd.DataFrame(columns=RELATIONSHIP_COLUMNS)
    df = pd.DataFrame(rows)
    counts = df.groupby(['type', 'category', 'origin'], sort=False).size().reset_index(name='count')
    return counts.sort_values('count', ascending=False, kind='stable').reset_index(drop=True)


def component_summary_frame(graph):
    """Weakly connected components, largest first."""
    rows = []
    for i, members in enumerate(nx.weakly_connected_components(graph)):
        names = [graph.nodes[n].get('name', n) for n in members]
        rows.append({'component': i, 'size': len(members), 'members': '; '.join(sorted(names))})
    df = pd.DataFrame(rows, columns=['component', 'size', 'members'])
    return df.sort_values('size', ascending=False, kind='stable').reset_index(drop=True)


def run_analysis(graph, out_dir=STATS_DIR):
    """Build the three tables, print the highlights and write them as CSV."""
    nodes = node_summary_frame(graph)
    relationships = relationship_summary_frame(graph)
    components = component_summary_frame(graph)

    print(f"\n  Top 10 most-connected nodes:")
    for _, r in nodes.head(10).iterrows():
        print(f"    {r['name']:24s}: {r['connection_count']} connections, "
              f"in={r['in_degree']} out={r['out_degree']}")

    print(f"\n  Relationships:")
    for _, r in relationships.iterrows():
        print(f"    {r['type']:18s} ({r['category']}, {r['origin']}): {r['count']}")

    print(f"\n  Components: {len(components)}")
    if len(components):
        print(f"    Largest: {components['size'].iloc[0]} nodes")

    out_dir.mkdir(parents=True, exist_ok=True)
    nodes.to_csv(out_dir / 'nodes.csv', index=False)
    relationships.to_csv(out_dir / 'relationships.csv', index=False)
    components.to_csv(out_dir / 'components.csv', index=False)
    print(f"\n  Saved: {out_dir}/nodes.csv, relationships.csv, components.csv")

    return {'nodes': nodes, 'relationships': relationships, 'components': components}


def main(argv=None):
    parser = argparse.ArgumentParser(description='Step 3: Network analysis')
    parser.add_argument('--input', default=str(GRAPH_JSON_PATH))
    args = parser.parse_args(argv)

    print("=" * 60)
    print("  Step 3: Network Analysis")
    print("=" * 60)

    ensure_dirs()
    graph = load_graph_json(args.input, verbose=True)
    results = run_analysis(graph)

    print("=" * 60)
    return results


if __name__ == '__main__':
    main()
