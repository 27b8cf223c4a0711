#import modules
import json
import re
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import networkx as nx
from pydantic import ValidationError

from config import (
    TransformOptions, resolve_options, relationship_category,
    CONNECTION_LABEL, VENTURE_LABEL,
)
from csv_utils import (
    Record, GraphValidationError,
    read_csv_source, parse_csv_rows, decode_records, split_list,
    extract_relationships, extract_freeform_relationships,
)
from graph_models import NetworkModel, ExportedNetwork

LIST_ATTRS = ('ventures', 'quotes', 'connections')

## 1. Node identity

def make_node_id(name : str, id_scheme : str = 'raw-name') -> str:
    r"""Identity key for `name`.
    `raw-name` keeps the name as is (case-sensitive), `sanitized-slug` lowercases it and replaces every
    character outside `[a-z0-9]` with `-`.
    """
    if id_scheme == 'sanitized-slug':
        return re.sub(r'[^a-z0-9]', '-', name.lower())
    return name

def _merge_unique(existing : List[str], new : List[str]) -> List[str]:
    return list(existing) + [item for item in new if item not in existing]

def _add_placeholder(graph : nx.MultiDiGraph, node_id : str, name : str) -> None:
    if not graph.has_node(node_id):
        graph.add_node(
            node_id, name=name, ventures=[], quotes=[], connections=[],
            connection_count=0, image='', node_type='person', placeholder=True,
        )

def _upsert_primary(graph : nx.MultiDiGraph, node_id : str, record : Record) -> None:
    """Fill a node from a primary row, completing a placeholder or merging a repeated name."""
    if graph.has_node(node_id) and not graph.nodes[node_id].get('placeholder', False):
        data = graph.nodes[node_id]
        data['ventures'] = _merge_unique(data['ventures'], record.ventures)
        data['quotes'] = _merge_unique(data['quotes'], record.quotes)
        data['connections'] = _merge_unique(data['connections'], record.connections)
        data['connection_count'] = len(data['connections'])
        data['image'] = data['image'] or record.image
        data['node_type'] = 'person'
        return
    graph.add_node(
        node_id,
        name=record.name,
        ventures=list(record.ventures),
        quotes=list(record.quotes),
        connections=list(record.connections),
        connection_count=len(record.connections),
        image=record.image,
        node_type='person',
        placeholder=False,
    )

def _add_edge(
    graph : nx.MultiDiGraph,
    source : str,
    target : str,
    label : str,
    origin : str,
    description : str = '',
    amount : Optional[str] = None,
    category : Optional[str] = None,
) -> None:
    attrs = {
        'type': label,
        'category': category or relationship_category(label),
        'origin': origin,
        'description': description,
    }
    if amount:
        attrs['amount'] = amount
    # key=label collapses repeated (source, target, type) triples
    graph.add_edge(source, target, key=label, **attrs)

def _pair_connected(graph : nx.MultiDiGraph, a : str, b : str) -> bool:
    return graph.has_edge(a, b) or graph.has_edge(b, a)

def _last_name_aliases(records : List[Record]) -> Dict[str, str]:
    r"""Map each unambiguous last word of a multi-word primary name to that name.
    """
    seen = {}
    ambiguous = set()
    for record in records:
        parts = record.name.split()
        if len(parts) < 2:
            continue
        last = parts[-1]
        if last in seen and seen[last] != record.name:
            ambiguous.add(last)
        seen.setdefault(last, record.name)
    return {last: name for last, name in seen.items() if last not in ambiguous}

## 2. Building the network graph

def build_network_graph(
    records : List[Record],
    options : Optional[TransformOptions] = None,
    verbose : bool = True
) -> nx.MultiDiGraph:
    r"""Fold decoded records into a deduplicated directed multigraph.
    Nodes are keyed by id (see `make_node_id`). Edges are keyed by relationship label.
    Primary names are collected before any edge is added, so `options.edge_target_policy='primary-only'`
    is order independent. A target node is created (as a placeholder) in the same step as its edge,
    and later filled in if a primary row for it shows up.
    Connection edges and venture edges are added after all influence edges and are skipped for any
    pair of nodes already joined by an edge.
    """
    options = options or resolve_options()
    scheme = options.id_scheme
    extract = extract_freeform_relationships if options.relationship_scheme == 'freeform' else extract_relationships

    graph = nx.MultiDiGraph()
    primary_ids = {}
    for record in records:
        primary_ids.setdefault(make_node_id(record.name, scheme), record.name)
    aliases = _last_name_aliases(records) if options.match_last_names else {}

    def resolve_target(target_name):
        target_id = make_node_id(target_name, scheme)
        if target_id not in primary_ids and target_name in aliases:
            target_name = aliases[target_name]
            target_id = make_node_id(target_name, scheme)
        return target_name, target_id

    def target_allowed(target_id):
        return options.edge_target_policy == 'any-nonempty' or target_id in primary_ids

    n_dropped = 0
    n_influence = 0

    # ----- 1. Primary nodes + influence edges -----
    for record in records:
        source_id = make_node_id(record.name, scheme)
        _upsert_primary(graph, source_id, record)

        relationships = extract(record.influence_raw)
        n_dropped += len(split_list(record.influence_raw)) - len(relationships)
        for rel in relationships:
            target_name, target_id = resolve_target(rel.target_name)
            if not target_allowed(target_id):
                n_dropped += 1
                continue
            _add_placeholder(graph, target_id, target_name)
            _add_edge(graph, source_id, target_id, rel.kind, 'influence',
                      description=rel.description, amount=rel.amount)
            n_influence += 1

    # ----- 2. Connection edges -----
    n_connection = 0
    if options.derive_edges_from_connections:
        for record in records:
            source_id = make_node_id(record.name, scheme)
            for connection in record.connections:
                target_name, target_id = resolve_target(connection)
                if target_id == source_id or not target_allowed(target_id):
                    continue
                if _pair_connected(graph, source_id, target_id):
                    continue
                _add_placeholder(graph, target_id, target_name)
                _add_edge(graph, source_id, target_id, CONNECTION_LABEL, 'connection')
                n_connection += 1

    # ----- 3. Venture nodes + business edges -----
    n_venture = 0
    if options.derive_edges_from_ventures:
        for record in records:
            source_id = make_node_id(record.name, scheme)
            for venture in record.ventures:
                venture_id = make_node_id(venture, scheme)
                if venture_id == source_id:
                    continue
                if not graph.has_node(venture_id):
                    graph.add_node(
                        venture_id, name=venture, ventures=[], quotes=[], connections=[],
                        connection_count=0, image='', node_type='venture', placeholder=False,
                    )
                if _pair_connected(graph, source_id, venture_id):
                    continue
                _add_edge(graph, source_id, venture_id, VENTURE_LABEL, 'venture')
                n_venture += 1

    graph.graph['skipped_rows'] = 0
    graph.graph['dropped_relationships'] = n_dropped

    if verbose:
        print(f"    Nodes: {graph.number_of_nodes()} "
              f"({sum(1 for _, d in graph.nodes(data=True) if d.get('placeholder'))} placeholders)")
        print(f"    Edges: influence={n_influence}, connection={n_connection}, venture={n_venture}")
        if n_dropped:
            print(f"    Dropped relationships: {n_dropped}")
    return graph

def parse_network_csv(text : str, options : Optional[TransformOptions] = None, verbose : bool = True) -> nx.MultiDiGraph:
    r"""Full transform: CSV text → rows → records → graph.
    Raises `EmptyInputError` for empty text. A header with no data rows gives an empty graph.
    """
    options = options or resolve_options()
    rows = parse_csv_rows(text, delimiter=options.delimiter)
    records = decode_records(rows)
    graph = build_network_graph(records, options=options, verbose=verbose)
    graph.graph['skipped_rows'] = len(rows) - len(records)
    if verbose and graph.graph['skipped_rows']:
        print(f"    Skipped rows (no name): {graph.graph['skipped_rows']}")
    return graph

def load_network_csv(source : Union[str, Path], options : Optional[TransformOptions] = None, verbose : bool = True) -> nx.MultiDiGraph:
    r"""Read `source` (path or URL) and transform it. Source failures raise `SourceUnavailableError`.
    """
    text = read_csv_source(source)
    return parse_network_csv(text, options=options, verbose=verbose)

## 3. Optimizing

def optimize_network_graph(graph : nx.MultiDiGraph, max_nodes : int) -> nx.MultiDiGraph:
    r"""Keep the `max_nodes` nodes with the highest `connection_count` and the edges among them.
    Ties keep their original order. With `max_nodes <= 0`, or a graph already small enough, a copy of
    the whole graph is returned. The input graph is never modified.
    """
    if max_nodes <= 0 or graph.number_of_nodes() <= max_nodes:
        return deepcopy(graph)

    ranked = sorted(graph.nodes(data=True), key=lambda item: -item[1].get('connection_count', 0))
    optimized = nx.MultiDiGraph()
    optimized.graph.update(deepcopy(graph.graph))
    for node_id, data in ranked[:max_nodes]:
        optimized.add_node(node_id, **deepcopy(data))
    for u, v, key, data in graph.edges(keys=True, data=True):
        if optimized.has_node(u) and optimized.has_node(v):
            optimized.add_edge(u, v, key=key, **deepcopy(data))
    return optimized

## 4. Validation

def validate_network_graph(graph : nx.MultiDiGraph) -> bool:
    r"""Check every node and edge of `graph` against `NetworkModel`.
    Raises `GraphValidationError` (chained to the pydantic `ValidationError`) listing the problems found.
    """
    payload = {
        'nodes': [{**data, 'id': node_id} for node_id, data in graph.nodes(data=True)],
        'edges': [{**data, 'source': u, 'target': v} for u, v, data in graph.edges(data=True)],
    }
    try:
        NetworkModel.model_validate(payload)
    except ValidationError as exc:
        raise GraphValidationError(f"{exc.error_count()} problem(s) in graph: {exc}") from exc
    return True

## 5. Export / import

def graph_to_dict(graph : nx.MultiDiGraph, edge_key : str = 'links', type_key : str = 'type') -> Dict[str, Any]:
    r"""Export `graph` as `{nodes: [...], <edge_key>: [...]}` for JSON and the rendering layer.
    `edge_key` is usually `links` or `edges`, `type_key` usually `type` or `relationship`.
    """
    nodes = []
    for node_id, d in graph.nodes(data=True):
        nodes.append({
            'id': node_id,
            'name': d.get('name', node_id),
            'ventures': list(d.get('ventures', [])),
            'quotes': list(d.get('quotes', [])),
            'connections': list(d.get('connections', [])),
            'connectionCount': int(d.get('connection_count', 0)),
            'image': d.get('image', ''),
            'nodeType': d.get('node_type', 'person'),
            'placeholder': bool(d.get('placeholder', False)),
        })
    edges = []
    for u, v, d in graph.edges(data=True):
        edge = {
            'source': u,
            'target': v,
            type_key: d.get('type', ''),
            'category': d.get('category', ''),
            'origin': d.get('origin', 'influence'),
        }
        if d.get('description'):
            edge['description'] = d['description']
        if d.get('amount'):
            edge['amount'] = d['amount']
        edges.append(edge)
    return {'nodes': nodes, edge_key: edges}

def graph_from_dict(data : Dict[str, Any], verbose : bool = False) -> nx.MultiDiGraph:
    r"""Rebuild a graph from `graph_to_dict` output (either `edges` or `links`, `type` or `relationship`).
    The payload is parsed with `ExportedNetwork`; malformed nodes or edges raise `GraphValidationError`.
    Edges pointing at ids absent from `nodes` are dropped and counted in `graph.graph['dropped_edges']`.
    """
    try:
        network = ExportedNetwork.model_validate(data)
    except ValidationError as exc:
        raise GraphValidationError(f"{exc.error_count()} problem(s) in network data: {exc}") from exc

    graph = nx.MultiDiGraph()
    for node in network.nodes:
        graph.add_node(node.id, **node.graph_attrs())

    n_dropped = 0
    for edge in network.edges:
        if not graph.has_node(edge.source) or not graph.has_node(edge.target):
            n_dropped += 1
            continue
        _add_edge(graph, edge.source, edge.target, edge.type, edge.origin,
                  description=edge.description, amount=edge.amount, category=edge.category)
    graph.graph['dropped_edges'] = n_dropped
    if verbose and n_dropped:
        print(f"    Dropped edges with unknown endpoints: {n_dropped}")
    return graph

def save_graph_json(graph : nx.MultiDiGraph, path : Union[str, Path], edge_key : str = 'links', type_key : str = 'type') -> None:
    r"""Write `graph_to_dict(graph)` to `path` as indented UTF-8 JSON.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(graph_to_dict(graph, edge_key, type_key), f, indent=2, ensure_ascii=False)

def load_graph_json(path : Union[str, Path], verbose : bool = False) -> nx.MultiDiGraph:
    r"""Load a graph written by `save_graph_json`.
    """
    with open(path, 'r', encoding='utf-8') as f:
        return graph_from_dict(json.load(f), verbose=verbose)

def save_network_graph(graph : nx.MultiDiGraph, path : Union[str, Path]) -> None:
    r"""Save a network graph to a GraphML file.
    GraphML only stores scalars, so list attributes are serialised as JSON strings.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    out = nx.MultiDiGraph()
    out.graph.update(graph.graph)
    for node_id, d in graph.nodes(data=True):
        out.add_node(node_id, **{k: (json.dumps(v) if k in LIST_ATTRS else v) for k, v in d.items()})
    for u, v, key, d in graph.edges(keys=True, data=True):
        out.add_edge(u, v, key=key, **{k: val for k, val in d.items() if val is not None})
    nx.write_graphml(out, str(path))

def load_network_graph(path : Union[str, Path]) -> nx.MultiDiGraph:
    r"""Load a network graph from a GraphML file written by `save_network_graph`.
    """
    raw = nx.read_graphml(str(path), edge_key_type=str, force_multigraph=True)
    graph = nx.MultiDiGraph()
    graph.graph.update(raw.graph)
    for node_id, d in raw.nodes(data=True):
        attrs = dict(d)
        for k in LIST_ATTRS:
            attrs[k] = json.loads(attrs[k]) if k in attrs else []
        graph.add_node(node_id, **attrs)
    for u, v, key, d in raw.edges(keys=True, data=True):
        attrs = dict(d)
        graph.add_edge(u, v, key=attrs.get('type', key), **attrs)
    return graph
