"""Shared CSV fixtures for the influence network tests."""
import pytest

SCENARIO_A = (
    "Name,Influence,Ventures,Connections,Quotes,Image\n"
    "Alice,Friends with Bob;Hired Charlie,Company A;Company B,Bob;Charlie,Quote 1|Quote 2,/img/a.jpg\n"
    "Bob,Hired Charlie,Company B,,Quote 3,/img/b.jpg\n"
    "Charlie,,,Alice;Bob,,/img/c.jpg"
)

HEADER = "Name,Influence,Ventures,Connections,Quotes,Image\n"


def edge_triples(graph):
    return {(u, v, d['type']) for u, v, d in graph.edges(data=True)}


@pytest.fixture
def scenario_a():
    return SCENARIO_A


@pytest.fixture
def ten_node_csv():
    """N0..N9 where Ni lists i connections and is friends with N(i+1)."""
    lines = [HEADER.rstrip('\n')]
    for i in range(10):
        influence = f"Friends with N{i + 1}" if i < 9 else ""
        connections = ';'.join(f"c{j}" for j in range(i))
        lines.append(f"N{i},{influence},,{connections},,")
    return '\n'.join(lines)
