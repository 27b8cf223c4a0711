"""End-to-end tests for the step scripts, run inside a temporary working directory."""
import json
from pathlib import Path

import pytest

import run_all
import step1_build_graph
import step2_optimize
import step3_analysis
from config import resolve_options
from network_utils import parse_network_csv
from step3_analysis import node_summary_frame, relationship_summary_frame, component_summary_frame
from step4_visualize import extract_graph_data, generate_html, normalize_image_path

SAMPLE_CSV = Path(__file__).resolve().parents[1] / 'data' / 'network_graph_relationships.csv'


@pytest.fixture
def workdir(tmp_path, monkeypatch, scenario_a):
    monkeypatch.chdir(tmp_path)
    csv_path = tmp_path / 'network.csv'
    csv_path.write_text(scenario_a, encoding='utf-8')
    return tmp_path


def test_step1_writes_graphml_and_json(workdir):
    graph = step1_build_graph.main(['--csv', 'network.csv'])
    assert graph.number_of_nodes() == 3
    assert (workdir / 'results' / 'influence_network.graphml').exists()
    data = json.loads((workdir / 'results' / 'graph_data.json').read_text(encoding='utf-8'))
    assert [n['id'] for n in data['nodes']] == ['Alice', 'Bob', 'Charlie']
    assert len(data['links']) == 3


def test_step1_load_existing(workdir):
    step1_build_graph.main(['--csv', 'network.csv', '--ventures'])
    graph = step1_build_graph.main(['--load'])
    assert graph.number_of_nodes() == 5


def test_step1_empty_csv_exits(workdir):
    (workdir / 'empty.csv').write_text('  \n', encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        step1_build_graph.main(['--csv', 'empty.csv'])
    assert excinfo.value.code == 1


def test_step1_missing_csv_exits(workdir):
    with pytest.raises(SystemExit):
        step1_build_graph.main(['--csv', 'nowhere.csv'])


def test_step2_optimizes_saved_graph(workdir):
    step1_build_graph.main(['--csv', 'network.csv'])
    optimized = step2_optimize.main(['--max-nodes', '2'])
    assert list(optimized.nodes) == ['Alice', 'Charlie']
    assert (workdir / 'results' / 'graph_data_optimized.json').exists()


def test_analysis_frames(scenario_a):
    graph = parse_network_csv(scenario_a, verbose=False)
    nodes = node_summary_frame(graph)
    assert list(nodes['id']) == ['Alice', 'Charlie', 'Bob']
    assert nodes.loc[0, 'out_degree'] == 2
    assert nodes.loc[1, 'in_degree'] == 2

    relationships = relationship_summary_frame(graph)
    assert relationships.loc[0, 'type'] == 'Hired'
    assert relationships.loc[0, 'count'] == 2

    components = component_summary_frame(graph)
    assert len(components) == 1
    assert components.loc[0, 'size'] == 3


def test_analysis_on_empty_graph():
    graph = parse_network_csv("Name,Influence\n", verbose=False)
    assert relationship_summary_frame(graph).empty
    assert node_summary_frame(graph).empty


def test_step3_writes_tables(workdir):
    step1_build_graph.main(['--csv', 'network.csv'])
    step3_analysis.main([])
    for name in ('nodes.csv', 'relationships.csv', 'components.csv'):
        assert (workdir / 'results' / 'stats' / name).exists()


def test_normalize_image_path():
    assert normalize_image_path('/public/img/a.jpg') == '/img/a.jpg'
    assert normalize_image_path('https://example.org/a.jpg') == 'https://example.org/a.jpg'
    assert normalize_image_path('') == ''


def test_explorer_html(tmp_path):
    text = SAMPLE_CSV.read_text(encoding='utf-8')
    graph = parse_network_csv(text, options=resolve_options(derive_edges_from_ventures=True), verbose=False)
    data = extract_graph_data(graph)
    alice = next(n for n in data['nodes'] if n['id'] == 'Alice Carter')
    assert alice['image'] == '/img/alice.jpg'
    assert alice['quote'] == 'Build the room, then fill it.'
    assert 'business' in data['categories']

    out = tmp_path / 'explorer.html'
    html = generate_html(data, out)
    assert out.exists()
    assert '__GRAPH_DATA__' not in html
    assert 'Alice Carter' in html


def test_explorer_html_escapes_csv_text(tmp_path):
    csv_text = (
        'Name,Influence,Ventures,Connections,Quotes,Image\n'
        'Eve</script><img src=x onerror=alert(1)>,,,,<b>bold</b>,x" onerror="alert(2)\n'
    )
    data = extract_graph_data(parse_network_csv(csv_text, verbose=False))
    html = generate_html(data, tmp_path / 'explorer.html')
    assert 'Eve</script>' not in html
    assert 'Eve<\\/script>' in html
    assert '${esc(d.name)}' in html and '${esc(d.quote)}' in html and '${esc(d.image)}' in html
    assert '${d.name}' not in html


def test_run_all_pipeline(workdir):
    run_all.main(['--csv', 'network.csv', '--max-nodes', '2'])
    results = workdir / 'results'
    assert (results / 'graph_data.json').exists()
    assert (results / 'graph_data_optimized.json').exists()
    assert (results / 'stats' / 'nodes.csv').exists()
    assert (results / 'network_explorer.html').exists()


def test_run_step_flags():
    assert run_all.run_step(1, set(), set())
    assert not run_all.run_step(1, {1}, set())
    assert not run_all.run_step(2, set(), {3})
