"""
Step 4: Interactive Network Explorer
====================================
Reads the influence network (.json) and generates a standalone
HTML file with a D3.js force-directed visualisation.

Features:
  - Person nodes (sized by connection count), venture nodes (squares)
  - Edges coloured by relationship category
  - Category toggles
  - Click-to-highlight neighbourhood
  - Ventures, first quote and image on the info panel

Reads: results/graph_data_optimized.json (falls back to graph_data.json)
Writes: results/network_explorer.html

Usage:
    python step4_visualize.py
    python step4_visualize.py --input results/graph_data.json
"""

import argparse
import json

from config import (
    GRAPH_JSON_PATH, OPTIMIZED_JSON_PATH, EXPLORER_HTML_PATH,
    ensure_dirs,
)
from network_utils import load_graph_json

CATEGORY_ORDER = ['personal', 'professional', 'political', 'financial', 'connection', 'business']


def normalize_image_path(path):
    """Serve images from the web root: '/public/img/a.jpg' → '/img/a.jpg'."""
    if not path:
        return ''
    return path.replace('/public/', '/', 1)


def extract_graph_data(graph):
    """Flatten the graph into nodes + edges for the visualisation."""
    nodes = []
    for nid, d in graph.nodes(data=True):
        nodes.append({
            'id': nid,
            'name': d.get('name', nid),
            'type': d.get('node_type', 'person'),
            'connections': int(d.get('connection_count', 0)),
            'ventures': list(d.get('ventures', [])),
            'quote': (d.get('quotes') or [''])[0],
            'image': normalize_image_path(d.get('image', '')),
            'placeholder': bool(d.get('placeholder', False)),
        })

    # --- Edges (skip self-loops) ---
    edges = []
    n_skipped = 0
    for u, v, d in graph.edges(data=True):
        if u == v:
            n_skipped += 1
            continue
        edges.append({
            'source': u, 'target': v,
            'type': d.get('type', ''),
            'category': d.get('category', 'professional'),
            'amount': d.get('amount', ''),
        })

    present = {e['category'] for e in edges}
    categories = [c for c in CATEGORY_ORDER if c in present] + sorted(present - set(CATEGORY_ORDER))

    print(f"    Export: nodes={len(nodes)}, edges={len(edges)}, skipped={n_skipped}")
    return {'nodes': nodes, 'edges': edges, 'categories': categories}


def generate_html(graph_data, output_path):
    """Embed data into HTML template and write file."""
    data_json = json.dumps(graph_data, separators=(',', ':'), ensure_ascii=False)
    data_json = data_json.replace('</', '<\\/')

    html = HTML_TEMPLATE.replace('__GRAPH_DATA__', data_json)

    with open(str(output_path), 'w', encoding='utf-8') as f:
        f.write(html)
    print(f"  Saved: {output_path} ({len(html)//1024} KB)")
    return html


HTML_TEMPLATE = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>Influence Network Explorer</title>
<script src="https://cdnjs.cloudflare.com/ajax/libs/d3/7.8.5/d3.min.js"></script>
<style>
*{margin:0;padding:0;box-sizing:border-box}
body{font-family:sans-serif;background:#0a0e17;color:#c8d6e5;overflow:hidden;height:100vh}
.app{display:grid;grid-template-columns:300px 1fr;height:100vh}
.sidebar{background:#0f1420;padding:18px;overflow-y:auto;display:flex;flex-direction:column;gap:14px}
h1{font-size:16px;color:#fff}
.section-label{font-size:9px;font-weight:700;text-transform:uppercase;letter-spacing:0.12em;color:#4a5a6a;margin-bottom:6px}
.chips{display:flex;flex-wrap:wrap;gap:4px}
.chip{font-size:10px;padding:3px 8px;border-radius:12px;border:1px solid rgba(255,255,255,0.1);cursor:pointer;color:#8a9ab0;user-select:none}
.chip.active{background:rgba(255,255,255,0.1);color:#fff}
.info-panel{background:rgba(255,255,255,0.03);border:1px solid rgba(255,255,255,0.08);border-radius:8px;padding:12px;font-size:11px;line-height:1.6}
.info-panel h3{font-size:13px;color:#fff}
.info-panel img{max-width:100%;border-radius:4px;margin-top:6px}
.graph-area{position:relative;overflow:hidden}
svg{width:100%;height:100%}
.label{font-size:10px;fill:#fff;pointer-events:none}
</style>
</head>
<body>
<div class="app">
<div class="sidebar">
    <div><h1>Influence Network</h1><div class="section-label" id="stats"></div></div>
    <div><div class="section-label">Relationships</div><div class="chips" id="cat-chips"></div></div>
    <div><div class="section-label">Selected</div><div class="info-panel" id="info-panel">Click any node to inspect.</div></div>
</div>
<div class="graph-area" id="graph-area"></div>
</div>
<script>
const DATA=__GRAPH_DATA__;
const CC={personal:'#22c55e',professional:'#3b82f6',political:'#f59e0b',financial:'#ef4444',connection:'#64748b',business:'#8b5cf6'};
const on=new Set(DATA.categories);
const area=document.getElementById('graph-area'),W=area.clientWidth,H=area.clientHeight;
const svg=d3.select('#graph-area').append('svg');const g=svg.append('g');
svg.call(d3.zoom().scaleExtent([0.1,8]).on('zoom',e=>g.attr('transform',e.transform)));
const chips=document.getElementById('cat-chips');
DATA.categories.forEach(c=>{const el=document.createElement('div');el.className='chip active';el.textContent=c;el.style.borderColor=CC[c]||'#888';el.onclick=()=>{el.classList.toggle('active');if(on.has(c))on.delete(c);else on.add(c);upd()};chips.appendChild(el)});
const lG=g.append('g'),nG=g.append('g');
const sim=d3.forceSimulation().force('charge',d3.forceManyBody().strength(-120)).force('center',d3.forceCenter(W/2,H/2)).force('collide',d3.forceCollide().radius(14));
const sid=x=>typeof x==='object'?x.id:x;
function upd(){
const vE=DATA.edges.filter(e=>on.has(e.category));
document.getElementById('stats').textContent=`${DATA.nodes.length} nodes · ${vE.length} edges`;
const lk=lG.selectAll('line').data(vE,e=>sid(e.source)+'|'+sid(e.target)+'|'+e.type);lk.exit().remove();
const lkM=lk.enter().append('line').attr('stroke-width',1.5).merge(lk).attr('stroke',e=>CC[e.category]||'#888').attr('stroke-opacity',0.6);
const nd=nG.selectAll('.node').data(DATA.nodes,n=>n.id);
const ne=nd.enter().append('g').attr('class','node').on('click',clickN).call(d3.drag().on('start',ds).on('drag',dr).on('end',de));
ne.filter(n=>n.type!=='venture').append('circle').attr('r',n=>6+Math.sqrt(n.connections)*3).attr('fill',n=>n.placeholder?'#2a3444':'#3b82f6');
ne.filter(n=>n.type==='venture').append('rect').attr('width',12).attr('height',12).attr('x',-6).attr('y',-6).attr('fill','#8b5cf6');
ne.append('text').attr('class','label').attr('dy',-12).attr('text-anchor','middle').text(n=>n.name);
sim.nodes(DATA.nodes);sim.force('link',d3.forceLink(vE).id(n=>n.id).distance(80));sim.alpha(0.5).restart();
sim.on('tick',()=>{lkM.attr('x1',e=>e.source.x).attr('y1',e=>e.source.y).attr('x2',e=>e.target.x).attr('y2',e=>e.target.y);nG.selectAll('.node').attr('transform',n=>`translate(${n.x},${n.y})`)})}
function esc(s){return String(s==null?'':s).replace(/[&<>"']/g,c=>({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#39;'}[c]))}
function clickN(ev,d){
const p=document.getElementById('info-panel');
const img=d.image?`<img src="${esc(d.image)}" alt="">`:'';
const q=d.quote?`<br><em>"${esc(d.quote)}"</em>`:'';
p.innerHTML=`<h3>${esc(d.name)}</h3>${esc(d.type)}<br><strong>Connections:</strong> ${esc(d.connections)}<br><strong>Ventures:</strong> ${esc(d.ventures.join(', '))||'none'}${q}${img}`;
const cn=new Set([d.id]);lG.selectAll('line').each(e=>{if(sid(e.source)===d.id)cn.add(sid(e.target));if(sid(e.target)===d.id)cn.add(sid(e.source))});
nG.selectAll('.node').style('opacity',n=>cn.has(n.id)?1:0.1);lG.selectAll('line').style('opacity',e=>(sid(e.source)===d.id||sid(e.target)===d.id)?1:0.05)}
function ds(ev){if(!ev.active)sim.alphaTarget(0.1).restart();ev.subject.fx=ev.subject.x;ev.subject.fy=ev.subject.y}
function dr(ev){ev.subject.fx=ev.x;ev.subject.fy=ev.y}
function de(ev){if(!ev.active)sim.alphaTarget(0);ev.subject.fx=null;ev.subject.fy=null}
svg.on('click',ev=>{if(ev.target.tagName==='svg'){nG.selectAll('.node').style('opacity',1);lG.selectAll('line').style('opacity',null)}});
upd();
</script>
</body>
</html>"""


def main(argv=None):
    parser = argparse.ArgumentParser(description='Step 4: Interactive explorer')
    parser.add_argument('--input', default=None)
    parser.add_argument('--output', default=str(EXPLORER_HTML_PATH))
    args = parser.parse_args(argv)

    print("=" * 60)
    print("  Step 4: Interactive Network Explorer")
    print("=" * 60)

    ensure_dirs()
    source = args.input or (OPTIMIZED_JSON_PATH if OPTIMIZED_JSON_PATH.exists() else GRAPH_JSON_PATH)
    print(f"  Loading: {source}")
    graph = load_graph_json(source)
    graph_data = extract_graph_data(graph)
    generate_html(graph_data, args.output)

    print("=" * 60)


if __name__ == '__main__':
    main()
