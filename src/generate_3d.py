#!/usr/bin/env python3
"""
Health Grid Viewer Generator - 3D Globe

Generates an interactive 3D page for the health grid:
- Nodes pinned to their globe positions (see compute_layout.py)
- Hub drawn as a cube, sensors as octahedra, everything else as spheres
- Click a node to select it; the API plays back its reveal sequence
- Sidebar with the selected entity and its connections / sequence steps
- Ambient arcs when nothing is selected

The page polls the API for the current frame, so all reveal logic lives in
the server. Without a reachable API it still renders the idle frame that is
embedded at generation time.

Usage:
    python src/generate_3d.py --input data/examples/health_grid.json --output output/html/health_grid.html
    python src/generate_3d.py -i data/examples/health_grid.json -o out.html --api http://localhost:8085
"""

import argparse
import html as html_lib
import json
from pathlib import Path

from compute_layout import GLOBE_RADIUS, compute_positions
from network_data import NetworkData, load_network
from render_adapter import render_frame

FRAME_POLL_MS = 100


def generate_html(network: NetworkData, title: str, api_base: str = "") -> str:
    """Generate the viewer page for a grid."""

    positions = compute_positions(network)

    nodes_list = []
    for entity in network.entities.values():
        x, y, z = positions[entity.id]
        nodes_list.append({
            "id": entity.id,
            "name": entity.label,
            "fx": x,
            "fy": y,
            "fz": z,
        })

    links_list = [
        {"source": c.source, "target": c.target, "edgeType": c.category}
        for c in network.connections
    ]

    initial_frame = render_frame(network, None).model_dump(mode="json")

    nodes_json = json.dumps(nodes_list)
    links_json = json.dumps(links_list)
    frame_json = json.dumps(initial_frame)
    api_json = json.dumps(api_base.rstrip("/"))

    subtitle = html_lib.escape(network.metadata.get("description", "Click a node to explore"))
    title = html_lib.escape(title)

    html = f'''<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{title}</title>
    <link rel="icon" href="data:,">
    <script src="//unpkg.com/three@0.160.0/build/three.min.js"></script>
    <script src="//unpkg.com/3d-force-graph@1.73.4/dist/3d-force-graph.min.js"></script>
    <style>
        * {{
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }}
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #000000;
            overflow: hidden;
        }}
        #graph {{
            width: 100vw;
            height: 100vh;
        }}
        #titles {{
            position: absolute;
            top: 30px;
            left: 30px;
            z-index: 10;
            pointer-events: none;
        }}
        #titles h1 {{
            color: white;
            letter-spacing: 2px;
            text-shadow: 0 0 20px #d946ef;
        }}
        #titles p {{
            color: #06b6d4;
            margin-top: 5px;
            font-size: 14px;
            text-transform: uppercase;
        }}
        #sidebar {{
            position: absolute;
            top: 0;
            right: 0;
            bottom: 0;
            width: 0;
            background: rgba(5, 5, 20, 0.95);
            border-left: 2px solid #333;
            transition: all 0.4s ease;
            color: white;
            overflow: hidden;
            z-index: 20;
        }}
        #sidebar.open {{
            width: 400px;
        }}
        #sidebar .content {{
            padding: 40px;
        }}
        #sidebar button {{
            float: right;
            background: none;
            border: none;
            color: white;
            font-size: 24px;
            cursor: pointer;
        }}
        #sidebar h2 {{
            font-size: 32px;
        }}
        #sidebar .type {{
            font-size: 12px;
            letter-spacing: 1.5px;
            color: #888;
            margin-bottom: 30px;
        }}
        #sidebar .items {{
            margin-top: 30px;
            padding: 20px;
            background: rgba(255,255,255,0.05);
            border-radius: 10px;
        }}
        #sidebar li {{
            margin-left: 20px;
            color: #aaa;
            line-height: 1.6;
        }}
        #sidebar li.pending {{
            opacity: 0.3;
        }}
        #sidebar li.current {{
            color: white;
            font-weight: bold;
        }}
    </style>
</head>
<body>
    <div id="graph"></div>
    <div id="titles">
        <h1>{title.upper()}</h1>
        <p>{subtitle}</p>
    </div>
    <div id="sidebar"><div class="content" id="sidebar-content"></div></div>

    <script>
        const API_BASE = {api_json};
        const nodesData = {nodes_json};
        const linksData = {links_json};
        let frame = {frame_json};
        let frameKey = '';
        let cameraKey = '';
        const GLOBE_RADIUS = {GLOBE_RADIUS};

        const nodeStyles = () => Object.fromEntries(frame.nodes.map(n => [n.id, n]));
        const arcKey = (s, t) => s + '|' + t;
        const arcStyles = () => Object.fromEntries(frame.arcs.map(a => [arcKey(a.source, a.target), a]));
        const linkEnd = (end) => typeof end === 'object' ? end.id : end;

        function buildMesh(style) {{
            let geometry;
            const s = style.shape.size * style.scale;
            if (style.shape.kind === 'box') geometry = new THREE.BoxGeometry(s, s, s);
            else if (style.shape.kind === 'octahedron') geometry = new THREE.OctahedronGeometry(s);
            else geometry = new THREE.SphereGeometry(s, style.shape.segments, style.shape.segments);

            const material = new THREE.MeshPhongMaterial({{
                color: style.color,
                emissive: style.color,
                emissiveIntensity: style.emissive_intensity,
                transparent: true,
                opacity: style.opacity
            }});
            return new THREE.Mesh(geometry, material);
        }}

        const graph = ForceGraph3D()(document.getElementById('graph'))
            .backgroundColor('#000000')
            .graphData({{ nodes: nodesData, links: linksData }})
            .nodeLabel('name')
            .nodeThreeObject(node => buildMesh(nodeStyles()[node.id]))
            .linkCurvature(0.25)
            .linkDirectionalParticleSpeed(0.01)
            .onNodeClick(node => post('/api/select/' + encodeURIComponent(node.id)));

        function applyFrame() {{
            const arcs = arcStyles();
            const style = link => arcs[arcKey(linkEnd(link.source), linkEnd(link.target))];
            graph
                .nodeThreeObject(node => buildMesh(nodeStyles()[node.id]))
                .linkColor(link => style(link).color)
                .linkWidth(link => style(link).stroke)
                .linkCurvature(link => style(link).altitude)
                .linkDirectionalParticles(link => style(link).revealed && !frame.default_layer_visible ? 4 : 0);

            applyCamera(frame.camera);
            renderSidebar();
        }}

        // Same convention as compute_layout.latlng_to_xyz
        function latLngToXyz(lat, lng, altitude) {{
            const phi = (90 - lat) * Math.PI / 180;
            const theta = (90 - lng) * Math.PI / 180;
            const r = GLOBE_RADIUS * (1 + altitude);
            return {{
                x: r * Math.sin(phi) * Math.cos(theta),
                y: r * Math.cos(phi),
                z: r * Math.sin(phi) * Math.sin(theta)
            }};
        }}

        function applyCamera(camera) {{
            const controls = graph.controls();
            if (controls) {{
                controls.autoRotate = camera.auto_rotate;
                controls.autoRotateSpeed = camera.auto_rotate_speed;
            }}

            // Fly only when the directive changes
            const key = JSON.stringify(camera);
            if (key === cameraKey) return;
            cameraKey = key;

            const center = {{ x: 0, y: 0, z: 0 }};
            if (camera.lat !== null && camera.lng !== null) {{
                graph.cameraPosition(latLngToXyz(camera.lat, camera.lng, camera.altitude), center, camera.transition_ms);
                return;
            }}
            // No target: keep the current direction, move to the requested altitude
            const pos = graph.cameraPosition();
            const len = Math.hypot(pos.x, pos.y, pos.z) || 1;
            const scale = GLOBE_RADIUS * (1 + camera.altitude) / len;
            graph.cameraPosition({{ x: pos.x * scale, y: pos.y * scale, z: pos.z * scale }}, center, camera.transition_ms);
        }}

        function element(tag, text, className) {{
            const el = document.createElement(tag);
            if (text !== undefined) el.textContent = text;
            if (className) el.className = className;
            return el;
        }}

        function renderSidebar() {{
            const sidebar = document.getElementById('sidebar');
            const content = document.getElementById('sidebar-content');
            const view = frame.sidebar;
            content.replaceChildren();
            if (!view) {{
                sidebar.classList.remove('open');
                sidebar.style.borderLeftColor = '#333';
                return;
            }}
            sidebar.classList.add('open');
            sidebar.style.borderLeftColor = view.color;

            const close = element('button', '×');
            close.addEventListener('click', () => post('/api/close'));
            const title = element('h2', view.title);
            title.style.color = view.color;
            const heading = element('h4', view.heading);
            heading.style.color = view.color;

            const list = element('ul');
            for (const item of view.items) {{
                const cls = item.current ? 'current' : (item.revealed ? '' : 'pending');
                list.appendChild(element('li', item.label, cls));
            }}
            const items = element('div', undefined, 'items');
            items.append(heading, list);

            content.append(close, title, element('div', view.type_label, 'type'), element('p', view.description), items);
        }}

        async function post(path) {{
            try {{
                await fetch(API_BASE + path, {{ method: 'POST' }});
                await poll();
            }} catch (err) {{
                console.warn('API unavailable', err);
            }}
        }}

        async function poll() {{
            try {{
                const response = await fetch(API_BASE + '/api/frame');
                if (!response.ok) return;
                const next = await response.json();
                const key = JSON.stringify(next);
                if (key !== frameKey) {{
                    frameKey = key;
                    frame = next;
                    applyFrame();
                }}
            }} catch (err) {{
                // Static page without a server keeps the embedded frame
            }}
        }}

        applyFrame();
        setInterval(poll, {FRAME_POLL_MS});
    </script>
</body>
</html>'''

    return html


def generate_visualization(
    input_path: str,
    output_path: str,
    api_base: str = "",
) -> str:
    """Generate the 3D viewer page from grid JSON."""
    network = load_network(input_path)
    title = network.metadata.get("title", "Network Visualization")

    print(f"Loaded grid: {len(network.entities)} nodes, {len(network.connections)} edges")

    html = generate_html(network, title, api_base=api_base)

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, 'w') as f:
        f.write(html)

    print(f"Generated 3D viewer: {output_file}")
    return str(output_file)


def main():
    parser = argparse.ArgumentParser(
        description="Generate the 3D health grid viewer from JSON data"
    )
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Path to input JSON file"
    )
    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Path for output HTML file"
    )
    parser.add_argument(
        "--api",
        default="",
        help="Base URL of the grid API (defaults to the page's own origin)"
    )

    args = parser.parse_args()

    generate_visualization(
        input_path=args.input,
        output_path=args.output,
        api_base=args.api,
    )


if __name__ == "__main__":
    main()
