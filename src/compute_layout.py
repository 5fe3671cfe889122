#!/usr/bin/env python3
"""
Health Grid Layout Computation

Places every entity on the globe surface from its latitude/longitude, using
the same convention as the globe renderer (y axis through the poles,
longitude 0 facing +z).

Usage:
    python src/compute_layout.py --input data/examples/health_grid.json --output data/layout_results.json
"""

import argparse
import json
from datetime import datetime
from pathlib import Path

import numpy as np

from network_data import NetworkData, load_network

GLOBE_RADIUS = 100.0


def latlng_to_xyz(lat, lng, radius=GLOBE_RADIUS, altitude=0.0):
    """Convert degrees to cartesian coordinates. Accepts scalars or arrays."""
    phi = np.radians(90.0 - np.asarray(lat, dtype=float))
    theta = np.radians(90.0 - np.asarray(lng, dtype=float))
    r = radius * (1.0 + altitude)

    x = r * np.sin(phi) * np.cos(theta)
    y = r * np.cos(phi)
    z = r * np.sin(phi) * np.sin(theta)
    return x, y, z


def compute_positions(network: NetworkData, radius=GLOBE_RADIUS, altitude=0.0):
    """Compute {entity_id: (x, y, z)} for the whole grid in one pass."""
    ids = list(network.entities)
    if not ids:
        return {}

    lats = np.array([network.entities[i].lat for i in ids])
    lngs = np.array([network.entities[i].lng for i in ids])
    xs, ys, zs = latlng_to_xyz(lats, lngs, radius=radius, altitude=altitude)

    return {
        entity_id: (float(x), float(y), float(z))
        for entity_id, x, y, z in zip(ids, xs, ys, zs)
    }


def save_layout_results(positions, output_path, radius=GLOBE_RADIUS):
    """Save layout results to JSON."""
    print(f"Saving layout results to {output_path}...")

    results = {
        "metadata": {
            "generated_at": datetime.now().isoformat(),
            "total_entities": len(positions),
            "radius": radius,
        },
        "positions": {
            k: {"x": v[0], "y": v[1], "z": v[2]} for k, v in positions.items()
        },
    }

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, 'w') as f:
        json.dump(results, f, indent=2)

    print(f"Saved layout for {len(positions)} entities")
    return results


def main():
    parser = argparse.ArgumentParser(description="Compute globe positions for grid entities")
    parser.add_argument("--input", "-i", default="data/examples/health_grid.json", help="Input grid JSON")
    parser.add_argument("--output", "-o", default="data/layout_results.json", help="Output layout JSON")
    parser.add_argument("--radius", type=float, default=GLOBE_RADIUS, help="Globe radius")
    args = parser.parse_args()

    network = load_network(args.input)
    print(f"Loaded {len(network.entities)} entities")

    positions = compute_positions(network, radius=args.radius)
    save_layout_results(positions, args.output, radius=args.radius)


if __name__ == "__main__":
    main()
