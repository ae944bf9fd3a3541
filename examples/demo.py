"""Demo script: extrude a few grid polygons and render them with matplotlib."""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from polyprism import PrismProperties, PrismRequest, load_config
from polyprism.model.colour import to_unit_rgba

FIXTURES = Path(__file__).resolve().parent.parent / "tests" / "fixtures"
OUTPUT = Path(__file__).resolve().parent / "prisms.pdf"

# Flat [x0, y0, x1, y1, ...] buffers in grid units (precision 100).
POLYGONS = {
    "tower": ([0, 0, 300, 0, 300, 300, 0, 300], 900, "steelblue"),
    "wing": ([400, 0, 800, 0, 800, 100, 500, 100, 500, 300, 400, 300], 300, "brick"),
    "plaza": ([0, 500, 800, 500, 600, 700, 100, 800], 20, (200, 200, 120)),
}


def main():
    registry = load_config(FIXTURES / "extrusion.json").build_registry()
    requests = []
    for name, (points, height, style) in POLYGONS.items():
        if style in registry.materials:
            props = PrismProperties(height=height, colour="firebrick", material=style)
        else:
            props = PrismProperties(height=height, colour=style)
        requests.append(PrismRequest(name, np.array(points), props))

    result = registry.create_many(requests)
    print(f"Built {len(result.created)} prism(s), {len(result.failed)} failed")

    fig = plt.figure(figsize=(6, 5))
    ax = fig.add_subplot(projection="3d")
    for prism in registry:
        world = prism.world_vertices()
        # Matplotlib's z axis is up; prisms extrude along y.
        xyz = world[:, [0, 2, 1]]
        faces = Poly3DCollection(
            xyz[prism.mesh.faces],
            facecolor=to_unit_rgba(prism.colour),
            edgecolor=(0.2, 0.2, 0.2, 0.3),
            linewidth=0.3,
        )
        ax.add_collection3d(faces)
        print(f"  {prism.name}: area {prism.area:.2f}, height {prism.height:.2f}")

    lo = np.min([p.world_vertices().min(axis=0) for p in registry], axis=0)
    hi = np.max([p.world_vertices().max(axis=0) for p in registry], axis=0)
    ax.set_xlim(lo[0], hi[0])
    ax.set_ylim(lo[2], hi[2])
    ax.set_zlim(lo[1], hi[1])
    fig.savefig(OUTPUT)
    print(f"Rendered to {OUTPUT}")


if __name__ == "__main__":
    main()
