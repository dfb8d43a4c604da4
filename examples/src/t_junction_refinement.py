#!/usr/bin/env python3
"""
Refine a cube whose front face is split by a T-junction.

The front face is cut into two halves by a vertical edge between the
midpoints of its bottom and top sides. Those midpoints are T-junctions
for the bottom and top faces, which become 5-sided in the edge graph but
stay rectangular in knot space.

Author: Wataru Fukuda
"""

import sys
import argparse

# Use Agg backend if --save is specified (non-interactive)
if '--save' in sys.argv:
    import matplotlib
    matplotlib.use('Agg')

import numpy as np

from watfTNURCC import Tnurcc
from watfTNURCC.visualization import plot_control_net


def make_split_cube() -> Tnurcc:
    points = np.array([
        [0.0, 0.0, 0.0], [0.0, 0.0, 1.0], [1.0, 0.0, 1.0], [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0], [0.0, 1.0, 1.0], [1.0, 1.0, 1.0], [1.0, 1.0, 0.0],
        [0.5, 0.0, 0.0], [0.5, 0.0, 1.0],
    ])
    faces = [
        # front, split at x = 0.5
        [(0, [(8, 0.5)]), (8, [(9, 1.0)]), (9, [(1, 0.5)]), (1, [(0, 1.0)])],
        [(8, [(3, 0.5)]), (3, [(2, 1.0)]), (2, [(9, 0.5)]), (9, [(8, 1.0)])],
        # left
        [(0, [(1, 1.0)]), (1, [(5, 1.0)]), (5, [(4, 1.0)]), (4, [(0, 1.0)])],
        # top, T-junction at 9
        [(1, [(9, 0.5), (2, 0.5)]), (2, [(6, 1.0)]), (6, [(5, 1.0)]), (5, [(1, 1.0)])],
        # back
        [(4, [(5, 1.0)]), (5, [(6, 1.0)]), (6, [(7, 1.0)]), (7, [(4, 1.0)])],
        # right
        [(2, [(3, 1.0)]), (3, [(7, 1.0)]), (7, [(6, 1.0)]), (6, [(2, 1.0)])],
        # bottom, T-junction at 8
        [(0, [(4, 1.0)]), (4, [(7, 1.0)]), (7, [(3, 1.0)]), (3, [(8, 0.5), (0, 0.5)])],
    ]
    return Tnurcc.try_new(points, faces)


def main():
    parser = argparse.ArgumentParser(description="T-junction refinement")
    parser.add_argument("--levels", type=int, default=1,
                        help="Subdivision levels")
    parser.add_argument("--save", action="store_true",
                        help="Save figure to file")
    args = parser.parse_args()

    mesh = make_split_cube()
    print(f"Input:   {mesh}")

    for level in range(args.levels):
        mesh.global_subdivide()
        mesh.verify()
        print(f"Level {level + 1}: {mesh}")

    save_path = "t_junction_net.png" if args.save else None
    plot_control_net(mesh, save_path=save_path, show=not args.save)
    if save_path:
        print(f"Saved: {save_path}")


if __name__ == "__main__":
    main()
