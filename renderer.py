# renderer.py v1.1 - "Snapshot"
# Part of Project Tesseract: 4D Projection Lab
# Draws the live handles of an InMemoryRenderTarget into a PNG with a
# matplotlib 3D axes. This is a headless preview, not a real-time renderer.

import os

import numpy as np
import matplotlib
matplotlib.use('Agg') # Use a non-interactive backend for headless runs
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Line3DCollection, Poly3DCollection

from styling import COLOR_BACKGROUND, FIG_DPI, FIG_SIZE_INCHES, FONT_SIZE_TITLE

WORLD_TO_POINTS = 400.0   # Line widths below 1.0 are in world units
VIEW_LIMIT = 3.0

# The 6 faces of a unit box, as indices into its 8 corners.
_BOX_CORNERS = np.array([[x, y, z] for x in (-0.5, 0.5) for y in (-0.5, 0.5) for z in (-0.5, 0.5)])
_BOX_FACES = [[0, 1, 3, 2], [4, 5, 7, 6], [0, 1, 5, 4], [2, 3, 7, 6], [0, 2, 6, 4], [1, 3, 7, 5]]

def _line_width(material: dict) -> float:
    width = material.get('linewidth', 1.0)
    return width * WORLD_TO_POINTS if width < 1.0 else width

def _draw_line_set(ax, handle):
    if handle.edges is None or len(handle.edges) == 0:
        return
    segments = handle.positions[handle.edges]
    ax.add_collection3d(Line3DCollection(
        segments,
        colors=[handle.material.get('color', (1.0, 1.0, 1.0))],
        linewidths=_line_width(handle.material),
        alpha=handle.material.get('opacity', 1.0),
    ))

def _draw_points(ax, handle, default_size: float):
    size = handle.material.get('size', handle.material.get('radius', default_size))
    positions = handle.positions
    ax.scatter(positions[:, 0], positions[:, 1], positions[:, 2],
               c=np.clip(handle.colors, 0.0, 1.0), s=(size * 200.0) ** 2 / 10.0,
               alpha=handle.material.get('opacity', 1.0), depthshade=False, edgecolors='none')

def _draw_mesh(ax, handle):
    material = handle.material
    if not material.get('visible', True):
        return
    corners = _BOX_CORNERS * np.asarray(material.get('scale', (1.0, 1.0, 1.0))) + handle.positions[0]
    faces = [corners[face] for face in _BOX_FACES]
    ax.add_collection3d(Poly3DCollection(
        faces,
        facecolors=[material.get('color', (1.0, 0.0, 1.0))],
        edgecolors=[material.get('emissive', (0.2, 0.0, 0.2))],
        alpha=material.get('opacity', 1.0),
    ))

def render_frame(render_target, output_path: str, title: str = "",
                 elevation: float = 20.0, azimuth: float = -60.0, view_limit: float = VIEW_LIMIT) -> str:
    """Renders every live handle of `render_target` to `output_path`."""
    fig = plt.figure(figsize=FIG_SIZE_INCHES, dpi=FIG_DPI)
    try:
        fig.set_facecolor(COLOR_BACKGROUND)
        ax = fig.add_subplot(projection='3d')
        ax.set_facecolor(COLOR_BACKGROUND)

        for handle in render_target.live_handles():
            if handle.kind == 'line_set':
                _draw_line_set(ax, handle)
            elif handle.kind == 'markers':
                _draw_points(ax, handle, default_size=0.05)
            elif handle.kind == 'point_cloud':
                _draw_points(ax, handle, default_size=0.05)
            elif handle.kind == 'mesh':
                _draw_mesh(ax, handle)

        ax.set_xlim(-view_limit, view_limit)
        ax.set_ylim(-view_limit, view_limit)
        ax.set_zlim(-view_limit, view_limit)
        ax.view_init(elev=elevation, azim=azimuth)
        ax.set_axis_off()
        if title:
            ax.set_title(title, fontsize=FONT_SIZE_TITLE, color='white', pad=20)

        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(output_path, dpi=FIG_DPI, facecolor=fig.get_facecolor())
    finally:
        plt.close(fig)
    return output_path
