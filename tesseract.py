# tesseract.py v2.0
# Part of Project Tesseract: 4D Projection Lab
# v2.0: "Tesseract Explorer"
# - A wireframe 4-cube rotating in four planes at once, drawn as an edge set
#   plus one marker per vertex.
# - Rotation speeds are in radians per second and scale with the frame delta.
# - Vertex markers are tinted by their rotated W coordinate.

import numpy as np

from base_simulation import AbstractSimulation
from controls import slider
from math4d import W_PERSPECTIVE_DISTANCE, project_points, rotate_points
from parameters import resolve
from styling import COLOR_TESSERACT_EDGES, COLOR_TESSERACT_VERTICES, hex_to_rgb, hsl_to_rgb
from topologies import TopologyFactory

TESSERACT_SIZE = 1.5

class TesseractSimulation(AbstractSimulation):
    info = {
        'title': "Tesseract Explorer",
        'description': ("A 4-dimensional hypercube (tesseract) projected into 3D space. "
                        "Observe how it appears to turn 'inside out', a characteristic of 4D rotation."),
    }

    def __init__(self, render_target, renderer_size: dict = None, size: float = TESSERACT_SIZE):
        super().__init__(render_target, renderer_size)
        self.size = size
        self.angles = {'xw': 0.0, 'yz': 0.0, 'zw': 0.0, 'xy': 0.0}
        self.rotation_speeds = {'xw': 0.5, 'yz': 0.7, 'zw': 0.3, 'xy': 0.1}
        self.w_perspective_distance = W_PERSPECTIVE_DISTANCE

        self.rotated_points = None
        self.line_set = None
        self.vertex_markers = None

    def _build_topology(self):
        return TopologyFactory.create('hypercube', {'size': self.size})

    def _create_render_objects(self):
        self.rotated_points = np.array(self.topology.points)
        projected = project_points(self.rotated_points, self.w_perspective_distance)

        self.line_set = self._acquire(self.render_target.acquire_line_set(
            projected, self.topology.edges,
            color=hex_to_rgb(COLOR_TESSERACT_EDGES),
            linewidth=0.0035,
            opacity=0.9,
            resolution=(self.renderer_size['width'], self.renderer_size['height']),
        ))
        self.vertex_markers = self._acquire(self.render_target.acquire_markers(
            projected, self._vertex_colors(self.rotated_points[:, 3]),
            radius=0.05,
            base_color=hex_to_rgb(COLOR_TESSERACT_VERTICES),
        ))

    def _vertex_colors(self, w_values: np.ndarray) -> np.ndarray:
        w_norm = (w_values + self.size / 2) / self.size
        return hsl_to_rgb(0.08 + w_norm * 0.05, 0.9, 0.5)

    def _step(self, delta_time, elapsed_time, params):
        self.advance_angles(delta_time, params)
        self.w_perspective_distance = resolve(params, 'wPerspectiveDistance', self.w_perspective_distance)

        rotate_points(self.topology.points, self.angles, out=self.rotated_points)
        project_points(self.rotated_points, self.w_perspective_distance, out=self.line_set.positions)
        self.vertex_markers.positions[:] = self.line_set.positions
        self.vertex_markers.colors[:] = self._vertex_colors(self.rotated_points[:, 3])

    def _resize(self, new_size):
        self.line_set.material['resolution'] = (new_size['width'], new_size['height'])

    def get_ui_controls(self) -> list:
        return [
            slider('rotationSpeeds.xw', 'XW Rotation Speed', -1, 1, 0.01, self.rotation_speeds['xw']),
            slider('rotationSpeeds.yz', 'YZ Rotation Speed', -1, 1, 0.01, self.rotation_speeds['yz']),
            slider('rotationSpeeds.zw', 'ZW Rotation Speed', -1, 1, 0.01, self.rotation_speeds['zw']),
            slider('rotationSpeeds.xy', 'XY Rotation Speed', -1, 1, 0.01, self.rotation_speeds['xy']),
            slider('wPerspectiveDistance', 'W Perspective Distance', 1, 10, 0.1, self.w_perspective_distance),
        ]
