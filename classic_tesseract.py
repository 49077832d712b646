# classic_tesseract.py v1.0
# Part of Project Tesseract: 4D Projection Lab
# v1.0: "Classic Tesseract"
# - The first-generation tesseract: plain line segments, no vertex markers.
# - Keeps its historical rotation order (XY, XW, YZ, ZW) instead of
#   math4d.ROTATION_ORDER.
# - The historical per-frame steps (0.005, 0.007, 0.002, 0.003 rad) are
#   expressed here as speeds at 60 frames per second and scale with the delta.

import numpy as np

from base_simulation import AbstractSimulation
from controls import slider
from math4d import W_PERSPECTIVE_DISTANCE, project_points, rotate_points
from parameters import resolve
from styling import COLOR_CLASSIC_EDGES, hex_to_rgb
from topologies import TopologyFactory

TESSERACT_SIZE = 1.5
CLASSIC_ROTATION_ORDER = ('xy', 'xw', 'yz', 'zw')
REFERENCE_FPS = 60

class ClassicTesseractSimulation(AbstractSimulation):
    info = {
        'title': "Classic Tesseract",
        'description': ("The original tesseract visualization. Observe how the 'inner' cube appears to "
                        "turn 'inside out' without passing through the faces of the 'outer' cube."),
    }

    def __init__(self, render_target, renderer_size: dict = None, size: float = TESSERACT_SIZE):
        super().__init__(render_target, renderer_size)
        self.size = size
        self.angles = {'xy': 0.0, 'xw': 0.0, 'yz': 0.0, 'zw': 0.0}
        self.rotation_speeds = {
            'xw': 0.005 * REFERENCE_FPS,
            'yz': 0.007 * REFERENCE_FPS,
            'xy': 0.002 * REFERENCE_FPS,
            'zw': 0.003 * REFERENCE_FPS,
        }
        self.perspective_distance = W_PERSPECTIVE_DISTANCE
        self.rotated_points = None
        self.lines = None

    def _build_topology(self):
        return TopologyFactory.create('hypercube', {'size': self.size})

    def _create_render_objects(self):
        self.rotated_points = np.array(self.topology.points)
        self.lines = self._acquire(self.render_target.acquire_line_set(
            project_points(self.rotated_points, self.perspective_distance),
            self.topology.edges,
            color=hex_to_rgb(COLOR_CLASSIC_EDGES),
            linewidth=2,
        ))

    def _step(self, delta_time, elapsed_time, params):
        self.advance_angles(delta_time, params)
        self.perspective_distance = resolve(params, 'perspectiveDistance', self.perspective_distance)

        rotate_points(self.topology.points, self.angles, out=self.rotated_points, order=CLASSIC_ROTATION_ORDER)
        project_points(self.rotated_points, self.perspective_distance, out=self.lines.positions)

    def get_ui_controls(self) -> list:
        limit = 0.02 * REFERENCE_FPS
        step = 0.001 * REFERENCE_FPS
        return [
            slider('rotationSpeeds.xw', 'XW Rotation Speed', -limit, limit, step, self.rotation_speeds['xw']),
            slider('rotationSpeeds.yz', 'YZ Rotation Speed', -limit, limit, step, self.rotation_speeds['yz']),
            slider('rotationSpeeds.xy', 'XY Rotation Speed', -limit, limit, step, self.rotation_speeds['xy']),
            slider('rotationSpeeds.zw', 'ZW Rotation Speed', -limit, limit, step, self.rotation_speeds['zw']),
            slider('perspectiveDistance', 'Perspective Distance', 1, 10, 0.1, self.perspective_distance),
        ]
