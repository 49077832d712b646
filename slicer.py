# slicer.py v1.1
# Part of Project Tesseract: 4D Projection Lab
# v1.1: "Coverage Placeholder"
# - A hyperplane w = sliceW sweeps back and forth through a rotating tesseract.
# - The 3D cross-section is NOT computed exactly. A stand-in box is scaled and
#   tinted by a coverage heuristic: how close the slice is to the tesseract's
#   centre in W, relative to its half-width.
# - An exact slice would clip every edge against the hyperplane and rebuild
#   the face polygons; that is deliberately not attempted here.

import math

from base_simulation import AbstractSimulation
from controls import slider
from math4d import Vec4, project, rotate_composed
from parameters import resolve
from styling import COLOR_SLICE_MESH, hex_to_rgb, hsl_to_rgb
from topologies import TopologyFactory

TESSERACT_SIZE = 1.5
CENTER_W = 0.0
MIN_VISIBLE_COVERAGE = 0.01

def slice_coverage(slice_w: float, center_w: float, half_width: float) -> float:
    """clamp(1 - |slice_w - center_w| / half_width, 0, 1)."""
    scale = 1.0 - abs(slice_w - center_w) / half_width
    return max(0.0, min(1.0, scale))

class SlicerSimulation(AbstractSimulation):
    info = {
        'title': "4D Slicer (Tesseract)",
        'description': ("Approximates 3D cross-sections of a tesseract as it passes through a hyperplane "
                        "at a moving W coordinate, like the 2D slices of an MRI scan. The slice shape is "
                        "a placeholder whose size follows how much of the tesseract the plane cuts."),
    }

    def __init__(self, render_target, renderer_size: dict = None, size: float = TESSERACT_SIZE):
        super().__init__(render_target, renderer_size)
        self.size = size
        self.slice_w = 0.0
        self.slice_speed = 0.3
        self.slice_amplitude = 1.5
        self.coverage = 1.0
        self.angles = {'xw': 0.0, 'yz': 0.0}
        self.rotation_speeds = {'xw': 0.2, 'yz': 0.14}
        self.slice_mesh = None

    def _build_topology(self):
        return TopologyFactory.create('hypercube', {'size': self.size})

    def _create_render_objects(self):
        self.slice_mesh = self._acquire(self.render_target.acquire_mesh(
            'box',
            color=hex_to_rgb(COLOR_SLICE_MESH),
            metalness=0.5,
            roughness=0.4,
            opacity=0.8,
        ))
        self._update_slice_visuals()

    def _update_slice_visuals(self):
        self.coverage = slice_coverage(self.slice_w, CENTER_W, self.size / 2)
        edge = self.coverage * self.size
        hue = 0.5 + self.slice_w / 3

        material = self.slice_mesh.material
        material['scale'] = (edge, edge, edge)
        material['color'] = tuple(hsl_to_rgb(hue, 0.8, 0.5))
        material['emissive'] = tuple(hsl_to_rgb(hue, 0.8, self.coverage * 0.2))
        material['visible'] = self.coverage > MIN_VISIBLE_COVERAGE

    def _step(self, delta_time, elapsed_time, params):
        self.slice_speed = resolve(params, 'sliceSpeed', self.slice_speed)
        self.slice_amplitude = resolve(params, 'sliceAmplitude', self.slice_amplitude)
        self.advance_angles(delta_time, params)

        self.slice_w = self.slice_amplitude * math.sin(elapsed_time * self.slice_speed)

        # Rotate the 4D centre, then project it as if it sat on the slice plane.
        center = rotate_composed(Vec4(0.0, 0.0, 0.0, 0.0), self.angles)
        self.slice_mesh.positions[0] = project(Vec4(center.x, center.y, center.z, 0.0))

        self._update_slice_visuals()

    def get_ui_controls(self) -> list:
        return [
            slider('sliceSpeed', 'Slice Speed', 0.05, 1, 0.05, self.slice_speed),
            slider('sliceAmplitude', 'Slice Amplitude', 0.5, 3, 0.1, self.slice_amplitude),
            slider('rotationSpeeds.xw', 'XW Rotation Speed', -0.5, 0.5, 0.01, self.rotation_speeds['xw']),
            slider('rotationSpeeds.yz', 'YZ Rotation Speed', -0.5, 0.5, 0.01, self.rotation_speeds['yz']),
        ]
