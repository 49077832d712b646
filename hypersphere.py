# hypersphere.py v1.2
# Part of Project Tesseract: 4D Projection Lab
# v1.2: "Passive Drift"
# - A point cloud sampled on the 3-sphere, rotating in the XW and YW planes.
# - On top of the accumulated angles, the applied rotation drifts with the
#   total elapsed time (0.1 rad/s in XW, 0.15 rad/s in YW). The drift is a
#   function of elapsed time, not accumulated per frame.
# - Points are colored by their rotated W coordinate (blues to pinks).

import numpy as np

from base_simulation import AbstractSimulation
from controls import checkbox, slider
from math4d import W_PERSPECTIVE_DISTANCE, project_points, rotate_points
from parameters import resolve
from styling import hsl_to_rgb
from topologies import TopologyFactory

RADIUS = 2.0
NUM_POINTS = 2000
DRIFT_RATES = {'xw': 0.1, 'yw': 0.15}

class HypersphereSimulation(AbstractSimulation):
    info = {
        'title': "Hypersphere Point Cloud",
        'description': ("A 3-sphere (glome) is the 4D analogue of a sphere. Points on its surface are "
                        "projected into 3D while it rotates in the XW and YW planes; they seem to emerge "
                        "from and recede into a central region as they pass through W."),
    }

    def __init__(self, render_target, renderer_size: dict = None,
                 radius: float = RADIUS, num_points: int = NUM_POINTS, rng: np.random.Generator = None):
        super().__init__(render_target, renderer_size)
        self.radius = radius
        self.num_points = num_points
        self.rng = rng
        self.angles = {'xw': 0.0, 'yw': 0.0}
        self.rotation_speeds = {'xw': 0.3, 'yw': 0.2}
        self.w_perspective_distance = W_PERSPECTIVE_DISTANCE
        self.point_size = 0.05
        self.use_additive_blending = False

        self.rotated_points = None
        self.point_cloud = None

    def _build_topology(self):
        return TopologyFactory.create('hypersphere', {'radius': self.radius, 'count': self.num_points, 'rng': self.rng})

    def _create_render_objects(self):
        count = self.topology.num_points
        self.rotated_points = np.array(self.topology.points)
        self.point_cloud = self._acquire(self.render_target.acquire_point_cloud(
            np.zeros((count, 3)), np.zeros((count, 3)),
            size=self.point_size,
            opacity=0.8,
            blending=self._blending_mode(),
        ))
        self._update_points(0.0)

    def _blending_mode(self) -> str:
        return 'additive' if self.use_additive_blending else 'normal'

    def applied_angles(self, elapsed_time: float) -> dict:
        """Accumulated angles plus the elapsed-time drift."""
        return {plane: self.angles[plane] + elapsed_time * rate for plane, rate in DRIFT_RATES.items()}

    def _update_points(self, elapsed_time: float):
        rotate_points(self.topology.points, self.applied_angles(elapsed_time), out=self.rotated_points)
        project_points(self.rotated_points, self.w_perspective_distance, out=self.point_cloud.positions)

        # Map W from [-radius, radius] to [0, 1] for the color ramp.
        w_normalized = (self.rotated_points[:, 3] + self.radius) / (2 * self.radius)
        self.point_cloud.colors[:] = hsl_to_rgb(0.6 + w_normalized * 0.4, 0.8, 0.3 + w_normalized * 0.4)

    def _step(self, delta_time, elapsed_time, params):
        self.advance_angles(delta_time, params)
        self.w_perspective_distance = resolve(params, 'wPerspectiveDistance', self.w_perspective_distance)

        self.point_size = resolve(params, 'pointSize', self.point_size)
        self.use_additive_blending = bool(resolve(params, 'useAdditiveBlending', self.use_additive_blending))
        self.point_cloud.material['size'] = self.point_size
        self.point_cloud.material['blending'] = self._blending_mode()

        self._update_points(elapsed_time)

    def get_ui_controls(self) -> list:
        return [
            slider('rotationSpeeds.xw', 'XW Rotation Speed', -1, 1, 0.01, self.rotation_speeds['xw']),
            slider('rotationSpeeds.yw', 'YW Rotation Speed', -1, 1, 0.01, self.rotation_speeds['yw']),
            slider('wPerspectiveDistance', 'W Perspective Distance', 1, 10, 0.1, self.w_perspective_distance),
            slider('pointSize', 'Point Size', 0.01, 0.2, 0.01, self.point_size),
            checkbox('useAdditiveBlending', 'Use Additive Blending', self.use_additive_blending),
        ]
