# test_simulation.py v16.0
# Integration tests for the simulation lifecycle and the four simulations.
# Every test runs against a real InMemoryRenderTarget so leaked or doubly
# released render handles show up in its ledger.

import math
import unittest
from unittest import mock

import numpy as np
from termcolor import cprint

from base_simulation import SimulationState
from classic_tesseract import CLASSIC_ROTATION_ORDER, ClassicTesseractSimulation
from errors import LifecycleError
from hypersphere import HypersphereSimulation
from math4d import project, rotate_composed, rotate_sequence
from render_target import InMemoryRenderTarget
from slicer import SlicerSimulation, slice_coverage
from tesseract import TesseractSimulation
from topologies import TopologyFactory

# --- Failure-injecting helpers ---
class BrokenTesseract(TesseractSimulation):
    """Borrows its handles, then fails before initialize() completes."""
    def _create_render_objects(self):
        super()._create_render_objects()
        raise RuntimeError("render objects could not be built")

class FlakyTarget(InMemoryRenderTarget):
    """Refuses to take back marker handles."""
    def _on_release(self, handle):
        if handle.kind == 'markers':
            raise RuntimeError("driver refused the release")
        super()._on_release(handle)

def _variants():
    return [
        (TesseractSimulation, {}),
        (HypersphereSimulation, {'num_points': 64, 'rng': np.random.default_rng(0)}),
        (SlicerSimulation, {}),
        (ClassicTesseractSimulation, {}),
    ]

class TestSimulationLifecycle(unittest.TestCase):
    """State machine and handle accounting shared by every simulation."""

    def setUp(self):
        cprint(f"\n--- Running test: {self._testMethodName} ---", 'yellow')
        self.target = InMemoryRenderTarget()

    def test_01_full_lifecycle_for_every_variant(self):
        cprint("  -> Testing initialize/update/cleanup on all simulations...", 'cyan')
        for simulation_class, kwargs in _variants():
            sim = simulation_class(self.target, **kwargs)
            self.assertIs(sim.state, SimulationState.UNINITIALIZED)
            self.assertIs(sim.initialize(), sim)
            self.assertTrue(sim.is_active)
            self.assertGreater(self.target.live_count, 0)

            for frame in range(1, 4):
                sim.update(1 / 60, frame / 60, {})
            sim.update(1 / 60, 4 / 60)

            sim.cleanup()
            self.assertIs(sim.state, SimulationState.DISPOSED)
            self.assertEqual(self.target.live_count, 0, f"{sim.name} leaked render handles")
        self.assertEqual(self.target.acquired_count, self.target.released_count)
        cprint("Test Passed: Every simulation returns all its handles.", 'green')

    def test_02_calls_in_the_wrong_state_are_rejected(self):
        cprint("  -> Testing lifecycle violations...", 'cyan')
        sim = TesseractSimulation(self.target)
        with self.assertRaisesRegex(LifecycleError, "before initialize"):
            sim.update(0.016, 0.016, {})
        with self.assertRaises(LifecycleError):
            sim.on_resize({'width': 640, 'height': 480})
        self.assertEqual(self.target.acquired_count, 0)

        sim.initialize()
        with self.assertRaisesRegex(LifecycleError, "already initialized"):
            sim.initialize()
        self.assertEqual(self.target.live_count, 2)

        sim.cleanup()
        with self.assertRaisesRegex(LifecycleError, "after cleanup"):
            sim.update(0.016, 0.032, {})
        with self.assertRaisesRegex(LifecycleError, "already disposed"):
            sim.initialize()
        cprint("Test Passed: The state machine is enforced.", 'green')

    def test_03_cleanup_is_idempotent(self):
        cprint("  -> Testing repeated cleanup...", 'cyan')
        sim = TesseractSimulation(self.target).initialize()
        sim.cleanup()
        sim.cleanup()
        self.assertEqual(self.target.acquired_count, 2)
        self.assertEqual(self.target.released_count, 2)

        # Cleaning up a never-initialized simulation is harmless too
        untouched = SlicerSimulation(self.target)
        untouched.cleanup()
        self.assertIs(untouched.state, SimulationState.DISPOSED)
        self.assertEqual(self.target.released_count, 2)
        cprint("Test Passed: No handle is released twice.", 'green')

    def test_04_failed_initialize_releases_everything(self):
        cprint("  -> Testing a failure halfway through initialize()...", 'cyan')
        sim = BrokenTesseract(self.target)
        with self.assertRaisesRegex(RuntimeError, "could not be built"):
            sim.initialize()
        self.assertEqual(self.target.acquired_count, 2)
        self.assertEqual(self.target.live_count, 0)
        self.assertIs(sim.state, SimulationState.DISPOSED)
        with self.assertRaises(LifecycleError):
            sim.update(0.016, 0.016, {})
        cprint("Test Passed: Partial resources are returned.", 'green')

    def test_05_cleanup_survives_a_failing_release(self):
        cprint("  -> Testing cleanup when one release fails...", 'cyan')
        target = FlakyTarget()
        sim = TesseractSimulation(target).initialize()
        with self.assertRaisesRegex(RuntimeError, "driver refused"):
            sim.cleanup()

        self.assertIs(sim.state, SimulationState.DISPOSED)
        self.assertTrue(sim.line_set.released)
        self.assertFalse(sim.vertex_markers.released)
        self.assertEqual(target.released_count, 1)

        # The failure is reported once; later calls are no-ops
        sim.cleanup()
        self.assertEqual(target.released_count, 1)
        cprint("Test Passed: The remaining handles are still released.", 'green')

    def test_06_context_manager(self):
        cprint("  -> Testing the context manager...", 'cyan')
        with TesseractSimulation(self.target) as sim:
            self.assertTrue(sim.is_active)
            sim.update(0.1, 0.1, {})
        self.assertIs(sim.state, SimulationState.DISPOSED)
        self.assertEqual(self.target.live_count, 0)

        with self.assertRaises(ValueError):
            with ClassicTesseractSimulation(self.target) as sim:
                raise ValueError("boom")
        self.assertIs(sim.state, SimulationState.DISPOSED)
        self.assertEqual(self.target.live_count, 0)
        cprint("Test Passed: Exiting the block always cleans up.", 'green')

    def test_07_instances_do_not_share_state(self):
        cprint("  -> Testing per-instance state...", 'cyan')
        first = TesseractSimulation(self.target).initialize()
        second = TesseractSimulation(self.target).initialize()
        first.update(1.0, 1.0, {'rotationSpeeds': {'xw': 0.9}})

        self.assertAlmostEqual(first.angles['xw'], 0.9)
        self.assertEqual(second.angles['xw'], 0.0)
        self.assertIsNot(first.line_set.positions, second.line_set.positions)
        self.assertFalse(np.allclose(first.line_set.positions, second.line_set.positions))
        first.cleanup()
        second.cleanup()
        cprint("Test Passed: No module-level state leaks between instances.", 'green')

    def test_08_controls_are_consistent(self):
        cprint("  -> Testing UI control descriptors...", 'cyan')
        for simulation_class, kwargs in _variants():
            # Controls are available without initializing
            controls = simulation_class(self.target, **kwargs).get_ui_controls()
            ids = [control.id for control in controls]
            self.assertEqual(len(ids), len(set(ids)))
            for control in controls:
                if control.type == 'slider':
                    self.assertLessEqual(control.min, control.default)
                    self.assertLessEqual(control.default, control.max)
                else:
                    self.assertIsInstance(control.default, bool)
        self.assertEqual(self.target.acquired_count, 0)
        cprint("Test Passed: Defaults lie inside their bounds.", 'green')

    def test_09_topologies_come_from_the_factory(self):
        cprint("  -> Testing topology construction...", 'cyan')
        rng = np.random.default_rng(2)
        expected = {
            TesseractSimulation: ('hypercube', {'size': 2.0}),
            SlicerSimulation: ('hypercube', {'size': 2.0}),
            ClassicTesseractSimulation: ('hypercube', {'size': 2.0}),
        }
        with mock.patch.object(TopologyFactory, 'create', wraps=TopologyFactory.create) as create:
            for simulation_class, call in expected.items():
                create.reset_mock()
                with simulation_class(self.target, size=2.0) as sim:
                    create.assert_called_once_with(*call)
                    self.assertEqual(sim.topology.num_edges, 32)
                    self.assertEqual(sim.topology.points.max(), 1.0)

            create.reset_mock()
            with HypersphereSimulation(self.target, radius=1.0, num_points=40, rng=rng) as sim:
                create.assert_called_once_with('hypersphere', {'radius': 1.0, 'count': 40, 'rng': rng})
                self.assertEqual(sim.topology.kind, 'point_cloud')
        self.assertEqual(self.target.live_count, 0)
        cprint("Test Passed: Every simulation builds through TopologyFactory.", 'green')


class TestTesseractSimulation(unittest.TestCase):

    def setUp(self):
        cprint(f"\n--- Running test: {self._testMethodName} ---", 'yellow')
        self.target = InMemoryRenderTarget()
        self.sim = TesseractSimulation(self.target).initialize()

    def tearDown(self):
        self.sim.cleanup()

    def test_01_angles_advance_with_delta_time(self):
        cprint("  -> Testing default speeds...", 'cyan')
        self.sim.update(0.5, 0.5, {})
        self.assertAlmostEqual(self.sim.angles['xw'], 0.25)
        self.assertAlmostEqual(self.sim.angles['yz'], 0.35)
        self.assertAlmostEqual(self.sim.angles['zw'], 0.15)
        self.assertAlmostEqual(self.sim.angles['xy'], 0.05)
        cprint("Test Passed: angle += speed * dt.", 'green')

    def test_02_parameter_overrides(self):
        cprint("  -> Testing rotationSpeeds overrides and unknown keys...", 'cyan')
        self.sim.update(0.5, 0.5, {'rotationSpeeds': {'xw': 1.0, 'qq': 4.0}, 'bogus': 3.0})
        self.assertAlmostEqual(self.sim.angles['xw'], 0.5)
        self.assertAlmostEqual(self.sim.angles['yz'], 0.35)
        self.assertNotIn('qq', self.sim.angles)
        self.assertEqual(self.sim.params['bogus'], 3.0)
        cprint("Test Passed: Overrides apply, unknown keys are ignored.", 'green')

    def test_03_buffers_match_the_scalar_math(self):
        cprint("  -> Testing projected vertex positions...", 'cyan')
        self.sim.update(0.7, 0.7, {'wPerspectiveDistance': 6.0})
        for i, vertex in enumerate(self.sim.topology.points):
            expected = project(rotate_composed(vertex, self.sim.angles), 6.0)
            np.testing.assert_allclose(self.sim.line_set.positions[i], expected, atol=1e-9)
        np.testing.assert_array_equal(self.sim.vertex_markers.positions, self.sim.line_set.positions)

        colors = self.sim.vertex_markers.colors
        self.assertEqual(colors.shape, (16, 3))
        self.assertTrue(np.all((colors >= 0.0) & (colors <= 1.0)))
        cprint("Test Passed: Buffers hold rotate-then-project results.", 'green')

    def test_04_buffers_keep_their_identity(self):
        cprint("  -> Testing in-place updates...", 'cyan')
        positions = self.sim.line_set.positions
        colors = self.sim.vertex_markers.colors
        before = positions.copy()
        for frame in range(1, 6):
            self.sim.update(0.1, frame * 0.1, {})
        self.assertIs(self.sim.line_set.positions, positions)
        self.assertIs(self.sim.vertex_markers.colors, colors)
        self.assertFalse(np.allclose(before, positions))
        self.assertEqual(self.target.acquired_count, 2)
        cprint("Test Passed: No reallocation between frames.", 'green')

    def test_05_base_topology_is_untouched(self):
        cprint("  -> Testing that rotation never mutates the base vertices...", 'cyan')
        original = self.sim.topology.points.copy()
        self.sim.update(1.3, 1.3, {})
        np.testing.assert_array_equal(self.sim.topology.points, original)
        cprint("Test Passed: Vertices are rotated into a separate buffer.", 'green')

    def test_06_resize_changes_resolution_only(self):
        cprint("  -> Testing on_resize...", 'cyan')
        self.sim.update(0.4, 0.4, {})
        angles = dict(self.sim.angles)
        topology = self.sim.topology
        positions = self.sim.line_set.positions.copy()

        self.sim.on_resize({'width': 800, 'height': 600})
        self.assertEqual(self.sim.line_set.material['resolution'], (800, 600))
        self.assertEqual(self.sim.renderer_size, {'width': 800, 'height': 600})
        self.assertEqual(self.sim.angles, angles)
        self.assertIs(self.sim.topology, topology)
        np.testing.assert_array_equal(self.sim.line_set.positions, positions)
        cprint("Test Passed: Only size-dependent metadata changed.", 'green')


class TestHypersphereSimulation(unittest.TestCase):

    def setUp(self):
        cprint(f"\n--- Running test: {self._testMethodName} ---", 'yellow')
        self.target = InMemoryRenderTarget()
        self.sim = HypersphereSimulation(self.target, num_points=64, rng=np.random.default_rng(11)).initialize()

    def tearDown(self):
        self.sim.cleanup()

    def test_01_drift_follows_elapsed_time(self):
        cprint("  -> Testing the elapsed-time drift...", 'cyan')
        self.sim.update(0.1, 2.0, {})
        self.assertAlmostEqual(self.sim.angles['xw'], 0.03)
        self.assertAlmostEqual(self.sim.angles['yw'], 0.02)

        applied = self.sim.applied_angles(2.0)
        self.assertAlmostEqual(applied['xw'], 0.03 + 0.2)
        self.assertAlmostEqual(applied['yw'], 0.02 + 0.3)
        for i, point in enumerate(self.sim.topology.points):
            expected = project(rotate_composed(point, applied), 4.0)
            np.testing.assert_allclose(self.sim.point_cloud.positions[i], expected, atol=1e-9)
        cprint("Test Passed: Drift is added on top of the accumulated angles.", 'green')

    def test_02_same_delta_different_elapsed(self):
        cprint("  -> Testing that elapsed time alone moves the cloud...", 'cyan')
        other = HypersphereSimulation(self.target, num_points=64, rng=np.random.default_rng(11)).initialize()
        self.sim.update(0.1, 1.0, {})
        other.update(0.1, 5.0, {})
        self.assertEqual(self.sim.angles, other.angles)
        self.assertFalse(np.allclose(self.sim.point_cloud.positions, other.point_cloud.positions))
        other.cleanup()
        cprint("Test Passed: Positions depend on elapsed time.", 'green')

    def test_03_colors_and_material(self):
        cprint("  -> Testing colors, point size and blending...", 'cyan')
        cloud = self.sim.point_cloud
        self.assertEqual(cloud.colors.shape, (64, 3))
        self.assertTrue(np.all((cloud.colors >= 0.0) & (cloud.colors <= 1.0)))
        self.assertEqual(cloud.material['blending'], 'normal')

        self.sim.update(0.016, 0.016, {'pointSize': 0.1, 'useAdditiveBlending': True})
        self.assertEqual(cloud.material['size'], 0.1)
        self.assertEqual(cloud.material['blending'], 'additive')
        self.assertIs(self.sim.point_cloud, cloud)
        cprint("Test Passed: Material follows the parameters.", 'green')


class TestSlicerSimulation(unittest.TestCase):

    def setUp(self):
        cprint(f"\n--- Running test: {self._testMethodName} ---", 'yellow')
        self.target = InMemoryRenderTarget()
        self.sim = SlicerSimulation(self.target).initialize()

    def tearDown(self):
        self.sim.cleanup()

    def test_01_slice_coverage(self):
        cprint("  -> Testing the coverage heuristic...", 'cyan')
        self.assertEqual(slice_coverage(0.0, 0.0, 0.75), 1.0)
        self.assertAlmostEqual(slice_coverage(0.375, 0.0, 0.75), 0.5)
        self.assertAlmostEqual(slice_coverage(-0.375, 0.0, 0.75), 0.5)
        self.assertEqual(slice_coverage(0.75, 0.0, 0.75), 0.0)
        self.assertEqual(slice_coverage(1.5, 0.0, 0.75), 0.0)
        cprint("Test Passed: Coverage is clamped to [0, 1].", 'green')

    def test_02_slice_at_the_centre(self):
        cprint("  -> Testing the slice through the centre...", 'cyan')
        self.sim.update(0.0, 0.0, {})
        material = self.sim.slice_mesh.material
        self.assertEqual(self.sim.slice_w, 0.0)
        self.assertEqual(self.sim.coverage, 1.0)
        self.assertEqual(material['scale'], (1.5, 1.5, 1.5))
        self.assertTrue(material['visible'])
        np.testing.assert_allclose(self.sim.slice_mesh.positions[0], [0.0, 0.0, 0.0])
        cprint("Test Passed: Full-size box at the origin.", 'green')

    def test_03_slice_outside_the_tesseract(self):
        cprint("  -> Testing the slice past the tesseract...", 'cyan')
        peak = (math.pi / 2) / 0.3
        self.sim.update(0.016, peak, {})
        self.assertAlmostEqual(self.sim.slice_w, 1.5)
        self.assertEqual(self.sim.coverage, 0.0)
        self.assertFalse(self.sim.slice_mesh.material['visible'])
        self.assertEqual(self.target.live_count, 1)
        cprint("Test Passed: The box is hidden, not released.", 'green')

    def test_04_slice_parameters(self):
        cprint("  -> Testing sliceAmplitude and sliceSpeed...", 'cyan')
        self.sim.update(0.016, 1.0, {'sliceAmplitude': 0.375, 'sliceSpeed': math.pi / 2})
        self.assertAlmostEqual(self.sim.slice_w, 0.375)
        self.assertAlmostEqual(self.sim.coverage, 0.5)
        for component in self.sim.slice_mesh.material['scale']:
            self.assertAlmostEqual(component, 0.75)
        self.assertTrue(self.sim.slice_mesh.material['visible'])
        cprint("Test Passed: The sweep follows its parameters.", 'green')


class TestClassicTesseractSimulation(unittest.TestCase):

    def setUp(self):
        cprint(f"\n--- Running test: {self._testMethodName} ---", 'yellow')
        self.target = InMemoryRenderTarget()
        self.sim = ClassicTesseractSimulation(self.target).initialize()

    def tearDown(self):
        self.sim.cleanup()

    def test_01_one_frame_matches_the_historical_step(self):
        cprint("  -> Testing per-frame increments at 60 fps...", 'cyan')
        self.sim.update(1 / 60, 1 / 60, {})
        self.assertAlmostEqual(self.sim.angles['xw'], 0.005)
        self.assertAlmostEqual(self.sim.angles['yz'], 0.007)
        self.assertAlmostEqual(self.sim.angles['xy'], 0.002)
        self.assertAlmostEqual(self.sim.angles['zw'], 0.003)
        cprint("Test Passed: Speeds reproduce the original per-frame steps.", 'green')

    def test_02_positions_use_the_classic_order(self):
        cprint("  -> Testing the classic rotation order...", 'cyan')
        self.sim.update(2.0, 2.0, {'perspectiveDistance': 5.0})
        steps = [(plane, self.sim.angles[plane]) for plane in CLASSIC_ROTATION_ORDER]
        for i, vertex in enumerate(self.sim.topology.points):
            expected = project(rotate_sequence(vertex, steps), 5.0)
            np.testing.assert_allclose(self.sim.lines.positions[i], expected, atol=1e-9)
        self.assertEqual(len(self.sim.handles), 1)
        cprint("Test Passed: Classic frames are reproduced.", 'green')

if __name__ == "__main__":
    unittest.main(verbosity=2)
