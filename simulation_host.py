# simulation_host.py v1.3
# Part of Project Tesseract: 4D Projection Lab
# v1.3: "One Active Simulation"
# - The host owns at most one ACTIVE simulation. `select()` always tears the
#   current one down before the replacement is constructed, so the outgoing
#   and incoming simulations never hold render handles at the same time.
# - A failed `select()` (unknown key, constructor or initialize() error) is
#   reported and re-raised, and leaves no simulation active.
# - Parameters from the UI are merged into a ParameterStore; each tick hands
#   the active simulation a fresh snapshot. Values for the active
#   simulation's sliders are clamped to the slider bounds on the way in.

import time

from termcolor import cprint

from base_simulation import DEFAULT_RENDERER_SIZE
from classic_tesseract import ClassicTesseractSimulation
from errors import UnknownSimulationKey
from hypersphere import HypersphereSimulation
from parameters import ParameterStore
from render_target import AbstractRenderTarget
from slicer import SlicerSimulation
from styling import C
from tesseract import TesseractSimulation

SIMULATION_REGISTRY = {
    'hypercube': TesseractSimulation,
    'hypersphere': HypersphereSimulation,
    'slice': SlicerSimulation,
    'classic': ClassicTesseractSimulation,
}

class SimulationHost:
    """Orchestrates the lifecycle of the active simulation."""
    def __init__(self, render_target: AbstractRenderTarget, registry: dict = None,
                 renderer_size: dict = None, options: dict = None):
        self.render_target = render_target
        # Extra constructor keyword arguments per simulation key (e.g. a seeded rng).
        self.options = dict(options or {})
        self.registry = dict(SIMULATION_REGISTRY if registry is None else registry)
        self.renderer_size = dict(renderer_size or DEFAULT_RENDERER_SIZE)
        self.params = ParameterStore()
        self._controls = {}
        self.active = None
        self.active_key = None

    def available(self) -> list:
        return list(self.registry)

    @property
    def active_count(self) -> int:
        return 0 if self.active is None else 1

    def select(self, key: str):
        """Replaces the active simulation with a freshly initialized `key`."""
        self._teardown_active()

        simulation_class = self.registry.get(key)
        if simulation_class is None:
            cprint(f"Simulation failed to load: unknown key '{key}'", C.ERROR)
            raise UnknownSimulationKey(key, self.available())

        cprint(f"\n--- Loading simulation: {key} ---", C.SUBHEADER, attrs=C.BOLD_ATTR)
        simulation = None
        try:
            simulation = simulation_class(self.render_target, dict(self.renderer_size), **self.options.get(key, {}))
            simulation.initialize()
        except Exception as e:
            cprint(f"Simulation '{key}' failed to load: {type(e).__name__} - {e}", C.ERROR)
            if simulation is not None:
                simulation.cleanup()
            raise

        self.active = simulation
        self.active_key = key
        controls = simulation.get_ui_controls()
        self._controls = {control.id: control for control in controls}
        self.params.reset()
        self.params.apply_defaults(controls)
        cprint(f"Loaded simulation: {simulation.info['title']}", C.SUCCESS)
        return simulation

    def tick(self, delta_time: float, elapsed_time: float):
        if self.active is None:
            return
        self.active.update(delta_time, elapsed_time, self.params.snapshot())

    def resize(self, new_size: dict):
        self.renderer_size = {'width': new_size['width'], 'height': new_size['height']}
        if self.active is not None:
            self.active.on_resize(self.renderer_size)

    def set_param(self, key: str, value):
        """Stores a parameter; values for known sliders are clamped to their bounds."""
        control = self._controls.get(key)
        if control is not None and not isinstance(value, bool):
            value = control.clamp(value)
        self.params.set(key, value)

    def update_params(self, values: dict):
        for key, value in values.items():
            if isinstance(value, dict):
                for child, child_value in value.items():
                    self.set_param(f"{key}.{child}", child_value)
            else:
                self.set_param(key, value)

    def get_ui_controls(self) -> list:
        return [] if self.active is None else self.active.get_ui_controls()

    def shutdown(self):
        self._teardown_active()

    def _teardown_active(self):
        if self.active is None:
            return
        simulation = self.active
        self.active = None
        self.active_key = None
        self._controls = {}
        simulation.cleanup()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown()
        return False


class FrameClock:
    """
    Supplies (delta_time, elapsed_time) once per frame.

    With `fixed_delta` every tick advances by exactly that amount, which makes
    offline rendering reproducible; otherwise wall-clock time is used.
    """
    def __init__(self, fixed_delta: float = None):
        self.fixed_delta = fixed_delta
        self.elapsed = 0.0
        self._last = None

    def tick(self) -> tuple:
        if self.fixed_delta is not None:
            delta = self.fixed_delta
        else:
            now = time.perf_counter()
            delta = 0.0 if self._last is None else now - self._last
            self._last = now
        self.elapsed += delta
        return delta, self.elapsed
