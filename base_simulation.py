# base_simulation.py v1.4
# Part of Project Tesseract: 4D Projection Lab
# v1.4: "Guaranteed Teardown"
# - Every simulation follows the same state machine:
#   UNINITIALIZED -> initialize() -> ACTIVE -> cleanup() -> DISPOSED.
# - Render handles are borrowed from the render target through `_acquire`
#   and handed back exactly once, on every exit path, including an
#   `initialize()` that fails halfway through.
# - Angles, buffers and parameters are per-instance; nothing lives at module
#   level, so two instances of the same simulation never alias each other.

from abc import ABC, abstractmethod
from enum import Enum

from termcolor import cprint

from errors import LifecycleError
from parameters import resolve
from render_target import AbstractRenderTarget, RenderHandle
from styling import C

DEFAULT_RENDERER_SIZE = {'width': 1280, 'height': 720}

class SimulationState(Enum):
    UNINITIALIZED = 'uninitialized'
    ACTIVE = 'active'
    DISPOSED = 'disposed'

class AbstractSimulation(ABC):
    """
    Abstract Base Class for all 4D simulations.

    Subclasses provide the topology, the render objects and the per-frame step.
    This class owns the lifecycle: it rejects calls made in the wrong state
    and tracks the borrowed render handles so `cleanup()` can return them.

    Attributes:
        angles (dict): plane -> current rotation angle (radians).
        rotation_speeds (dict): plane -> default speed (radians / second),
                                used when the parameters carry no override.
    """
    info = {
        'title': "Abstract Simulation",
        'description': "Base class for all 4D simulations.",
    }

    def __init__(self, render_target: AbstractRenderTarget, renderer_size: dict = None):
        self.render_target = render_target
        self.renderer_size = dict(renderer_size or DEFAULT_RENDERER_SIZE)
        self.state = SimulationState.UNINITIALIZED
        self.topology = None
        self.params = {}
        self.angles = {}
        self.rotation_speeds = {}
        self._handles = []

    # --- Lifecycle ---

    def initialize(self):
        """Builds the topology and render objects. Returns self."""
        if self.state is SimulationState.DISPOSED:
            raise LifecycleError(f"{self.name}: already disposed")
        if self.state is SimulationState.ACTIVE:
            raise LifecycleError(f"{self.name}: already initialized")

        try:
            self.topology = self._build_topology()
            self._create_render_objects()
        except Exception:
            # Whatever was borrowed before the failure goes back now.
            try:
                self._release_handles()
            except Exception as release_error:
                cprint(f"   -> {self.name}: release after failed initialize also failed: {release_error}", C.ERROR)
            self.state = SimulationState.DISPOSED
            raise

        self.state = SimulationState.ACTIVE
        cprint(f"   -> {self.name} initialized ({len(self._handles)} render handles).", C.SUCCESS)
        return self

    def update(self, delta_time: float, elapsed_time: float, params: dict = None):
        """Advances the simulation by one frame and refreshes the render buffers in place."""
        self._require_active('update')
        params = params or {}
        self.params = dict(params)
        self._step(delta_time, elapsed_time, params)

    def on_resize(self, new_size: dict):
        self._require_active('on_resize')
        self.renderer_size = {'width': new_size['width'], 'height': new_size['height']}
        self._resize(self.renderer_size)

    def cleanup(self):
        """
        Returns every borrowed handle and moves to DISPOSED. Safe to repeat.

        If a release fails, the remaining handles are still returned and the
        simulation still ends up DISPOSED; the first failure is re-raised.
        """
        if self.state is SimulationState.DISPOSED:
            return
        try:
            self._release_handles()
        finally:
            self.state = SimulationState.DISPOSED
            cprint(f"   -> {self.name} cleaned up.", C.DEBUG)

    # --- Helpers for subclasses ---

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @property
    def is_active(self) -> bool:
        return self.state is SimulationState.ACTIVE

    @property
    def handles(self) -> list:
        return list(self._handles)

    def _acquire(self, handle: RenderHandle) -> RenderHandle:
        self._handles.append(handle)
        return handle

    def _release_handles(self):
        handles, self._handles = self._handles, []
        first_error = None
        for handle in reversed(handles):
            try:
                self.render_target.release(handle)
            except Exception as e:
                cprint(f"   -> {self.name}: failed to release {handle!r}: {e}", C.WARNING)
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    def _require_active(self, operation: str):
        if self.state is SimulationState.UNINITIALIZED:
            raise LifecycleError(f"{self.name}.{operation}() called before initialize()")
        if self.state is SimulationState.DISPOSED:
            raise LifecycleError(f"{self.name}.{operation}() called after cleanup()")

    def advance_angles(self, delta_time: float, params: dict):
        """angle += (params.rotationSpeeds[plane] or the default speed) * dt, for every owned plane."""
        for plane in self.angles:
            speed = resolve(params, f"rotationSpeeds.{plane}", self.rotation_speeds[plane])
            self.angles[plane] += speed * delta_time

    # --- Context manager: initialize on entry, always clean up on exit ---

    def __enter__(self):
        return self.initialize()

    def __exit__(self, exc_type, exc_value, traceback):
        self.cleanup()
        return False

    # --- Subclass contract ---

    @abstractmethod
    def _build_topology(self):
        """Returns the TopologyData this simulation animates."""
        pass

    @abstractmethod
    def _create_render_objects(self):
        """Borrows render handles (via `_acquire`) and fills the initial buffers."""
        pass

    @abstractmethod
    def _step(self, delta_time: float, elapsed_time: float, params: dict):
        pass

    def _resize(self, new_size: dict):
        """Size-dependent metadata only. Topology and angles stay untouched."""
        pass

    @abstractmethod
    def get_ui_controls(self) -> list:
        """Declarative list of UIControl descriptors."""
        pass
