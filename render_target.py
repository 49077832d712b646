# render_target.py v1.2
# Part of Project Tesseract: 4D Projection Lab
# v1.2: "Lent Handles"
# - The render target owns the drawable resources and LENDS them to a
#   simulation as RenderHandles. The simulation mutates the handle buffers in
#   place every frame and must give every handle back exactly once.
# - InMemoryRenderTarget keeps a ledger of live handles and acquire/release
#   counts. The headless CLI draws from it, and the tests audit it for leaks.

import itertools
from abc import ABC, abstractmethod

import numpy as np

from errors import LifecycleError

class RenderHandle:
    """
    A drawable resource on loan from a render target.

    Attributes:
        kind (str): 'line_set', 'point_cloud', 'markers' or 'mesh'.
        positions (np.ndarray): (N, 3) float buffer. Its identity never changes,
                                only its contents.
        colors (np.ndarray | None): (N, 3) RGB buffer in [0, 1].
        edges (np.ndarray | None): (E, 2) indices into `positions` (line sets).
        material (dict): free-form appearance settings (color, size, opacity,
                         resolution, ...).
    """
    def __init__(self, handle_id: int, kind: str, positions: np.ndarray,
                 colors: np.ndarray = None, edges: np.ndarray = None, material: dict = None):
        self.handle_id = handle_id
        self.kind = kind
        self.positions = positions
        self.colors = colors
        self.edges = edges
        self.material = material or {}
        self.released = False

    def __repr__(self):
        state = 'released' if self.released else 'live'
        return f"RenderHandle(#{self.handle_id} {self.kind}, {len(self.positions)} pts, {state})"


class AbstractRenderTarget(ABC):
    """
    Interface for anything that can draw the output of a simulation.

    Concrete targets only decide what happens when a handle is lent out or
    given back. Buffer allocation and double-release checks live here.
    """
    def __init__(self):
        self._ids = itertools.count(1)

    def _lend(self, kind, positions, colors=None, edges=None, material=None) -> RenderHandle:
        positions = np.array(positions, dtype=float).reshape(-1, 3)
        if colors is not None:
            colors = np.array(colors, dtype=float).reshape(-1, 3)
            assert len(colors) == len(positions), "One color per point is required."
        if edges is not None:
            edges = np.array(edges, dtype=int).reshape(-1, 2)
        handle = RenderHandle(next(self._ids), kind, positions, colors, edges, dict(material or {}))
        self._on_acquire(handle)
        return handle

    def acquire_line_set(self, positions, edges, **material) -> RenderHandle:
        """Wireframe: points plus index pairs. Point order must be preserved."""
        return self._lend('line_set', positions, edges=edges, material=material)

    def acquire_point_cloud(self, positions, colors, **material) -> RenderHandle:
        return self._lend('point_cloud', positions, colors=colors, material=material)

    def acquire_markers(self, positions, colors, **material) -> RenderHandle:
        """Small solid markers drawn at each point (e.g. tesseract vertices)."""
        return self._lend('markers', positions, colors=colors, material=material)

    def acquire_mesh(self, shape: str, **material) -> RenderHandle:
        """A single stand-in solid; `positions` holds its centre."""
        material.setdefault('shape', shape)
        return self._lend('mesh', np.zeros((1, 3)), material=material)

    def release(self, handle: RenderHandle):
        if handle.released:
            raise LifecycleError(f"{handle!r} was already released")
        self._on_release(handle)
        handle.released = True

    @abstractmethod
    def _on_acquire(self, handle: RenderHandle):
        pass

    @abstractmethod
    def _on_release(self, handle: RenderHandle):
        pass


class InMemoryRenderTarget(AbstractRenderTarget):
    """Keeps every live handle in memory; nothing is drawn until asked."""
    def __init__(self):
        super().__init__()
        self.live = {}
        self.acquired_count = 0
        self.released_count = 0

    def _on_acquire(self, handle: RenderHandle):
        self.live[handle.handle_id] = handle
        self.acquired_count += 1

    def _on_release(self, handle: RenderHandle):
        del self.live[handle.handle_id]
        self.released_count += 1

    def live_handles(self) -> list:
        return list(self.live.values())

    @property
    def live_count(self) -> int:
        return len(self.live)
