# topologies.py v2.1
# Part of Project Tesseract: 4D Projection Lab
# v2.1: "Hypercubes and Glomes"
# - Contains the passive TopologyData container.
# - Contains generator functions for the hypercube (vertices + edges) and the
#   hypersphere point cloud.
# - Contains a factory to select the correct generator.

import numpy as np
from termcolor import cprint

from styling import C

EDGE_TOLERANCE = 1e-4  # Coordinates closer than this count as equal

class TopologyData:
    """
    A simple, passive data container for a 4D shape.

    Attributes:
        points (np.ndarray): (N, dimensionality) vertex coordinates.
        edges (np.ndarray | None): (E, 2) vertex index pairs for wireframes,
                                   None for point clouds.
        kind (str): 'wireframe' or 'point_cloud'.
    """
    def __init__(self, points: np.ndarray, edges, dimensionality: int = 4, **kwargs):
        self.points = np.array(points, dtype=float)
        self.edges = None if edges is None else np.array(edges, dtype=int).reshape(-1, 2)
        self.dimensionality = dimensionality
        self.num_points = len(self.points)
        self.kind = 'point_cloud' if self.edges is None else 'wireframe'

        # Store any additional metadata (like size or radius)
        self.metadata = kwargs
        self.__dict__.update(kwargs)

        # The base data never changes after creation.
        self.points.setflags(write=False)
        if self.edges is not None:
            self.edges.setflags(write=False)

        # Validation
        if self.points.ndim == 2 and self.num_points > 0:
            assert self.points.shape[1] == dimensionality, "Points' dimension must match the specified dimensionality."
        if self.edges is not None and self.edges.size > 0:
            assert self.edges.min() >= 0 and self.edges.max() < self.num_points, "Edges must index existing points."

    @property
    def num_edges(self) -> int:
        return 0 if self.edges is None else len(self.edges)

# --- GENERATOR FUNCTIONS ---

def generate_hypercube_vertices(size: float = 1.0, dimensions: int = 4) -> np.ndarray:
    """
    All 2^n corners of an n-cube with coordinates +/- size/2.

    Bit k of the vertex index selects the sign of axis k (bit 0 -> x, bit 1 -> y,
    bit 2 -> z, bit 3 -> w), so the order is fixed by index.
    """
    indices = np.arange(2 ** dimensions)
    bits = (indices[:, None] >> np.arange(dimensions)) & 1
    return np.where(bits == 1, 1.0, -1.0) * size / 2

def generate_hypercube_edges(vertices) -> np.ndarray:
    """
    Connects every pair of vertices that differ in exactly one coordinate.

    Works for any hypercube whose vertices use a +/- encoding; a 4-cube
    yields 32 edges.
    """
    vertices = np.asarray(vertices, dtype=float)
    edges = []
    for i in range(len(vertices)):
        for j in range(i + 1, len(vertices)):
            diff_count = np.count_nonzero(np.abs(vertices[i] - vertices[j]) > EDGE_TOLERANCE)
            if diff_count == 1:
                edges.append((i, j))
    return np.array(edges, dtype=int).reshape(-1, 2)

def _open_unit_uniform(rng: np.random.Generator, shape) -> np.ndarray:
    """Uniform samples from the open interval (0, 1)."""
    samples = rng.random(shape)
    zeros = samples == 0.0
    while np.any(zeros):
        samples[zeros] = rng.random(np.count_nonzero(zeros))
        zeros = samples == 0.0
    return samples

def box_muller(rng: np.random.Generator, shape) -> np.ndarray:
    """Standard normal variates via the Box-Muller transform."""
    u = _open_unit_uniform(rng, shape)
    v = _open_unit_uniform(rng, shape)
    return np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v)

def generate_hypersphere_vertices(radius: float = 1.0, count: int = 1000,
                                  rng: np.random.Generator = None) -> np.ndarray:
    """
    Approximately uniform points on the 3-sphere of the given radius.

    Each point is four independent normal samples, normalized to unit length
    and scaled by `radius`. Degenerate zero-length samples are skipped, so the
    result can (in principle) hold fewer than `count` points.
    """
    if rng is None:
        rng = np.random.default_rng()
    samples = box_muller(rng, (count, 4))
    norms = np.linalg.norm(samples, axis=1)
    valid = norms > 0.0
    return samples[valid] / norms[valid, None] * radius

def generate_hypercube_topology(size: float = 1.5) -> TopologyData:
    """Generator function for a tesseract wireframe."""
    cprint(f"1. Generating Topology: Tesseract (size={size})", C.SUBHEADER, attrs=C.BOLD_ATTR)
    vertices = generate_hypercube_vertices(size)
    edges = generate_hypercube_edges(vertices)
    cprint(f"   -> {len(vertices)} vertices, {len(edges)} edges.", C.DEBUG)
    return TopologyData(points=vertices, edges=edges, dimensionality=4, size=size)

def generate_hypersphere_topology(radius: float = 2.0, count: int = 2000,
                                  rng: np.random.Generator = None) -> TopologyData:
    """Generator function for a glome point cloud."""
    cprint(f"1. Generating Topology: Hypersphere (r={radius}, {count} points)", C.SUBHEADER, attrs=C.BOLD_ATTR)
    points = generate_hypersphere_vertices(radius, count, rng=rng)
    return TopologyData(points=points, edges=None, dimensionality=4, radius=radius)

# --- FACTORY ---

class TopologyFactory:
    @staticmethod
    def create(topology_type: str, params: dict) -> TopologyData:
        if topology_type == 'hypercube':
            return generate_hypercube_topology(size=params.get('size', 1.5))
        elif topology_type == 'hypersphere':
            return generate_hypersphere_topology(
                radius=params.get('radius', 2.0),
                count=params.get('count', 2000),
                rng=params.get('rng')
            )
        else:
            raise ValueError(f"Unknown topology type: '{topology_type}'")
