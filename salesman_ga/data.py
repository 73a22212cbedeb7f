from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

import networkx as nx
import numpy as np
import tsplib95


TSPLIB_SUFFIXES = {".tsp", ".atsp"}


@dataclass
class Instance:
    name: str
    cost_matrix: np.ndarray
    optimum: Optional[float] = None
    path: Optional[Path] = None

    @property
    def number_of_cities(self) -> int:
        return self.cost_matrix.shape[0]


def validate_cost_matrix(matrix, starting_city: int = 0) -> np.ndarray:
    """Return ``matrix`` as a float array after checking it can describe a tour.

    Rejects non-square tables, fewer than two cities, NaN/inf or negative
    costs, and a starting city outside ``[0, N)``. The diagonal is ignored.
    """
    mat = np.asarray(matrix, dtype=np.float64)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        raise ValueError(f"cost matrix must be square, got shape {mat.shape}")
    n = mat.shape[0]
    if n < 2:
        raise ValueError("cost matrix must cover at least 2 cities")
    if not np.isfinite(mat).all():
        raise ValueError("cost matrix contains non-finite values")
    if (mat < 0).any():
        raise ValueError("cost matrix contains negative costs")
    if not 0 <= starting_city < n:
        raise ValueError(f"starting city {starting_city} out of range [0, {n})")
    return mat


def load_matrix(path: Path) -> np.ndarray:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No cost matrix at {path}")
    delimiter = "," if path.suffix.lower() == ".csv" else None
    return np.loadtxt(path, delimiter=delimiter, dtype=np.float64, ndmin=2)


def save_matrix(matrix: np.ndarray, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    delimiter = "," if path.suffix.lower() == ".csv" else " "
    mat = np.asarray(matrix)
    fmt = "%d" if np.issubdtype(mat.dtype, np.integer) else "%.6g"
    np.savetxt(path, mat, fmt=fmt, delimiter=delimiter)


def _optimum_tour_files(instance_path: Path) -> Iterable[Path]:
    yield instance_path.with_suffix(".opt.tour")
    solutions = instance_path.parent / "solutions"
    yield from (solutions / f"{instance_path.stem}{ext}" for ext in (".opt.tour", ".opt", ".tour"))


def _load_optimum(instance_path: Path, nodes: Sequence, cost_matrix: np.ndarray) -> Optional[float]:
    """Cost of the first readable optimal tour next to ``instance_path``, priced on ``cost_matrix``."""
    index = {node: i for i, node in enumerate(nodes)}
    for candidate in _optimum_tour_files(instance_path):
        if not candidate.exists():
            continue
        try:
            solution = tsplib95.parse(candidate.read_text())
            cycle = np.array([index[node] for node in solution.tours[0]], dtype=np.intp)
        except (OSError, LookupError, ValueError, tsplib95.exceptions.TsplibError):
            # Unreadable or mismatched solution files just mean no known optimum.
            continue
        if len(cycle) != len(nodes):
            continue
        return float(cost_matrix[cycle, np.roll(cycle, -1)].sum())
    return None


def graph_to_matrix(graph: nx.Graph, nodes: Optional[Sequence] = None) -> np.ndarray:
    nodes = sorted(graph.nodes()) if nodes is None else list(nodes)
    mat = nx.to_numpy_array(graph, nodelist=nodes, weight="weight", dtype=np.float64)
    np.fill_diagonal(mat, 0.0)
    return mat


def load_tsplib(path: Path) -> Instance:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No TSPLIB instance at {path}")
    problem = tsplib95.load(path)
    graph = problem.get_graph()
    nodes = sorted(graph.nodes())
    cost_matrix = graph_to_matrix(graph, nodes)
    return Instance(
        name=problem.name or path.stem,
        cost_matrix=cost_matrix,
        optimum=_load_optimum(path, nodes, cost_matrix),
        path=path,
    )


def load_instance(path: Path) -> Instance:
    path = Path(path)
    if path.suffix.lower() in TSPLIB_SUFFIXES:
        return load_tsplib(path)
    return Instance(name=path.stem, cost_matrix=load_matrix(path), path=path)


def random_instance(
    n: int,
    seed: Optional[int] = None,
    low: int = 1,
    high: int = 100,
    symmetric: bool = True,
) -> Instance:
    if n < 2:
        raise ValueError("random instance needs at least 2 cities")
    if not 0 < low < high:
        raise ValueError("cost range must satisfy 0 < low < high")
    gen = np.random.default_rng(seed)
    mat = gen.integers(low, high, size=(n, n))
    if symmetric:
        mat = np.triu(mat, 1)
        mat = mat + mat.T
    np.fill_diagonal(mat, 0)
    return Instance(name=f"random{n}", cost_matrix=mat)
