import abc
import dataclasses
import logging
from typing import Dict, List, Sequence, Tuple

import numpy as np

from stagger.util import ConfigurationError


logger = logging.getLogger(__name__)


class Diagnostics(abc.ABC):
    @abc.abstractmethod
    def record(
        self,
        name: str,
        array: np.ndarray,
        index_range: Sequence[range],
        timestamp: float,
    ):
        """
        Store the compute domain of a field.

        Args:
            name: name of the field
            array: values on the compute domain of this rank
            index_range: global cell indices covered by array along x, y and z
            timestamp: model time of the values
        """
        ...

    @abc.abstractmethod
    def cleanup(self):
        ...


class NullDiagnostics(Diagnostics):
    def record(self, name, array, index_range, timestamp):
        pass

    def cleanup(self):
        pass


class InMemoryDiagnostics(Diagnostics):
    """
    Keeps a copy of every recorded array.

    Attributes:
        records: for each field name, a list of (timestamp, array) pairs
            in the order they were recorded
        index_ranges: global index ranges of each field's arrays
    """

    def __init__(self):
        self.records: Dict[str, List[Tuple[float, np.ndarray]]] = {}
        self.index_ranges: Dict[str, Tuple[range, ...]] = {}

    def record(self, name, array, index_range, timestamp):
        self.records.setdefault(name, []).append((timestamp, np.array(array)))
        self.index_ranges[name] = tuple(index_range)

    def latest(self, name: str) -> np.ndarray:
        """most recently recorded values of a field"""
        return self.records[name][-1][1]

    def timestamps(self, name: str) -> List[float]:
        return [timestamp for timestamp, _ in self.records[name]]

    def cleanup(self):
        logger.debug("kept records of %d fields in memory", len(self.records))


@dataclasses.dataclass(frozen=True)
class DiagnosticsConfig:
    """
    Attributes:
        output_frequency: number of time steps between records
        output_initial_state: whether to record the state before the first step
        names: fields to record, by default every field configured for output
        store: "null" to discard records or "memory" to keep them in memory
    """

    output_frequency: int = 1
    output_initial_state: bool = False
    names: List[str] = dataclasses.field(default_factory=list)
    store: str = "null"

    def __post_init__(self):
        if self.output_frequency < 1:
            raise ConfigurationError(
                f"output_frequency must be positive, got {self.output_frequency}"
            )
        if self.store not in ("null", "memory"):
            raise ConfigurationError(
                f"store must be one of 'null' or 'memory', got {self.store}"
            )

    def diagnostics_factory(self) -> Diagnostics:
        if self.store == "memory":
            return InMemoryDiagnostics()
        else:
            return NullDiagnostics()
