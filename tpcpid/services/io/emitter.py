"""
OutputEmitter service - Collects PID table rows and writes them out.

Tables are independent columns-per-track; chunks of the same table are
appended in the order they are emitted.
"""

import os
import logging
from collections import defaultdict

import numpy as np
import uproot

from tpcpid.domain.outputs import TableChunk


class OutputEmitter:
    """Record sink for the 18 possible output tables."""

    def __init__(self):
        self._chunks: dict[str, list[TableChunk]] = defaultdict(list)
        self.logger = logging.getLogger(self.__class__.__name__)

    def append(self, chunk: TableChunk):
        """Append the rows of one chunk to its table."""
        existing = self._chunks.get(chunk.table_name)
        if existing and set(existing[0].columns) != set(chunk.columns):
            raise ValueError(
                f"Columns of {chunk.table_name} changed from "
                f"{sorted(existing[0].columns)} to {sorted(chunk.columns)}"
            )
        self._chunks[chunk.table_name].append(chunk)

    @property
    def table_names(self) -> list[str]:
        return list(self._chunks)

    def table(self, table_name: str) -> dict[str, np.ndarray]:
        """
        Concatenated columns of one table.

        Raises:
            KeyError: If nothing was emitted for the table
        """
        if table_name not in self._chunks:
            raise KeyError(f"No rows emitted for table {table_name}")
        chunks = self._chunks[table_name]
        return {
            column: np.concatenate([chunk.columns[column] for chunk in chunks])
            for column in chunks[0].columns
        }

    def row_count(self, table_name: str) -> int:
        return sum(chunk.row_count for chunk in self._chunks.get(table_name, []))

    def summary(self) -> dict[str, int]:
        """Table name -> number of rows."""
        return {name: self.row_count(name) for name in self._chunks}

    def write(self, output_path: str) -> str:
        """
        Write every table as a TTree into one ROOT file.

        Args:
            output_path: Path of the ROOT file to (re)create

        Returns:
            The path written
        """
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        with uproot.recreate(output_path) as f:
            for table_name in self._chunks:
                f[table_name] = self.table(table_name)
                self.logger.info(f"Wrote {self.row_count(table_name):,} rows to {table_name}")
        return output_path
