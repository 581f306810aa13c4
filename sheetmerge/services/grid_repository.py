from __future__ import annotations

from collections.abc import Iterator, Mapping

from sheetmerge.services.grid_models import CellValue, DecodedFile

FrozenGrid = tuple[tuple[CellValue, ...], ...]


class GridRepository(Mapping[str, Mapping[str, FrozenGrid]]):
    """Full decoded grids keyed by file id.

    The configuration store only keeps a preview of each sheet; merges read the
    complete grids from here.
    """

    def __init__(self) -> None:
        self._bundles: dict[str, dict[str, FrozenGrid]] = {}

    def put(self, decoded: DecodedFile) -> None:
        if decoded.id in self._bundles:
            raise ValueError(f"Grid bundle for file {decoded.id} already registered")
        self._bundles[decoded.id] = {
            name: tuple(tuple(row) for row in grid) for name, grid in decoded.sheets.items()
        }

    def remove(self, file_id: str) -> bool:
        return self._bundles.pop(file_id, None) is not None

    def __getitem__(self, file_id: str) -> Mapping[str, FrozenGrid]:
        return self._bundles[file_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bundles)

    def __len__(self) -> int:
        return len(self._bundles)
