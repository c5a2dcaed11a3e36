from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol


class SettingsRepository(Protocol):
    def load_buffers(self) -> Optional[Mapping[str, Any]]:
        """Raw stored values keyed by BufferConfig field name, or None when nothing is stored."""

        raise NotImplementedError

    def save_buffers(self, values: Mapping[str, int]) -> None:
        raise NotImplementedError
