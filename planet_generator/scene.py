# planet_generator/scene.py

"""
Collaborator interfaces consumed by the core.

The core only ever registers and unregisters objects with a scene and asks a
picker for an impact point; rendering, cameras and input live elsewhere. Any
object providing these methods can be plugged in.
"""
import logging
from typing import List, Optional, Protocol

import numpy as np


class Scene(Protocol):
    """Accepts meshes and instances for display."""

    def add(self, obj) -> None: ...
    def remove(self, obj) -> None: ...


class Picker(Protocol):
    """Supplies the current world-space impact point, or None when nothing is hit."""

    def pick(self) -> Optional[np.ndarray]: ...


class HeadlessScene:
    """
    A scene that simply keeps a list of registered objects. Used by the CLI
    driver and by tests to observe registration and teardown.
    """
    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger(__name__)
        self._objects: List[object] = []

    def add(self, obj) -> None:
        if any(existing is obj for existing in self._objects):
            return
        self._objects.append(obj)

    def remove(self, obj) -> None:
        for i, existing in enumerate(self._objects):
            if existing is obj:
                del self._objects[i]
                return
        self.logger.debug(f"Ignoring removal of an object that is not in the scene: {obj!r}")

    @property
    def objects(self) -> List[object]:
        return list(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, obj) -> bool:
        return any(existing is obj for existing in self._objects)
