# planet_generator/assets.py

"""
================================================================================
ASSET LOADING
================================================================================
Resolves a mapping of logical asset names to files into decoded objects.
Every asset is loaded concurrently in a worker thread; the results are joined
before anything downstream (the scatter pass) proceeds.

Data Contract:
---------------
- Inputs: {name: path} where the extension selects the decoder.
    - .glb / .gltf -> Prefab (trimesh geometry, flattened to one mesh)
    - .png / .jpg / .jpeg -> PIL.Image.Image (RGBA)
    - anything else -> silently skipped
- Outputs: {name: decoded object} for every asset that loaded.
- Failure: a decode error is logged as AssetLoadFailure and that entry is
  excluded. Sibling loads are unaffected. No completion order is guaranteed.
================================================================================
"""
import asyncio
import logging
import os
from typing import Dict, Mapping, Optional, Tuple

import trimesh
from PIL import Image

from .errors import AssetLoadFailure
from .scatter import Prefab

logger = logging.getLogger(__name__)

MODEL_EXTENSIONS = ('.glb', '.gltf')
TEXTURE_EXTENSIONS = ('.png', '.jpg', '.jpeg')


def asset_kind(path: str) -> Optional[str]:
    """'model', 'texture' or None for an unsupported extension."""
    extension = os.path.splitext(str(path))[1].lower()
    if extension in MODEL_EXTENSIONS:
        return 'model'
    if extension in TEXTURE_EXTENSIONS:
        return 'texture'
    return None


def _decode_model(name: str, path: str) -> Prefab:
    geometry = trimesh.load(path, force='mesh')
    if not isinstance(geometry, trimesh.Trimesh) or len(geometry.faces) == 0:
        raise ValueError("file contains no triangle geometry")
    return Prefab(name, geometry)


def _decode_texture(path: str) -> Image.Image:
    with Image.open(path) as img:
        return img.convert('RGBA')


def decode_asset(name: str, path: str):
    """Blocking decode of a single asset. Raises AssetLoadFailure on any decode error."""
    kind = asset_kind(path)
    try:
        if kind == 'model':
            return _decode_model(name, path)
        if kind == 'texture':
            return _decode_texture(path)
    except Exception as e:  # decoders raise a wide variety of types on corrupt input
        raise AssetLoadFailure(name, str(path), str(e)) from e
    raise AssetLoadFailure(name, str(path), "unsupported extension")


async def _load_one(name: str, path: str, logger: logging.Logger) -> Tuple[str, object]:
    try:
        asset = await asyncio.to_thread(decode_asset, name, path)
    except AssetLoadFailure as e:
        logger.error(str(e))
        return name, None
    logger.debug(f"Loaded asset '{name}' from '{path}'.")
    return name, asset


async def load_assets(sources: Mapping[str, str], logger: logging.Logger = logger) -> Dict[str, object]:
    """Fan out one decode per supported asset, then fan in the successes."""
    tasks = []
    for name, path in sources.items():
        if asset_kind(path) is None:
            logger.debug(f"Skipping asset '{name}': unsupported file type '{path}'.")
            continue
        tasks.append(_load_one(name, path, logger))

    results = await asyncio.gather(*tasks)
    loaded = {name: asset for name, asset in results if asset is not None}
    logger.info(f"Loaded {len(loaded)} of {len(tasks)} supported assets.")
    return loaded


def load_assets_blocking(sources: Mapping[str, str], logger: logging.Logger = logger) -> Dict[str, object]:
    """Synchronous wrapper for callers without an event loop (CLI, viewer)."""
    return asyncio.run(load_assets(sources, logger=logger))
