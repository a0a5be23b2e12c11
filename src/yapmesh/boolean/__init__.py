"""Boolean (CSG) engines for EditMesh solids."""

from . import bsp as native
from . import trimesh_engine
from .bsp import BooleanOp, BspNode, mesh_boolean as native_boolean

ENGINE_REGISTRY = {'native': native}
if trimesh_engine.trimesh is not None:
    ENGINE_REGISTRY['trimesh'] = trimesh_engine


def get_engine(name: str):
    return ENGINE_REGISTRY.get(name)


def mesh_boolean(a, b, operation, engine: str = 'native'):
    """Combine ``a`` and ``b`` with ``operation`` using the named engine."""

    module = get_engine(engine)
    if module is None:
        raise ValueError(f'unknown boolean engine {engine!r}; available: {sorted(ENGINE_REGISTRY)}')
    return module.mesh_boolean(a, b, operation)


__all__ = [
    'BooleanOp',
    'BspNode',
    'ENGINE_REGISTRY',
    'get_engine',
    'mesh_boolean',
    'native',
    'native_boolean',
    'trimesh_engine',
]
