"""exocalc utilities module."""

from exocalc.utils.jax_setup import ensure_jax_x64, is_jax_configured

__all__ = [
    'ensure_jax_x64',
    'is_jax_configured',
]
