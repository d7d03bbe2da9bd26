"""Centralized JAX configuration for exocalc.

JAX supplies the partial derivatives used for uncertainty propagation.
Literature uncertainties are often many orders of magnitude below the
value (orbital periods are known to ~1e-7 relative), so JAX must run in
float64 or the propagated uncertainties are dominated by rounding.

Usage:
    from exocalc.utils.jax_setup import ensure_jax_x64
    ensure_jax_x64()  # Call before any JAX operations

Environment Variables:
    EXOCALC_DEVICE: JAX platform to run on ("cpu", "gpu", ...). When unset
        the platform is left to JAX and the host application.
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

# Track if we've already configured (avoid duplicate calls)
_jax_configured = False


def get_device_preference() -> Optional[str]:
    """Return the JAX platform requested through ``EXOCALC_DEVICE``, or None."""
    return os.environ.get('EXOCALC_DEVICE', '').strip().lower() or None


def ensure_jax_x64() -> bool:
    """Ensure JAX is configured for float64 precision.

    Safe to call multiple times; only the first call does any work. The
    JAX platform is only changed when ``EXOCALC_DEVICE`` is set.

    Returns
    -------
    bool
        True once JAX is configured.
    """
    global _jax_configured

    if _jax_configured:
        return True

    import jax

    jax.config.update('jax_enable_x64', True)

    device = get_device_preference()
    if device is not None:
        try:
            jax.config.update('jax_platforms', device)
        except (AttributeError, ValueError) as e:
            # Older JAX releases have no jax_platforms option
            logger.debug(f"Could not select JAX platform {device!r}: {e}")

    logger.debug(f"JAX float64 precision enabled (platform: {device or 'default'})")
    _jax_configured = True
    return True


def is_jax_configured() -> bool:
    """Check if ensure_jax_x64() has been called successfully."""
    return _jax_configured
