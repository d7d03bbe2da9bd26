"""exocalc: self-consistent exoplanet system parameters.

Derives stellar, orbital and planetary parameters (plus the expected
transmission signal of the planet's atmosphere) from a sparse set of
literature measurements, recording which inputs produced each value.

JAX is used for uncertainty propagation and is configured lazily for
float64 by ``exocalc.utils.jax_setup.ensure_jax_x64``.
"""

# Version
__version__ = "0.1.0"
