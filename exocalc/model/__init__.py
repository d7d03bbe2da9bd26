"""
exocalc Model Module
====================

Data model for star-planet systems:
- Measurement: value + uncertainty + astropy unit, with propagation
- ParameterSpec: parameter metadata (symbol, group, dimension, display unit)
- Codecs: text <-> Measurement conversion (linear and log10 notation)
- Study: the sparse, immutable set of literature inputs for one system

Design principles:
1. All measurements stored internally in SI base units; codecs only at I/O boundary
2. ParameterSpec and Study are immutable (frozen dataclasses)
3. An unset Study field means "unknown", never zero
"""

from .measurement import (
    Measurement,
    sqrt,
    cbrt,
    sin,
    cos,
    log10,
)

from .parameter_spec import (
    ParameterSpec,
    ParameterGroup,
    PARAMETER_REGISTRY,
    get_spec,
    get_display_unit,
    canonicalize_param_name,
    list_params_by_group,
    list_input_params,
    list_derived_params,
)

from .codecs import (
    Codec,
    LinearCodec,
    Log10Codec,
    CODECS,
    format_value,
)

from .study import Study, INPUT_FIELDS, DEFAULT_SCALE_HEIGHTS

__all__ = [
    # Measurements
    'Measurement',
    'sqrt',
    'cbrt',
    'sin',
    'cos',
    'log10',
    # Parameter specs
    'ParameterSpec',
    'ParameterGroup',
    'PARAMETER_REGISTRY',
    'get_spec',
    'get_display_unit',
    'canonicalize_param_name',
    'list_params_by_group',
    'list_input_params',
    'list_derived_params',
    # Codecs
    'Codec',
    'LinearCodec',
    'Log10Codec',
    'CODECS',
    'format_value',
    # Studies
    'Study',
    'INPUT_FIELDS',
    'DEFAULT_SCALE_HEIGHTS',
]
