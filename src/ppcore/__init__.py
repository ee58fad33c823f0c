"""Numerical core for skill ratings and performance scaling.

The package is split into :mod:`ppcore.equations` (hit model, order
statistics, root search and miss-count distributions), :mod:`ppcore.skills`
(per-object evaluators and the strategies folding over feature streams) and
:mod:`ppcore.metrics` (miss penalty curves and deviation estimates).
"""

from __future__ import annotations

from importlib import import_module

_equations = import_module("ppcore.equations")
_skills = import_module("ppcore.skills")
_metrics = import_module("ppcore.metrics")
_config = import_module("ppcore.config")

__all__ = list(
    dict.fromkeys(
        [
            *_equations.__all__,
            *_skills.__all__,
            *_metrics.__all__,
            *_config.__all__,
        ]
    )
)

# Public handles to the structured namespaces.
equations = _equations
skills = _skills
metrics = _metrics
config = _config

for _module in (_equations, _skills, _metrics, _config):
    for _name in _module.__all__:
        globals()[_name] = getattr(_module, _name)

del _module, _name
