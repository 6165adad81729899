"""
Execution engines: SQL lowering (``engines.sql``) and shape dispatch (``engines.executor``).
"""

from schemql.engines.executor import ParamsShapeEnum, QueryDispatcher, detect_params_shape

__all__ = [
    "ParamsShapeEnum",
    "QueryDispatcher",
    "detect_params_shape",
]
