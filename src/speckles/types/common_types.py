"""Scalar type aliases shared across the package.

Extended Summary
----------------
Type aliases accepted by the public functions of speckles. Each alias
admits both the plain Python number and the equivalent 0-d JAX array,
so that functions can be called eagerly with literals and traced under
``jax.jit`` with arrays.

Routine Listings
----------------
ScalarFloat : TypeAlias
    Python float or 0-d floating array.
ScalarInteger : TypeAlias
    Python int or 0-d integer array.
ScalarNumeric : TypeAlias
    Any Python number or 0-d numeric array.
"""

from beartype.typing import TypeAlias, Union
from jaxtyping import Array, Float, Int, Num

ScalarFloat: TypeAlias = Union[float, Float[Array, " "]]
ScalarInteger: TypeAlias = Union[int, Int[Array, " "]]
ScalarNumeric: TypeAlias = Union[int, float, complex, Num[Array, " "]]
