"""Field sources and photon detection.

Extended Summary
----------------
The physical side of the simulation: drawing a random realization of a
Doppler-broadened multi-line field and turning its intensity into photon
counts on the two arms of a beamsplitter.

Submodules
----------
field
    Field instance drawing and intensity sampling
detector
    Poisson photon-counting readout

Routine Listings
----------------
field_intensity : function
    Instantaneous intensity of a set of emitters
make_field_instance : function
    Draw a FieldInstance from ensemble parameters
produce_readout : function
    Two-arm photon count readout of a field instance
"""

from .detector import produce_readout
from .field import field_intensity, make_field_instance

__all__: list[str] = [
    "field_intensity",
    "make_field_instance",
    "produce_readout",
]
