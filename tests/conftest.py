"""
测试共享的 fixtures
"""

import pytest

MESHTAL = """\
mcnp   version 6     ld=05/08/13  probid =  03/05/24 10:11:12
 test problem
 Number of histories used for normalizing tallies =      1000.00

 Mesh Tally Number       104
 neutron  mesh tally.

 Tally bin boundaries:
    X direction:     0.00      5.00     10.00
    Y direction:     0.00     10.00
    Z direction:     0.00     10.00
    Energy bin boundaries: 0.00E+00 1.00E+00 2.00E+01

   Energy         X         Y         Z     Result     Rel Error
   1.000E+00     7.500     5.000     5.000  2.00000E+00  2.00000E-01
   1.000E+00     2.500     5.000     5.000  1.00000E+00  1.00000E-01
   2.000E+01     2.500     5.000     5.000  3.00000E+00  3.00000E-01
   2.000E+01     7.500     5.000     5.000  4.00000E+00  4.00000E-01
   Total         2.500     5.000     5.000  4.00000E+00  1.00000E-01
   Total         7.500     5.000     5.000  6.00000E+00  2.00000E-01


 Mesh Tally Number       204
 photon   mesh tally.

 Tally bin boundaries:
  Cylinder origin at   0.00E+00  0.00E+00 -5.00E+00, axis in  0.00E+00  0.00E+00  1.00E+00 direction
    R direction:       0.00E+00  5.00E+00
    Z direction:       0.00E+00  1.00E+01
    Theta direction (revolutions):  0.000E+00  5.000E-01
                                    1.000E+00
    Energy bin boundaries: 0.00E+00 1.00E+02

   Energy         R         Z         Th    Result     Rel Error
   1.000E+02     2.500     5.000     0.250  5.00000E-01  1.00000-001
   1.000E+02     2.500     5.000     0.750  7.00000E-01  2.00000E-01

 Mesh Tally Number       304
 neutron  mesh tally.

 Tally bin boundaries:
    X direction:     0.00     10.00
    Y direction:     0.00     10.00
    Z direction:     0.00      5.00     10.00

   X         Y         Z     Result     Rel Error     Volume    Rslt * Vol
   5.000     5.000     2.500  1.00000E+00  1.00000E-01  5.00000E+02  5.00000E+02
   5.000     5.000     7.500  2.00000E+00  1.00000E-01  5.00000E+02  1.00000E+03
"""


@pytest.fixture
def meshtal_text():
    """Meshtal file with a rectangular (104), cylindrical (204) and CF (304) tally."""
    return MESHTAL


@pytest.fixture
def meshtal_file(tmp_path):
    path = tmp_path / "meshtal"
    path.write_text(MESHTAL)
    return str(path)
