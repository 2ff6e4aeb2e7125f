X_DIM = "x"
X_INTERFACE_DIM = "x_interface"
Y_DIM = "y"
Y_INTERFACE_DIM = "y_interface"
Z_DIM = "z"
Z_INTERFACE_DIM = "z_interface"
X_DIMS = (X_DIM, X_INTERFACE_DIM)
Y_DIMS = (Y_DIM, Y_INTERFACE_DIM)
Z_DIMS = (Z_DIM, Z_INTERFACE_DIM)
SCALAR_DIMS = (X_DIM, Y_DIM, Z_DIM)
INTERFACE_DIMS = (X_INTERFACE_DIM, Y_INTERFACE_DIM, Z_INTERFACE_DIM)
SPATIAL_DIMS = X_DIMS + Y_DIMS + Z_DIMS

# face index f holds the face at f - 1/2, so i + 1/2 -> i + P_HALF
# and i - 1/2 -> i - M_HALF
P_HALF = 1
M_HALF = 0

# boundary types, one per logical direction of the halo map
WEST = 0
EAST = 1
SOUTH = 2
NORTH = 3
BOTTOM = 4
TOP = 5
X_BOUNDARY_TYPES = (WEST, EAST)
Y_BOUNDARY_TYPES = (SOUTH, NORTH)
Z_BOUNDARY_TYPES = (BOTTOM, TOP)
BOUNDARY_TYPES = X_BOUNDARY_TYPES + Y_BOUNDARY_TYPES + Z_BOUNDARY_TYPES
OPPOSITE_BOUNDARY = {
    WEST: EAST,
    EAST: WEST,
    SOUTH: NORTH,
    NORTH: SOUTH,
    BOTTOM: TOP,
    TOP: BOTTOM,
}
