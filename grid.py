#grid.py

from collections import namedtuple
import numpy as np
import constants as C
from cohorts import GroupedCollection
from utilities import cell_dimensions_km, km2_to_hectares, ConfigurationError
import logger as log

# One staged cohort movement, as read back from the parallel delta lists of a cell.
DispersalRecord = namedtuple(
    "DispersalRecord",
    ["functional_group", "cohort_index", "destination", "exit_direction", "entry_direction"])

# (lat step, lon step) for each direction code. North is increasing latitude index.
DIRECTION_OFFSETS = {
    C.DIRECTION_NORTH: (1, 0),
    C.DIRECTION_NORTH_EAST: (1, 1),
    C.DIRECTION_EAST: (0, 1),
    C.DIRECTION_SOUTH_EAST: (-1, 1),
    C.DIRECTION_SOUTH: (-1, 0),
    C.DIRECTION_SOUTH_WEST: (-1, -1),
    C.DIRECTION_WEST: (0, -1),
    C.DIRECTION_NORTH_WEST: (1, -1),
}


class ModelGrid:
    """
    The geographic grid. Each cell holds its cohorts and stocks (grouped by functional
    group), its environment values, and the lists used to stage dispersal until the end
    of a time step.
    """
    def __init__(self, bottom_latitude, top_latitude, left_longitude, right_longitude,
                 lat_cell_size, lon_cell_size, number_of_cohort_groups, number_of_stock_groups):
        self.lat_cell_size = lat_cell_size
        self.lon_cell_size = lon_cell_size
        # Bottom/left edges of each cell, in degrees.
        self.lats = np.arange(bottom_latitude, top_latitude - lat_cell_size / 2, lat_cell_size)
        self.lons = np.arange(left_longitude, right_longitude - lon_cell_size / 2, lon_cell_size)
        self.num_lat_cells = len(self.lats)
        self.num_lon_cells = len(self.lons)
        self.wraps_east_west = (right_longitude - left_longitude) > C.GLOBAL_LONGITUDE_SPAN_DEGREES
        self.number_of_cohort_groups = number_of_cohort_groups
        self.number_of_stock_groups = number_of_stock_groups

        # Cell geometry only depends on latitude.
        self.cell_heights_km = np.zeros(self.num_lat_cells)
        self.cell_widths_km = np.zeros(self.num_lat_cells)
        self.cell_areas_km2 = np.zeros(self.num_lat_cells)
        for ii, lat in enumerate(self.lats):
            height, width, area = cell_dimensions_km(lat + lat_cell_size / 2, lat_cell_size, lon_cell_size)
            self.cell_heights_km[ii] = height
            self.cell_widths_km[ii] = width
            self.cell_areas_km2[ii] = area

        # Environment layers: name -> array of shape (months, lat, lon).
        self._layers = {}
        self.set_environment_layer("Realm", np.full((self.num_lat_cells, self.num_lon_cells), C.REALM_TERRESTRIAL))

        shape = (self.num_lat_cells, self.num_lon_cells)
        self._cohorts = [[GroupedCollection(number_of_cohort_groups) for _ in range(shape[1])] for _ in range(shape[0])]
        self._stocks = [[GroupedCollection(number_of_stock_groups) for _ in range(shape[1])] for _ in range(shape[0])]
        self.organic_pool = np.zeros(shape)  # grams (g) of dead organic matter per cell

        # Dispersal delta lists, parallel per origin cell.
        self.delta_functional_group = [[[] for _ in range(shape[1])] for _ in range(shape[0])]
        self.delta_cohort_number = [[[] for _ in range(shape[1])] for _ in range(shape[0])]
        self.delta_cell_to_disperse_to = [[[] for _ in range(shape[1])] for _ in range(shape[0])]
        self.delta_exit_direction = [[[] for _ in range(shape[1])] for _ in range(shape[0])]
        self.delta_entry_direction = [[[] for _ in range(shape[1])] for _ in range(shape[0])]

        self._dispersal_neighbours = None
        log.log(f"Model grid created with {self.num_lat_cells}x{self.num_lon_cells} cells "
                f"(east-west wrap: {self.wraps_east_west}).")

    # --- Environment ---

    def set_environment_layer(self, name, values):
        """Stores a static (lat, lon) or monthly (month, lat, lon) environment layer."""
        values = np.asarray(values, dtype=float)
        if values.ndim == 2:
            values = values[np.newaxis, :, :]
        if values.shape[1:] != (self.num_lat_cells, self.num_lon_cells):
            raise ConfigurationError(f"Environment layer '{name}' has shape {values.shape}, "
                                     f"expected (..., {self.num_lat_cells}, {self.num_lon_cells})")
        self._layers[name] = values
        if name == "Realm":
            # Neighbours are only valid within the same realm.
            self._dispersal_neighbours = None

    def get_environment_layer(self, name, month, lat_index, lon_index):
        """Returns (value, exists). Static layers ignore the month."""
        layer = self._layers.get(name)
        if layer is None:
            return C.MISSING_VALUE, False
        month_index = month % layer.shape[0]
        return float(layer[month_index, lat_index, lon_index]), True

    def environment_layer_names(self):
        return sorted(self._layers)

    def cell_environment(self, lat_index, lon_index, month=0):
        """A snapshot of the environment values of one cell, plus its geometry and indices."""
        environment = {name: float(layer[month % layer.shape[0], lat_index, lon_index])
                       for name, layer in self._layers.items()}
        environment["Cell Area"] = float(self.cell_areas_km2[lat_index])
        environment["LatIndex"] = lat_index
        environment["LonIndex"] = lon_index
        return environment

    def cell_area_km2(self, lat_index, lon_index):
        return float(self.cell_areas_km2[lat_index])

    def cell_area_hectares(self, lat_index, lon_index):
        return km2_to_hectares(self.cell_area_km2(lat_index, lon_index))

    def is_marine(self, lat_index, lon_index):
        return self.get_environment_layer("Realm", 0, lat_index, lon_index)[0] == C.REALM_MARINE

    def all_cells(self):
        for ii in range(self.num_lat_cells):
            for jj in range(self.num_lon_cells):
                yield ii, jj

    # --- Cohorts & stocks ---

    def get_cell_cohorts(self, lat_index, lon_index):
        return self._cohorts[lat_index][lon_index]

    def get_cell_stocks(self, lat_index, lon_index):
        return self._stocks[lat_index][lon_index]

    def add_cohort(self, lat_index, lon_index, cohort):
        return self._cohorts[lat_index][lon_index].add(cohort.functional_group_index, cohort)

    def add_stock(self, lat_index, lon_index, stock):
        return self._stocks[lat_index][lon_index].add(stock.functional_group_index, stock)

    def total_cohort_count(self):
        return sum(self._cohorts[ii][jj].total_count() for ii, jj in self.all_cells())

    # --- Dispersal neighbours ---

    def _neighbour(self, lat_index, lon_index, direction):
        d_lat, d_lon = DIRECTION_OFFSETS[direction]
        lat = lat_index + d_lat
        lon = lon_index + d_lon
        if lat < 0 or lat >= self.num_lat_cells:
            return None
        if lon < 0 or lon >= self.num_lon_cells:
            if not self.wraps_east_west:
                return None
            lon %= self.num_lon_cells
        realm_from = self.get_environment_layer("Realm", 0, lat_index, lon_index)[0]
        realm_to = self.get_environment_layer("Realm", 0, lat, lon)[0]
        if realm_from != realm_to:
            return None
        return (lat, lon)

    def _build_dispersal_neighbours(self):
        neighbours = {}
        for ii, jj in self.all_cells():
            neighbours[(ii, jj)] = {direction: self._neighbour(ii, jj, direction) for direction in DIRECTION_OFFSETS}
        self._dispersal_neighbours = neighbours

    def check_dispersal(self, lat_index, lon_index, direction):
        """
        The cell a cohort would reach by leaving (lat_index, lon_index) in the given
        direction, or None when there is no valid destination (grid edge or a change of
        realm).
        """
        if self._dispersal_neighbours is None:
            self._build_dispersal_neighbours()
        return self._dispersal_neighbours[(lat_index, lon_index)][direction]

    # --- Dispersal deltas ---

    def append_dispersal_delta(self, lat_index, lon_index, functional_group, cohort_index,
                               destination, exit_direction, entry_direction):
        """Stages one cohort movement on its origin cell."""
        self.delta_functional_group[lat_index][lon_index].append(functional_group)
        self.delta_cohort_number[lat_index][lon_index].append(cohort_index)
        self.delta_cell_to_disperse_to[lat_index][lon_index].append(tuple(destination))
        self.delta_exit_direction[lat_index][lon_index].append(exit_direction)
        self.delta_entry_direction[lat_index][lon_index].append(entry_direction)

    def staged_dispersals(self, lat_index, lon_index):
        return [DispersalRecord(*fields) for fields in zip(
            self.delta_functional_group[lat_index][lon_index],
            self.delta_cohort_number[lat_index][lon_index],
            self.delta_cell_to_disperse_to[lat_index][lon_index],
            self.delta_exit_direction[lat_index][lon_index],
            self.delta_entry_direction[lat_index][lon_index])]

    def commit_dispersal(self):
        """
        Moves every staged cohort to its destination cell, removes it from its origin and
        clears the delta lists. Returns (number moved, inbound counts, outbound counts),
        where the count arrays are indexed [lat, lon, direction].
        """
        inbound = np.zeros((self.num_lat_cells, self.num_lon_cells, 8), dtype=int)
        outbound = np.zeros((self.num_lat_cells, self.num_lon_cells, 8), dtype=int)
        moved = 0

        # Add every mover to its destination before deleting anything, so the staged
        # indices stay valid while we read them.
        for ii, jj in self.all_cells():
            cohorts = self._cohorts[ii][jj]
            for record in self.staged_dispersals(ii, jj):
                cohort = cohorts[record.functional_group, record.cohort_index]
                dest_lat, dest_lon = record.destination
                self._cohorts[dest_lat][dest_lon].add(record.functional_group, cohort)
                outbound[ii, jj, record.exit_direction] += 1
                inbound[dest_lat, dest_lon, record.entry_direction] += 1
                moved += 1

        for ii, jj in self.all_cells():
            if not self.delta_functional_group[ii][jj]:
                continue
            by_group = {}
            for fg, index in zip(self.delta_functional_group[ii][jj], self.delta_cohort_number[ii][jj]):
                by_group.setdefault(fg, []).append(index)
            for fg, indices in by_group.items():
                self._cohorts[ii][jj].remove_indices(fg, indices)
            self.clear_dispersal_deltas(ii, jj)

        return moved, inbound, outbound

    def clear_dispersal_deltas(self, lat_index, lon_index):
        self.delta_functional_group[lat_index][lon_index] = []
        self.delta_cohort_number[lat_index][lon_index] = []
        self.delta_cell_to_disperse_to[lat_index][lon_index] = []
        self.delta_exit_direction[lat_index][lon_index] = []
        self.delta_entry_direction[lat_index][lon_index] = []
