# environment.py

import numpy as np
import noise
import constants as C
import logger as log


class Environment:
    """
    Synthetic environmental data for demo runs: a land/ocean mask, autotroph production
    and monthly ocean currents, all drawn from Perlin noise over cell-centre coordinates.
    """
    def __init__(self):
        self.realm_seed = C.REALM_NOISE_SEED
        self.npp_seed = C.NPP_NOISE_SEED
        self.u_velocity_seed = C.U_VELOCITY_NOISE_SEED
        self.v_velocity_seed = C.V_VELOCITY_NOISE_SEED
        log.log("Environment initialized with Perlin noise layers.")

    def _noise(self, lat, lon, seed):
        """Noise in [0, 1] at a point given in degrees."""
        value = noise.pnoise2((lon + seed) / C.NOISE_SCALE, (lat + seed) / C.NOISE_SCALE,
                              octaves=C.NOISE_OCTAVES, persistence=C.NOISE_PERSISTENCE,
                              lacunarity=C.NOISE_LACUNARITY)
        return (value + 1) / 2

    def _seasonal_noise(self, lat, lon, month, seed):
        """Noise in [-1, 1] that drifts smoothly through the year."""
        value = noise.pnoise3((lon + seed) / C.NOISE_SCALE, (lat + seed) / C.NOISE_SCALE,
                              month / C.MONTHS_IN_YEAR, octaves=C.NOISE_OCTAVES,
                              persistence=C.NOISE_PERSISTENCE, lacunarity=C.NOISE_LACUNARITY)
        return max(-1.0, min(1.0, value))

    def get_realm(self, lat, lon):
        if self._noise(lat, lon, self.realm_seed) < C.REALM_WATER_LEVEL:
            return C.REALM_MARINE
        return C.REALM_TERRESTRIAL

    def get_npp(self, lat, lon):
        """Autotroph production in g per km^2 per month."""
        return max(0.0, min(1.0, self._noise(lat, lon, self.npp_seed))) * C.NPP_MAX_G_PER_KM2

    def get_current(self, lat, lon, month):
        """(u, v) ocean current speeds in m/s; u is eastward, v northward."""
        u = self._seasonal_noise(lat, lon, month, self.u_velocity_seed) * C.MAX_CURRENT_SPEED_M_PER_S
        v = self._seasonal_noise(lat, lon, month, self.v_velocity_seed) * C.MAX_CURRENT_SPEED_M_PER_S
        return u, v

    def build_layers(self, grid):
        """Writes the Realm, NPP, uVel and vVel layers onto a model grid."""
        shape = (grid.num_lat_cells, grid.num_lon_cells)
        months = int(C.MONTHS_IN_YEAR)
        realm = np.zeros(shape)
        npp = np.zeros(shape)
        u_velocity = np.zeros((months,) + shape)
        v_velocity = np.zeros((months,) + shape)

        for ii, jj in grid.all_cells():
            lat = grid.lats[ii] + grid.lat_cell_size / 2
            lon = grid.lons[jj] + grid.lon_cell_size / 2
            realm[ii, jj] = self.get_realm(lat, lon)
            npp[ii, jj] = self.get_npp(lat, lon)
            if realm[ii, jj] == C.REALM_MARINE:
                for month in range(months):
                    u_velocity[month, ii, jj], v_velocity[month, ii, jj] = self.get_current(lat, lon, month)

        grid.set_environment_layer("Realm", realm)
        grid.set_environment_layer("NPP", npp)
        grid.set_environment_layer("uVel", u_velocity)
        grid.set_environment_layer("vVel", v_velocity)
        marine_cells = int(np.sum(realm == C.REALM_MARINE))
        log.log(f"Environment layers built: {marine_cells} marine and {realm.size - marine_cells} terrestrial cells.")
