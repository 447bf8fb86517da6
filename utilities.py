# utilities.py

import numpy as np
import constants as C
import logger as log


class ConfigurationError(ValueError):
    """Raised when a model is set up with an unsupported unit, trait or option."""


class InvariantViolation(ArithmeticError):
    """Raised when eating would leave a negative biomass or abundance and clamping is off."""


# Length of each supported time unit, in days.
_DAYS_PER_UNIT = {
    "year": C.DAYS_IN_YEAR,
    "month": C.DAYS_IN_YEAR / C.MONTHS_IN_YEAR,
    "bimonth": C.DAYS_IN_YEAR / (C.MONTHS_IN_YEAR * 2),
    "week": C.DAYS_IN_WEEK,
    "day": 1.0,
    "second": 1.0 / C.SECONDS_IN_DAY,
}


def convert_time_units(from_unit, to_unit):
    """Returns how many `to_unit`s fit in one `from_unit` (e.g. month -> day is 30)."""
    from_key = from_unit.lower()
    to_key = to_unit.lower()
    if from_key not in _DAYS_PER_UNIT or to_key not in _DAYS_PER_UNIT:
        raise ConfigurationError(
            f"Requested combination of time units not supported: '{from_unit}' -> '{to_unit}'")
    if from_key == to_key:
        return 1.0
    return _DAYS_PER_UNIT[from_key] / _DAYS_PER_UNIT[to_key]


def length_of_degree_latitude_km(latitude):
    """Length of one degree of latitude at the given latitude, on the WGS84 ellipsoid."""
    latitude_rad = np.radians(latitude)
    a = C.EARTH_EQUATORIAL_RADIUS_M
    b = C.EARTH_POLAR_RADIUS_M
    temp_val = (a * np.cos(latitude_rad)) ** 2 + (b * np.sin(latitude_rad)) ** 2
    # Meridional radius of curvature
    m_phi = (a * b) ** 2 / temp_val ** 1.5
    return np.pi / 180.0 * m_phi / C.METRES_PER_KM


def length_of_degree_longitude_km(latitude):
    """Length of one degree of longitude at the given latitude, on the WGS84 ellipsoid."""
    latitude_rad = np.radians(latitude)
    a = C.EARTH_EQUATORIAL_RADIUS_M
    b = C.EARTH_POLAR_RADIUS_M
    temp_val = (a * np.cos(latitude_rad)) ** 2 + (b * np.sin(latitude_rad)) ** 2
    # Normal radius of curvature
    n_phi = a ** 2 / np.sqrt(temp_val)
    return np.pi / 180.0 * np.cos(latitude_rad) * n_phi / C.METRES_PER_KM


def cell_dimensions_km(centre_latitude, lat_cell_size, lon_cell_size):
    """Returns (height_km, width_km, area_km2) of a cell centred on the given latitude."""
    height = length_of_degree_latitude_km(centre_latitude) * lat_cell_size
    width = length_of_degree_longitude_km(centre_latitude) * lon_cell_size
    return height, width, height * width


def km2_to_hectares(area_km2):
    return area_km2 * C.HECTARES_PER_KM2


def enforce_non_negative(value, description, clamp=C.CLAMP_NEGATIVE_STATE):
    """
    Returns value unchanged when it is >= 0. A negative value is clamped to zero and
    logged, or raises InvariantViolation when clamping is switched off.
    """
    if value >= 0:
        return value
    if not clamp:
        raise InvariantViolation(f"{description} went negative ({value!r})")
    log.log(f"WARNING: {description} went negative ({value!r}); clamped to zero.")
    return 0.0
