# constants.py

# =============================================================================
# --- MODEL TIME & RUN SETTINGS ---
# =============================================================================
# The unit of one global model time step. Every ecological process converts its own
# rate units into this unit at construction time.
GLOBAL_TIME_STEP_UNIT = "month"
DEMO_TIME_STEPS = 12
PROFILER_PRINT_LINE_COUNT = 20

# Calendar used by the time unit conversion.
DAYS_IN_YEAR = 360.0
MONTHS_IN_YEAR = 12.0
DAYS_IN_WEEK = 7.0
HOURS_IN_DAY = 24.0
SECONDS_IN_HOUR = 3600.0
SECONDS_IN_DAY = 86400.0

# =============================================================================
# --- RANDOM NUMBERS ---
# =============================================================================
# When True every stochastic process seeds itself from system entropy, so runs are not
# reproducible. When False the fixed seed below is used and two runs with the same
# inputs draw identical sequences.
DRAW_RANDOMLY = False
FIXED_RANDOM_SEED = 14141

# =============================================================================
# --- GRID & REALMS ---
# =============================================================================
# Realm codes stored in the "Realm" environment layer.
REALM_TERRESTRIAL = 1.0
REALM_MARINE = 2.0

# A longitude span wider than this wraps east-west.
# Unit: degrees
GLOBAL_LONGITUDE_SPAN_DEGREES = 359.9

# WGS84 ellipsoid radii, used to compute the length of a degree at a given latitude.
# Unit: metres
EARTH_EQUATORIAL_RADIUS_M = 6378137.0
EARTH_POLAR_RADIUS_M = 6356752.3142
METRES_PER_KM = 1000.0
HECTARES_PER_KM2 = 100.0

# Sentinel value for a missing environment value.
MISSING_VALUE = -9999.0

# Demo grid extent.
# Unit: degrees
DEMO_BOTTOM_LATITUDE = -10.0
DEMO_TOP_LATITUDE = 10.0
DEMO_LEFT_LONGITUDE = 0.0
DEMO_RIGHT_LONGITUDE = 20.0
DEMO_CELL_SIZE_DEGREES = 2.0

# =============================================================================
# --- SYNTHETIC ENVIRONMENT (PERLIN NOISE) ---
# =============================================================================
NOISE_SCALE = 8.0
NOISE_OCTAVES = 4
NOISE_PERSISTENCE = 0.5
NOISE_LACUNARITY = 2.0
REALM_NOISE_SEED = 24322
NPP_NOISE_SEED = 12345
U_VELOCITY_NOISE_SEED = 98765
V_VELOCITY_NOISE_SEED = 56789
# Noise values (in [0, 1]) below this become ocean.
REALM_WATER_LEVEL = 0.45

# Peak autotroph production added to each stock per model time step.
# Unit: grams per km^2 per month
NPP_MAX_G_PER_KM2 = 2.0e5

# Peak ocean current speed.
# Unit: m/s
MAX_CURRENT_SPEED_M_PER_S = 0.2

# =============================================================================
# --- TRACKING & DIAGNOSTICS ---
# =============================================================================
TRACK_PROCESSES = False
SPECIFIC_LOCATIONS = False
OUTPUT_DETAIL = "low"
OUTPUT_DETAIL_LEVELS = ("low", "medium", "high")

# Fraction of predation events that are recorded as mortality diagnostics. The remaining
# events are skipped to bound the volume of records.
MORTALITY_TRACKING_SAMPLE_RATE = 0.025

# =============================================================================
# --- INVARIANTS ---
# =============================================================================
# When True, a prey abundance or stock biomass that would go negative after eating is
# clamped to zero and logged. When False an InvariantViolation is raised.
CLAMP_NEGATIVE_STATE = True

# =============================================================================
# --- HERBIVORY ---
# =============================================================================
HERBIVORY_TIME_UNIT = "day"

# Handling time per gram of autotroph matter for a herbivore of ReferenceMass.
# Unit: days per gram
HERBIVORY_HANDLING_TIME_SCALAR_TERRESTRIAL = 0.7
HERBIVORY_HANDLING_TIME_SCALAR_MARINE = 0.7
HERBIVORY_HANDLING_TIME_EXPONENT_TERRESTRIAL = 0.7
HERBIVORY_HANDLING_TIME_EXPONENT_MARINE = 0.7
# Unit: grams
HERBIVORY_HANDLING_TIME_REFERENCE_MASS = 1.0

# Individual herbivory rate per hectare = RateConstant * bodyMass^RateMassExponent.
HERBIVORY_RATE_CONSTANT = 1.0e-11
HERBIVORY_RATE_MASS_EXPONENT = 1.0
HERBIVORY_ATTACK_RATE_EXPONENT_TERRESTRIAL = 2.0
HERBIVORY_ATTACK_RATE_EXPONENT_MARINE = 2.0

# Fraction of autotroph biomass that is edible to herbivores.
TERRESTRIAL_EDIBLE_FRACTION = 0.1
MARINE_EDIBLE_FRACTION = 1.0

# =============================================================================
# --- PREDATION ---
# =============================================================================
PREDATION_TIME_UNIT = "day"

# Handling time per gram of prey for a predator of ReferenceMass.
# Unit: days per gram
PREDATION_HANDLING_TIME_SCALAR_TERRESTRIAL = 0.5
PREDATION_HANDLING_TIME_SCALAR_MARINE = 0.5
PREDATION_HANDLING_TIME_EXPONENT_TERRESTRIAL = 0.7
PREDATION_HANDLING_TIME_EXPONENT_MARINE = 0.7
# Unit: grams
PREDATION_HANDLING_TIME_REFERENCE_MASS = 1.0

# Killing rate of an individual predator per unit prey density per hectare per day is
# KillRateConstant * predatorMass^KillRateConstantMassExponent.
PREDATION_KILL_RATE_CONSTANT = 1.0e-6
PREDATION_KILL_RATE_CONSTANT_MASS_EXPONENT = 1.0

# Width of the log-normal feeding preference around the optimal prey/predator mass ratio.
PREDATION_FEEDING_PREFERENCE_STANDARD_DEVIATION = 0.7

# Number of log-mass bins prey are aggregated into. Must be even.
PREDATION_NUMBER_OF_MASS_BINS = 12

# =============================================================================
# --- DISPERSAL ---
# =============================================================================
# Cohorts at or below this individual body mass in marine cells drift with currents.
# Unit: grams
PLANKTON_DISPERSAL_THRESHOLD = 0.01

# --- Advective ---
ADVECTIVE_TIME_UNIT = "month"
# Unit: m^2/s
ADVECTIVE_HORIZONTAL_DIFFUSIVITY = 100.0
# Length of one advective sub-step.
# Unit: hours
ADVECTIVE_MODEL_TIME_STEP_LENGTH_HOURS = 18

# --- Diffusive ---
DIFFUSIVE_TIME_UNIT = "month"
# Dispersal speed = Scalar * bodyMass^Exponent.
# Unit: km per month
DIFFUSIVE_DISPERSAL_SPEED_BODY_MASS_SCALAR = 0.0278
DIFFUSIVE_DISPERSAL_SPEED_BODY_MASS_EXPONENT = 0.48

# --- Responsive ---
RESPONSIVE_TIME_UNIT = "month"
# Unit: km per month
RESPONSIVE_DISPERSAL_SPEED_BODY_MASS_SCALAR = 0.0278
RESPONSIVE_DISPERSAL_SPEED_BODY_MASS_EXPONENT = 0.48
# Density threshold (individuals per km^2) is DensityThresholdScaling / adultMass.
RESPONSIVE_DENSITY_THRESHOLD_SCALING = 50000.0
# Below this fraction of adult mass a cohort always attempts starvation dispersal.
RESPONSIVE_STARVATION_DISPERSAL_BODY_MASS_THRESHOLD = 0.8

# Direction codes used in dispersal bookkeeping.
DIRECTION_NORTH = 0
DIRECTION_NORTH_EAST = 1
DIRECTION_EAST = 2
DIRECTION_SOUTH_EAST = 3
DIRECTION_SOUTH = 4
DIRECTION_SOUTH_WEST = 5
DIRECTION_WEST = 6
DIRECTION_NORTH_WEST = 7

# =============================================================================
# --- DEMO POPULATION ---
# =============================================================================
DEMO_COHORTS_PER_GROUP = 2
DEMO_INITIAL_STOCK_BIOMASS_G_PER_KM2 = 1.0e6
DEMO_INITIAL_DENSITY_PER_KM2 = 5.0
