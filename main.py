#main.py

import sys
import cProfile
import pstats
import constants as C
from diagnostics import ProcessTracker
from world import World
import logger

def run_simulation(number_of_time_steps):
    tracker = ProcessTracker(specific_locations=C.SPECIFIC_LOCATIONS) if C.TRACK_PROCESSES else None
    world = World(tracker=tracker)
    logger.set_time_manager(world.time_manager)
    world.populate_world()
    world.run(number_of_time_steps)
    if tracker is not None:
        logger.log(f"Tracker: {tracker.summary()}")
    return world

def main(number_of_time_steps=C.DEMO_TIME_STEPS):
    logger.log("--- Model Start ---")
    run_simulation(number_of_time_steps)
    logger.log("--- Model Exit ---")

def print_profile_report(profiler):
    print("\n\n--- PROFILER REPORT ---")
    stats = pstats.Stats(profiler)
    stats.sort_stats(pstats.SortKey.CUMULATIVE)
    stats.print_stats(C.PROFILER_PRINT_LINE_COUNT)

if __name__ == '__main__':
    time_steps = int(sys.argv[1]) if len(sys.argv) > 1 else C.DEMO_TIME_STEPS
    profiler = cProfile.Profile()
    try:
        profiler.runcall(main, time_steps)
    finally:
        print_profile_report(profiler)
