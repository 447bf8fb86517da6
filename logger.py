# logger.py

# This will hold a reference to the model's TimeManager instance.
_time_manager = None

def set_time_manager(tm):
    """Sets the global time manager for the logger to use."""
    global _time_manager
    _time_manager = tm

def log(message):
    """Prints a message with a model time stamp if available."""
    # Only stamp with the model clock once the driver has registered one.
    if _time_manager is not None and _time_manager.has_started:
        time_str = f"[Step {_time_manager.current_time_step:04d} | Month {_time_manager.current_month:02d}]"
        print(f"{time_str} {message}")
    else:
        # For messages logged before the first time step.
        print(f"[Model Start] {message}")
