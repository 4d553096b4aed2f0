"""
Punch - time tracking service: punch in, punch out, report on gross and net time.
"""
__version__ = "0.1.0"
