"""
SysPulse Agent

Samples host CPU and memory utilization from /proc and reports it to a
telemetry collector over HTTP.
"""

__version__ = "1.0.0"
