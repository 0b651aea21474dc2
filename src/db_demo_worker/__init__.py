"""
DB Demo Worker - periodic timestamp writer for PostgreSQL, MySQL and MongoDB.

The worker waits for the configured database to become reachable and then
inserts one timestamped row into a ``demo_log`` table (or collection) on a
fixed interval until it is stopped.
"""

__version__ = "1.0.0"
__author__ = "DB Demo Worker Team"
