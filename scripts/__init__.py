"""
Scripts - Command-line utilities for the appliance energy estimator.
"""
