"""Inspex - refuge bay door inspection and certification tracker."""

__version__ = "0.1.0"
