"""Utility functions and classes for ARMA-GARCH analysis"""

from .progress import ProgressMonitor
from .log_setup import setup_logging

__all__ = ['ProgressMonitor', 'setup_logging']
