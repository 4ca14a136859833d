"""
Configuration module for the trucking billing engine.
"""
from .settings import (
    TruckingBillingConfig,
    get_config,
    load_config,
    reload_config
)

__all__ = [
    'TruckingBillingConfig',
    'get_config',
    'load_config',
    'reload_config'
]
