"""
Exceptions raised by faucetflow.
"""


class ConfigurationError(ValueError):
    """Raised when flow parameters or a distribution are invalid.

    Always raised while building a configuration, never mid-simulation.
    """
