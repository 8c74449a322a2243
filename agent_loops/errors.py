"""Exception types raised by the loop library."""


class AgentLoopError(Exception):
    pass


class ContextStateError(AgentLoopError):
    """Illegal transition on an execution context."""


class ConfigError(AgentLoopError):
    """Missing or invalid configuration."""
