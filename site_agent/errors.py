# site_agent/errors.py


class SiteAgentError(Exception):
    """Base class for every error raised by the agent."""


class FetchError(SiteAgentError):
    """The browser could not be launched, navigate, or evaluate a script in the page."""


class OcrError(SiteAgentError):
    """A single image could not be downloaded or transcribed."""


class InputValidationError(SiteAgentError):
    """A capability payload was rejected by its schema before dispatch."""

    def __init__(self, capability: str, details: str):
        super().__init__(f"Invalid input for {capability}: {details}")
        self.capability = capability
        self.details = details


class UnknownCapabilityError(SiteAgentError):
    pass


class AgentNotRunningError(SiteAgentError):
    pass
