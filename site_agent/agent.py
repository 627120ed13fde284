# site_agent/agent.py
"""
SiteAgent - the boundary between the hosting runtime and the capabilities.

It holds the registered capabilities, validates each incoming payload against the
capability's schema before anything runs, and hands back the capability's text.
Settings (credentials included) are read once, in start().
"""
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .config import Settings, load_settings
from .errors import AgentNotRunningError, InputValidationError, UnknownCapabilityError
from .pipeline.capabilities import Capability

logger = logging.getLogger(__name__)


class SiteAgent:
    def __init__(self, system_prompt: str, settings_loader: Callable[[], Settings] = load_settings):
        self.system_prompt = system_prompt
        self._settings_loader = settings_loader
        self._capabilities: Dict[str, Capability] = {}
        self.settings: Optional[Settings] = None

    # --- Registration ---

    def add_capability(self, capability: Capability):
        if capability.name in self._capabilities:
            raise ValueError(f"Capability {capability.name!r} is already registered")
        self._capabilities[capability.name] = capability
        logger.debug("Registered capability %s", capability.name)

    @property
    def capability_names(self) -> List[str]:
        return list(self._capabilities)

    def describe_capabilities(self) -> List[Dict[str, Any]]:
        """Name, description and JSON schema of every capability, for the hosting side."""
        return [
            {
                "name": capability.name,
                "description": capability.description,
                "schema": capability.schema.model_json_schema(by_alias=True),
            }
            for capability in self._capabilities.values()
        ]

    # --- Lifecycle ---

    @property
    def is_running(self) -> bool:
        return self.settings is not None

    def start(self):
        if self.is_running:
            logger.debug("Agent already running.")
            return
        self.settings = self._settings_loader()
        logger.info("Agent started with capabilities: %s", ", ".join(self.capability_names))

    def stop(self):
        if not self.is_running:
            return
        self.settings = None
        logger.info("Agent stopped.")

    # --- Dispatch ---

    async def dispatch(self, name: str, args: Mapping[str, Any]) -> str:
        """
        Validates `args` against the capability's schema and runs it.
        Raises InputValidationError before the handler runs when the payload is rejected.
        """
        if not self.is_running:
            raise AgentNotRunningError("Agent is not running; call start() first")
        capability = self._capabilities.get(name)
        if capability is None:
            raise UnknownCapabilityError(f"Unknown capability: {name}")

        try:
            request = capability.schema.model_validate(dict(args))
        except ValidationError as e:
            logger.warning("Rejected %s payload: %s", name, e)
            raise InputValidationError(name, str(e)) from e

        logger.info("Dispatching %s", name)
        return await capability.run(request)
