"""Capability registry.

Holds registered actions (keyed by name) and resources (keyed by URI) in
registration order. The registry is a plain mapping with lookup: it knows
nothing about transports, requests or protocol envelopes.

Duplicate policy: registering a name or URI that is already present raises
DuplicateNameError. Nothing is ever silently replaced.

Usage:
    from hellomcp.capabilities.registry import CapabilityRegistry

    registry = CapabilityRegistry()
    registry.register_action("hello_world", hello_world, description="Says hello")
    action = registry.resolve_action("hello_world")
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from hellomcp.capabilities.models import Action, Capability, Resource
from hellomcp.capabilities.validation import FieldSpec, InputShape
from hellomcp.core.console import get_logger
from hellomcp.core.result import DuplicateNameError, NotFoundError, RegistrationError

logger = get_logger("capabilities.registry")


class CapabilityRegistry:
    """Ordered store of actions and resources."""

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}
        self._resources: dict[str, Resource] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, capability: Capability) -> Capability:
        """Add an action or resource. Returns the registered record."""
        if isinstance(capability, Action):
            if capability.name in self._actions:
                raise DuplicateNameError(
                    f"Action '{capability.name}' is already registered",
                    context={"name": capability.name},
                )
            self._actions[capability.name] = capability
            logger.debug("Registered action %s", capability.name)
            return capability

        if isinstance(capability, Resource):
            if capability.uri in self._resources:
                raise DuplicateNameError(
                    f"Resource '{capability.uri}' is already registered",
                    context={"uri": capability.uri},
                )
            self._resources[capability.uri] = capability
            logger.debug("Registered resource %s (%s)", capability.name, capability.uri)
            return capability

        raise RegistrationError(
            f"Cannot register {type(capability).__name__}; expected Action or Resource"
        )

    def register_action(
        self,
        name: str,
        invoke: Any,
        *,
        description: str = "",
        input_shape: InputShape | Mapping[str, FieldSpec] | None = None,
    ) -> Action:
        """Build an Action from its parts and register it."""
        try:
            action = Action(
                name=name,
                description=description,
                input_shape=input_shape,
                invoke=invoke,
            )
        except (PydanticValidationError, TypeError) as exc:
            raise RegistrationError(f"Invalid action '{name}': {exc}", context={"name": name}) from exc
        self.register(action)
        return action

    def register_resource(
        self,
        name: str,
        uri: str,
        read: Any,
        *,
        description: str = "",
        media_type: str = "text/plain",
    ) -> Resource:
        """Build a Resource from its parts and register it."""
        try:
            resource = Resource(
                name=name,
                uri=uri,
                description=description,
                media_type=media_type,
                read=read,
            )
        except PydanticValidationError as exc:
            raise RegistrationError(f"Invalid resource '{name}': {exc}", context={"uri": uri}) from exc
        self.register(resource)
        return resource

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve_action(self, name: str) -> Action:
        try:
            return self._actions[name]
        except KeyError:
            raise NotFoundError(f"Unknown tool: {name}", context={"name": name}) from None

    def resolve_resource(self, uri: str) -> Resource:
        try:
            return self._resources[uri]
        except KeyError:
            raise NotFoundError(f"Unknown resource: {uri}", context={"uri": uri}) from None

    def list_actions(self) -> tuple[Action, ...]:
        return tuple(self._actions.values())

    def list_resources(self) -> tuple[Resource, ...]:
        return tuple(self._resources.values())

    def __contains__(self, key: object) -> bool:
        return key in self._actions or key in self._resources

    def __len__(self) -> int:
        return len(self._actions) + len(self._resources)

    def __repr__(self) -> str:
        return f"CapabilityRegistry(actions={len(self._actions)}, resources={len(self._resources)})"


__all__ = ["CapabilityRegistry"]
