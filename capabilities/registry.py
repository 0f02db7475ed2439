# Namespaced operation registry
"""Merged, read-only registry of provider operations"""
from typing import Any, Dict, Iterator, List, Mapping, Optional
from types import MappingProxyType
import logging

from jsonschema import validate, ValidationError as JsonSchemaValidationError
from jsonschema.exceptions import SchemaError

from capabilities.models import OperationSpec
from execution.models import ValidationError

logger = logging.getLogger(__name__)


def qualify(provider: str, operation: str) -> str:
    """Namespaced name exposed to the AI collaborator"""
    return f"{provider}_{operation}"


class OperationHandle:
    """One callable provider operation"""

    def __init__(self, provider: str, spec: OperationSpec, session: Any):
        self.provider = provider
        self.operation = spec.name
        self.name = qualify(provider, spec.name)
        self.description = spec.description or f"Tool provided by {provider}: {spec.name}"
        self.input_schema = spec.input_schema
        self._session = session

    def validate_arguments(self, arguments: Dict[str, Any]):
        try:
            validate(instance=arguments, schema=self.input_schema)
        except JsonSchemaValidationError as e:
            raise ValidationError(
                message=f"Invalid arguments for {self.name}: {e.message}",
                provider_name=self.provider,
                details={"operation": self.operation, "path": list(e.absolute_path)},
            )
        except SchemaError as e:
            # a provider shipping a broken schema should not block calls
            logger.warning(f"Ignoring invalid input schema of {self.name}: {e.message}")

    async def invoke(self, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """
        Validate arguments and call the operation on its provider

        Args:
            arguments: Operation arguments

        Returns:
            Provider result

        Raises:
            ValidationError if arguments do not match the input schema
        """
        arguments = arguments or {}
        self.validate_arguments(arguments)
        logger.debug(f"Calling {self.name}")
        return await self._session.call_operation(self.operation, arguments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "provider": self.provider,
            "operation": self.operation,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    def __repr__(self) -> str:
        return f"OperationHandle({self.name!r})"


class CapabilityRegistry(Mapping):
    """
    Qualified operation name -> OperationHandle.

    Instances never change after construction; the aggregator builds a
    new one and swaps the reference.
    """

    def __init__(self, handles: Optional[Mapping[str, OperationHandle]] = None):
        self._handles = MappingProxyType(dict(handles or {}))

    def __getitem__(self, name: str) -> OperationHandle:
        return self._handles[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def by_provider(self, provider: str) -> List[OperationHandle]:
        return [h for h in self._handles.values() if h.provider == provider]

    def providers(self) -> List[str]:
        return sorted({h.provider for h in self._handles.values()})

    def describe(self) -> List[Dict[str, Any]]:
        return [self._handles[name].to_dict() for name in sorted(self._handles)]

    def __repr__(self) -> str:
        return f"CapabilityRegistry({len(self)} operations)"


class RegistryBuilder:
    """Working set used while an aggregation run is in progress"""

    def __init__(self):
        self._handles: Dict[str, OperationHandle] = {}

    def add_provider(self, provider: str, specs: List[OperationSpec], session: Any) -> int:
        added = 0
        for spec in specs:
            handle = OperationHandle(provider, spec, session)
            existing = self._handles.get(handle.name)
            if existing is not None:
                logger.warning(
                    f"Operation '{handle.name}' from {provider} shadows "
                    f"the one from {existing.provider}"
                )
            self._handles[handle.name] = handle
            added += 1
        return added

    def build(self) -> CapabilityRegistry:
        return CapabilityRegistry(self._handles)
