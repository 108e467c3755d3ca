"""
Host contracts.

A host runtime sees the protocol through three kinds of records: actions
(intent-triggered operations), providers (read-only snapshots) and
evaluators (text scorers). ``PluginRegistry`` holds them and is the only
way a host looks one up.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Tuple, Union

from ..config import PodConfig
from ..evaluators.rules import EvaluationResult
from ..exceptions import AgentPodError, InvalidArgumentError
from ..protocol.coordinator import ProtocolCoordinator

logger = logging.getLogger(__name__)


class RecordKind(str, Enum):
    ACTION = "action"
    PROVIDER = "provider"
    EVALUATOR = "evaluator"


@dataclass
class Context:
    """One conversation turn as seen by a plugin record."""
    text: str = ""
    coordinator: Optional[ProtocolCoordinator] = None
    config: Optional[PodConfig] = None

    def __post_init__(self):
        if self.config is None and self.coordinator is not None:
            self.config = self.coordinator.config

    @property
    def lowered(self) -> str:
        return self.text.lower() if isinstance(self.text, str) else ""

    def config_errors(self) -> List[str]:
        if self.config is None:
            return ["No protocol configuration provided"]
        return self.config.validate()


@dataclass
class ActionResult:
    success: bool
    text: str
    content: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "text": self.text, "content": self.content}


@dataclass
class ProviderResult:
    text: str
    values: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "values": self.values}


@dataclass(frozen=True)
class Action:
    """An operation a host triggers from a conversation turn."""
    name: str
    description: str
    validate: Callable[[Context], bool]
    handler: Callable[[Context], Awaitable[ActionResult]]
    similes: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()

    kind = RecordKind.ACTION

    async def run(self, context: Context) -> ActionResult:
        """Run the handler, rendering protocol errors as a failed result."""
        if context.coordinator is None:
            return ActionResult(False, "AgentPod protocol service not available.", {"error": "NO_COORDINATOR"})
        try:
            return await self.handler(context)
        except AgentPodError as e:
            logger.warning("Action %s failed: %s", self.name, e.message)
            return ActionResult(False, e.message, e.to_dict())


@dataclass(frozen=True)
class Provider:
    """A read-only snapshot of protocol state."""
    name: str
    description: str
    get: Callable[[Context], Awaitable[ProviderResult]]

    kind = RecordKind.PROVIDER


def has_text_and_coordinator(context: Context) -> bool:
    return bool(context.text) and context.coordinator is not None


@dataclass(frozen=True)
class Evaluator:
    """A stateless scorer run over a turn's text."""
    name: str
    description: str
    handler: Callable[[Any], EvaluationResult]
    validate: Callable[[Context], bool] = has_text_and_coordinator

    kind = RecordKind.EVALUATOR

    def evaluate(self, context: Context) -> EvaluationResult:
        return self.handler(context.text)


PluginRecord = Union[Action, Provider, Evaluator]


class PluginRegistry:
    """
    Registry of plugin records, keyed by kind and name.

    Usage:
        registry = build_plugin()
        for action in registry.matching_actions(context):
            result = await action.run(context)
    """

    def __init__(self, name: str = "agentpod", description: str = ""):
        self.name = name
        self.description = description
        self._records: Dict[Tuple[RecordKind, str], PluginRecord] = {}

    def register(self, record: PluginRecord) -> PluginRecord:
        if not isinstance(record, (Action, Provider, Evaluator)):
            raise InvalidArgumentError(f"Not a plugin record: {type(record).__name__}")
        key = (record.kind, record.name)
        if key in self._records:
            raise InvalidArgumentError(f"Duplicate {record.kind.value}: {record.name}")
        self._records[key] = record
        return record

    def get(self, name: str, kind: Optional[RecordKind] = None) -> Optional[PluginRecord]:
        if kind is not None:
            return self._records.get((RecordKind(kind), name))
        for (_, record_name), record in self._records.items():
            if record_name == name:
                return record
        return None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PluginRecord]:
        return iter(list(self._records.values()))

    def _of_kind(self, kind: RecordKind) -> list:
        return [r for (k, _), r in self._records.items() if k == kind]

    def actions(self) -> List[Action]:
        return self._of_kind(RecordKind.ACTION)

    def providers(self) -> List[Provider]:
        return self._of_kind(RecordKind.PROVIDER)

    def evaluators(self) -> List[Evaluator]:
        return self._of_kind(RecordKind.EVALUATOR)

    def matching_actions(self, context: Context) -> List[Action]:
        """Actions whose validate() accepts this turn."""
        return [a for a in self.actions() if a.validate(context)]

    def run_evaluators(self, context: Context) -> Dict[str, EvaluationResult]:
        return {e.name: e.evaluate(context) for e in self.evaluators() if e.validate(context)}

    async def collect_providers(self, context: Context) -> Dict[str, ProviderResult]:
        return {p.name: await p.get(context) for p in self.providers()}
