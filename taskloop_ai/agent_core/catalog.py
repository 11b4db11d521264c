from __future__ import annotations

"""Static action catalog and classifier.

The catalog is the closed set of actions the reasoning engine may choose and
the behavioural category of each:

- ``NEW_TASK``: propose a task definition; needs human confirmation.
- ``QUESTION``: needs a human answer before anything else happens.
- ``ACTION``: observable work (read/list/search/write); never suspends.
- ``COMPLETION``: present results and ask whether the human is satisfied.

Categories are declared explicitly per action, never inferred from names.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Type

from .capabilities.definitions import (
    ActionArgs,
    AskForClarificationArgs,
    AttemptCompletionArgs,
    ConfirmActionArgs,
    ListFilesArgs,
    NewTaskArgs,
    ReadFileArgs,
    SearchFilesArgs,
    WriteToFileArgs,
)
from .errors import UnknownActionError
from .schemas.domain import ActionCategory, ActionName

SUSPENDING_CATEGORIES: FrozenSet[ActionCategory] = frozenset(
    {ActionCategory.new_task, ActionCategory.question, ActionCategory.completion}
)


@dataclass(frozen=True)
class ActionSpec:
    """One catalog entry."""

    name: str
    category: ActionCategory
    description: str
    args_model: Type[ActionArgs]

    @property
    def suspends(self) -> bool:
        return self.category in SUSPENDING_CATEGORIES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category.value,
            "description": self.description,
            "input_schema": self.args_model.model_json_schema(),
        }


class ActionCatalog:
    """Immutable identifier → ``ActionSpec`` mapping."""

    def __init__(self, specs: Iterable[ActionSpec]) -> None:
        table: Dict[str, ActionSpec] = {}
        for spec in specs:
            if spec.name in table:
                raise ValueError(f"duplicate action in catalog: {spec.name}")
            table[spec.name] = spec
        self._specs: Mapping[str, ActionSpec] = MappingProxyType(table)

    def get(self, identifier: str) -> ActionSpec:
        """
        Look up an action.

        Raises:
            UnknownActionError: If ``identifier`` is not registered.
        """
        key = identifier.value if isinstance(identifier, ActionName) else identifier
        try:
            return self._specs[key]
        except KeyError:
            raise UnknownActionError(str(key)) from None

    def category_of(self, identifier: str) -> ActionCategory:
        return self.get(identifier).category

    def names(self) -> FrozenSet[str]:
        return frozenset(self._specs)

    def of_category(self, category: ActionCategory) -> List[ActionSpec]:
        return [s for s in self._specs.values() if s.category == category]

    def __contains__(self, identifier: object) -> bool:
        key = identifier.value if isinstance(identifier, ActionName) else identifier
        return key in self._specs

    def __iter__(self) -> Iterator[ActionSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)


DEFAULT_CATALOG = ActionCatalog(
    [
        ActionSpec(
            name=ActionName.new_task.value,
            category=ActionCategory.new_task,
            description="Define a new task based on user request and get confirmation",
            args_model=NewTaskArgs,
        ),
        ActionSpec(
            name=ActionName.ask_for_clarification.value,
            category=ActionCategory.question,
            description="Ask the user for clarification when the request is ambiguous or needs more information",
            args_model=AskForClarificationArgs,
        ),
        ActionSpec(
            name=ActionName.confirm_action.value,
            category=ActionCategory.question,
            description="Ask the user to confirm before performing a risky operation",
            args_model=ConfirmActionArgs,
        ),
        ActionSpec(
            name=ActionName.read_file.value,
            category=ActionCategory.action,
            description="Read and examine the contents of a file to understand code structure",
            args_model=ReadFileArgs,
        ),
        ActionSpec(
            name=ActionName.list_files.value,
            category=ActionCategory.action,
            description="List files in a directory to understand project structure",
            args_model=ListFilesArgs,
        ),
        ActionSpec(
            name=ActionName.search_files.value,
            category=ActionCategory.action,
            description="Search for patterns, functions, or text across files in the codebase",
            args_model=SearchFilesArgs,
        ),
        ActionSpec(
            name=ActionName.write_to_file.value,
            category=ActionCategory.action,
            description="Write or modify file contents to make changes to the codebase",
            args_model=WriteToFileArgs,
        ),
        ActionSpec(
            name=ActionName.attempt_completion.value,
            category=ActionCategory.completion,
            description="Present final results and check if user is satisfied with the work",
            args_model=AttemptCompletionArgs,
        ),
    ]
)


def classify(identifier: str, catalog: ActionCatalog = DEFAULT_CATALOG) -> ActionCategory:
    """Return the category of ``identifier``; raises ``UnknownActionError`` if unregistered."""
    return catalog.category_of(identifier)
