"""
Action discovery from packages and plugin directories.

Discovery scans an ordered list of locations, imports every module found
there and registers the action units each module exports:

- Ready-made instances satisfying GameActionProtocol are used as is.
- Concrete subclasses of BaseAction are instantiated with no arguments.
- A module-level MCP_TOOLS list contributes pre-built ToolSpecs directly.

A location is either an importable package name ("mcbridge_core.actions.library")
or a filesystem directory of ``*.py`` plugin files.

Scanning stops at the first location that yields at least one ToolSpec;
later locations are not consulted. Units from earlier locations win name
collisions because discovery never overwrites a registered name.

Example:
    ```python
    registry = ActionRegistry()
    discovery = ActionDiscovery(registry, ["mcbridge_core.actions.library", "./plugins"])
    tools = discovery.discover()
    ```
"""

import dataclasses
import hashlib
import importlib
import importlib.util
import inspect
import logging
import pkgutil
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Iterator, Sequence

from mcbridge_core.actions.base import BaseAction
from mcbridge_core.actions.registry import ActionRegistry
from mcbridge_core.actions.types import ToolSpec
from mcbridge_protocols import GameActionProtocol

logger = logging.getLogger(__name__)

MODULE_TOOLS_ATTR = "MCP_TOOLS"
"""Module attribute holding a list of pre-built ToolSpecs."""


class ActionDiscovery:
    """
    Discovers action units and tool specs and registers them.

    Attributes:
        registry: Registry receiving discovered units
        locations: Ordered candidate locations (package names or directories)
    """

    def __init__(self, registry: ActionRegistry, locations: Sequence[str | Path]) -> None:
        self.registry = registry
        self.locations = list(locations)
        self._tools: tuple[ToolSpec, ...] = ()

    @property
    def discovered_tools(self) -> tuple[ToolSpec, ...]:
        """Tool specs from the last discover() call (empty before the first)."""
        return self._tools

    def discover(self) -> tuple[ToolSpec, ...]:
        """
        Scan locations, register new units and collect their tool specs.

        Returns:
            Immutable snapshot of the collected tool specs
        """
        tools: list[ToolSpec] = []

        for location in self.locations:
            modules = self._load_location(location)
            if modules is None:
                continue

            for module in modules:
                tools.extend(self._scan_module(module))

            if tools:
                logger.info(
                    f"Discovered {len(tools)} tool(s) in {location}; "
                    "remaining locations skipped"
                )
                break

        self._tools = tuple(tools)
        return self._tools

    def _load_location(self, location: str | Path) -> list[ModuleType] | None:
        """
        Import every module in a location.

        Returns:
            Loaded modules, or None if the location does not exist
        """
        path = Path(location)
        if path.is_dir():
            return list(self._load_directory(path))

        if isinstance(location, Path) or not _is_importable(location):
            logger.debug(f"Discovery location not found: {location}")
            return None

        return list(self._load_package(location))

    def _load_package(self, package_name: str) -> Iterator[ModuleType]:
        try:
            package = importlib.import_module(package_name)
        except Exception as e:
            logger.warning(f"Failed to import discovery package {package_name}: {e}")
            return

        search_path = getattr(package, "__path__", None)
        if search_path is None:
            # Plain module: scan it directly
            yield package
            return

        for info in sorted(pkgutil.iter_modules(search_path), key=lambda m: m.name):
            if info.name.startswith("_"):
                continue
            module_name = f"{package_name}.{info.name}"
            try:
                yield importlib.import_module(module_name)
            except Exception as e:
                logger.warning(f"Failed to import action module {module_name}: {e}")

    def _load_directory(self, directory: Path) -> Iterator[ModuleType]:
        # Unique per directory so two plugin dirs can both hold "actions.py"
        digest = hashlib.sha1(str(directory.resolve()).encode()).hexdigest()[:8]

        for file_path in sorted(directory.glob("*.py")):
            if file_path.name.startswith("_"):
                continue
            module_name = f"mcbridge_plugins_{digest}.{file_path.stem}"
            spec = importlib.util.spec_from_file_location(module_name, file_path)
            if spec is None or spec.loader is None:
                logger.warning(f"Cannot load action module from {file_path}")
                continue

            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            try:
                spec.loader.exec_module(module)
            except Exception as e:
                sys.modules.pop(module_name, None)
                logger.warning(f"Failed to load action module {file_path}: {e}")
                continue
            yield module

    def _scan_module(self, module: ModuleType) -> list[ToolSpec]:
        tools: list[ToolSpec] = []

        for attr_name, value in _exported_values(module):
            action = self._as_action(value, module.__name__, attr_name)
            if action is None:
                continue

            tools.extend(self._tools_for(action))

            if not self.registry.register_if_absent(action):
                logger.debug(
                    f"Skipping duplicate action '{action.name}' from {module.__name__}"
                )

        for entry in getattr(module, MODULE_TOOLS_ATTR, None) or []:
            if _is_valid_tool_spec(entry):
                tools.append(entry)
            else:
                logger.warning(
                    f"Ignoring invalid entry in {module.__name__}.{MODULE_TOOLS_ATTR}: {entry!r}"
                )

        return tools

    def _as_action(
        self,
        value: Any,
        module_name: str,
        attr_name: str,
    ) -> GameActionProtocol | None:
        """Classify an exported value, instantiating BaseAction subclasses."""
        if isinstance(value, type):
            if (
                not issubclass(value, BaseAction)
                or value is BaseAction
                or inspect.isabstract(value)
            ):
                return None
            try:
                return value()
            except Exception as e:
                logger.warning(
                    f"Failed to instantiate action {module_name}.{attr_name}: {e}"
                )
                return None

        if isinstance(value, GameActionProtocol):
            return value
        return None

    def _tools_for(self, action: GameActionProtocol) -> list[ToolSpec]:
        provider = getattr(action, "get_mcp_tools", None)
        if not callable(provider):
            return []

        try:
            specs = provider() or []
        except Exception as e:
            logger.warning(f"get_mcp_tools() failed for action '{action.name}': {e}")
            return []

        tools = []
        for spec in specs:
            if not _is_valid_tool_spec(spec):
                logger.warning(f"Ignoring invalid tool spec from '{action.name}': {spec!r}")
                continue
            if spec.action_name is None:
                spec = dataclasses.replace(spec, action_name=action.name)
            tools.append(spec)
        return tools


def _is_importable(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except Exception as e:
        # find_spec imports parent packages, which may themselves fail
        logger.debug(f"Cannot resolve discovery location {name}: {e}")
        return False


def _is_valid_tool_spec(entry: Any) -> bool:
    return (
        isinstance(entry, ToolSpec)
        and bool(entry.tool_name)
        and bool(entry.description)
    )


def _exported_values(module: ModuleType) -> Iterator[tuple[str, Any]]:
    """
    Yield (name, value) for a module's exports.

    Uses __all__ when defined. Otherwise yields public names, skipping
    classes imported from other modules.
    """
    explicit = getattr(module, "__all__", None)
    if explicit is not None:
        for name in explicit:
            if hasattr(module, name):
                yield name, getattr(module, name)
        return

    for name, value in list(vars(module).items()):
        if name.startswith("_"):
            continue
        if isinstance(value, type) and value.__module__ != module.__name__:
            continue
        yield name, value
