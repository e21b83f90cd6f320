"""
Built-in tool definitions and input mapping.

This module provides:
- Input models for the always-available query tools
- FALLBACK_TOOL_SPECS: basic action tools published when discovery did
  not provide a tool of the same name
- default_input_mapper: permissive mapping used by specs without a mapper
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mcbridge_core.actions.types import ToolContext, ToolSpec

MAX_EVENTS_LIMIT = 500
DEFAULT_EVENTS_LIMIT = 50

# Tool input field -> action parameter name
FIELD_ALIASES = {
    "blockName": "name",
    "itemName": "item",
    "playerName": "player",
}

# Input fields consumed by the bridge itself, never forwarded to actions
RESERVED_INPUT_FIELDS = {"auth_token", "actionName"}


class QueryEventsInput(BaseModel):
    # Values reach the state provider unchanged, so no coercion
    model_config = ConfigDict(strict=True)

    type: str | None = Field(default=None, description="Only events of this type")
    since_ms: int | None = Field(default=None, description="Only events at or after this epoch ms")
    limit: int | None = Field(
        default=None,
        ge=1,
        le=MAX_EVENTS_LIMIT,
        description=f"Maximum events to return (default {DEFAULT_EVENTS_LIMIT})",
    )


def default_input_mapper(tool_input: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    """
    Map tool input to action params by normalizing known field names.

    Unknown fields pass through unchanged. An aliased field (e.g. blockName)
    takes precedence over its canonical name (name) when both are given.
    None values and bridge-reserved fields are dropped.
    """
    params: dict[str, Any] = {}
    aliased: dict[str, Any] = {}

    for key, value in tool_input.items():
        if key in RESERVED_INPUT_FIELDS or value is None:
            continue
        if key in FIELD_ALIASES:
            aliased[FIELD_ALIASES[key]] = value
        else:
            params[key] = value

    params.update(aliased)
    return params


class MineBlockInput(BaseModel):
    blockName: str = Field(..., description="Block name, e.g. 'dirt'")
    name: str | None = Field(default=None, description="Alias of blockName")
    count: int | None = Field(default=None, ge=1, description="How many blocks (default 1)")


class PlaceBlockInput(BaseModel):
    x: float
    y: float
    z: float
    itemName: str = Field(..., description="Block item to place")


class FollowPlayerInput(BaseModel):
    player: str | None = None
    playerName: str | None = None
    name: str | None = None
    distance: int | None = Field(default=None, gt=0, description="Follow distance in blocks")
    timeout: int | None = Field(default=None, gt=0, description="Seconds to follow")
    timeoutSec: int | None = Field(default=None, gt=0, description="Alias of timeout")


class CraftItemInput(BaseModel):
    item: str = Field(..., description="Item to craft")
    count: int | None = Field(default=None, ge=1, description="How many (default 1)")


def _map_mine_block(tool_input: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    return {
        "name": tool_input.get("blockName") or tool_input.get("name"),
        "count": tool_input.get("count") or 1,
    }


def _map_place_block(tool_input: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    return {
        "x": tool_input.get("x"),
        "y": tool_input.get("y"),
        "z": tool_input.get("z"),
        "item": tool_input.get("itemName"),
    }


def _map_follow_player(tool_input: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    player = (
        tool_input.get("playerName")
        or tool_input.get("player")
        or tool_input.get("name")
        or _nearest_player(context)
    )
    return {
        "player": player,
        "distance": tool_input.get("distance") or 3,
        "timeout": tool_input.get("timeoutSec") or tool_input.get("timeout") or 60,
    }


def _map_craft_item(tool_input: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    return {"item": tool_input.get("item"), "count": tool_input.get("count") or 1}


def _nearest_player(context: ToolContext) -> str | None:
    if context.state is None:
        return None
    players = context.state.get_game_state().get("nearbyPlayers") or []
    if not players:
        return None
    return players[0].get("username")


FALLBACK_TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        tool_name="mine_block",
        description="Mine blocks by name nearby.",
        input_model=MineBlockInput,
        action_name="mineBlock",
        map_input_to_params=_map_mine_block,
    ),
    ToolSpec(
        tool_name="place_block",
        description="Place a block at a position.",
        input_model=PlaceBlockInput,
        action_name="placeBlock",
        map_input_to_params=_map_place_block,
    ),
    ToolSpec(
        tool_name="follow_player",
        description="Follow a player by name.",
        input_model=FollowPlayerInput,
        action_name="followPlayer",
        map_input_to_params=_map_follow_player,
    ),
    ToolSpec(
        tool_name="craft_item",
        description=(
            "Craft an item by name. Will auto-place and approach a crafting "
            "table when needed."
        ),
        input_model=CraftItemInput,
        action_name="craftItem",
        map_input_to_params=_map_craft_item,
    ),
)
