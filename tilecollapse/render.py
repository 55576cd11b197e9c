"""Terminal rendering for WFC grids.

Renders a grid as rich Text: collapsed cells use their tile's symbol and
color, unresolved cells show how many candidates they still have, and a
contradicted cell is a red "!".
"""

from __future__ import annotations

from rich.text import Text

from tilecollapse.generation.tilesets import TileStyle
from tilecollapse.generation.wfc import Cell, CellState, CollapseEvent, Grid

CONTRADICTION_RENDER: TileStyle = ("!", "bold red")
UNKNOWN_TILE_RENDER: TileStyle = ("?", "magenta")
UNRESOLVED_COLOR = "bright_black"


def get_cell_render(cell: Cell, styles: dict[str, TileStyle]) -> TileStyle:
    """Get (symbol, color) for a cell in any state."""
    state = cell.state
    if state == CellState.COLLAPSED:
        return styles.get(cell.tile_id, UNKNOWN_TILE_RENDER)
    if state == CellState.CONTRADICTED:
        return CONTRADICTION_RENDER
    count = cell.entropy
    return (str(count) if count < 10 else "?", UNRESOLVED_COLOR)


def render_grid(grid: Grid, styles: dict[str, TileStyle]) -> Text:
    """Render the whole grid, top row first."""
    text = Text()
    for i, row in enumerate(grid.rows()):
        if i:
            text.append("\n")
        for cell in row:
            symbol, color = get_cell_render(cell, styles)
            text.append(symbol, style=color)
    return text


def render_event(event: CollapseEvent, styles: dict[str, TileStyle]) -> Text:
    """One-line description of a collapse, e.g. "#0003 (2, 5) -> road_rl ─"."""
    symbol, color = styles.get(event.tile_id, UNKNOWN_TILE_RENDER)
    text = Text(f"#{event.step:04d} ({event.position.x}, {event.position.y}) -> {event.tile_id} ")
    text.append(symbol, style=color)
    return text
