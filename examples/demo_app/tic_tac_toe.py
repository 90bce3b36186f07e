"""Self-playing tic-tac-toe on a configurable board.

The board is drawn with box-drawing characters and refreshed in place with
rich `Live`. Moves are either scripted (`steps`) or random until somebody
collects `marks_to_win` marks in a row, or the board is full.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

from console_demo_kit import CancellationToken

logger = logging.getLogger(__name__)


class TicTacToeConfigError(ValueError):
    """Invalid rules or board options."""


@dataclass(frozen=True, slots=True)
class BoardChars:
    """Characters used to draw the board."""

    inner_horz_line: str
    inner_vert_line: str
    inner_cross: str
    outer_horz_line: str
    outer_vert_line: str
    left_side_cross: str
    right_side_cross: str
    top_side_cross: str
    bottom_side_cross: str
    top_left_angle: str
    top_right_angle: str
    bottom_left_angle: str
    bottom_right_angle: str
    x_mark: str = "X"
    o_mark: str = "O"
    space: str = " "


# All lines single.
ALL_SINGLE = BoardChars("─", "│", "┼", "─", "│", "├", "┤", "┬", "┴", "┌", "┐", "└", "┘")
# All lines double.
ALL_DOUBLE = BoardChars("═", "║", "╬", "═", "║", "╠", "╣", "╦", "╩", "╔", "╗", "╚", "╝")
# Inner lines single, outer double.
SINGLE_IN_DOUBLE = BoardChars("─", "│", "┼", "═", "║", "╟", "╢", "╤", "╧", "╔", "╗", "╚", "╝")
# Inner lines double, outer single.
DOUBLE_IN_SINGLE = BoardChars("═", "║", "╬", "─", "│", "╞", "╡", "╥", "╨", "┌", "┐", "└", "┘")


@dataclass(frozen=True, slots=True)
class BoardOptions:
    """Board drawing options.

    Attributes:
        board_chars: characters used for drawing
        step_duration: seconds to wait after each mark
        horz_cell_padding: spaces between a mark and the vertical cell borders
        vert_cell_padding: blank lines between a mark and the horizontal cell borders
        draw_external_border: False draws only the inner lines
    """

    board_chars: BoardChars
    step_duration: float
    horz_cell_padding: int = 2
    vert_cell_padding: int = 1
    draw_external_border: bool = True


DEFAULT_BOARD_OPTIONS = BoardOptions(DOUBLE_IN_SINGLE, step_duration=1.0)


@dataclass(frozen=True, slots=True)
class TicTacToeRules:
    width: int = 3
    height: int = 3
    marks_to_win: int = 3


@dataclass(frozen=True, slots=True)
class TicTacToeStep:
    x: int
    y: int


Board = list[list[str]]


def render_board(marks: Sequence[Sequence[str]], options: BoardOptions) -> list[str]:
    """Draw `marks` (indexed as marks[y][x]) as a list of text lines."""
    ch = options.board_chars
    height = len(marks)
    width = len(marks[0]) if height else 0
    cell_width = options.horz_cell_padding * 2 + 1
    pad = ch.space * options.horz_cell_padding
    border = options.draw_external_border

    def separator(left: str, line: str, cross: str, right: str) -> str:
        return left + cross.join(line * cell_width for _ in range(width)) + right

    lines: list[str] = []
    for y in range(height):
        if y == 0 and border:
            lines.append(separator(ch.top_left_angle, ch.outer_horz_line, ch.top_side_cross, ch.top_right_angle))
        elif y > 0:
            if border:
                lines.append(separator(ch.left_side_cross, ch.inner_horz_line, ch.inner_cross, ch.right_side_cross))
            else:
                lines.append(separator("", ch.inner_horz_line, ch.inner_cross, ""))

        for q in range(options.vert_cell_padding * 2 + 1):
            cells = [
                pad + (marks[y][x] if q == options.vert_cell_padding else ch.space) + pad
                for x in range(width)
            ]
            row = ch.inner_vert_line.join(cells)
            if border:
                row = ch.outer_vert_line + row + ch.outer_vert_line
            lines.append(row)

    if border and height:
        lines.append(separator(ch.bottom_left_angle, ch.outer_horz_line, ch.bottom_side_cross, ch.bottom_right_angle))
    return lines


def find_winner(marks: Sequence[Sequence[str]], marks_to_win: int, space: str = " ") -> str:
    """Return the mark that has `marks_to_win` in a row, or `space` if nobody has."""
    height = len(marks)
    width = len(marks[0]) if height else 0
    # right, down, down-right, down-left
    directions = ((1, 0), (0, 1), (1, 1), (-1, 1))
    for x in range(width):
        for y in range(height):
            mark = marks[y][x]
            if mark == space:
                continue
            for dx, dy in directions:
                end_x = x + dx * (marks_to_win - 1)
                end_y = y + dy * (marks_to_win - 1)
                if not (0 <= end_x < width and 0 <= end_y < height):
                    continue
                if all(marks[y + dy * k][x + dx * k] == mark for k in range(1, marks_to_win)):
                    return mark
    return space


class TicTacToeScenario:
    """Plays one round of tic-tac-toe by itself.

    Raises:
        TicTacToeConfigError: invalid rules, board options, or a step outside the board.
    """

    def __init__(
        self,
        rules: TicTacToeRules | None = None,
        board_options: BoardOptions = DEFAULT_BOARD_OPTIONS,
        name: str = "TicTacToe",
        *,
        steps: Iterable[TicTacToeStep] = (),
        console: Console | None = None,
        rng: random.Random | None = None,
    ) -> None:
        rules = rules or TicTacToeRules()
        steps = list(steps)
        _validate(rules, board_options, steps)

        self.rules = rules
        self.board_options = board_options
        self.name = name
        # Steps may overwrite earlier marks.
        self.steps: list[TicTacToeStep] = steps
        self._console = console or Console()
        self._rng = rng or random.Random()
        self._marks: Board = []
        self._winner = board_options.board_chars.space
        self._reset_marks()

    @property
    def winner(self) -> str:
        """X mark, O mark, or the space character while there is no winner."""
        return self._winner

    @property
    def marks(self) -> list[list[str]]:
        return [list(row) for row in self._marks]

    def _reset_marks(self) -> None:
        space = self.board_options.board_chars.space
        self._marks = [[space] * self.rules.width for _ in range(self.rules.height)]
        self._winner = space

    def _has_space(self) -> bool:
        space = self.board_options.board_chars.space
        return any(mark == space for row in self._marks for mark in row)

    def result_text(self) -> str:
        if self._winner != self.board_options.board_chars.space:
            return f'"{self._winner}" won!'
        return "Round draw!"

    def _renderable(self, status: str | None) -> Group:
        board = Text("\n".join(render_board(self._marks, self.board_options)))
        return Group(board, Text(status or "", style="bold"))

    async def run(self, token: CancellationToken) -> None:
        self._reset_marks()
        ch = self.board_options.board_chars
        next_mark = ch.x_mark

        with Live(self._renderable(None), console=self._console, auto_refresh=False) as live:

            async def set_mark(x: int, y: int) -> None:
                nonlocal next_mark
                self._marks[y][x] = next_mark
                next_mark = ch.o_mark if next_mark == ch.x_mark else ch.x_mark
                live.update(self._renderable(None), refresh=True)
                await token.sleep(self.board_options.step_duration)

            def show_result() -> None:
                live.update(self._renderable(self.result_text()), refresh=True)

            if self.steps:
                for step in self.steps:
                    await set_mark(step.x, step.y)
                    # First winner stays; later steps are still played.
                    if self._winner == ch.space:
                        self._winner = find_winner(self._marks, self.rules.marks_to_win, ch.space)
                        if self._winner != ch.space:
                            show_result()
                if self._winner == ch.space and not self._has_space():
                    show_result()
            else:
                while self._has_space():
                    free = [
                        (x, y)
                        for y in range(self.rules.height)
                        for x in range(self.rules.width)
                        if self._marks[y][x] == ch.space
                    ]
                    x, y = self._rng.choice(free)
                    await set_mark(x, y)
                    self._winner = find_winner(self._marks, self.rules.marks_to_win, ch.space)
                    if self._winner != ch.space:
                        break
                show_result()

        logger.info(f"TicTacToe finished: {self.result_text()}")


def _validate(rules: TicTacToeRules, options: BoardOptions, steps: Sequence[TicTacToeStep] = ()) -> None:
    if rules.width < 3:
        raise TicTacToeConfigError("minimal board width is 3 cells")
    if rules.height < 3:
        raise TicTacToeConfigError("minimal board height is 3 cells")
    if rules.marks_to_win < 2:
        raise TicTacToeConfigError("count of marks for winning cannot be less than 2")
    if rules.marks_to_win > rules.width:
        raise TicTacToeConfigError(
            f"too small board width ({rules.width}) for the given marks-to-win count ({rules.marks_to_win})"
        )
    if rules.marks_to_win > rules.height:
        raise TicTacToeConfigError(
            f"too small board height ({rules.height}) for the given marks-to-win count ({rules.marks_to_win})"
        )

    chars = options.board_chars
    if chars.x_mark == chars.o_mark:
        raise TicTacToeConfigError("X mark cannot be same as O mark")
    if chars.x_mark == chars.space:
        raise TicTacToeConfigError("X mark cannot be same as space character")
    if chars.o_mark == chars.space:
        raise TicTacToeConfigError("O mark cannot be same as space character")

    if options.horz_cell_padding < 0:
        raise TicTacToeConfigError("horizontal cell padding cannot be less than zero")
    if options.vert_cell_padding < 0:
        raise TicTacToeConfigError("vertical cell padding cannot be less than zero")
    if options.step_duration < 0:
        raise TicTacToeConfigError("step duration cannot be negative")

    for step in steps:
        if not (0 <= step.x < rules.width and 0 <= step.y < rules.height):
            raise TicTacToeConfigError(
                f"step ({step.x}, {step.y}) is outside the {rules.width}x{rules.height} board"
            )
