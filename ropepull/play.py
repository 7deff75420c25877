"""The rope-pulling game: two players, a shared beat, and a rope to drag."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .scene import Camera, Scene, Transform

Color = tuple[int, int, int, int]

WHITE: Color = (0xFF, 0xFF, 0xFF, 0x00)
GREEN: Color = (0x00, 0xFF, 0x00, 0x00)
RED: Color = (0xFF, 0x00, 0x00, 0x00)

WIN_DISTANCE = 10
TEXT_HEIGHT = 0.09
_ROPE_STEP = 0.1


class Key(enum.Enum):
    """Keys the game reacts to."""

    ESCAPE = "escape"
    A = "a"
    D = "d"
    W = "w"
    S = "s"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    SPACE = "space"


class EventKind(enum.Enum):
    KEY_DOWN = "key_down"
    KEY_UP = "key_up"
    QUIT = "quit"


@dataclass(frozen=True)
class KeyEvent:
    kind: EventKind
    key: Optional[Key] = None


@dataclass
class Button:
    """Input state of one key: presses since the last update, and whether held."""

    downs: int = 0
    pressed: bool = False

    def press(self) -> None:
        self.downs = (self.downs + 1) % 256
        self.pressed = True

    def release(self) -> None:
        self.pressed = False


@dataclass(frozen=True)
class HudText:
    """One line of overlay text, positioned in aspect-corrected screen space."""

    text: str
    position: tuple[float, float]
    color: Color
    height: float = TEXT_HEIGHT


class PauseState(enum.IntEnum):
    NONE = 0
    LEFT_SLIPPED = 1
    RIGHT_SLIPPED = 2


_KEY_TO_BUTTON = {
    Key.A: "left",
    Key.D: "right",
    Key.W: "up",
    Key.S: "down",
    Key.LEFT: "left1",
    Key.RIGHT: "right1",
    Key.UP: "up1",
    Key.DOWN: "down1",
}


class PlayMode:
    """Game state and rules; works on its own copy of the given scene."""

    def __init__(self, scene: Scene) -> None:
        self.scene = scene.copy()

        self.left = Button()
        self.right = Button()
        self.down = Button()
        self.up = Button()
        self.left1 = Button()
        self.right1 = Button()
        self.down1 = Button()
        self.up1 = Button()

        self.wobble = 0.0
        self.prev_wobble_int = 0
        self.pause_state = PauseState.NONE
        self.rope_state = 0

        found: dict[str, Transform] = {}
        for transform in self.scene.transforms:
            if transform.name in ("AllStuffsFixedOnRope", "LeftSideBound", "RightSideBound"):
                found[transform.name] = transform
        for name in ("AllStuffsFixedOnRope", "LeftSideBound", "RightSideBound"):
            if name not in found:
                raise ValueError(f"{name} not found.")
        self.rope: Transform = found["AllStuffsFixedOnRope"]
        self.left_bound: Transform = found["LeftSideBound"]
        self.right_bound: Transform = found["RightSideBound"]

        for bound, x in ((self.left_bound, -1.0), (self.right_bound, 1.0)):
            bound.position = np.array(bound.position, dtype=float)
            bound.position[0] = x
        self.rope.position = np.array(self.rope.position, dtype=float)

        if len(self.scene.cameras) != 1:
            raise ValueError(
                "Expecting scene to have exactly one camera, but it has "
                f"{len(self.scene.cameras)}"
            )
        self.camera: Camera = self.scene.cameras[0]

    def handle_event(self, event: KeyEvent) -> bool:
        """Update input state; return True if the event was consumed."""
        if event.kind is EventKind.KEY_DOWN:
            if event.key is Key.ESCAPE:
                return True
            name = _KEY_TO_BUTTON.get(event.key)
            if name is not None:
                getattr(self, name).press()
                return True
        elif event.kind is EventKind.KEY_UP:
            name = _KEY_TO_BUTTON.get(event.key)
            if name is not None:
                getattr(self, name).release()
                return True
        return False

    def _beat_move(self) -> float:
        move = 0.0
        if self.pause_state is PauseState.NONE:
            if self.left.pressed and self.left1.pressed:
                move = 0.0
                self.pause_state = PauseState.LEFT_SLIPPED
            if self.left.pressed and self.up1.pressed:
                move = -1.0
            if self.left.pressed and self.right1.pressed:
                move = 0.0

            if self.up.pressed and self.left1.pressed:
                move = -1.0
            if self.up.pressed and self.up1.pressed:
                move = 0.0
            if self.up.pressed and self.right1.pressed:
                move = 1.0

            if self.right.pressed and self.left1.pressed:
                move = 0.0
            if self.right.pressed and self.up1.pressed:
                move = 1.0
            if self.right.pressed and self.right1.pressed:
                move = 0.0
                self.pause_state = PauseState.RIGHT_SLIPPED
        else:
            if self.pause_state is PauseState.LEFT_SLIPPED and self.right1.pressed:
                move = 1.0
            if self.pause_state is PauseState.RIGHT_SLIPPED and self.left.pressed:
                move = -1.0
            self.pause_state = PauseState.NONE
        return move

    def update(self, elapsed: float) -> None:
        """Advance the beat; on each new beat resolve both players' moves."""
        self.wobble += elapsed / 10.0
        self.wobble -= math.floor(self.wobble)

        beat = math.floor(self.wobble * 5)
        frame_right = self.camera.transform.make_local_to_parent()[:, 0]
        if abs(self.rope_state) < WIN_DISTANCE and beat != self.prev_wobble_int:
            move = self._beat_move()
            self.rope.position = self.rope.position + move * _ROPE_STEP * frame_right
            self.rope_state += int(move)
        self.prev_wobble_int = beat

        for button in (self.left, self.right, self.up, self.down):
            button.downs = 0

    def countdown(self) -> int:
        """Tenths left until the next beat, from 10 down to 0 ("Now")."""
        phase = self.wobble * 5 - math.floor(self.wobble * 5)
        return int(10 * (1 - phase))

    def hud(self) -> list[HudText]:
        """The overlay text for the current state."""
        items: list[HudText] = []
        count = self.countdown()
        if count > 0:
            items.append(HudText(str(count), (0.0, 0.5), WHITE))
        else:
            items.append(HudText("Now", (0.0, 0.5), GREEN))

        if self.pause_state is PauseState.LEFT_SLIPPED:
            items.append(HudText("You slipped", (-1.5, -0.75), RED))
            items.append(HudText("Chance", (1.3, -0.75), GREEN))
        elif self.pause_state is PauseState.RIGHT_SLIPPED:
            items.append(HudText("You slipped", (1.3, -0.75), RED))
            items.append(HudText("Chance", (-1.5, -0.75), GREEN))

        items.append(HudText(str(-self.rope_state), (-1.5, 0.7), WHITE))
        items.append(HudText("/10", (-1.5 + 0.1, 0.7), WHITE))
        items.append(HudText(str(self.rope_state), (1.3, 0.7), WHITE))
        items.append(HudText("/10", (1.4, 0.7), WHITE))

        if self.rope_state == -WIN_DISTANCE:
            items.append(HudText("You win", (-1.5, 0.8), GREEN))
        elif self.rope_state == WIN_DISTANCE:
            items.append(HudText("You win", (1.3, 0.8), GREEN))

        if self.left.pressed + self.up.pressed + self.right.pressed == 1:
            items.append(HudText("Ready", (-1.5, 0.0), WHITE))
        if self.left1.pressed + self.up1.pressed + self.right1.pressed == 1:
            items.append(HudText("Ready", (1.3, 0.0), WHITE))
        return items