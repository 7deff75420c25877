import numpy as np
import pytest

from ropepull.play import (
    Button,
    EventKind,
    HudText,
    Key,
    KeyEvent,
    PlayMode,
)
from ropepull.scene import Camera, Scene, Transform


def make_scene(names=("AllStuffsFixedOnRope", "LeftSideBound", "RightSideBound"), cameras=1):
    scene = Scene()
    for name in names:
        scene.transforms.append(Transform(name=name))
    for _ in range(cameras):
        cam_transform = Transform(name="Camera")
        scene.transforms.append(cam_transform)
        scene.cameras.append(Camera(cam_transform))
    return scene


def down(key):
    return KeyEvent(EventKind.KEY_DOWN, key)


def up(key):
    return KeyEvent(EventKind.KEY_UP, key)


def press(mode, *keys):
    for key in keys:
        assert mode.handle_event(down(key))


def test_bounds_are_placed():
    mode = PlayMode(make_scene())
    assert mode.left_bound.position[0] == -1.0
    assert mode.right_bound.position[0] == 1.0


def test_original_scene_untouched():
    scene = make_scene()
    mode = PlayMode(scene)
    assert mode.rope is not scene.transforms[0]
    assert scene.transforms[1].position[0] == 0.0


@pytest.mark.parametrize("missing", ["AllStuffsFixedOnRope", "LeftSideBound", "RightSideBound"])
def test_missing_transform_raises(missing):
    names = [n for n in ("AllStuffsFixedOnRope", "LeftSideBound", "RightSideBound") if n != missing]
    with pytest.raises(ValueError, match=missing):
        PlayMode(make_scene(names=names))


@pytest.mark.parametrize("count", [0, 2])
def test_camera_count_checked(count):
    with pytest.raises(ValueError, match="exactly one camera"):
        PlayMode(make_scene(cameras=count))


def test_key_down_and_up():
    mode = PlayMode(make_scene())
    assert mode.handle_event(down(Key.A)) is True
    assert mode.left.pressed and mode.left.downs == 1
    assert mode.handle_event(up(Key.A)) is True
    assert not mode.left.pressed
    assert mode.handle_event(down(Key.UP)) is True
    assert mode.up1.pressed


def test_unhandled_events():
    mode = PlayMode(make_scene())
    assert mode.handle_event(down(Key.ESCAPE)) is True
    assert mode.handle_event(up(Key.ESCAPE)) is False
    assert mode.handle_event(down(Key.SPACE)) is False
    assert mode.handle_event(KeyEvent(EventKind.QUIT)) is False


def test_button_downs_wrap_like_a_byte():
    button = Button()
    for _ in range(256):
        button.press()
    assert button.downs == 0
    assert button.pressed
    button.release()
    assert not button.pressed


def test_no_move_without_new_beat():
    mode = PlayMode(make_scene())
    press(mode, Key.A, Key.UP)
    mode.update(0.5)
    assert mode.rope_state == 0
    assert mode.rope.position[0] == 0.0


def test_left_player_pulls_on_beat():
    mode = PlayMode(make_scene())
    press(mode, Key.A, Key.UP)
    mode.update(3.0)
    assert mode.rope_state == -1
    assert mode.rope.position[0] == pytest.approx(-0.1)
    # Same beat again does nothing more.
    mode.update(0.01)
    assert mode.rope_state == -1


def test_right_player_pulls_on_beat():
    mode = PlayMode(make_scene())
    press(mode, Key.W, Key.RIGHT)
    mode.update(3.0)
    assert mode.rope_state == 1
    assert mode.rope.position[0] == pytest.approx(0.1)


def test_same_choice_cancels():
    mode = PlayMode(make_scene())
    press(mode, Key.W, Key.UP)
    mode.update(3.0)
    assert mode.rope_state == 0


def test_left_slip_then_chance():
    mode = PlayMode(make_scene())
    press(mode, Key.A, Key.LEFT)
    mode.update(3.0)
    assert mode.pause_state == 1
    assert mode.rope_state == 0
    mode.handle_event(up(Key.LEFT))
    press(mode, Key.RIGHT)
    mode.update(2.0)
    assert mode.pause_state == 0
    assert mode.rope_state == 1


def test_right_slip_then_chance():
    mode = PlayMode(make_scene())
    press(mode, Key.D, Key.RIGHT)
    mode.update(3.0)
    assert mode.pause_state == 2
    mode.handle_event(up(Key.D))
    press(mode, Key.A)
    mode.update(2.0)
    assert mode.pause_state == 0
    assert mode.rope_state == -1


def test_game_over_freezes_rope():
    mode = PlayMode(make_scene())
    mode.rope_state = -10
    press(mode, Key.A, Key.UP)
    mode.update(3.0)
    assert mode.rope_state == -10
    assert mode.rope.position[0] == 0.0


def test_update_resets_first_player_downs_only():
    mode = PlayMode(make_scene())
    press(mode, Key.A, Key.LEFT)
    mode.update(0.01)
    assert mode.left.downs == 0
    assert mode.left1.downs == 1


def test_wobble_stays_in_unit_interval():
    mode = PlayMode(make_scene())
    for _ in range(50):
        mode.update(0.7)
        assert 0.0 <= mode.wobble < 1.0


def test_countdown_starts_full():
    mode = PlayMode(make_scene())
    assert mode.countdown() == 10
    texts = [item.text for item in mode.hud()]
    assert texts[0] == "10"


def test_hud_scores_and_win():
    mode = PlayMode(make_scene())
    mode.rope_state = -10
    hud = mode.hud()
    assert HudText("10", (-1.5, 0.7), (0xFF, 0xFF, 0xFF, 0x00)) in hud
    assert HudText("-10", (1.3, 0.7), (0xFF, 0xFF, 0xFF, 0x00)) in hud
    assert HudText("You win", (-1.5, 0.8), (0x00, 0xFF, 0x00, 0x00)) in hud
    assert sum(item.text == "/10" for item in hud) == 2


def test_hud_ready_and_slip():
    mode = PlayMode(make_scene())
    press(mode, Key.A)
    hud = mode.hud()
    assert [item.position for item in hud if item.text == "Ready"] == [(-1.5, 0.0)]
    press(mode, Key.LEFT)
    mode.update(3.0)
    hud = mode.hud()
    slipped = [item for item in hud if item.text == "You slipped"]
    assert slipped[0].position == (-1.5, -0.75)
    assert [item.position for item in hud if item.text == "Chance"] == [(1.3, -0.75)]


def test_now_shown_just_before_beat():
    mode = PlayMode(make_scene())
    mode.update(1.95)
    assert mode.countdown() == 0
    assert mode.hud()[0].text == "Now"
    assert np.allclose(mode.rope.position, [0.0, 0.0, 0.0])