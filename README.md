# ropepull

The rules and state of a two-player rope-pulling timing game, together with
the pieces it is built on: a reader for binary scene files, chunked binary
I/O, PNG loading and saving, and the orbit-camera logic used by scene and mesh
viewers.

## Installing

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## The game

`ropepull.play.PlayMode` holds the game state. It is built from a `Scene` that
has transforms named `AllStuffsFixedOnRope`, `LeftSideBound` and
`RightSideBound` and exactly one camera; otherwise it raises `ValueError`. It
works on its own copy of the scene, and places the two bounds at x = -1 and
x = 1.

Player one uses `A`, `W` and `D`; player two uses the left, up and right
arrow keys. `update(elapsed)` advances a cycle that lasts ten seconds and
holds five beats, one every two seconds. On each beat the keys the players
hold are compared and the rope moves one step (0.1 along the camera's x axis):

| Player one | Player two | Result |
|---|---|---|
| `A` | up | player one gains a step |
| `W` | left | player one gains a step |
| `W` | right | player two gains a step |
| `D` | up | player two gains a step |
| `A` | left | player one slips |
| `D` | right | player two slips |
| any other pair | | no move |

After a slip, the next beat gives the other player a chance: if player one
slipped and player two holds the right arrow, player two gains a step; if
player two slipped and player one holds `A`, player one gains a step. Either
way the slip is then cleared. The score (`rope_state`, positive towards
player two) stops changing once it reaches 10 either way, and that side wins.

Feed the mode `KeyEvent`s through `handle_event`, advance it with `update`,
and read what to show from `countdown()` (tenths until the next beat, down to
0) and `hud()`, a list of `HudText` items holding text, position and colour:

```python
from ropepull.play import PlayMode, KeyEvent, EventKind, Key

mode = PlayMode(scene)          # a Scene holding the rope, both bounds and a camera
mode.handle_event(KeyEvent(EventKind.KEY_DOWN, Key.A))
mode.update(1 / 60)
for text in mode.hud():
    print(text.text, text.position)
```

`handle_event` returns `True` for the keys it uses (and for `Key.ESCAPE`),
`False` otherwise. The `S` and down-arrow keys are tracked but take no part in
the rules.

## Scene files

`ropepull.scene.Scene` reads the chunked binary scene format (names,
transform hierarchy, meshes, cameras and lamps) and computes local, parent and
world matrices for each `Transform`:

```python
from ropepull.scene import Scene

scene = Scene.from_file("level.scene", None)
for transform in scene.transforms:
    print(transform.name, transform.make_local_to_world())
```

The second argument of `from_file` and `load` is an optional callback,
`on_drawable(scene, transform, mesh_name)`, called for each mesh entry.
Non-perspective cameras and unknown lamp types are skipped with a message.
Malformed files raise `SceneFormatError`; truncated or mismatched chunks raise
`ropepull.chunks.ChunkError`. `Scene.copy()` and `Scene.copy_with_map()` make
deep copies whose drawables, cameras and lights refer to the copied
transforms. `Camera.make_projection()` gives an infinite perspective matrix.

## Other utilities

- `ropepull.chunks.read_chunk` / `write_chunk`: magic-tagged arrays of
  fixed-size records described by a `struct` format, or raw bytes when the
  format is `None`.
- `ropepull.pngio.read_png` / `write_png` / `load_png` / `save_png`: RGBA
  images, with the first row at the top or bottom according to `Origin`.
- `ropepull.viewer.OrbitCamera`: a z-up trackball camera with `begin_drag`,
  `drag` (tumble or pan), `wheel` (dolly, radius kept between 0.1 and 1e6) and
  `apply` to place a `Transform`.
- `ropepull.viewer.next_name` / `prev_name`: step through mesh names in sorted
  order, staying at the ends.

## What this package does not do

There is no window, renderer or input loop, and no command to start the game
or the viewers: the package holds the game rules, scene data and camera
arithmetic, and a front end must supply the events, the elapsed time and the
drawing. Mesh buffer files are not read, and there is no helper for finding
data files next to the running program.