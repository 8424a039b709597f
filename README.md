# gamomania

A small real-time 3D viewer built on OpenGL through pyglet. It loads a
Wavefront OBJ model with its MTL materials and textures, lights it with one
ambient, one directional and three point lights, and lets you fly around it
with a free camera.

## Installing

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
pytest
```

## Running

```
gamomania
```

Options:

| Option     | Default                  | Meaning                                          |
|------------|--------------------------|--------------------------------------------------|
| `--root`   | `.`                      | project directory holding `asset/` and `src/shader/` |
| `--model`  | `backpack/backpack.obj`  | model path under `<root>/asset/model`            |
| `--width`  | `800`                    | initial window width                             |
| `--height` | `600`                    | initial window height                            |

The window is resizable, asks for an OpenGL 4.3 context and captures the mouse.
The command returns 1 if the scene cannot be set up.

Controls:

| Key / input   | Action                              |
|---------------|-------------------------------------|
| `W` / `S`     | move forward / backward             |
| `A` / `D`     | move left / right                   |
| `E` / `Q`     | move up / down                      |
| Left `Shift`  | double movement speed               |
| mouse         | look around (pitch clamped to ±75°) |
| `T`           | toggle wireframe rendering          |
| `Esc`         | quit                                |

Files looked up under the root directory:

- `src/shader/modelVertex.glsl` and `src/shader/modelFragment.glsl`
- `asset/texture/white1x1.jpg`, the fallback for materials without a map
- the model under `asset/model`, with its textures next to it

## Using the pieces

- `gamomania.camera`: `Camera` (movement, `rotate`, a cached `view` matrix,
  `projection()`), plus `look_at`, `perspective` and `format_vec3`. Matrices
  are row-major numpy arrays.
- `gamomania.event`: `Direction` and `Movement`, the held-key and mouse state.
- `gamomania.light`: `SceneLight` holding up to 16 lights; `uniform_values()`
  gives the shader uniform names and values, `load(program)` sets them.
  Adding a seventeenth light raises `LightLimitError`.
- `gamomania.shader`: `ShaderStage`, `ShaderProgram.build`, uniform lookup and
  setters; failures raise `ShaderError`.
- `gamomania.texture`: `TextureBank`, which loads each image once by name.
- `gamomania.material`, `gamomania.mesh`: `Material`, `Vertex`, `Mesh` and
  `pack_vertices`.
- `gamomania.model`: `load_scene` reads an OBJ file into a `Scene`;
  `Model.create` / `Model.from_scene` turn it into GPU meshes.
- `gamomania.gl_debug`: `check_error`, `error_name` and `debug_output`.
- `gamomania.files`: `concat_path` and `read_file`.

The OpenGL functions take a `gl` object whose entry points use plain Python
arguments (ids returned as ints, data as bytes); the module docstrings list
what each one calls. The command supplies one built on pyglet.

```python
from gamomania.camera import Camera
from gamomania.light import SceneLight

cam = Camera()
cam.set_pos_and_dir_from_target((0.0, 0.0, 3.0), (0.0, 0.0, 0.0))
cam.move_forward(1.0)
cam.rotate(10.0, 0.0)
print(cam.projection())

lights = SceneLight()
lights.add_point_light((1.0, 0.5, 0.5), (1.0, 1.0, 1.0), 0.9, 0.09, 0.032)
print(lights.uniform_values()["pointLightsLen"])  # 1
```

## What it does not do

- No shaders, models or textures ship with the package; the files listed
  above must exist under `--root`.
- Only Wavefront OBJ models are read, with `Kd`, `Ks`, `Ns`, `map_Kd` and
  `map_Ks` from their material libraries. Other model formats, bump and height
  maps, and animation are not supported.
- Spot lights can be added and are counted, but their parameters are not
  sent to the shader.