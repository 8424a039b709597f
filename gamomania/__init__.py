"""OpenGL scene viewer: camera, input state, lights, shaders, textures, materials, meshes and OBJ models."""

__version__ = "0.0.1"