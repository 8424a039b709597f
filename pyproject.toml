[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gamomania"
version = "0.0.1"
description = "A small OpenGL scene viewer: free-flying camera, lights, materials, textures and OBJ models"
requires-python = ">=3.10"
keywords = ["opengl", "3d", "rendering", "camera", "shader", "obj", "pyglet"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Environment :: X11 Applications",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]
dependencies = [
    "numpy",
    "pillow",
    "pyglet",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gamomania = "gamomania.main:main"

[tool.hatch.build.targets.wheel]
packages = ["gamomania"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
