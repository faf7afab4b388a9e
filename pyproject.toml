[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "uvccam"
version = "0.1.0"
description = "UVC webcam stream handling: payload deframing, USB descriptor parsing and YUY2 colour conversion"
requires-python = ">=3.10"
dependencies = []
keywords = ["uvc", "webcam", "usb", "video", "yuy2", "mjpeg", "deframer", "descriptors"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Capture",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["uvccam"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
