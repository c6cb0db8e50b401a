[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "prockit"
version = "0.1.0"
description = "Process and kernel inspection tools: slabtop, snice, sysctl, top, w and watch"
requires-python = ">=3.10"
keywords = ["procps", "slabtop", "sysctl", "top", "watch", "snice", "w", "process"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
slabtop = "prockit.slabtop:main"
snice = "prockit.snice:main"
sysctl = "prockit.sysctl:main"
top = "prockit.top:main"
w = "prockit.w:main"
watch = "prockit.watch:main"

[tool.hatch.build.targets.wheel]
packages = ["prockit"]

[tool.pytest.ini_options]
addopts = "-ra"
