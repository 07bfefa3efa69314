"""vpiano — virtual piano with performance capture and WAV rendering."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("vpiano")
except PackageNotFoundError:
    # Running from a source checkout: take the version from pyproject.toml
    try:
        import tomllib
        from pathlib import Path

        _toml = Path(__file__).resolve().parent.parent / "pyproject.toml"
        with open(_toml, "rb") as f:
            __version__ = tomllib.load(f)["project"]["version"]
    except (OSError, KeyError, ValueError):
        __version__ = "0.0.0-dev"
