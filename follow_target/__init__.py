"""Follow a streamed target pose with a reduced-DOF manipulator."""

__version__ = "0.1.0"
