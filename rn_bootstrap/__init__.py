"""Bootstrap a React Native project that builds and runs out of the box."""

__version__ = "1.0.0"
