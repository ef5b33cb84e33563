"""emsbrew: build and install the openEMS field-solver suite from a formula."""

__version__ = "0.5.0"
