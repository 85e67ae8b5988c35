"""
The `packaging` sub-package contains modules related to the construction and
extraction of distribution packages.

This includes:
- Assembling and parsing the AR container of Debian binary packages.
- Building permission-annotated zip bundles for macOS application folders.
- Orchestrating RPM builds through an external `rpmbuild` toolchain.
"""
